"""Storage engine.

This module owns the document hierarchy, snapshot persistence,
dump scheduling and document id generation.
"""
