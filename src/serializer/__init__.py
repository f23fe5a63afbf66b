"""Value codecs.

This module converts caller values to byte sequences and back.
The same codec encodes stored values and the database file itself.
"""
