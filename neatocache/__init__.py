"""
NeatoCache - tracks locations and their visitors on NFC tags.
"""

__version__ = '0.1.0'
