"""
Modules package for the NeatoCache backend.

This package contains all the specialized functionality modules:
- nfc: Reads and writes location records on NFC tags
- api: Provides web API for scanning locations and adding visitors
"""
