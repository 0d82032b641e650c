#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
===============================================================================
 File:        exceptions.py
 Created:     2026-02-02
 Description: Module containing all the custom exceptions raised by the
              MetaStock decoders.

              Every decode call either returns a fully decoded value or raises
              one of these. Callers reading a whole directory catch
              MetastockError per symbol and continue with the next one.

 Requirements:
     - Python 3.8+

 License:
     MIT License
===============================================================================
"""
class MetastockError(Exception):
    """Base exception for all decoding errors."""
    pass

class MalformedInputError(MetastockError):
    """Raised when a byte slice handed to the float codec has the wrong size."""
    pass

class UnknownVariantError(MetastockError):
    """Raised when an index variant other than MASTER/EMASTER/XMASTER is requested."""
    pass

class TruncatedRecordError(MetastockError):
    """Raised when an index buffer is not a whole number of records."""
    pass

class CorruptHeaderError(MetastockError):
    """Raised when a data file size does not match its record count."""
    pass

class InvalidDateError(MetastockError):
    """Raised when packed date/time components do not form a real timestamp."""
    pass
