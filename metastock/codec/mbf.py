#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
===============================================================================
 File:        mbf.py
 Created:     2026-02-02
 Description: Microsoft Binary Format (MBF) single precision to IEEE double
              conversion.

              MetaStock stores every price cell of a data file, and the dates
              of a MASTER index record, as a 32-bit MBF float:

              | Byte 4    | Byte 3    | Byte 2    | Byte 1    |
              | EEEE EEEE | SMMM MMMM | MMMM MMMM | MMMM MMMM |

              E = 8 bit biased exponent, S = sign, M = 23 bit mantissa. The
              leading mantissa bit is implicit and sits where the sign bit is
              stored, so value = sign * (M | 0x800000) * 2^(E - 152).

              Provides:
              - mbf_to_ieee: scalar conversion of exactly 4 bytes.
              - mbf_array_to_ieee: vectorized conversion of uint32 words.
              - mbf_buffer_to_ieee: vectorized conversion of a raw byte buffer.

 Requirements:
     - Python 3.8+
     - numpy

 License:
     MIT License
===============================================================================
"""
import struct
import numpy as np

from metastock.codec.exceptions import MalformedInputError

# Bottom 24 bits: sign + stored mantissa
MANTISSA_MASK = 0x00FFFFFF
# Implicit leading mantissa bit (overlays the sign bit)
HIDDEN_BIT = 0x00800000
SIGN_BIT = 0x00800000
# 128 exponent bias + 24 mantissa bits
EXPONENT_BIAS = 152

MBF_SIZE = 4


def mbf_to_ieee(raw: bytes) -> float:
    """
    Convert a single 4-byte MBF float to a Python float.

    Args:
        raw (bytes): Exactly 4 bytes, little-endian word order.

    Returns:
        float: Decoded value. An all-zero word decodes to 0.0.

    Raises:
        MalformedInputError: If `raw` is not exactly 4 bytes long.
    """
    if raw is None or len(raw) != MBF_SIZE:
        size = 0 if raw is None else len(raw)
        raise MalformedInputError(f"MBF value needs {MBF_SIZE} bytes, got {size}")

    word = struct.unpack('<I', bytes(raw))[0]
    if word == 0:
        return 0.0

    mantissa = (word & MANTISSA_MASK) | HIDDEN_BIT
    exponent = (word >> 24) - EXPONENT_BIAS
    sign = -1.0 if word & SIGN_BIT else 1.0
    return sign * float(mantissa) * (2.0 ** exponent)


def mbf_array_to_ieee(words: np.ndarray) -> np.ndarray:
    """
    Vectorized MBF conversion.

    Args:
        words (np.ndarray): Array of uint32 MBF words (any shape).

    Returns:
        np.ndarray: float64 array of the same shape.
    """
    words = np.asarray(words, dtype=np.uint32)

    mantissa = ((words & MANTISSA_MASK) | HIDDEN_BIT).astype(np.float64)
    exponent = (words >> 24).astype(np.int32) - EXPONENT_BIAS
    sign = np.where(words & SIGN_BIT, -1.0, 1.0)

    values = sign * np.ldexp(mantissa, exponent)
    return np.where(words == 0, 0.0, values)


def mbf_buffer_to_ieee(buffer, offset: int = 0, count: int = -1) -> np.ndarray:
    """
    Decode `count` consecutive MBF cells starting at byte `offset`.

    Raises:
        MalformedInputError: If the buffer does not hold whole 4-byte cells.
    """
    available = len(buffer) - offset
    if count < 0:
        if available % MBF_SIZE:
            raise MalformedInputError(
                f"Buffer of {available} bytes is not a whole number of MBF cells"
            )
        count = available // MBF_SIZE
    elif available < count * MBF_SIZE:
        raise MalformedInputError(
            f"Need {count * MBF_SIZE} bytes for {count} MBF cells, got {available}"
        )

    if count == 0:
        return np.empty(0, dtype=np.float64)

    words = np.frombuffer(buffer, dtype='<u4', count=count, offset=offset)
    return mbf_array_to_ieee(words)
