"""Builders for in-memory MetaStock index and data files used by the tests."""
import math
import struct
from typing import Iterable, List, Sequence


def ieee_to_mbf(value: float) -> bytes:
    """Encode a float as a 4-byte MBF single (test-side inverse of mbf_to_ieee)."""
    if value == 0:
        return b"\x00\x00\x00\x00"
    mantissa, exponent = math.frexp(abs(value))
    m24 = int(round(mantissa * (1 << 24)))
    biased = exponent + 128
    if m24 == 1 << 24:
        m24 >>= 1
        biased += 1
    word = (biased << 24) | (m24 & 0x7FFFFF) | (0x800000 if value < 0 else 0)
    return struct.pack("<I", word)


def _text(value: str, width: int) -> bytes:
    return value.encode("latin-1")[:width].ljust(width, b" ")


def master_record(file_number, symbol, name, start, end, frequency="D", intraday=0) -> bytes:
    rec = bytearray(53)
    rec[0] = file_number
    rec[7:23] = _text(name, 16)
    rec[25:29] = ieee_to_mbf(start)
    rec[29:33] = ieee_to_mbf(end)
    rec[33] = ord(frequency)
    rec[34] = intraday
    rec[36:52] = _text(symbol, 16)
    return bytes(rec)


def emaster_record(file_number, symbol, name, full_name, start, end, frequency="D", intraday=0) -> bytes:
    rec = bytearray(192)
    rec[2] = file_number
    rec[11:25] = _text(symbol, 14)
    rec[32:48] = _text(name, 16)
    rec[60] = ord(frequency)
    rec[62] = intraday
    rec[64:68] = struct.pack("<f", start)
    rec[72:76] = struct.pack("<f", end)
    rec[139:192] = _text(full_name, 53)
    return bytes(rec)


def xmaster_record(file_number, symbol, full_name, start, end, frequency="D", intraday=0) -> bytes:
    rec = bytearray(150)
    rec[1:15] = _text(symbol, 14)
    rec[16:62] = _text(full_name, 46)
    rec[62] = ord(frequency)
    rec[64] = intraday
    rec[65:67] = struct.pack("<H", file_number)
    rec[108:112] = struct.pack("<I", start)
    rec[116:120] = struct.pack("<I", end)
    return bytes(rec)


def index_file(records: Iterable[bytes], record_length: int) -> bytes:
    """Prefix the records with a header record of the same length."""
    header = bytearray(record_length)
    header[0] = 0xFF
    return bytes(header) + b"".join(records)


def data_file(rows: Sequence[Sequence[float]], n_fields: int) -> bytes:
    """Header record (record count at offset 2) followed by MBF encoded rows."""
    header = bytearray(n_fields * 4)
    struct.pack_into("<H", header, 2, len(rows) + 1)
    cells: List[bytes] = []
    for row in rows:
        assert len(row) == n_fields
        cells.extend(ieee_to_mbf(v) for v in row)
    return bytes(header) + b"".join(cells)
