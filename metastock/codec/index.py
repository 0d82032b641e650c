#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
===============================================================================
 File:        index.py
 Created:     2026-02-03

 Description:
     Decoder for the three MetaStock symbol index variants.

     An index file is a sequence of fixed-length records. The first record
     is a header and is never surfaced; every following record describes
     one security and names the data file (F<n>.DAT / F<n>.MWD) holding its
     time series.

     Record layouts (0-indexed byte offsets):

         MASTER (53 bytes)
             0       data file number (uint8)
             7-22    name
             25-28   first date (MBF, packed)
             29-32   last date (MBF, packed)
             33      frequency
             34      intraday minutes
             36-51   symbol

         EMASTER (192 bytes)
             2       data file number (uint8)
             11-24   symbol
             32-47   name
             60      frequency
             62      intraday minutes
             64-67   first date (IEEE single, packed)
             72-75   last date (IEEE single, packed)
             139-191 full name

         XMASTER (150 bytes)
             1-14    symbol
             16-61   full name
             62      frequency
             64      intraday minutes
             65-66   data file number (uint16)
             108-111 first date (uint32 read as single, packed)
             116-119 last date (uint32 read as single, packed)

     Getting the date number is variant specific and lives in each layout.
     Interpreting that number as a date is shared (dates.decode_packed_date).

     Key classes:
         - IndexEntry: One decoded security record.
         - IndexLayout: Record length, numpy dtype and date converter of a
           variant.

     Key functions:
         - decode_index: Decode a full index buffer.
         - get_layout: Resolve a variant name to its layout.

 Requirements:
     - Python 3.8+
     - numpy

 Exceptions:
     - UnknownVariantError: Variant is not MASTER, EMASTER or XMASTER.
     - TruncatedRecordError: Buffer is not a whole number of records.
===============================================================================
"""
import numpy as np
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

from metastock.codec.dates import PackedDate, decode_packed_date, format_date
from metastock.codec.exceptions import TruncatedRecordError, UnknownVariantError
from metastock.codec.mbf import mbf_array_to_ieee
from metastock.io.source import ByteSource, as_buffer

MASTER = "master"
EMASTER = "emaster"
XMASTER = "xmaster"

# Frequency codes found in the index records
FREQUENCIES = {
    "I": "intraday",
    "D": "daily",
    "W": "weekly",
    "M": "monthly",
    "Q": "quarterly",
    "Y": "yearly",
}

# Characters stripped from the right of fixed-width text fields
TEXT_PADDING = " \x00"


@dataclass(frozen=True)
class IndexEntry:
    data_file_number: int
    symbol: str
    name: Optional[str]
    full_name: Optional[str]
    start_date: Optional[PackedDate]
    end_date: Optional[PackedDate]
    frequency: str
    intraday_minutes: int

    @property
    def is_intraday(self) -> bool:
        return self.frequency == "I"

    def to_dict(self) -> Dict[str, Any]:
        """Flat view with dates rendered as 'YYYY-MM-DD' / 'none'."""
        return {
            "data_file_number": self.data_file_number,
            "symbol": self.symbol,
            "name": self.name,
            "full_name": self.full_name,
            "start_date": format_date(self.start_date),
            "end_date": format_date(self.end_date),
            "frequency": self.frequency,
            "intraday_minutes": self.intraday_minutes,
        }


@dataclass(frozen=True)
class IndexLayout:
    variant: str
    record_length: int
    dtype: np.dtype
    # Raw date column -> float64 packed date numbers
    date_numbers: Callable[[np.ndarray], np.ndarray]


def _ieee_dates(column: np.ndarray) -> np.ndarray:
    return column.astype(np.float64)


def _uint_dates(column: np.ndarray) -> np.ndarray:
    # Passed through single precision: odd days above 2^24 round to even
    return column.astype(np.float32).astype(np.float64)


MASTER_LAYOUT = IndexLayout(
    variant=MASTER,
    record_length=53,
    dtype=np.dtype({
        'names':   ['file_number', 'name', 'start', 'end', 'frequency', 'intraday', 'symbol'],
        'formats': ['u1',          'S16',  '<u4',   '<u4', 'S1',        'u1',       'S16'],
        'offsets': [0,             7,      25,      29,    33,          34,         36],
        'itemsize': 53,
    }),
    date_numbers=mbf_array_to_ieee,
)

EMASTER_LAYOUT = IndexLayout(
    variant=EMASTER,
    record_length=192,
    dtype=np.dtype({
        'names':   ['file_number', 'symbol', 'name', 'frequency', 'intraday', 'start', 'end', 'full_name'],
        'formats': ['u1',          'S14',    'S16',  'S1',        'u1',       '<f4',   '<f4', 'S53'],
        'offsets': [2,             11,       32,     60,          62,         64,      72,    139],
        'itemsize': 192,
    }),
    date_numbers=_ieee_dates,
)

XMASTER_LAYOUT = IndexLayout(
    variant=XMASTER,
    record_length=150,
    dtype=np.dtype({
        'names':   ['symbol', 'full_name', 'frequency', 'intraday', 'file_number', 'start', 'end'],
        'formats': ['S14',    'S46',       'S1',        'u1',       '<u2',         '<u4',   '<u4'],
        'offsets': [1,        16,          62,          64,         65,            108,     116],
        'itemsize': 150,
    }),
    date_numbers=_uint_dates,
)

INDEX_LAYOUTS: Dict[str, IndexLayout] = {
    MASTER: MASTER_LAYOUT,
    EMASTER: EMASTER_LAYOUT,
    XMASTER: XMASTER_LAYOUT,
}


def get_layout(variant: str) -> IndexLayout:
    """
    Resolve a variant name (case-insensitive) to its record layout.

    Raises:
        UnknownVariantError: If the variant is not supported.
    """
    key = variant.lower() if isinstance(variant, str) else None
    if key not in INDEX_LAYOUTS:
        raise UnknownVariantError(
            f"Unknown index variant {variant!r}. Expected one of: "
            f"{', '.join(v.upper() for v in INDEX_LAYOUTS)}"
        )
    return INDEX_LAYOUTS[key]


def _text(raw: bytes) -> str:
    return raw.decode('latin-1').rstrip(TEXT_PADDING)


def decode_index(
    variant: str,
    data: Union[bytes, bytearray, memoryview, ByteSource]
) -> List[IndexEntry]:
    """
    Decode every security record of an index file.

    Args:
        variant (str): 'master', 'emaster' or 'xmaster' (any case).
        data: Full index file contents.

    Returns:
        List[IndexEntry]: One entry per record after the header, in on-disk
        order.

    Raises:
        UnknownVariantError: If `variant` is not supported.
        TruncatedRecordError: If the size is not a multiple of the record
        length.
    """
    layout = get_layout(variant)
    buffer = as_buffer(data)

    if len(buffer) % layout.record_length:
        raise TruncatedRecordError(
            f"{layout.variant.upper()} size {len(buffer)} is not a multiple "
            f"of the {layout.record_length} byte record length"
        )

    # Skip the header record
    count = len(buffer) // layout.record_length - 1
    if count <= 0:
        return []

    records = np.frombuffer(buffer, dtype=layout.dtype, count=count, offset=layout.record_length)

    fields = layout.dtype.names
    starts = layout.date_numbers(records['start'])
    ends = layout.date_numbers(records['end'])

    entries = []
    for i, rec in enumerate(records):
        entries.append(IndexEntry(
            data_file_number=int(rec['file_number']),
            symbol=_text(rec['symbol']),
            name=_text(rec['name']) if 'name' in fields else None,
            full_name=_text(rec['full_name']) if 'full_name' in fields else None,
            start_date=decode_packed_date(float(starts[i])),
            end_date=decode_packed_date(float(ends[i])),
            frequency=_text(rec['frequency']),
            intraday_minutes=int(rec['intraday']),
        ))

    return entries
