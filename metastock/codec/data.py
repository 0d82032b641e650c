#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
===============================================================================
 File:        data.py
 Created:     2026-02-04

 Description:
     Decoder for MetaStock data files (F<n>.DAT / F<n>.MWD).

     A data file is a matrix of 4-byte MBF cells. Every record, the header
     included, holds the same number of fields:

         | Date | (Time) | Open | High | Low | Close | (Volume) | (OpenInterest) |

     The header record carries the record count (header included) as a
     little-endian uint16 at byte offset 2. The field count is not stored;
     it follows from the file size:

         n_fields = file_size / (num_records * 4)

     Files with 8 fields carry a packed time column, which is folded together
     with the date into one datetime timestamp. Files with fewer fields carry
     dates only.

     Key classes:
         - DataRecord: One decoded bar.
         - DataSeries: All bars of one data file plus its on-disk field count.

     Key functions:
         - decode_data_file: Decode a complete data file buffer.

 Requirements:
     - Python 3.8+
     - numpy
     - pandas

 Exceptions:
     - CorruptHeaderError: Record count and file size are inconsistent.
     - InvalidDateError: A row's timestamp lies outside the years 1-9999.
===============================================================================
"""
import struct
import numpy as np
import pandas as pd
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional, Tuple, Union

from metastock.codec.dates import (
    PackedDate, PackedTime, roll_timestamp, split_packed_dates, split_packed_times
)
from metastock.codec.exceptions import CorruptHeaderError
from metastock.codec.mbf import MBF_SIZE, mbf_buffer_to_ieee
from metastock.io.source import ByteSource, as_buffer

# Byte offset of the uint16 record count in the header record
RECORD_COUNT_OFFSET = 2

# Date + OHLC is the smallest usable row, date + time + OHLCV + OI the largest
MIN_FIELDS = 5
MAX_FIELDS = 8
INTRADAY_FIELDS = 8

PRICE_COLUMNS = ['open', 'high', 'low', 'close']
EXTRA_COLUMNS = ['volume', 'open_interest']


@dataclass(frozen=True)
class DataRecord:
    timestamp: Union[date, datetime]
    open: float
    high: float
    low: float
    close: float
    volume: Optional[float] = None
    open_interest: Optional[float] = None


@dataclass(frozen=True)
class DataSeries:
    rows: Tuple[DataRecord, ...]
    # On-disk field count, before the time column is folded. 0 when the
    # data file was absent.
    field_count: int

    @classmethod
    def empty(cls) -> "DataSeries":
        return cls(rows=(), field_count=0)

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def is_intraday(self) -> bool:
        return self.field_count == INTRADAY_FIELDS

    @property
    def value_columns(self) -> List[str]:
        """Names of the numeric columns present in this series."""
        if self.field_count < MIN_FIELDS:
            return list(PRICE_COLUMNS)
        extra = self.field_count - MIN_FIELDS - (1 if self.is_intraday else 0)
        return PRICE_COLUMNS + EXTRA_COLUMNS[:extra]

    @property
    def has_volume(self) -> bool:
        return 'volume' in self.value_columns

    @property
    def has_open_interest(self) -> bool:
        return 'open_interest' in self.value_columns

    def to_dataframe(self) -> pd.DataFrame:
        """
        Tabular view of the series.

        Returns:
            pd.DataFrame: Columns ['open', 'high', 'low', 'close'] plus
            'volume' / 'open_interest' when present, indexed by 'time'.
        """
        columns = self.value_columns
        df = pd.DataFrame(
            [[getattr(r, c) for c in columns] for r in self.rows],
            columns=columns,
            index=pd.to_datetime([r.timestamp for r in self.rows]),
            dtype='float64',
        )
        df.index.name = 'time'
        return df


def read_header(buffer) -> Tuple[int, int]:
    """
    Derive (num_records, n_fields) from a data file buffer.

    Raises:
        CorruptHeaderError: If the count is missing or zero, or the file size
        is not a whole number of records.
    """
    size = len(buffer)
    if size < RECORD_COUNT_OFFSET + 2:
        raise CorruptHeaderError(f"Data file too short for a header: {size} bytes")

    num_records = struct.unpack_from('<H', buffer, RECORD_COUNT_OFFSET)[0]
    if num_records == 0:
        raise CorruptHeaderError("Data file header reports zero records")

    n_fields, remainder = divmod(size, num_records * MBF_SIZE)
    if remainder:
        raise CorruptHeaderError(
            f"Data file size {size} is not divisible by {num_records} records of 4-byte fields"
        )
    return num_records, n_fields


def decode_data_file(data: Union[bytes, bytearray, memoryview, ByteSource]) -> DataSeries:
    """
    Decode a complete data file.

    Args:
        data: Full data file contents.

    Returns:
        DataSeries: Rows in on-disk order. A header-only file yields no rows.

    Raises:
        CorruptHeaderError: If the header and the file size disagree, or the
        field count cannot hold a date and OHLC prices.
        InvalidDateError: If a row's timestamp lies outside the years
        1-9999. Other impossible components roll over (month 13 is January
        of the next year, hour 24 is midnight of the next day).
    """
    buffer = as_buffer(data)
    num_records, n_fields = read_header(buffer)

    num_rows = num_records - 1
    if num_rows == 0:
        return DataSeries(rows=(), field_count=n_fields)

    if not MIN_FIELDS <= n_fields <= MAX_FIELDS:
        raise CorruptHeaderError(
            f"Unsupported field count {n_fields} (expected {MIN_FIELDS}-{MAX_FIELDS})"
        )

    # Skip the header record, then read everything at once
    matrix = mbf_buffer_to_ieee(
        buffer, offset=n_fields * MBF_SIZE, count=num_rows * n_fields
    ).reshape(num_rows, n_fields)

    years, months, days = split_packed_dates(matrix[:, 0])
    if n_fields == INTRADAY_FIELDS:
        hours, minutes = split_packed_times(matrix[:, 1])
        times = [PackedTime(int(h), int(m)) for h, m in zip(hours, minutes)]
        values = matrix[:, 2:]
    else:
        times = [None] * num_rows
        values = matrix[:, 1:]

    rows = []
    for i, cells in enumerate(values.tolist()):
        stamp = roll_timestamp(PackedDate(int(years[i]), int(months[i]), int(days[i])), times[i])
        rows.append(DataRecord(stamp, *cells))

    return DataSeries(rows=tuple(rows), field_count=n_fields)
