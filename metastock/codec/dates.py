#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
===============================================================================
 File:        dates.py
 Created:     2026-02-02
 Description: Packed date/time decoding for MetaStock records.

              MetaStock stores a date as a number whose decimal digits are
              grouped as YYYYMMDD, or in a compacted form where the century
              is folded: YYMMDD (19YY) and CYYMMDD (e.g. 1010123 is
              2001-01-23). Only values with eight digits are taken literally,
              everything shorter gets 1900 added to the year. No range checks
              are applied to the components.

              Intraday (8 field) data files carry a second number per row
              holding the time of day as HHMMSS, of which only hours and
              minutes are used.

              Provides:
              - PackedDate / PackedTime: raw calendar components.
              - decode_packed_date, decode_packed_time, format_date.
              - to_timestamp: components -> datetime.date / datetime.datetime.
              - roll_timestamp: same, with out of range components carried
                over the way a calendar serial number would.
              - split_packed_dates, split_packed_times: numpy versions used
                for whole data-file columns.

 Requirements:
     - Python 3.8+
     - numpy

 License:
     MIT License
===============================================================================
"""
import math
import numpy as np
from datetime import date, datetime, timedelta
from typing import NamedTuple, Optional, Tuple, Union

from metastock.codec.exceptions import InvalidDateError

# Placeholder rendered for a zero (unset) packed date
NO_DATE = "none"


class PackedDate(NamedTuple):
    year: int
    month: int
    day: int

    def __str__(self) -> str:
        return format_date(self)

    def to_date(self) -> date:
        return to_timestamp(self)


class PackedTime(NamedTuple):
    hour: int
    minute: int


def decode_packed_date(n: float) -> Optional[PackedDate]:
    """
    Split a packed (C)YYMMDD or YYYYMMDD number into calendar components.

    Args:
        n (float): Decoded numeric value of the date field.

    Returns:
        Optional[PackedDate]: Components, or None when `n` is zero
        (no date recorded).

    Raises:
        InvalidDateError: If `n` is NaN or infinite.
    """
    if n == 0:
        return None
    if not math.isfinite(n):
        raise InvalidDateError(f"Packed date is not a finite number: {n}")

    value = int(math.floor(n))
    day = value % 100
    month = (value // 100) % 100
    year = value // 10_000

    # YYMMDD / CYYMMDD: less than eight digits
    if value // 10_000_000 == 0:
        year += 1900

    return PackedDate(year, month, day)


def decode_packed_time(n: float) -> PackedTime:
    """
    Split a packed HHMMSS number into hour and minute. Seconds are dropped.
    """
    hour = int(math.floor(n / 10_000))
    minute = int(math.floor((n / 100) % 100))
    return PackedTime(hour, minute)


def format_date(packed: Optional[PackedDate]) -> str:
    """
    Render a packed date as 'YYYY-MM-DD', or 'none' for a missing date.
    """
    if packed is None:
        return NO_DATE
    return f"{packed.year:d}-{packed.month:02d}-{packed.day:02d}"


def to_timestamp(
    packed: Optional[PackedDate],
    time_of_day: Optional[PackedTime] = None
) -> Union[date, datetime]:
    """
    Build a concrete timestamp from packed components.

    Args:
        packed (PackedDate): Calendar components.
        time_of_day (Optional[PackedTime]): Hour/minute for intraday rows.

    Returns:
        datetime.date when no time is given, otherwise datetime.datetime
        with seconds set to 0.

    Raises:
        InvalidDateError: If the date is missing or the components are out
        of calendar range.
    """
    if packed is None:
        raise InvalidDateError("Packed date is zero, no timestamp recorded")

    try:
        if time_of_day is None:
            return date(packed.year, packed.month, packed.day)
        return datetime(
            packed.year, packed.month, packed.day,
            time_of_day.hour, time_of_day.minute, 0
        )
    except (ValueError, OverflowError) as e:
        raise InvalidDateError(
            f"Invalid packed timestamp {packed} {time_of_day or ''}".rstrip()
        ) from e


def roll_timestamp(
    packed: PackedDate,
    time_of_day: Optional[PackedTime] = None
) -> Union[date, datetime]:
    """
    Build a timestamp from packed components, carrying overflow forward.

    A month below 1 counts as January and months past 12 move into the
    following years. Day, hour and minute are offsets from the start of the
    month, so day 0 is the last day of the previous month and hour 24 is
    midnight of the next day. A zero packed date (all-zero row) ends up as
    1899-12-31.

    Raises:
        InvalidDateError: If the result falls outside the years 1-9999.
    """
    month = max(packed.month, 1)
    year = packed.year + (month - 1) // 12
    month = (month - 1) % 12 + 1

    try:
        day = date(year, month, 1) + timedelta(days=packed.day - 1)
        if time_of_day is None:
            return day
        return datetime(day.year, day.month, day.day) + timedelta(
            hours=time_of_day.hour, minutes=time_of_day.minute
        )
    except (ValueError, OverflowError) as e:
        raise InvalidDateError(
            f"Packed timestamp out of range: {packed} {time_of_day or ''}".rstrip()
        ) from e


def split_packed_dates(values: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Vectorized decode_packed_date without the zero check.

    Returns:
        Tuple of int64 arrays (year, month, day).
    """
    n = np.floor(np.asarray(values, dtype=np.float64)).astype(np.int64)
    day = n % 100
    month = (n // 100) % 100
    year = n // 10_000
    year = np.where(n // 10_000_000 == 0, year + 1900, year)
    return year, month, day


def split_packed_times(values: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Vectorized decode_packed_time.

    Returns:
        Tuple of int64 arrays (hour, minute).
    """
    n = np.asarray(values, dtype=np.float64)
    hour = np.floor(n / 10_000).astype(np.int64)
    minute = np.floor(np.mod(n / 100, 100)).astype(np.int64)
    return hour, minute
