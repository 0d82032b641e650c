#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
===============================================================================
 File:        directory.py
 Created:     2026-02-05
 Description: Reads a MetaStock directory: one index file plus the numbered
              data files next to it.

              The index variant is taken from the file name (MASTER, EMASTER
              or XMASTER). Each index entry points at F<n>.DAT when n <= 255
              and at F<n>.MWD otherwise. Data files are decoded concurrently
              in a thread pool and joined back to their entries in index
              order.

              A data file that does not exist is not an error: sparse
              directories are common, and the entry simply gets an empty
              series.

              Provides:
              - detect_variant: variant name from an index file path.
              - data_file_name: F<n>.<ext> for a data file number.
              - Security: an IndexEntry joined with its DataSeries.
              - MetastockReader: directory-level reader.

 Requirements:
     - Python 3.8+

 License:
     MIT License
===============================================================================
"""
import concurrent.futures
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from metastock.codec.data import DataSeries, decode_data_file
from metastock.codec.exceptions import MetastockError, UnknownVariantError
from metastock.codec.index import INDEX_LAYOUTS, IndexEntry, decode_index
from metastock.config.app_config import ReaderConfig, ReaderExtensions
from metastock.io.source import FileByteSource


@dataclass(frozen=True)
class Security:
    entry: IndexEntry
    series: DataSeries
    # Resolved data file, None when it could not be found
    path: Optional[str] = None
    # Decode error message when the reader was asked to skip broken files
    error: Optional[str] = None

    @property
    def missing(self) -> bool:
        return self.path is None

    @property
    def failed(self) -> bool:
        return self.error is not None


def detect_variant(index_path: Union[str, Path]) -> str:
    """
    Derive the index variant from the file name.

    Raises:
        UnknownVariantError: If the name is not MASTER, EMASTER or XMASTER.
    """
    stem = Path(index_path).stem.lower()
    if stem not in INDEX_LAYOUTS:
        raise UnknownVariantError(
            f"The name of the index file should be MASTER, EMASTER or XMASTER, got {Path(index_path).name!r}"
        )
    return stem


def data_file_name(number: int, extensions: Optional[ReaderExtensions] = None) -> str:
    """
    Name of the data file for `number`, e.g. F1.DAT or F300.MWD.
    """
    ext = extensions or ReaderExtensions()
    suffix = ext.dat if number <= ext.threshold else ext.mwd
    return f"F{number}.{suffix}"


class MetastockReader:
    """
    Reads an index file and every data file it references.
    """

    def __init__(self, config: Optional[ReaderConfig] = None):
        """
        Args:
            config (Optional[ReaderConfig]): Reader settings. Defaults apply
                when omitted.
        """
        self.config = config or ReaderConfig()
        self.max_workers = self.config.max_workers or os.cpu_count()

    def read_index(self, index_path: Union[str, Path]) -> List[IndexEntry]:
        """Decode the index file at `index_path`."""
        variant = detect_variant(index_path)
        with FileByteSource(index_path) as source:
            return decode_index(variant, source)

    def resolve_data_file(self, directory: Union[str, Path], entry: IndexEntry) -> Optional[Path]:
        """
        Locate the data file of `entry` in `directory`.

        Tries the exact name first, then a case-insensitive match when
        enabled. Returns None if nothing matches.
        """
        directory = Path(directory)
        name = data_file_name(entry.data_file_number, self.config.extensions)

        candidate = directory / name
        if candidate.is_file():
            return candidate

        if self.config.case_insensitive and directory.is_dir():
            wanted = name.lower()
            with os.scandir(directory) as it:
                for item in it:
                    if item.is_file() and item.name.lower() == wanted:
                        return Path(item.path)
        return None

    def read_series(
        self,
        directory: Union[str, Path],
        entry: IndexEntry,
        skip_errors: bool = False,
    ) -> Security:
        """
        Decode the data file of a single entry.

        Args:
            directory: Directory holding the data files.
            entry (IndexEntry): Entry to read.
            skip_errors (bool): Record decode errors on the returned Security
                (with an empty series) instead of raising.

        Raises:
            MetastockError: If the data file exists but cannot be decoded and
            `skip_errors` is False.
        """
        path = self.resolve_data_file(directory, entry)
        if path is None:
            return Security(entry=entry, series=DataSeries.empty())

        try:
            with FileByteSource(path) as source:
                series = decode_data_file(source)
        except MetastockError as e:
            if not skip_errors:
                raise
            return Security(entry=entry, series=DataSeries.empty(), path=str(path), error=str(e))
        return Security(entry=entry, series=series, path=str(path))

    def read(
        self,
        index_path: Union[str, Path],
        symbols: Optional[List[str]] = None,
        on_done: Optional[Callable[[Security], None]] = None,
        skip_errors: bool = False,
    ) -> List[Security]:
        """
        Read an index file and all of its data files.

        Args:
            index_path: Path to MASTER, EMASTER or XMASTER.
            symbols (Optional[List[str]]): Only read these symbols.
            on_done (Optional[Callable]): Called once per decoded security,
                in completion order (used for progress reporting).
            skip_errors (bool): Keep going when a data file fails to decode;
                the error is recorded on its Security.

        Returns:
            List[Security]: One per selected entry, in index order.

        Raises:
            MetastockError: The first decode error encountered, unless
            `skip_errors` is set.
        """
        directory = Path(index_path).parent
        entries = self.read_index(index_path)
        if symbols:
            wanted = set(symbols)
            entries = [e for e in entries if e.symbol in wanted]

        results: Dict[int, Security] = {}
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                executor.submit(self.read_series, directory, entry, skip_errors): i
                for i, entry in enumerate(entries)
            }
            for future in concurrent.futures.as_completed(futures):
                security = future.result()
                results[futures[future]] = security
                if on_done:
                    on_done(security)

        return [results[i] for i in range(len(entries))]

    @staticmethod
    def missing(securities: List[Security]) -> List[IndexEntry]:
        """Entries whose data file could not be found."""
        return [s.entry for s in securities if s.missing]
