#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
===============================================================================
 File:        source.py
 Created:     2026-02-03

 Description:
     Byte sources handed to the MetaStock decoders.

     The decoders never open files themselves. They receive either a plain
     bytes-like object or a ByteSource, which offers positioned reads over
     some backing store.

     Key classes:
         - ByteSource: Abstract, context-managed `read_at` / `size` interface.
         - BufferByteSource: In-memory source over a bytes-like object.
         - FileByteSource: Read-only memory-mapped file.

     Key functions:
         - as_buffer: Normalize bytes / bytearray / memoryview / ByteSource
           into a buffer numpy can view without copying.

 Requirements:
     - Python 3.8+
     - mmap

 License:
     MIT License
===============================================================================
"""
import mmap
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union


class ByteSource(ABC):

    @abstractmethod
    def read_at(self, offset: int, length: int) -> bytes:
        pass

    @abstractmethod
    def size(self) -> int:
        pass

    def read_all(self) -> bytes:
        return self.read_at(0, self.size())

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class BufferByteSource(ByteSource):
    """
    Byte source over an in-memory buffer.
    """

    def __init__(self, data: Union[bytes, bytearray, memoryview]):
        self._data = bytes(data)

    def read_at(self, offset: int, length: int) -> bytes:
        if offset < 0 or length < 0:
            raise ValueError(f"Invalid read: offset={offset}, length={length}")
        return self._data[offset:offset + length]

    def size(self) -> int:
        return len(self._data)

    def read_all(self) -> bytes:
        return self._data


class FileByteSource(ByteSource):
    """
    Zero-copy byte source over a memory-mapped file.

    Structure:
        - The whole file is mapped read-only on construction.
        - Empty files cannot be mapped and are served as b"".
    """

    def __init__(self, filepath: Union[str, Path]):
        """
        Open and map `filepath`.

        Raises:
            OSError: If the file cannot be opened.
        """
        self.filepath = Path(filepath)
        self.file_handle = None
        self.mm = None
        self._size = 0
        self._open()

    def _open(self) -> None:
        self.file_handle = open(self.filepath, 'rb')
        try:
            self._size = os.path.getsize(self.filepath)
            if self._size > 0:
                self.mm = mmap.mmap(self.file_handle.fileno(), 0, access=mmap.ACCESS_READ)
        except Exception:
            self.close()
            raise

    def read_at(self, offset: int, length: int) -> bytes:
        if offset < 0 or length < 0:
            raise ValueError(f"Invalid read: offset={offset}, length={length}")
        if self.mm is None:
            return b""
        return self.mm[offset:offset + length]

    def size(self) -> int:
        return self._size

    def close(self) -> None:
        if self.mm:
            self.mm.close()
            self.mm = None
        if self.file_handle:
            self.file_handle.close()
            self.file_handle = None


def as_buffer(data: Union[bytes, bytearray, memoryview, ByteSource]) -> bytes:
    """
    Return the full contents of `data` as a bytes-like buffer.

    Args:
        data: Raw bytes or a ByteSource.

    Returns:
        A bytes-like object suitable for numpy.frombuffer.

    Raises:
        TypeError: If `data` is neither bytes-like nor a ByteSource.
    """
    if isinstance(data, ByteSource):
        return data.read_all()
    if isinstance(data, (bytes, bytearray)):
        return data
    if isinstance(data, memoryview):
        return data.tobytes()
    raise TypeError(f"Expected bytes or ByteSource, got {type(data).__name__}")
