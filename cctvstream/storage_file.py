"""Ring-buffer storage file of length-prefixed records.

Layout: a 12-byte file header (first item offset, last item offset, padding
offset; each a little-endian uint32) followed by the data area.  Offsets are
relative to the start of the data area.  Each record is a 4-byte item size
followed by that many payload bytes.  When a record no longer fits before the
end of the data area, the place where it would have gone is remembered as the
padding offset and writing wraps to offset 0, pushing the first item offset
past any records that get overwritten.
"""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Union

MAX_FILE_SIZE = 100 * 1024 * 1024
FILE_HEADER_SIZE = 12
ITEM_HEADER_SIZE = 4
FILL_BYTE = 0xFF

_CHUNK_SIZE = 1024 * 1024
_FILE_HEADER = struct.Struct("<III")
_ITEM_HEADER = struct.Struct("<I")
_UINT32_MAX = 0xFFFFFFFF


class StorageError(RuntimeError):
    """Raised when the storage file cannot be read or written as required."""


@dataclass
class FileHeader:
    """The three offsets kept at the start of a storage file."""

    first_item_offset: int
    last_item_offset: int
    padding_offset: int

    def to_bytes(self) -> bytes:
        try:
            return _FILE_HEADER.pack(self.first_item_offset, self.last_item_offset, self.padding_offset)
        except struct.error as exc:
            raise StorageError(f"File header offset out of range: {exc}") from exc

    @classmethod
    def from_bytes(cls, data: bytes) -> "FileHeader":
        if len(data) != FILE_HEADER_SIZE:
            raise StorageError(f"File header must be {FILE_HEADER_SIZE} bytes, got {len(data)}")
        return cls(*_FILE_HEADER.unpack(bytes(data)))


class StorageFile:
    """A fixed-size ring of records kept in one file."""

    def __init__(self, path: Union[str, os.PathLike], max_file_size: int = MAX_FILE_SIZE) -> None:
        if max_file_size <= FILE_HEADER_SIZE + ITEM_HEADER_SIZE:
            raise ValueError("Storage file is too small to hold any item")
        if max_file_size - FILE_HEADER_SIZE + 1 > _UINT32_MAX:
            raise ValueError("Storage file is too large for 32-bit offsets")
        self.path = Path(path)
        self.max_file_size = max_file_size
        invalid = self.invalid_offset
        self.header = FileHeader(invalid, invalid, invalid)

    @property
    def max_data_offset(self) -> int:
        return self.max_file_size - FILE_HEADER_SIZE

    @property
    def invalid_offset(self) -> int:
        """Offset value meaning 'no item'."""
        return self.max_data_offset + 1

    def create(self) -> None:
        """Create the file filled with dummy bytes and an empty header."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with self.path.open("wb") as file:
                remaining = self.max_file_size
                while remaining > 0:
                    chunk = min(remaining, _CHUNK_SIZE)
                    file.write(bytes([FILL_BYTE]) * chunk)
                    remaining -= chunk
        except OSError as exc:
            raise StorageError("Unable to open storage file for writing.") from exc
        invalid = self.invalid_offset
        self.header = FileHeader(invalid, invalid, invalid)
        self.write_header()

    def write_header(self) -> None:
        """Write the in-memory header to the start of the file."""
        data = self.header.to_bytes()
        try:
            with self.path.open("r+b") as file:
                file.write(data)
        except OSError as exc:
            raise StorageError("Failed to open file for writing.") from exc

    def read_header(self) -> FileHeader:
        """Load the header from the file into memory and return it."""
        try:
            with self.path.open("rb") as file:
                data = file.read(FILE_HEADER_SIZE)
        except OSError as exc:
            raise StorageError("Failed to open file for reading.") from exc
        if len(data) < FILE_HEADER_SIZE:
            raise StorageError("Failed to read file header.")
        self.header = FileHeader.from_bytes(data)
        return self.header

    def first_item_offset(self) -> int:
        return self.read_header().first_item_offset

    def last_item_offset(self) -> int:
        return self.read_header().last_item_offset

    def padding_offset(self) -> int:
        return self.read_header().padding_offset

    def next_item_offset(self, offset: int) -> int:
        """Offset of the record that follows the one at ``offset``.

        As with :meth:`read_item`, the padding offset stands for offset 0.
        """
        return self._next_offset(self._resolve(offset))

    def append_item(self, record: bytes) -> int:
        """Write a length-prefixed record into the ring and return its offset."""
        record = bytes(record)
        size = len(record)
        if size < ITEM_HEADER_SIZE or _ITEM_HEADER.unpack_from(record)[0] != size - ITEM_HEADER_SIZE:
            raise StorageError("Malformed item record: size prefix does not match its payload.")
        if size >= self.max_data_offset:
            raise StorageError(f"Item of {size} bytes does not fit in storage file: {self.path}")
        if not self.path.is_file():
            raise StorageError(f"Failed to open file for appending: {self.path}")

        header = self.header
        invalid = self.invalid_offset
        if header.last_item_offset == invalid and header.first_item_offset == invalid:
            insert_at = 0
            header.first_item_offset = insert_at
            header.last_item_offset = insert_at
        elif header.last_item_offset == 0 and header.first_item_offset == 0:
            insert_at = self._next_offset(header.last_item_offset)
            header.last_item_offset = insert_at
        else:
            insert_at = self._next_offset(header.last_item_offset)
            if insert_at + size >= self.max_data_offset:
                header.padding_offset = insert_at
                insert_at = 0
            if insert_at <= header.first_item_offset:
                item_offset = header.first_item_offset
                while insert_at + size > item_offset:
                    item_offset = self._next_offset(item_offset)
                header.first_item_offset = item_offset
            header.last_item_offset = insert_at

        try:
            with self.path.open("r+b") as file:
                file.seek(FILE_HEADER_SIZE + insert_at)
                file.write(record)
        except OSError as exc:
            raise StorageError(f"Failed to append item to file: {self.path}") from exc
        self.write_header()
        return insert_at

    def read_item(self, offset: int) -> bytes:
        """Return the payload of the record at ``offset``."""
        offset = self._resolve(offset)
        try:
            with self.path.open("rb") as file:
                file.seek(FILE_HEADER_SIZE + offset)
                raw_size = file.read(ITEM_HEADER_SIZE)
                if len(raw_size) < ITEM_HEADER_SIZE:
                    raise StorageError("Failed to read item header.")
                (item_size,) = _ITEM_HEADER.unpack(raw_size)
                payload = file.read(item_size)
        except OSError as exc:
            raise StorageError("Failed to open file for reading.") from exc
        if len(payload) < item_size:
            raise StorageError("Failed to read item data.")
        return payload

    def _resolve(self, offset: int) -> int:
        return 0 if offset == self.header.padding_offset else offset

    def _next_offset(self, offset: int) -> int:
        position = FILE_HEADER_SIZE + offset
        try:
            with self.path.open("rb") as file:
                file_size = file.seek(0, os.SEEK_END)
                if position >= file_size:
                    raise StorageError(
                        f"Seek position is beyond the file size. {self.path}; Position: {position}"
                    )
                file.seek(position)
                raw_size = file.read(ITEM_HEADER_SIZE)
        except OSError as exc:
            raise StorageError(f"Failed to open file: {self.path}") from exc
        if len(raw_size) < ITEM_HEADER_SIZE:
            raise StorageError(f"Failed to read item header. Current position: {position}")
        (item_size,) = _ITEM_HEADER.unpack(raw_size)
        next_offset = offset + ITEM_HEADER_SIZE + item_size
        if next_offset > self.max_data_offset:
            raise StorageError(f"Next item offset exceeds file size. Offset: {next_offset}")
        return next_offset