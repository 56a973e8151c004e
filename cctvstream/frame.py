"""Video frame wire format: a fixed 40-byte header followed by the image body."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass
from typing import Iterable, Iterator, List

TIMESTAMP_LENGTH = 19

# frameId, bodySize, imageWidth, imageHeight, imageFormat, pad(3),
# timestamp(19), pad(1), gopStartFlag, gopSize, pad(2); numbers in network order.
_HEADER_STRUCT = struct.Struct("!IIHHB3x19sxBB2x")
HEADER_SIZE = _HEADER_STRUCT.size


class FrameError(ValueError):
    """Raised for malformed frames, headers and GOPs."""


class GopStartFlag(enum.IntEnum):
    FALSE = 0
    TRUE = 1


class ImageFormat(enum.IntEnum):
    RAW = 0
    H264 = 1


def _as_enum(enum_type, value: int) -> int:
    try:
        return enum_type(value)
    except ValueError:
        return value


@dataclass(frozen=True)
class Header:
    """Fixed-size frame header."""

    frame_id: int = 0
    body_size: int = 0
    image_width: int = 0
    image_height: int = 0
    image_format: int = ImageFormat.RAW
    timestamp: str = ""
    gop_start_flag: int = GopStartFlag.FALSE
    gop_size: int = 0

    def to_bytes(self) -> bytes:
        """Encode the header as its 40-byte wire form."""
        try:
            raw_timestamp = self.timestamp.encode("latin-1")
        except UnicodeEncodeError as exc:
            raise FrameError(f"Timestamp is not representable: {self.timestamp!r}") from exc
        if len(raw_timestamp) > TIMESTAMP_LENGTH:
            raise FrameError(f"Timestamp longer than {TIMESTAMP_LENGTH} bytes: {self.timestamp!r}")
        try:
            return _HEADER_STRUCT.pack(
                self.frame_id,
                self.body_size,
                self.image_width,
                self.image_height,
                int(self.image_format),
                raw_timestamp,
                int(self.gop_start_flag),
                self.gop_size,
            )
        except struct.error as exc:
            raise FrameError(f"Header field out of range: {exc}") from exc

    @classmethod
    def from_bytes(cls, data: bytes) -> "Header":
        """Decode a header from exactly 40 bytes."""
        if len(data) != HEADER_SIZE:
            raise FrameError(f"Header must be {HEADER_SIZE} bytes, got {len(data)}")
        (
            frame_id,
            body_size,
            width,
            height,
            image_format,
            raw_timestamp,
            gop_start_flag,
            gop_size,
        ) = _HEADER_STRUCT.unpack(bytes(data))
        return cls(
            frame_id=frame_id,
            body_size=body_size,
            image_width=width,
            image_height=height,
            image_format=_as_enum(ImageFormat, image_format),
            timestamp=raw_timestamp.split(b"\0", 1)[0].decode("latin-1"),
            gop_start_flag=_as_enum(GopStartFlag, gop_start_flag),
            gop_size=gop_size,
        )


@dataclass(frozen=True)
class Frame:
    """A header and its image body."""

    header: Header
    body: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "body", bytes(self.body))

    def size(self) -> int:
        """Encoded size as announced by the header."""
        return HEADER_SIZE + self.header.body_size

    def to_bytes(self) -> bytes:
        return self.header.to_bytes() + self.body

    @classmethod
    def from_bytes(cls, data: bytes) -> "Frame":
        """Decode one frame from the start of ``data``; trailing bytes are ignored."""
        data = bytes(data)
        if len(data) < HEADER_SIZE:
            raise FrameError("Buffer size is too small to deserialize header")
        header = Header.from_bytes(data[:HEADER_SIZE])
        end = HEADER_SIZE + header.body_size
        if len(data) < end:
            raise FrameError("Buffer size is too small to deserialize body")
        return cls(header, data[HEADER_SIZE:end])


class GOP:
    """A group of pictures: frames led by one carrying the GOP start flag."""

    def __init__(self, frames: Iterable[Frame]) -> None:
        frames = tuple(frames)
        if not frames:
            raise FrameError("A GOP needs at least one frame.")
        first = frames[0].header
        if first.gop_start_flag != GopStartFlag.TRUE:
            raise FrameError("Invalid GOP start flag.")
        if first.gop_size != len(frames):
            raise FrameError("Mismatch between GOP size and frame count.")
        self._frames = frames

    def frames(self) -> List[Frame]:
        return list(self._frames)

    def __len__(self) -> int:
        return len(self._frames)

    def __iter__(self) -> Iterator[Frame]:
        return iter(self._frames)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GOP):
            return NotImplemented
        return self._frames == other._frames

    def __hash__(self) -> int:
        return hash(self._frames)

    def __repr__(self) -> str:
        return f"GOP({list(self._frames)!r})"