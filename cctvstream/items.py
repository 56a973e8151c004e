"""Storage items: length-prefixed records holding JSON documents or GOPs."""

from __future__ import annotations

import json
import struct
from typing import Any, List

from cctvstream.frame import GOP, Frame

ITEM_HEADER_SIZE = 4
_ITEM_HEADER = struct.Struct("<I")


def _encode_json(data: Any) -> bytes:
    """Compact JSON with sorted keys, UTF-8 encoded."""
    return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


class Item:
    """A record stored in a storage file: a 4-byte size followed by the payload."""

    payload: bytes = b""

    def to_bytes(self) -> bytes:
        """The full record: little-endian payload size, then the payload."""
        return _ITEM_HEADER.pack(len(self.payload)) + self.payload

    def size(self) -> int:
        """Length of the full record in bytes."""
        return ITEM_HEADER_SIZE + len(self.payload)


class JsonItem(Item):
    """An item whose payload is a compact JSON document."""

    def __init__(self, data: Any) -> None:
        self.data = data
        self.payload = _encode_json(data)

    @classmethod
    def from_payload(cls, payload: bytes) -> "JsonItem":
        """Parse a stored payload back into an item."""
        payload = bytes(payload)
        try:
            data = json.loads(payload.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ValueError("Failed to parse JSON data") from exc
        item = cls(data)
        item.payload = payload
        return item


class H264Item(Item):
    """An item whose payload is the encoded frames of one GOP, back to back."""

    def __init__(self, gop: GOP) -> None:
        self.gop = gop
        self.payload = b"".join(frame.to_bytes() for frame in gop.frames())

    @classmethod
    def from_payload(cls, payload: bytes) -> "H264Item":
        """Rebuild the GOP from a stored payload."""
        payload = bytes(payload)
        frames: List[Frame] = []
        offset = 0
        while offset < len(payload):
            frame = Frame.from_bytes(payload[offset:])
            frames.append(frame)
            offset += frame.size()
        item = cls(GOP(frames))
        item.payload = payload
        return item


class JsonCodec:
    """Turns JSON documents into storage items and back."""

    name = "json"

    def create_item(self, data: Any) -> JsonItem:
        return JsonItem(data)

    def decode(self, payload: bytes) -> Any:
        return JsonItem.from_payload(payload).data


class GopCodec:
    """Turns GOPs into storage items and back."""

    name = "h264"

    def create_item(self, data: GOP) -> H264Item:
        return H264Item(data)

    def decode(self, payload: bytes) -> GOP:
        return H264Item.from_payload(payload).gop