"""Object-detection results exchanged as JSON documents.

A detection frame looks like::

    {
        "frameId": 32,
        "objects": [
            {"className": "cardboard", "height": 618, "width": 1258, "x": -29, "y": 0}
        ],
        "timestamp": "20241126_114616.057"
    }
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Tuple


def _field(data: Any, key: str, kind: type) -> Any:
    if not isinstance(data, Mapping):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    try:
        value = data[key]
    except KeyError:
        raise ValueError(f"Missing field {key!r}") from None
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ValueError(f"Field {key!r} must be of type {kind.__name__}, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class DetectedObject:
    """One detected object: its class and bounding box."""

    class_name: str
    height: int
    width: int
    x: int
    y: int

    def to_json(self) -> Dict[str, Any]:
        return {
            "className": self.class_name,
            "height": self.height,
            "width": self.width,
            "x": self.x,
            "y": self.y,
        }

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "DetectedObject":
        return cls(
            class_name=_field(data, "className", str),
            height=_field(data, "height", int),
            width=_field(data, "width", int),
            x=_field(data, "x", int),
            y=_field(data, "y", int),
        )


@dataclass(frozen=True)
class DetectionFrame:
    """All objects detected in one video frame."""

    frame_id: int
    timestamp: str
    objects: Tuple[DetectedObject, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        objects: Iterable[DetectedObject] = self.objects
        object.__setattr__(self, "objects", tuple(objects))

    def to_json(self) -> Dict[str, Any]:
        return {
            "frameId": self.frame_id,
            "timestamp": self.timestamp,
            "objects": [obj.to_json() for obj in self.objects],
        }

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "DetectionFrame":
        objects = _field(data, "objects", list)
        return cls(
            frame_id=_field(data, "frameId", int),
            timestamp=_field(data, "timestamp", str),
            objects=tuple(DetectedObject.from_json(item) for item in objects),
        )