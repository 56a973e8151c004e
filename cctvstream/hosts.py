"""Addresses of camera hosts and the ports they serve video and JSON on."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass


def _check_port(name: str, port: int) -> None:
    if isinstance(port, bool) or not isinstance(port, int) or not 0 <= port <= 65535:
        raise ValueError(f"{name} must be an integer between 0 and 65535, got {port!r}")


@dataclass(frozen=True)
class Host:
    """An IPv4 host with its video and JSON ports."""

    ip: str
    video_port: int
    json_port: int

    def __post_init__(self) -> None:
        try:
            ipaddress.IPv4Address(self.ip)
        except ValueError as exc:
            raise ValueError(f"Invalid IPv4 address: {self.ip!r}") from exc
        _check_port("video_port", self.video_port)
        _check_port("json_port", self.json_port)

    @classmethod
    def parse(cls, text: str) -> "Host":
        """Parse ``ip:video_port:json_port``."""
        parts = text.strip().split(":")
        if len(parts) != 3:
            raise ValueError(f"Expected 'ip:video_port:json_port', got {text!r}")
        ip, video, json_port = parts
        try:
            return cls(ip, int(video), int(json_port))
        except ValueError as exc:
            raise ValueError(f"Invalid host specification {text!r}: {exc}") from exc

    def __str__(self) -> str:
        return f"{self.ip}:{self.video_port}:{self.json_port}"


CCTV1 = Host(ip="192.168.50.14", video_port=12345, json_port=54321)