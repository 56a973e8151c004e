"""Camera-side clients that receive video and detection data and store it."""

from __future__ import annotations

import argparse
import json
import ssl
from pathlib import Path
from typing import Any, List, Optional

from cctvstream.frame import GOP, HEADER_SIZE, Frame, GopStartFlag, Header
from cctvstream.hosts import CCTV1, Host
from cctvstream.items import GopCodec, JsonCodec
from cctvstream.logger import Logger
from cctvstream.net import BaseClient
from cctvstream.storage_file import StorageError
from cctvstream.storage_manager import DEFAULT_ROOT, StorageManager
from cctvstream.tls import create_client_context

JSON_DELIMITER = b"|"
JSON_CHUNK_SIZE = 50

_json_logger = Logger("JsonClient")
_video_logger = Logger("VideoClient")


class JsonStreamBuffer:
    """Splits a byte stream of ``|``-terminated JSON documents.

    Malformed documents are logged and dropped.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()

    @property
    def pending(self) -> bytes:
        """Bytes received but not yet part of a complete document."""
        return bytes(self._buffer)

    def feed(self, data: bytes) -> List[Any]:
        """Add ``data`` and return the documents it completes, in order."""
        self._buffer += data
        documents = []
        while True:
            position = self._buffer.find(JSON_DELIMITER)
            if position < 0:
                return documents
            text = bytes(self._buffer[:position])
            del self._buffer[: position + 1]
            try:
                documents.append(json.loads(text.decode("utf-8")))
            except (UnicodeDecodeError, json.JSONDecodeError) as exc:
                _json_logger.warning(f"JSON parse error: {exc}")


class JsonClient(BaseClient):
    """Receives detection documents and saves each one to storage."""

    def __init__(
        self, host: str, port: int, storage: Any, context: Optional[ssl.SSLContext] = None
    ) -> None:
        super().__init__(host, port, context)
        self.storage = storage
        self._stream = JsonStreamBuffer()
        _json_logger.debug(f"json port: {port}")

    def handle_data(self) -> None:
        data = self.receive_exactly(JSON_CHUNK_SIZE)
        for document in self._stream.feed(data):
            try:
                self.storage.save(document)
            except StorageError as exc:
                _json_logger.info(f"Retry parse JSON data: {exc}")


class VideoClient(BaseClient):
    """Receives frames, groups them into GOPs and saves each GOP to storage.

    Frames received outside a GOP are discarded.
    """

    def __init__(
        self, host: str, port: int, storage: Any, context: Optional[ssl.SSLContext] = None
    ) -> None:
        super().__init__(host, port, context)
        self.storage = storage

    def handle_data(self) -> None:
        frame = self.receive_frame()
        header = frame.header
        if header.gop_start_flag != GopStartFlag.TRUE:
            return
        frames = [frame]
        frames.extend(self.receive_frame() for _ in range(header.gop_size - 1))
        self.storage.save(GOP(frames))

    def receive_frame(self) -> Frame:
        """Read one header and the body it announces."""
        header = Header.from_bytes(self.receive_exactly(HEADER_SIZE))
        _video_logger.debug(
            f"Header received. FrameId: {header.frame_id}, BodySize: {header.body_size}"
        )
        _video_logger.debug(f"Gop Start : {int(header.gop_start_flag)}")
        _video_logger.debug(f"Gop Size : {header.gop_size}")
        body = self.receive_exactly(header.body_size) if header.body_size > 0 else b""
        return Frame(header, body)


def _client_parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument(
        "--host",
        type=Host.parse,
        default=CCTV1,
        help="camera as ip:video_port:json_port",
    )
    parser.add_argument("--storage-root", type=Path, default=DEFAULT_ROOT)
    return parser


def _run_client(client: BaseClient) -> int:
    try:
        client.start()
    except KeyboardInterrupt:
        return 130
    finally:
        client.close()
    return 0


def json_client_main(argv: Optional[List[str]] = None) -> int:
    """Receive detection documents from a camera and store them."""
    args = _client_parser("Receive and store detection data.").parse_args(argv)
    storage = StorageManager(args.host.ip, JsonCodec(), args.storage_root)
    client = JsonClient(args.host.ip, args.host.json_port, storage, create_client_context())
    return _run_client(client)


def video_client_main(argv: Optional[List[str]] = None) -> int:
    """Receive video from a camera and store it GOP by GOP."""
    args = _client_parser("Receive and store video.").parse_args(argv)
    storage = StorageManager(args.host.ip, GopCodec(), args.storage_root)
    client = VideoClient(args.host.ip, args.host.video_port, storage, create_client_context())
    return _run_client(client)