"""Viewer-side servers that stream stored video and detection data to a client."""

from __future__ import annotations

import argparse
import json
import socket
import ssl
from pathlib import Path
from typing import Any, List, Optional

from cctvstream.frame import GOP
from cctvstream.hosts import CCTV1
from cctvstream.items import GopCodec, JsonCodec
from cctvstream.logger import Logger
from cctvstream.net import BaseServer
from cctvstream.storage_manager import DEFAULT_ROOT, StorageManager
from cctvstream.tls import create_server_context, default_cert_paths

JSON_DELIMITER = b"|"

_json_logger = Logger("JsonServer")
_video_logger = Logger("VideoServer")


def encode_json_message(data: Any) -> bytes:
    """Compact JSON with sorted keys, followed by the ``|`` delimiter."""
    text = json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return text.encode("utf-8") + JSON_DELIMITER


def encode_gop(gop: GOP) -> bytes:
    """The encoded frames of a GOP, back to back."""
    return b"".join(frame.to_bytes() for frame in gop.frames())


class JsonServer(BaseServer):
    """Streams stored detection documents to each client until it disconnects."""

    PORT = 54321

    def __init__(
        self, port: int, storage: Any, context: Optional[ssl.SSLContext] = None, host: str = ""
    ) -> None:
        super().__init__(port, context, host)
        self.storage = storage

    def handle_connection(self, conn: socket.socket) -> None:
        _json_logger.info("streaming start")
        while True:
            document = self.storage.get_next()
            if document is None:
                continue
            try:
                conn.sendall(encode_json_message(document))
            except OSError:
                _json_logger.error("send() failed or client disconnected")
                return


class VideoServer(BaseServer):
    """Streams stored GOPs to each client until it disconnects."""

    PORT = 12345

    def __init__(
        self, port: int, storage: Any, context: Optional[ssl.SSLContext] = None, host: str = ""
    ) -> None:
        super().__init__(port, context, host)
        self.storage = storage

    def handle_connection(self, conn: socket.socket) -> None:
        _video_logger.info("streaming start")
        while True:
            gop = self.storage.get_next()
            if gop is None:
                continue
            for frame in gop.frames():
                _video_logger.info(f"send frame id: {frame.header.frame_id}")
                try:
                    conn.sendall(frame.to_bytes())
                except OSError:
                    _video_logger.error("send() failed or client disconnected")
                    return


def _server_parser(description: str, port: int) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--port", type=int, default=port)
    parser.add_argument("--bind", default="", help="address to listen on")
    parser.add_argument("--camera-ip", default=CCTV1.ip, help="camera whose data is served")
    parser.add_argument("--storage-root", type=Path, default=DEFAULT_ROOT)
    parser.add_argument("--certs-root", type=Path, default=Path("."))
    return parser


def _run_server(server: BaseServer) -> int:
    try:
        server.start()
    except KeyboardInterrupt:
        return 130
    finally:
        server.close()
    return 0


def json_server_main(argv: Optional[List[str]] = None) -> int:
    """Serve stored detection data over TLS."""
    args = _server_parser("Stream stored detection data.", JsonServer.PORT).parse_args(argv)
    cert_path, key_path = default_cert_paths(args.certs_root)
    context = create_server_context(cert_path, key_path)
    storage = StorageManager(args.camera_ip, JsonCodec(), args.storage_root)
    return _run_server(JsonServer(args.port, storage, context, args.bind))


def video_server_main(argv: Optional[List[str]] = None) -> int:
    """Serve stored video over TLS."""
    args = _server_parser("Stream stored video.", VideoServer.PORT).parse_args(argv)
    cert_path, key_path = default_cert_paths(args.certs_root)
    context = create_server_context(cert_path, key_path)
    storage = StorageManager(args.camera_ip, GopCodec(), args.storage_root)
    return _run_server(VideoServer(args.port, storage, context, args.bind))