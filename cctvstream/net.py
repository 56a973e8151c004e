"""Blocking TCP client and server bases, optionally wrapped in TLS."""

from __future__ import annotations

import abc
import socket
import ssl
from typing import Optional

from cctvstream.logger import Logger

_client_logger = Logger("BaseClient")
_server_logger = Logger("BaseServer")


class ConnectionClosed(ConnectionError):
    """Raised when the peer closes the connection or none is open."""


class BaseClient(abc.ABC):
    """Connects to a server and calls :meth:`handle_data` until the connection closes.

    ``context`` is the TLS context to wrap the connection in, or ``None``
    for plain TCP.
    """

    def __init__(self, host: str, port: int, context: Optional[ssl.SSLContext] = None) -> None:
        self.host = host
        self.port = port
        self.context = context
        self._sock: Optional[socket.socket] = None
        self._closed = True
        _client_logger.debug(f"port: {port}")

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        """Connect, then handle incoming data until the server closes the connection."""
        self._connect()
        try:
            while not self._closed:
                try:
                    self.handle_data()
                except ConnectionClosed:
                    break
        finally:
            self.close()

    def close(self) -> None:
        """Shut the connection down; calling it again does nothing."""
        if self._sock is not None:
            self._sock.close()
            self._sock = None
        self._closed = True

    def receive_exactly(self, size: int) -> bytes:
        """Read exactly ``size`` bytes, raising :class:`ConnectionClosed` if the peer closes first."""
        if self._sock is None:
            raise ConnectionClosed("Not connected")
        received = bytearray()
        while len(received) < size:
            try:
                chunk = self._sock.recv(size - len(received))
            except InterruptedError:
                continue
            except ssl.SSLEOFError:
                chunk = b""
            except OSError:
                _client_logger.error("recv() failed while receiving data")
                raise
            if not chunk:
                self._closed = True
                _client_logger.info("Connection closed by server")
                raise ConnectionClosed("Connection closed by server")
            received += chunk
        return bytes(received)

    @abc.abstractmethod
    def handle_data(self) -> None:
        """Process one unit of incoming data."""

    def __enter__(self) -> "BaseClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _connect(self) -> None:
        _client_logger.info("connectToServer() start")
        try:
            sock = socket.create_connection((self.host, self.port))
        except OSError:
            _client_logger.error(f"connect() fail: {self.port}")
            raise
        _client_logger.info("connect() success")
        if self.context is not None:
            try:
                sock = self.context.wrap_socket(sock, server_hostname=self.host)
            except (ssl.SSLError, OSError):
                sock.close()
                raise
            _client_logger.info("TLS handshake successful")
        self._sock = sock
        self._closed = False


class BaseServer(abc.ABC):
    """Listens on a port and serves one client at a time.

    The socket is bound and listening once the server is constructed; a
    port of 0 picks a free port, available afterwards as :attr:`port`.
    """

    BACKLOG = 3

    def __init__(self, port: int, context: Optional[ssl.SSLContext] = None, host: str = "") -> None:
        self.context = context
        self._closed = False
        _server_logger.debug(f"port: {port}")
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            self._sock.bind((host, port))
            self._sock.listen(self.BACKLOG)
        except OSError:
            _server_logger.error("bind() or listen() fail")
            self._sock.close()
            raise
        self.host, self.port = self._sock.getsockname()[:2]
        _server_logger.info(f"listening port: {self.port}")

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        """Serve clients one after another until the server is closed."""
        while not self._closed:
            self.serve_one()

    def serve_one(self) -> bool:
        """Accept and serve one client; return False if accepting failed."""
        _server_logger.info("Waiting for client connection...")
        try:
            conn, address = self._sock.accept()
        except OSError:
            _server_logger.error("accept() failed")
            return False
        try:
            if self.context is not None:
                conn = self.context.wrap_socket(conn, server_side=True)
                _server_logger.info("TLS handshake successful")
            _server_logger.info(f"Client connected from IP: {address[0]}")
            self.handle_connection(conn)
        finally:
            conn.close()
        _server_logger.info("Client disconnected")
        return True

    def close(self) -> None:
        """Stop listening."""
        self._closed = True
        self._sock.close()

    @abc.abstractmethod
    def handle_connection(self, conn: socket.socket) -> None:
        """Talk to one connected client."""

    def __enter__(self) -> "BaseServer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()