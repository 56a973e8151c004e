"""TLS contexts for the camera client and the viewer server."""

from __future__ import annotations

import os
import ssl
from pathlib import Path
from typing import Tuple, Union


def create_client_context() -> ssl.SSLContext:
    """A client context that, like the camera client, does not verify the server."""
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


def create_server_context(
    cert_path: Union[str, os.PathLike], key_path: Union[str, os.PathLike]
) -> ssl.SSLContext:
    """A server context using the PEM certificate and private key given."""
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.load_cert_chain(certfile=os.fspath(cert_path), keyfile=os.fspath(key_path))
    return context


def default_cert_paths(root: Union[str, os.PathLike]) -> Tuple[Path, Path]:
    """Certificate and key locations below a project root."""
    certs = Path(root) / "viewer" / "certs"
    return certs / "server.cert", certs / "server.key"