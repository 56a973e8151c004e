"""ChaCha20 stream cipher and the cipher interface it implements."""

from __future__ import annotations

import abc
import os
from pathlib import Path
from typing import Union

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms

KEY_SIZE = 32
NONCE_SIZE = 12
IV_SIZE = 16


class Ciphable(abc.ABC):
    """Something that can encrypt and decrypt bytes under a nonce."""

    @abc.abstractmethod
    def encrypt(self, data: bytes, nonce: bytes) -> bytes:
        """Return the ciphertext of ``data``."""

    @abc.abstractmethod
    def decrypt(self, data: bytes, nonce: bytes) -> bytes:
        """Return the plaintext of ``data``."""


class ChaCha20:
    """ChaCha20 keystream cipher with a 256-bit key.

    The nonce is either the full 16-byte value (4-byte little-endian block
    counter followed by a 12-byte nonce) or a 12-byte nonce, in which case
    the counter starts at zero.  Encryption and decryption are the same
    operation.
    """

    def __init__(self, key: bytes) -> None:
        key = bytes(key)
        if len(key) != KEY_SIZE:
            raise ValueError("Key must be 32 bytes for ChaCha20")
        self._key = key

    @staticmethod
    def load_key_from_file(path: Union[str, os.PathLike]) -> bytes:
        """Read a raw 32-byte key from ``path``."""
        key = Path(path).read_bytes()
        if len(key) != KEY_SIZE:
            raise ValueError("Key file must contain exactly 32 bytes for ChaCha20")
        return key

    def process(self, nonce: bytes, data: bytes) -> bytes:
        """XOR ``data`` with the keystream for ``nonce``."""
        nonce = bytes(nonce)
        if len(nonce) == NONCE_SIZE:
            nonce = bytes(4) + nonce
        elif len(nonce) != IV_SIZE:
            raise ValueError(f"Nonce must be {NONCE_SIZE} or {IV_SIZE} bytes for ChaCha20")
        context = Cipher(algorithms.ChaCha20(self._key, nonce), mode=None).encryptor()
        return context.update(bytes(data)) + context.finalize()


class ChaCha20CipherAdapter(Ciphable):
    """Ciphable backed by ChaCha20 with a key loaded from a file."""

    def __init__(self, key_file_path: Union[str, os.PathLike]) -> None:
        self._chacha20 = ChaCha20(ChaCha20.load_key_from_file(key_file_path))

    def encrypt(self, data: bytes, nonce: bytes) -> bytes:
        return self._chacha20.process(nonce, data)

    def decrypt(self, data: bytes, nonce: bytes) -> bytes:
        return self._chacha20.process(nonce, data)