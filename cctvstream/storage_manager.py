"""Saving items into a per-host storage file and reading them back in order."""

from __future__ import annotations

import os
import time
from pathlib import Path
from typing import Any, Optional, Union

from cctvstream.logger import Logger
from cctvstream.storage_file import MAX_FILE_SIZE, StorageFile

DEFAULT_ROOT = Path("storage")

_logger = Logger("StorageManager")


class StorageManager:
    """Stores data of one kind for one host and hands it out in order.

    The file lives at ``<root>/<ip>/<codec.name>.dat``.  A new file is
    created and filled with dummy bytes; an existing one is reopened.
    Reading starts at the last item present when the manager was created.
    """

    def __init__(
        self,
        ip: str,
        codec: Any,
        root: Union[str, os.PathLike] = DEFAULT_ROOT,
        max_file_size: int = MAX_FILE_SIZE,
        poll_interval: float = 1.0,
    ) -> None:
        self.ip = ip
        self.poll_interval = poll_interval
        self._codec = codec
        self.directory = Path(root) / ip
        self.path = self.directory / f"{codec.name}.dat"
        self._file = StorageFile(self.path, max_file_size)
        if self.path.exists():
            self._file.read_header()
        else:
            self._file.create()
        self._current = self._file.last_item_offset()
        _logger.info(f"access storagePath: {self.path}")

    def save(self, data: Any) -> None:
        """Append ``data`` to the storage file."""
        try:
            item = self._codec.create_item(data)
            self._file.append_item(item.to_bytes())
        except Exception as exc:
            _logger.error(f"Error saving data: {exc}")
            raise
        _logger.info("Item saved successfully.")

    def get_next(self) -> Optional[Any]:
        """Return the next stored item, or ``None`` after waiting if there is none yet."""
        try:
            if self._current != self._file.last_item_offset():
                payload = self._file.read_item(self._current)
                data = self._codec.decode(payload)
                self._current = self._file.next_item_offset(self._current)
                _logger.info("Next data retrieved successfully.")
                return data
        except Exception as exc:
            _logger.error(f"Error read data: {exc}")
            raise
        _logger.info("Waiting Next Item.")
        time.sleep(self.poll_interval)
        return None