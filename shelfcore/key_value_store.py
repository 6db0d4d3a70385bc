from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Optional


_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


def is_valid_key(key: str) -> bool:
    return bool(_KEY_PATTERN.match(key or "")) and key not in {".", ".."}


class FileKeyValueStore:
    """Named byte slots kept as one file per key under a root directory.

    Writes go to a temporary sibling first and are swapped in with
    `os.replace`, so a slot always holds either the old or the new blob.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _slot_path(self, key: str) -> Path:
        if not is_valid_key(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.root / f"{key}.dat"

    def get(self, key: str) -> Optional[bytes]:
        path = self._slot_path(key)
        if not path.exists():
            return None
        return path.read_bytes()

    def set(self, key: str, data: bytes) -> None:
        path = self._slot_path(key)
        self.root.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + ".tmp")
        try:
            tmp.write_bytes(data)
            os.replace(tmp, path)
        finally:
            if tmp.exists():
                tmp.unlink()

    def delete(self, key: str) -> bool:
        path = self._slot_path(key)
        if not path.exists():
            return False
        path.unlink()
        return True
