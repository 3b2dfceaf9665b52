"""
Durable Storage

String-keyed slot stores with the browser localStorage contract:
values are strings, reads of unknown keys return None, writes overwrite.
"""

import json
import os
from pathlib import Path
from typing import Dict, Optional, Union

from chat_logger import get_logger

logger = get_logger("routine_advisor")


class MemoryStorage:
    """In-process storage, lost when the instance goes away."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class LocalStorage:
    """
    Single JSON file holding every slot.

    A missing file reads as empty. A file that is not a JSON object raises
    ValueError on read; callers decide whether that is fatal.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Storage file {self.path} does not hold a JSON object")
        return data

    def _write_all(self, items: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(json.dumps(items, indent=2), encoding="utf-8")
        os.replace(tmp_path, self.path)

    def get_item(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return None if value is None else str(value)

    def set_item(self, key: str, value: str) -> None:
        try:
            items = self._read_all()
        except ValueError:
            logger.warning(f"Storage | path={self.path} | corrupt file replaced on write")
            items = {}
        items[key] = str(value)
        self._write_all(items)

    def remove_item(self, key: str) -> None:
        items = self._read_all()
        if key in items:
            del items[key]
            self._write_all(items)
