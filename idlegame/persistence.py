"""Storage backends for Idle Coding Legend saves."""

from __future__ import annotations

import copy
import json
import shutil
import string
from pathlib import Path
from typing import Dict, Optional, Protocol


class SaveError(Exception):
    """Base class for save related failures."""


class SaveCorruptError(SaveError):
    """Raised when a save file cannot be parsed."""


class Storage(Protocol):
    def load(self, key: str) -> Optional[Dict]: ...

    def save(self, key: str, blob: Dict) -> None: ...


_VALID_KEY_CHARS = set(string.ascii_lowercase + string.digits + "-_.")


def normalize_key(key: str) -> str:
    cleaned = "".join(ch for ch in (key or "").strip().lower() if ch in _VALID_KEY_CHARS)
    cleaned = cleaned.strip(".")
    if not cleaned:
        raise SaveError("Save keys must contain letters or numbers.")
    return cleaned


class JsonFileStorage:
    """One JSON document per key, written atomically with a rolling backup."""

    SUFFIX = ".json"
    BACKUP_SUFFIX = ".bak"

    def __init__(self, base_path: Path | str = "saves") -> None:
        self.base_path = Path(base_path)

    def path_for(self, key: str) -> Path:
        return self.base_path / f"{normalize_key(key)}{self.SUFFIX}"

    def backup_path_for(self, key: str) -> Path:
        path = self.path_for(key)
        return path.with_suffix(path.suffix + self.BACKUP_SUFFIX)

    def load(self, key: str) -> Optional[Dict]:
        save_path = self.path_for(key)
        backup_path = self.backup_path_for(key)
        if not save_path.exists():
            if not backup_path.exists():
                return None
            return self._read(backup_path)
        try:
            return self._read(save_path)
        except SaveCorruptError:
            if not backup_path.exists():
                raise
            return self._read(backup_path)

    def save(self, key: str, blob: Dict) -> None:
        save_path = self.path_for(key)
        backup_path = self.backup_path_for(key)
        tmp_path = save_path.with_suffix(save_path.suffix + ".tmp")
        try:
            save_path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as handle:
                json.dump(blob, handle, indent=2)
                handle.write("\n")
            if save_path.exists():
                shutil.copy2(save_path, backup_path)
            tmp_path.replace(save_path)
        except (OSError, TypeError, ValueError) as exc:
            try:
                tmp_path.unlink()
            except OSError:
                pass
            raise SaveError(f"Failed to write {save_path}: {exc}") from exc

    def _read(self, path: Path) -> Optional[Dict]:
        try:
            with open(path, "r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except FileNotFoundError:
            return None
        except json.JSONDecodeError as exc:
            raise SaveCorruptError(f"Invalid JSON in {path}: {exc}") from exc
        except OSError as exc:
            raise SaveError(f"Failed to read {path}: {exc}") from exc
        return payload


class MemoryStorage:
    """In-process storage; keeps private copies so callers cannot alias saves."""

    def __init__(self, initial: Optional[Dict[str, Dict]] = None) -> None:
        self.blobs: Dict[str, Dict] = copy.deepcopy(initial) if initial else {}

    def load(self, key: str) -> Optional[Dict]:
        blob = self.blobs.get(key)
        return copy.deepcopy(blob) if blob is not None else None

    def save(self, key: str, blob: Dict) -> None:
        self.blobs[key] = copy.deepcopy(blob)
