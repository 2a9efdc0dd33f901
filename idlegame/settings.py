"""Settings persistence for Idle Coding Legend."""

from __future__ import annotations

import json
import os
import sys
import tempfile
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict

_BASE_DIR = Path(__file__).resolve().parent.parent
SETTINGS_PATH = _BASE_DIR / "settings.json"

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off"}


def _as_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        return default
    return bool(value) if value is not None else default


@dataclass
class GameSettings:
    """Player toggles the engine reads but never writes."""

    auto_save: bool = True
    show_notifications: bool = True

    def copy(self) -> "GameSettings":
        return GameSettings.from_dict(self.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "GameSettings":
        if not isinstance(data, dict):
            return cls()
        return cls(
            auto_save=_as_bool(data.get("auto_save"), True),
            show_notifications=_as_bool(data.get("show_notifications"), True),
        )


def load_settings(path: Path | str = SETTINGS_PATH) -> GameSettings:
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError:
        return GameSettings()
    except (OSError, json.JSONDecodeError, TypeError):
        return GameSettings()
    return GameSettings.from_dict(data)


def save_settings(settings: GameSettings, path: Path | str = SETTINGS_PATH) -> GameSettings:
    path = Path(path)
    sanitized = settings.copy()
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w", delete=False, dir=path.parent, prefix=path.name, suffix=".tmp", encoding="utf-8"
        ) as tmp_file:
            json.dump(sanitized.to_dict(), tmp_file, indent=2)
            tmp_file.write("\n")
            tmp_path = Path(tmp_file.name)
        os.replace(str(tmp_path), str(path))
    except OSError as exc:
        print(f"[Settings] Failed to save settings: {exc}", file=sys.stderr)
        if tmp_path is not None:
            try:
                tmp_path.unlink()
            except OSError:
                pass
    return sanitized
