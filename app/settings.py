# app/settings.py
from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict

from app.difficulty import AGE_GROUPS, TEEN
from app.errors import SettingsError
from app.validation import LAYOUTS, QWERTY

log = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILE = Path("settings.json")


@dataclass
class PracticeSettings:
    layout: str = QWERTY
    age_group: str = TEEN
    allow_backspace: bool = False
    focus_weak_letters: bool = True
    initial_chunk_size: int = 60
    append_chunk_size: int = 40
    append_threshold: float = 0.8
    calm_weak_letter_weight: float = 0.4
    targeted_weak_letter_weight: float = 0.7
    history_limit: int = 50


# -------- helpers --------
_DEFAULTS = PracticeSettings()


def _check_type(name: str, value: Any) -> None:
    # JSON has no int/float split, so floats accept ints; bools are never numbers
    expected = type(getattr(_DEFAULTS, name))
    if expected is float:
        ok = isinstance(value, (int, float)) and not isinstance(value, bool)
    elif expected is int:
        ok = isinstance(value, int) and not isinstance(value, bool)
    else:
        ok = isinstance(value, expected)
    if not ok:
        raise SettingsError(f"{name} must be {expected.__name__}, got {type(value).__name__}")


def settings_from_dict(d: Dict[str, Any]) -> PracticeSettings:
    known = {f.name for f in fields(PracticeSettings)}
    unknown = set(d.keys()) - known
    if unknown:
        raise SettingsError(f"Unknown settings keys: {', '.join(sorted(unknown))}")
    for name, value in d.items():
        _check_type(name, value)

    settings = PracticeSettings(**d)
    if settings.layout not in LAYOUTS:
        raise SettingsError(f"Unsupported layout: {settings.layout!r}")
    if settings.age_group not in AGE_GROUPS:
        raise SettingsError(f"Unsupported age group: {settings.age_group!r}")
    if not 0.0 < settings.append_threshold <= 1.0:
        raise SettingsError("append_threshold must be in (0, 1]")
    for name in ("calm_weak_letter_weight", "targeted_weak_letter_weight"):
        if not 0.0 <= getattr(settings, name) <= 1.0:
            raise SettingsError(f"{name} must be in [0, 1]")
    if settings.initial_chunk_size <= 0 or settings.append_chunk_size <= 0:
        raise SettingsError("chunk sizes must be positive")
    if settings.history_limit <= 0:
        raise SettingsError("history_limit must be positive")
    return settings


# -------- public API --------
def load_settings(path: Path = DEFAULT_SETTINGS_FILE) -> PracticeSettings:
    """Read settings.json; anything missing or broken falls back to defaults."""
    if not path.exists():
        return PracticeSettings()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise SettingsError("settings file must hold an object")
        return settings_from_dict(data)
    except (json.JSONDecodeError, SettingsError, TypeError) as e:
        log.warning("Ignoring invalid settings in %s: %s", path, e)
        return PracticeSettings()


def save_settings(settings: PracticeSettings, path: Path = DEFAULT_SETTINGS_FILE) -> None:
    try:
        path.write_text(json.dumps(asdict(settings), indent=2), encoding="utf-8")
    except OSError as e:
        raise SettingsError(f"Could not write {path}: {e}") from e
