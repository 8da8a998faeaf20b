"""Simple JSON-backed store for the user's calendar sync preferences."""
from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from core.settings import CONFIG_PATH


@dataclass
class SyncConfig:
    """User-level sync preferences persisted to ``config.json``."""

    default_calendar_id: Optional[str] = None
    auto_sync_enabled: bool = False
    sync_completed_tasks: bool = False
    time_zone: Optional[str] = None
    last_sync_at: Optional[str] = None


_FIELD_NAMES = {f.name for f in fields(SyncConfig)}


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def _load_raw(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def load_config(path: Optional[Path] = None) -> SyncConfig:
    target = path or CONFIG_PATH
    data = _load_raw(target)
    return SyncConfig(**{key: value for key, value in data.items() if key in _FIELD_NAMES})


def save_config(config: SyncConfig, path: Optional[Path] = None) -> None:
    target = path or CONFIG_PATH
    _ensure_parent(target)
    payload = json.dumps(asdict(config), ensure_ascii=False, indent=2, sort_keys=True)
    tmp = target.with_suffix(".tmp")
    try:
        tmp.write_text(payload, encoding="utf-8")
        tmp.replace(target)
    finally:
        if tmp.exists():
            try:
                tmp.unlink()
            except OSError:
                pass


def update_config(path: Optional[Path] = None, **changes: Any) -> SyncConfig:
    target = path or CONFIG_PATH
    cfg = load_config(target)
    for key, value in changes.items():
        if key not in _FIELD_NAMES:
            raise ValueError(f"Unknown sync setting: {key}")
        setattr(cfg, key, value)
    save_config(cfg, target)
    return cfg


__all__ = ["SyncConfig", "load_config", "save_config", "update_config"]
