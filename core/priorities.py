"""Utility helpers for task priorities and their calendar colors."""
from __future__ import annotations

from typing import Dict, Optional

# Google Calendar exposes a fixed palette of event colors addressed by string ids.
# Each priority owns exactly one slot so the color can be read back as priority.
PRIORITY_META: Dict[str, Dict[str, str]] = {
    "high": {
        "label": "Alta",
        "color_id": "11",
        "color_name": "red",
    },
    "medium": {
        "label": "Media",
        "color_id": "5",
        "color_name": "yellow",
    },
    "low": {
        "label": "Baja",
        "color_id": "10",
        "color_name": "green",
    },
}

DEFAULT_PRIORITY = "medium"

_COLOR_TO_PRIORITY: Dict[str, str] = {
    meta["color_id"]: level for level, meta in PRIORITY_META.items()
}


def normalize_priority(value: Optional[str]) -> str:
    """Fold external values onto the supported priority names."""
    if value is None:
        return DEFAULT_PRIORITY
    text = str(value).strip().lower()
    return text if text in PRIORITY_META else DEFAULT_PRIORITY


def priority_color_id(value: Optional[str]) -> str:
    return PRIORITY_META[normalize_priority(value)]["color_id"]


def priority_from_color_id(color_id: Optional[str]) -> str:
    if color_id is None:
        return DEFAULT_PRIORITY
    return _COLOR_TO_PRIORITY.get(str(color_id).strip(), DEFAULT_PRIORITY)


def priority_label(value: Optional[str]) -> str:
    return PRIORITY_META[normalize_priority(value)]["label"]


__all__ = [
    "PRIORITY_META",
    "DEFAULT_PRIORITY",
    "normalize_priority",
    "priority_color_id",
    "priority_from_color_id",
    "priority_label",
]
