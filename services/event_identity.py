"""Recognizing calendar events created by Synapse and the tasks behind them."""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional

from core.settings import CALENDAR_SYNC
from services.description_codec import DEFAULT_CODEC, LabeledParagraphCodec


def _marker_token(marker: str) -> str:
    return marker.strip()


def _leading_markers_re(marker: str) -> re.Pattern:
    return re.compile(r"^(?:" + re.escape(_marker_token(marker)) + r"\s*)+")


def is_synapse_event(event: Mapping[str, Any], *, marker: str = CALENDAR_SYNC.title_marker) -> bool:
    """Ownership is read from the title prefix only, never from the description."""
    summary = event.get("summary") if event else None
    if not summary or not isinstance(summary, str):
        return False
    return summary.startswith(_marker_token(marker))


def add_title_marker(title: Optional[str], *, marker: str = CALENDAR_SYNC.title_marker) -> str:
    bare = _leading_markers_re(marker).sub("", title or "", count=1)
    return f"{marker}{bare}"


def strip_title_marker(summary: Optional[str], *, marker: str = CALENDAR_SYNC.title_marker) -> str:
    text = summary or ""
    token = _marker_token(marker)
    if not text.startswith(token):
        return text
    return text[len(token):].lstrip()


def extract_task_id_from_event(
    event: Mapping[str, Any],
    *,
    marker: str = CALENDAR_SYNC.title_marker,
    codec: LabeledParagraphCodec = DEFAULT_CODEC,
) -> Optional[str]:
    """Return the embedded task id, or None for foreign or unlinkable events."""
    if not is_synapse_event(event, marker=marker):
        return None
    return codec.find_task_id(event.get("description"))


__all__ = [
    "add_title_marker",
    "extract_task_id_from_event",
    "is_synapse_event",
    "strip_title_marker",
]
