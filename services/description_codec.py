"""Packing of task metadata into a Google Calendar event description.

Google Calendar has no custom fields visible to this app, so the task's
extra fields travel as labeled paragraphs at the end of the description::

    <task description>

    ⏱️ Tiempo estimado: 2h

    🏷️ Etiquetas: work, urgent

    📝 Notas: check with Ana

    🔗 Creado desde Synapse - ID: abc-123

Everything that reads or writes this layout lives here, so the translator
and the identity resolver only talk to ``LabeledParagraphCodec``.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Pattern

LABEL_ESTIMATED_TIME = "\u23f1\ufe0f Tiempo estimado"
LABEL_TAGS = "\U0001f3f7\ufe0f Etiquetas"
LABEL_NOTES = "\U0001f4dd Notas"
LABEL_TASK_ID = "\U0001f517 Creado desde Synapse - ID"

VARIATION_SELECTOR = "\ufe0f"
TAG_SEPARATOR = ", "
PARAGRAPH_BREAK = "\n\n"


def _label_regex(label: str) -> str:
    # Calendar clients sometimes drop or add the emoji variation selector.
    parts: List[str] = []
    for ch in label.replace(VARIATION_SELECTOR, ""):
        parts.append(re.escape(ch))
        if ord(ch) > 0x2000:
            parts.append(VARIATION_SELECTOR + "?")
    return "".join(parts)


def _paragraph_pattern(label: str) -> Pattern[str]:
    return re.compile(
        r"^[ \t]*" + _label_regex(label) + r"[ \t]*:[ \t]*(?P<value>[^\n].*?)(?=\n[ \t]*\n|\Z)",
        re.M | re.S,
    )


_ESTIMATED_RE = _paragraph_pattern(LABEL_ESTIMATED_TIME)
_TAGS_RE = _paragraph_pattern(LABEL_TAGS)
_NOTES_RE = _paragraph_pattern(LABEL_NOTES)
_TASK_ID_RE = re.compile(r"^[ \t]*" + _label_regex(LABEL_TASK_ID) + r"[ \t]*:[ \t]*(?P<value>[^\n]+)", re.M)
_BARE_ID_RE = re.compile(r"\bID:[ \t]*(?P<value>[^\n]+)")


def _first_value(pattern: Pattern[str], text: str) -> Optional[str]:
    match = pattern.search(text)
    if not match:
        return None
    value = match.group("value").strip()
    return value or None


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def split_tags(raw: str) -> List[str]:
    return [tag.strip() for tag in raw.split(TAG_SEPARATOR) if tag.strip()]


class LabeledParagraphCodec:
    """Writes and reads the labeled-paragraph description layout."""

    metadata_patterns = (_ESTIMATED_RE, _TAGS_RE, _NOTES_RE, _TASK_ID_RE)

    def pack(self, task) -> str:
        paragraphs = [task.description or ""]
        if task.estimated_time:
            paragraphs.append(f"{LABEL_ESTIMATED_TIME}: {task.estimated_time}")
        if task.tags:
            paragraphs.append(f"{LABEL_TAGS}: {TAG_SEPARATOR.join(task.tags)}")
        if task.notes:
            paragraphs.append(f"{LABEL_NOTES}: {task.notes}")
        paragraphs.append(f"{LABEL_TASK_ID}: {task.id}")
        return PARAGRAPH_BREAK.join(paragraphs).strip()

    def unpack(self, description: Optional[str]) -> Dict[str, Any]:
        """Return only the metadata fields found; missing labels are left out."""
        text = _as_text(description)
        fields: Dict[str, Any] = {}
        estimated = _first_value(_ESTIMATED_RE, text)
        if estimated is not None:
            fields["estimated_time"] = estimated
        tags = _first_value(_TAGS_RE, text)
        if tags is not None:
            fields["tags"] = split_tags(tags)
        notes = _first_value(_NOTES_RE, text)
        if notes is not None:
            fields["notes"] = notes
        return fields

    def base_description(self, description: Optional[str]) -> str:
        """Text before the first labeled paragraph, or all of it."""
        text = _as_text(description)
        starts = [
            match.start()
            for match in (pattern.search(text) for pattern in self.metadata_patterns)
            if match
        ]
        if starts:
            text = text[: min(starts)]
        return text.strip()

    def find_task_id(self, description: Optional[str]) -> Optional[str]:
        text = _as_text(description)
        return _first_value(_TASK_ID_RE, text) or _first_value(_BARE_ID_RE, text)


DEFAULT_CODEC = LabeledParagraphCodec()


__all__ = [
    "DEFAULT_CODEC",
    "LABEL_ESTIMATED_TIME",
    "LABEL_NOTES",
    "LABEL_TAGS",
    "LABEL_TASK_ID",
    "LabeledParagraphCodec",
    "split_tags",
]
