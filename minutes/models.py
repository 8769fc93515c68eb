"""
Structured meeting minutes.

The generative model is asked for a fixed JSON shape, but list entries
sometimes arrive as bare strings instead of records (``"Ship v2"`` rather
than ``{"content": "Ship v2", "context": ""}``).  :meth:`Minutes.from_dict`
folds both forms into one record type per field as soon as the payload is
ingested, and fills any missing field with an empty default, so renderers
never have to deal with either case.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List

FALLBACK_TITLE = "Meeting Notes"
FALLBACK_SUMMARY = "Automatic summarisation failed. Please refer to the transcript."


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _items(value: Any) -> List[Any]:
    if isinstance(value, list):
        return [item for item in value if item is not None]
    return []


@dataclass
class Decision:
    content: str
    context: str = ""

    @classmethod
    def from_raw(cls, raw: Any) -> "Decision":
        if isinstance(raw, dict):
            return cls(content=_text(raw.get("content")), context=_text(raw.get("context")))
        return cls(content=_text(raw))


@dataclass
class ActionItem:
    task: str
    assignee: str = ""
    deadline: str = ""

    @classmethod
    def from_raw(cls, raw: Any) -> "ActionItem":
        if isinstance(raw, dict):
            return cls(
                task=_text(raw.get("task")),
                assignee=_text(raw.get("assignee")),
                deadline=_text(raw.get("deadline")),
            )
        return cls(task=_text(raw))


@dataclass
class DiscussionPoint:
    details: str
    topic: str = ""

    @classmethod
    def from_raw(cls, raw: Any) -> "DiscussionPoint":
        if isinstance(raw, dict):
            return cls(details=_text(raw.get("details")), topic=_text(raw.get("topic")))
        return cls(details=_text(raw))


@dataclass
class Minutes:
    """Minutes of one meeting, as produced by the summariser."""

    title: str = ""
    summary: str = ""
    participants: List[str] = field(default_factory=list)
    agenda: List[str] = field(default_factory=list)
    decisions: List[Decision] = field(default_factory=list)
    action_items: List[ActionItem] = field(default_factory=list)
    discussion_points: List[DiscussionPoint] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Minutes":
        """Build minutes from a parsed JSON object, defaulting missing fields."""
        return cls(
            title=_text(data.get("title")),
            summary=_text(data.get("summary")),
            participants=[_text(p) for p in _items(data.get("participants"))],
            agenda=[_text(a) for a in _items(data.get("agenda"))],
            decisions=[Decision.from_raw(d) for d in _items(data.get("decisions"))],
            action_items=[ActionItem.from_raw(a) for a in _items(data.get("action_items"))],
            discussion_points=[DiscussionPoint.from_raw(p) for p in _items(data.get("discussion_points"))],
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def fallback_minutes() -> Minutes:
    """Minutes used when the model output cannot be parsed."""
    return Minutes(title=FALLBACK_TITLE, summary=FALLBACK_SUMMARY)
