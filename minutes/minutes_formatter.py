"""
Minutes formatting utilities.

Renders :class:`~minutes.models.Minutes` as Markdown suitable for pasting
into a wiki page or chat message.  Sections with no content are left out;
unknown assignees and deadlines are shown as ``TBD``.
"""

from typing import List

from .models import FALLBACK_TITLE, Minutes

UNDECIDED = "TBD"


def _decision_lines(minutes: Minutes) -> List[str]:
    lines = []
    for decision in minutes.decisions:
        suffix = f" — {decision.context}" if decision.context else ""
        lines.append(f"- {decision.content}{suffix}")
    return lines


def _action_rows(minutes: Minutes) -> List[str]:
    rows = ["| Assignee | Task | Deadline |", "|--|--|--|"]
    for item in minutes.action_items:
        rows.append(f"| {item.assignee or UNDECIDED} | {item.task} | {item.deadline or UNDECIDED} |")
    return rows


def _discussion_lines(minutes: Minutes) -> List[str]:
    lines = []
    for point in minutes.discussion_points:
        if point.topic:
            lines.append(f"- **{point.topic}**: {point.details}")
        else:
            lines.append(f"- {point.details}")
    return lines


def to_markdown(minutes: Minutes) -> str:
    """Render ``minutes`` as a Markdown document."""
    sections = [f"# {minutes.title or FALLBACK_TITLE}"]
    if minutes.summary:
        sections.append(f"## Summary\n{minutes.summary}")
    if minutes.agenda:
        numbered = "\n".join(f"{i}. {item}" for i, item in enumerate(minutes.agenda, start=1))
        sections.append(f"## Agenda\n{numbered}")
    if minutes.decisions:
        sections.append("## Decisions\n" + "\n".join(_decision_lines(minutes)))
    if minutes.action_items:
        sections.append("## Action Items\n" + "\n".join(_action_rows(minutes)))
    if minutes.discussion_points:
        sections.append("## Discussion Points\n" + "\n".join(_discussion_lines(minutes)))
    return "\n\n".join(sections) + "\n"
