from minutes.minutes_formatter import to_markdown
from minutes.models import ActionItem, Decision, DiscussionPoint, Minutes


def test_full_minutes_render():
    minutes = Minutes(
        title="Release planning",
        summary="We planned the release.",
        agenda=["Scope", "Dates"],
        decisions=[Decision("Ship on Friday", "QA signed off"), Decision("Keep v1 API")],
        action_items=[ActionItem(task="Tag the build", assignee="Aki", deadline="Thursday"), ActionItem(task="Notify users")],
        discussion_points=[DiscussionPoint(details="Migration is untested", topic="Risk"), DiscussionPoint(details="Budget ok")],
    )
    expected = (
        "# Release planning\n\n"
        "## Summary\nWe planned the release.\n\n"
        "## Agenda\n1. Scope\n2. Dates\n\n"
        "## Decisions\n- Ship on Friday — QA signed off\n- Keep v1 API\n\n"
        "## Action Items\n| Assignee | Task | Deadline |\n|--|--|--|\n"
        "| Aki | Tag the build | Thursday |\n| TBD | Notify users | TBD |\n\n"
        "## Discussion Points\n- **Risk**: Migration is untested\n- Budget ok\n"
    )
    assert to_markdown(minutes) == expected


def test_empty_sections_are_omitted():
    assert to_markdown(Minutes(title="Sync")) == "# Sync\n"


def test_missing_title_uses_placeholder():
    assert to_markdown(Minutes(summary="Hi")).startswith("# Meeting Notes\n\n## Summary\nHi")
