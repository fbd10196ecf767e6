from __future__ import annotations

from datetime import datetime, timezone

import pytest

# Wednesday; the current Monday-start week begins 2026-10-12.
NOW = datetime(2026, 10, 14, 12, 0, 0, tzinfo=timezone.utc)


def make_issue(
    identifier: str,
    team: str = "Financial Crime Prevention",
    state: str = "Backlog",
    assignee: str | None = "Ana Perez",
    labels: list[str] | None = None,
    due: str | None = None,
    created: str | None = None,
    completed: str | None = None,
    priority: int | None = 3,
    trashed: bool = False,
    title: str | None = None,
    project: str | None = None,
    parent: str | None = None,
    children: list[dict] | None = None,
    estimate: float | None = None,
) -> dict:
    """Raw Linear GraphQL issue node, as the fetch step hands it over."""
    return {
        "id": f"uuid-{identifier}",
        "identifier": identifier,
        "title": title or f"Issue {identifier}",
        "url": f"https://linear.app/roxom/issue/{identifier}",
        "dueDate": due,
        "createdAt": created,
        "updatedAt": created,
        "completedAt": completed,
        "trashed": trashed,
        "priority": priority,
        "estimate": estimate,
        "state": {"name": state, "type": "started"},
        "team": {"key": "", "name": team, "id": "team-1"},
        "assignee": {"name": assignee} if assignee else None,
        "labels": {"nodes": [{"name": l} for l in (labels or [])]},
        "project": {"id": "p1", "name": project, "slugId": "okr-slug"} if project else None,
        "parent": {"id": parent} if parent else None,
        "children": {"nodes": children or []},
    }


def make_child(identifier: str, state: str = "Todo", assignee: str | None = "Ana Perez",
               project: str | None = None) -> dict:
    return {
        "id": f"uuid-{identifier}",
        "identifier": identifier,
        "title": f"Sub-issue {identifier}",
        "url": f"https://linear.app/roxom/issue/{identifier}",
        "state": {"name": state},
        "assignee": {"name": assignee} if assignee else None,
        "priority": 2,
        "project": {"name": project} if project else None,
    }


@pytest.fixture()
def now() -> datetime:
    return NOW
