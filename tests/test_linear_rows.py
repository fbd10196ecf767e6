from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from conftest import make_child, make_issue
from linear_rows import (
    Priority,
    ShirtSize,
    classify_group,
    classify_shirt_size,
    from_mcp_issue,
    normalize,
    parse_date,
    parse_dt,
)


@pytest.mark.parametrize(
    "labels, expected",
    [
        (["XS"], ShirtSize.XS),
        (["Shirt Size: M"], ShirtSize.M),
        (["size: l"], ShirtSize.L),
        (["xl"], ShirtSize.XL),
        (["L", "S"], ShirtSize.S),
        (["Compliance", "Urgent review"], ShirtSize.MISSING),
    ],
)
def test_classify_shirt_size_from_labels(labels, expected) -> None:
    assert classify_shirt_size(labels) == expected


@pytest.mark.parametrize(
    "estimate, expected",
    [(1, ShirtSize.XS), (2, ShirtSize.S), (3, ShirtSize.M), (5, ShirtSize.L), (8, ShirtSize.XL)],
)
def test_classify_shirt_size_falls_back_to_estimate(estimate, expected) -> None:
    assert classify_shirt_size([], estimate) == expected


def test_label_size_wins_over_estimate() -> None:
    assert classify_shirt_size(["Shirt Size: XS"], 8) == ShirtSize.XS
    assert classify_shirt_size([], "not a number") == ShirtSize.MISSING


@pytest.mark.parametrize(
    "labels, expected",
    [
        (["Group: Roxom Global"], "Global"),
        (["Group: Roxom TV"], "Roxom TV"),
        (["Group: Roxom"], "Roxom"),
        (["Group: Roxom", "Group: Roxom TV"], "Roxom TV"),
        (["Roxom"], "Roxom"),
        (["Roxom Ltd", "BAU"], None),
        ([], None),
    ],
)
def test_classify_group(labels, expected) -> None:
    assert classify_group(labels) == expected


def test_normalize_defaults_missing_fields() -> None:
    row = normalize({"identifier": "FCP-1"})
    assert row.id == "FCP-1"
    assert row.title == ""
    assert row.state == "Unknown"
    assert row.priority == Priority.NONE
    assert row.assignee == "Unassigned"
    assert row.team == "Unknown"
    assert row.due_date is None and row.created_at is None and row.completed_at is None
    assert row.shirt_size == ShirtSize.MISSING
    assert row.url.endswith("/issue/FCP-1")
    assert row.children == ()
    assert row.trashed is False


def test_normalize_maps_team_names_and_keys() -> None:
    assert normalize(make_issue("A-1", team="Financial Crime Prevention")).team == "FCP"
    assert normalize(make_issue("A-2", team="Regulatory Public Affairs")).team == "RPA"
    raw = make_issue("A-3", team="Ops squad")
    raw["team"]["key"] = "LTO"
    assert normalize(raw).team == "LTO"
    raw = make_issue("A-4", team="Marketing")
    raw["team"]["key"] = "MKT"
    assert normalize(raw).team == "Marketing"


def test_normalize_assignee_display_name_and_override_team() -> None:
    row = normalize(make_issue("PGA-1", team="PGA", assignee="sofita"))
    assert row.assignee == "Sofia"
    assert row.team == "PGA"
    assert row.dashboard_team == "RPA"


def test_normalize_priority_enum_is_total() -> None:
    assert normalize(make_issue("A-1", priority=1)).priority == Priority.URGENT
    assert normalize(make_issue("A-2", priority=4)).priority == Priority.LOW
    assert normalize(make_issue("A-3", priority=0)).priority == Priority.NONE
    assert normalize(make_issue("A-4", priority=9)).priority == Priority.NONE
    assert normalize(make_issue("A-5", priority=None)).priority == Priority.NONE


@pytest.mark.parametrize(
    "field, value, attr, expected",
    [
        ("title", 12345, "title", "12345"),
        ("assignee", {"name": 42}, "assignee", "42"),
        ("labels", {"nodes": [{"name": 3}]}, "labels", ("3",)),
        ("priority", float("inf"), "priority", Priority.NONE),
        ("state", {"name": 7}, "state", "7"),
    ],
)
def test_normalize_tolerates_badly_typed_fields(field, value, attr, expected) -> None:
    raw = make_issue("A-1")
    raw[field] = value
    row = normalize(raw)
    assert getattr(row, attr) == expected
    assert row.shirt_size == ShirtSize.MISSING


def test_fallback_urls_use_workspace_at_call_time(monkeypatch) -> None:
    monkeypatch.setenv("LINEAR_WORKSPACE", "acme")
    raw = make_issue("FCP-1", project="OKR 1 - AML")
    raw["url"] = None
    row = normalize(raw)
    assert row.url == "https://linear.app/acme/issue/FCP-1"
    assert row.project_url == "https://linear.app/acme/project/okr-slug"
    monkeypatch.delenv("LINEAR_WORKSPACE")
    assert normalize(raw).url == "https://linear.app/roxom/issue/FCP-1"


def test_normalize_dates_and_unparseable_values() -> None:
    row = normalize(make_issue("A-1", due="2026-10-20", created="2026-10-01T09:30:00.000Z",
                               completed="not a date"))
    assert row.due_date == date(2026, 10, 20)
    assert row.created_at == datetime(2026, 10, 1, 9, 30, tzinfo=timezone.utc)
    assert row.completed_at is None
    assert parse_date("2026-13-45") is None
    assert parse_dt("") is None


def test_normalize_flattens_children_and_project() -> None:
    raw = make_issue(
        "FCP-10", title="DKR 1 - Screening", project="OKR 1 - AML",
        children=[make_child("FCP-11", state="Done", project="OKR 1 - AML"), {"identifier": "FCP-12"}],
    )
    row = normalize(raw)
    assert row.project == "OKR 1 - AML"
    assert row.project_url.endswith("/project/okr-slug")
    first, second = row.children
    assert first.id == "FCP-11" and first.state == "Done" and first.team == "FCP"
    assert first.priority == Priority.HIGH
    assert first.project_name == "OKR 1 - AML"
    assert second.state == "Unknown" and second.assignee == "Unassigned"
    assert second.url.endswith("/issue/FCP-12")


def test_from_mcp_issue_marks_deleted_states_trashed() -> None:
    mcp = {
        "id": "x1", "identifier": "LTO-3", "title": "Old", "status": "Canceled",
        "team": "Legal Tech Operations", "assignee": "Guadalupe", "labels": ["BAU", {"name": "M"}],
        "priority": {"value": 2},
    }
    raw = from_mcp_issue(mcp)
    assert raw["trashed"] is True
    assert raw["team"]["key"] == "LTO"
    row = normalize(raw)
    assert row.team == "LTO"
    assert row.state == "Canceled"
    assert row.labels == ("BAU", "M")
    assert row.shirt_size == ShirtSize.M
    assert row.priority == Priority.HIGH


def test_from_mcp_issue_defaults() -> None:
    raw = from_mcp_issue({"identifier": "RPA-1", "status": "Todo", "team": "Regulatory and Public Affairs"})
    row = normalize(raw)
    assert row.trashed is False
    assert row.assignee == "Unassigned"
    assert row.priority == Priority.NONE
