"""
Shapes of the analytics model handed to the dashboard renderer.

The renderer locates blocks by key and position, so every field name here is part of the contract.
"""
import json
import math
from collections.abc import Mapping
from datetime import date, datetime
from enum import Enum


TOP_LEVEL_KEYS = (
    "summaryStats",
    "teamDetailedData",
    "assigneeDetailedData",
    "performanceData",
    "qualityData",
    "dataQualityIssues",
    "weeklyData",
    "cycleTimeData",
    "deletedIssueIds",
    "issuesByStatus",
    "issuesByPriority",
    "issuesByShirtSize",
    "okrsDataByTeam",
    "dkrSummaryByTeam",
    "issuesByOKR",
    "canceledIssues",
    "duplicatedIssues",
)


class AnalyticsInputError(TypeError):
    """The issue collection is not a sequence of records; nothing is aggregated."""


def validate_issues(issues):
    if isinstance(issues, (str, bytes, Mapping)) or not isinstance(issues, (list, tuple)):
        raise AnalyticsInputError(f"Expected a list of issue records, got {type(issues).__name__}")
    for idx, it in enumerate(issues):
        if not isinstance(it, Mapping):
            raise AnalyticsInputError(f"Issue #{idx} is {type(it).__name__}, not a record")
    return list(issues)


# ----------------------------
# Issue references
# ----------------------------
def _v(x):
    return x.value if isinstance(x, Enum) else x


def _iso(x):
    return x.isoformat() if x is not None else None


def issue_ref(row, team=None, state=True):
    """Sidebar entry for a row (or child summary); team defaults to the row's own."""
    ref = {
        "id": row.id,
        "title": row.title,
        "team": team or row.team,
        "assignee": row.assignee,
        "priority": _v(row.priority),
        "url": row.url,
    }
    if state:
        ref["state"] = row.state
    return ref


def quality_ref(row):
    return {"id": row.id, "title": row.title, "assignee": row.assignee, "status": row.state, "url": row.url}


def overdue_ref(row, team, today):
    return {
        "id": row.id,
        "title": row.title,
        "team": team,
        "due_date": _iso(row.due_date),
        "days_overdue": (today - row.due_date).days,
        "assignee": row.assignee,
        "priority": _v(row.priority),
        "url": row.url,
    }


def due_soon_ref(row, team):
    return {
        "id": row.id,
        "title": row.title,
        "team": team,
        "due_date": _iso(row.due_date),
        "assignee": row.assignee,
        "priority": _v(row.priority),
        "url": row.url,
    }


def closed_ref(row, team):
    ref = issue_ref(row, team=team, state=False)
    ref["completedAt"] = _iso(row.completed_at)
    ref["createdAt"] = _iso(row.created_at)
    return ref


# ----------------------------
# Count lists
# ----------------------------
def count_list(key, counts, order=None, keep_zero=True):
    """{name: n} -> [{key: name, count: n}], in `order` when given, else insertion order."""
    names = [_v(o) for o in order] if order is not None else list(counts)
    out = [{key: n, "count": counts.get(n, 0)} for n in names]
    if not keep_zero:
        out = [e for e in out if e["count"] > 0]
    return out


def sized_counts(issues_by_size):
    """Non-empty shirt-size counts taken from the per-size issue lists themselves."""
    return [{"size": size, "count": len(lst)} for size, lst in issues_by_size.items() if lst]


# ----------------------------
# Serialization
# ----------------------------
def _nan_to_none(obj):
    """json writes float NaN as a bare NaN token and never consults the default hook for floats."""
    if isinstance(obj, float) and math.isnan(obj):
        return None
    if isinstance(obj, dict):
        return {k: _nan_to_none(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_nan_to_none(v) for v in obj]
    return obj


def _json_default(obj):
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def to_json(model, indent=2):
    return json.dumps(_nan_to_none(model), indent=indent, ensure_ascii=False, default=_json_default)


def dump(model, path):
    with open(path, "w", encoding="utf-8") as f:
        f.write(to_json(model))
