"""
Normalize raw Linear issue records (GraphQL nodes or MCP exports) into canonical rows.

normalize() is total: missing or malformed optional fields fall back to defaults
("Unknown" state, "None" priority, "Unassigned" assignee, absent dates) and never raise.
"""
import os
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum

from dateutil import parser as dtparser

from linear_classify import TEAM_NAME_MAP, UNASSIGNED, dashboard_team, normalize_team


# ----------------------------
# Config
# ----------------------------
DEFAULT_WORKSPACE = "roxom"

ASSIGNEE_DISPLAY_NAMES = {"sofita": "Sofia"}

_MCP_DELETED_RE = re.compile(r"canceled|duplicate|deleted|archived|trashed|restore", re.IGNORECASE)


class Priority(str, Enum):
    URGENT = "Urgent"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    NONE = "None"


PRIORITY_MAP = {0: Priority.NONE, 1: Priority.URGENT, 2: Priority.HIGH, 3: Priority.MEDIUM, 4: Priority.LOW}
PRIORITY_ORDER = [Priority.URGENT, Priority.HIGH, Priority.MEDIUM, Priority.LOW, Priority.NONE]


class ShirtSize(str, Enum):
    XS = "XS"
    S = "S"
    M = "M"
    L = "L"
    XL = "XL"
    MISSING = "Missing"

    @property
    def weight(self):
        return SHIRT_WEIGHTS[self]


SHIRT_WEIGHTS = {
    ShirtSize.XS: 1, ShirtSize.S: 2, ShirtSize.M: 3, ShirtSize.L: 5, ShirtSize.XL: 8, ShirtSize.MISSING: 0,
}
SHIRT_ORDER = [ShirtSize.XS, ShirtSize.S, ShirtSize.M, ShirtSize.L, ShirtSize.XL, ShirtSize.MISSING]
_LABELLED_SIZES = SHIRT_ORDER[:-1]


# ----------------------------
# Rows
# ----------------------------
@dataclass(frozen=True)
class ChildSummary:
    id: str
    title: str
    team: str
    assignee: str
    priority: Priority
    url: str
    state: str
    project_name: str = None


@dataclass(frozen=True)
class Row:
    id: str
    title: str
    team: str
    dashboard_team: str
    group: str
    assignee: str
    priority: Priority
    url: str
    state: str
    due_date: date = None
    created_at: datetime = None
    completed_at: datetime = None
    trashed: bool = False
    shirt_size: ShirtSize = ShirtSize.MISSING
    labels: tuple = ()
    project: str = None
    project_url: str = None
    parent_id: str = None
    children: tuple = ()


# ----------------------------
# Helpers
# ----------------------------
def parse_dt(s):
    """ISO timestamp -> timezone-aware datetime (naive values are taken as UTC); None if unparseable."""
    if not s:
        return None
    if isinstance(s, datetime):
        dt = s
    else:
        try:
            dt = dtparser.isoparse(str(s))
        except (TypeError, ValueError, OverflowError):
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_date(s):
    """Due dates are calendar days; a full timestamp keeps only its date part."""
    if isinstance(s, date) and not isinstance(s, datetime):
        return s
    if isinstance(s, str) and len(s) >= 10:
        try:
            return date.fromisoformat(s[:10])
        except ValueError:
            pass
    dt = parse_dt(s)
    return dt.date() if dt else None


def _text(value):
    return None if value is None else str(value)


def _name_of(value):
    """Linear nests most references as {name: ...}; exports sometimes flatten them to strings."""
    if value is None:
        return None
    if isinstance(value, dict):
        value = value.get("name")
    return _text(value)


def _nodes(value):
    if isinstance(value, dict):
        return value.get("nodes") or []
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def label_names(raw_labels):
    names = []
    for l in _nodes(raw_labels):
        name = _name_of(l)
        if name:
            names.append(name)
    return names


def assignee_display_name(name):
    if not name:
        return UNASSIGNED
    return ASSIGNEE_DISPLAY_NAMES.get(name) or ASSIGNEE_DISPLAY_NAMES.get(name.lower()) or name


def priority_of(value):
    if isinstance(value, dict):
        value = value.get("value")
    try:
        return PRIORITY_MAP.get(int(value), Priority.NONE)
    except (TypeError, ValueError, OverflowError):
        return Priority.NONE


def linear_workspace():
    """Read per call so a workspace loaded from .env by the runner still applies."""
    return os.environ.get("LINEAR_WORKSPACE") or DEFAULT_WORKSPACE


def issue_url(identifier, url=None):
    return url or f"https://linear.app/{linear_workspace()}/issue/{identifier}"


def project_url(slug_id):
    return f"https://linear.app/{linear_workspace()}/project/{slug_id}" if slug_id else None


# ----------------------------
# Label classifiers
# ----------------------------
def _size_from_labels(labels):
    lowered = [(l or "").lower() for l in labels]
    for size in _LABELLED_SIZES:
        code = size.value.lower()
        for l in lowered:
            if l == code or f"shirt size: {code}" in l or f": {code}" in l:
                return size
    return None


def _size_from_estimate(estimate):
    try:
        e = float(estimate)
    except (TypeError, ValueError):
        return None
    if e <= 1:
        return ShirtSize.XS
    if e <= 2:
        return ShirtSize.S
    if e <= 3:
        return ShirtSize.M
    if e <= 5:
        return ShirtSize.L
    return ShirtSize.XL


def classify_shirt_size(labels, estimate=None):
    """Label first ("XS", "Shirt Size: M", "Size: L"), then the numeric estimate, else Missing."""
    return _size_from_labels(labels) or _size_from_estimate(estimate) or ShirtSize.MISSING


def classify_group(labels):
    """'Group: Roxom Global' -> Global, 'Group: Roxom TV' -> Roxom TV, 'Group: Roxom' -> Roxom."""
    lowered = [str(l).strip().lower() for l in (labels or []) if l]
    if any("roxom global" in s for s in lowered):
        return "Global"
    if any("roxom tv" in s for s in lowered):
        return "Roxom TV"
    if any(s == "roxom" or ("group" in s and "roxom" in s) for s in lowered):
        return "Roxom"
    return None


# ----------------------------
# Normalizer
# ----------------------------
def _child_summary(c, team):
    identifier = _text(c.get("identifier") or c.get("id"))
    return ChildSummary(
        id=identifier,
        title=_text(c.get("title")) or "",
        team=team,
        assignee=assignee_display_name(_name_of(c.get("assignee"))),
        priority=priority_of(c.get("priority")),
        url=issue_url(identifier, c.get("url")),
        state=_name_of(c.get("state")) or "Unknown",
        project_name=_name_of(c.get("project")),
    )


def normalize(raw):
    """Raw Linear issue node -> Row."""
    team_obj = raw.get("team") or {}
    if isinstance(team_obj, dict):
        team = normalize_team(_name_of(team_obj) or "", _text(team_obj.get("key")) or "")
    else:
        team = normalize_team(str(team_obj))
    assignee = assignee_display_name(_name_of(raw.get("assignee")))
    labels = label_names(raw.get("labels"))
    identifier = _text(raw.get("identifier") or raw.get("id"))

    project = raw.get("project")
    if isinstance(project, dict):
        project_name, slug = _name_of(project), _text(project.get("slugId"))
    else:
        project_name, slug = _name_of(project), None

    children = tuple(_child_summary(c, team) for c in _nodes(raw.get("children")) if isinstance(c, dict))
    parent = raw.get("parent")
    parent_id = parent.get("id") if isinstance(parent, dict) else parent

    return Row(
        id=identifier,
        title=_text(raw.get("title")) or "",
        team=team,
        dashboard_team=dashboard_team(team, assignee),
        group=classify_group(labels),
        assignee=assignee,
        priority=priority_of(raw.get("priority")),
        url=issue_url(identifier, raw.get("url")),
        state=_name_of(raw.get("state")) or "Unknown",
        due_date=parse_date(raw.get("dueDate")),
        created_at=parse_dt(raw.get("createdAt")),
        completed_at=parse_dt(raw.get("completedAt")),
        trashed=bool(raw.get("trashed")),
        shirt_size=classify_shirt_size(labels, raw.get("estimate")),
        labels=tuple(labels),
        project=project_name or None,
        project_url=project_url(slug),
        parent_id=parent_id or None,
        children=children,
    )


def from_mcp_issue(issue):
    """Flattened MCP export record -> Linear GraphQL node shape accepted by normalize()."""
    state_name = _text(issue.get("status")) or _name_of(issue.get("state")) or ""
    trashed = issue.get("trashed")
    if trashed is None:
        trashed = issue.get("trashedAt")
    if trashed is None:
        trashed = bool(_MCP_DELETED_RE.search(state_name))
    team_name = _name_of(issue.get("team"))
    priority = issue.get("priority")
    if isinstance(priority, dict):
        priority = priority.get("value")
    return {
        "id": issue.get("id"),
        "identifier": issue.get("identifier"),
        "title": issue.get("title"),
        "url": issue.get("url"),
        "dueDate": issue.get("dueDate"),
        "createdAt": issue.get("createdAt"),
        "updatedAt": issue.get("updatedAt"),
        "completedAt": issue.get("completedAt"),
        "trashed": bool(trashed),
        "priority": priority,
        "estimate": issue.get("estimate"),
        "state": {"name": state_name or "Unknown"},
        "team": {"key": TEAM_NAME_MAP.get(team_name, team_name), "name": team_name, "id": issue.get("teamId")},
        "assignee": {"name": _name_of(issue.get("assignee")) or UNASSIGNED},
        "labels": {"nodes": [{"name": n} for n in label_names(issue.get("labels"))]},
        "project": issue.get("project"),
        "parent": issue.get("parent") or ({"id": issue["parentId"]} if issue.get("parentId") else None),
        "children": issue.get("children"),
    }
