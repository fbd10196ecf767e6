#!/usr/bin/env python3
"""
Compliance dashboard analytics from Linear issues.

build_analytics(issues, now) turns raw issue records into the nested model the dashboard
renders: summary cards, team and assignee breakdowns, OKR/DKR rollups, weekly trend,
cycle-time histogram and data-quality scores. It is pure: "now" is an argument and nothing
is fetched or written. main() is the thin runner around it (pre-fetched JSON in, JSON out).

Run: LINEAR_ISSUES_FILE=issues.json python linear_analytics.py
"""
import json
import math
import os
from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

import pandas as pd
from dotenv import load_dotenv

from dashboard_model import (
    closed_ref,
    count_list,
    dump,
    due_soon_ref,
    issue_ref,
    overdue_ref,
    quality_ref,
    sized_counts,
    validate_issues,
)
from linear_classify import (
    ALL_TEAMS,
    DEFAULT_TAXONOMY,
    MAIN_TEAMS,
    UNASSIGNED,
    dkr_dashboard_team,
    dkr_number,
    has_company,
    is_active,
    is_bau_work,
    is_eliminated,
    is_okr_work,
    okr_number,
    state_is,
)
from linear_rows import (
    PRIORITY_ORDER,
    SHIRT_ORDER,
    SHIRT_WEIGHTS,
    ShirtSize,
    from_mcp_issue,
    normalize,
    parse_dt,
)


# ----------------------------
# Config
# ----------------------------
VELOCITY_WEEKS = 10
PREV_WINDOW_WEEKS = (8, 4)  # closures in [now - 8w, now - 4w)
DUE_SOON_DAYS = 7
WEEKLY_BUCKETS = 11
CYCLE_BUCKETS = [("0-3d", 3), ("4-7d", 7), ("8-14d", 14), ("15-30d", 30), ("30+d", None)]
OKR_NUMBERS = (1, 2, 3)
QUALITY_FIELDS = ("missingShirt", "missingCompany", "missingGroup", "missingWorkType")


@dataclass(frozen=True)
class Clock:
    """The single "now" of one aggregation run; every time window is measured from it."""
    now: datetime

    @classmethod
    def at(cls, now):
        if isinstance(now, Clock):
            return now
        if isinstance(now, str):
            now = parse_dt(now)
        if not isinstance(now, datetime):
            raise TypeError(f"now must be a datetime, got {type(now).__name__}")
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return cls(now.astimezone(timezone.utc))

    @property
    def today(self) -> date:
        return self.now.date()

    def weeks_ago(self, n):
        return self.now - timedelta(weeks=n)

    def week_start(self) -> date:
        return self.today - timedelta(days=self.today.weekday())


# ----------------------------
# Helpers
# ----------------------------
def team_of(row):
    return row.dashboard_team


def round_half_up(x, ndigits=0):
    m = 10 ** ndigits
    return math.floor(x * m + 0.5) / m


def pct(part, whole):
    """Rounded percentage; None when there is nothing to divide by."""
    if not whole:
        return None
    return int(round_half_up(part / whole * 100))


def days_between(start, end):
    return math.floor((end - start).total_seconds() / 86400.0)


def iso_week(d):
    y, w, _ = d.isocalendar()
    return f"{y}-W{w:02d}"


def avg_cycle_days(rows, ndigits=2):
    with_dates = [r for r in rows if r.created_at and r.completed_at]
    if not with_dates:
        return None
    total = sum(days_between(r.created_at, r.completed_at) for r in with_dates)
    return round_half_up(total / len(with_dates), ndigits)


def sla_counts(closed_rows):
    """(closed with due date, closed on or before due date, compliance %)."""
    with_due = [r for r in closed_rows if r.due_date and r.completed_at]
    on_time = [r for r in with_due if r.completed_at.date() <= r.due_date]
    return len(with_due), len(on_time), pct(len(on_time), len(with_due))


def closed_within(rows, clock, weeks):
    cutoff = clock.weeks_ago(weeks)
    return [r for r in rows if r.completed_at and r.completed_at >= cutoff]


def closed_in_prev_window(rows, clock):
    start, end = clock.weeks_ago(PREV_WINDOW_WEEKS[0]), clock.weeks_ago(PREV_WINDOW_WEEKS[1])
    return [r for r in rows if r.completed_at and start <= r.completed_at < end]


def velocity(rows, clock, weeks=VELOCITY_WEEKS):
    return round_half_up(len(closed_within(rows, clock, weeks)) / weeks, 1)


def is_overdue(row, clock):
    return row.due_date is not None and row.due_date < clock.today


def is_due_soon(row, clock):
    return row.due_date is not None and clock.today <= row.due_date <= clock.today + timedelta(days=DUE_SOON_DAYS)


def weighted(rows):
    return sum(SHIRT_WEIGHTS[r.shirt_size] for r in rows)


def refs_by_size(rows):
    return {size.value: [issue_ref(r, team=team_of(r)) for r in rows if r.shirt_size == size]
            for size in SHIRT_ORDER}


def _unique(values):
    return [v for v in dict.fromkeys(values) if v and v != UNASSIGNED]


# ----------------------------
# Populations
# ----------------------------
@dataclass
class Populations:
    rows: list
    active: list
    open: list
    closed: list
    canceled: list
    duplicated: list

    def in_teams(self, rows, teams):
        return [r for r in rows if team_of(r) in teams]


def split_populations(rows, taxonomy):
    """ActiveRow is the base of every metric; canceled/duplicated only drop trashed rows."""
    active = [r for r in rows if is_active(r)]
    default = taxonomy.default
    return Populations(
        rows=rows,
        active=active,
        open=[r for r in active if default.is_open(r.state)],
        closed=[r for r in active if default.is_closed(r.state)],
        canceled=[r for r in rows if state_is(r, "Canceled") and not r.trashed],
        duplicated=[r for r in rows if state_is(r, "Duplicate") and not r.trashed],
    )


# ----------------------------
# Team / assignee breakdowns
# ----------------------------
def team_breakdown(team, active, taxonomy, clock):
    states = taxonomy.for_team(team)
    team_rows = [r for r in active if team_of(r) == team]
    team_open = [r for r in team_rows if states.is_open(r.state)]
    team_closed = [r for r in team_rows if states.is_closed(r.state)]
    with_due, on_time, sla = sla_counts(team_closed)
    return {
        "team": team,
        "open": len(team_open),
        "closed": len(team_closed),
        "overdue": sum(1 for r in team_open if is_overdue(r, clock)),
        "velocity": velocity(team_closed, clock),
        "closedWithDueDate": with_due,
        "closedOnTime": on_time,
        "sla": sla,
        "avgCycleTime": avg_cycle_days(team_closed),
    }


def reported_teams(active):
    present = {team_of(r) for r in active}
    return MAIN_TEAMS + (["PGA"] if "PGA" in present else [])


def _detail(open_rows, overdue_issues):
    status_counts = Counter(r.state for r in open_rows)
    priority_counts = Counter(r.priority.value for r in open_rows)
    by_size = refs_by_size(open_rows)
    return {
        "byStatus": count_list("status", status_counts),
        "byPriority": count_list("priority", priority_counts, order=PRIORITY_ORDER),
        "byShirtSize": sized_counts(by_size),
        "overdueIssues": overdue_issues,
        "issuesByShirtSize": by_size,
    }


def team_detailed_data(pop, overdue_issues, clock):
    out = {}
    for team in MAIN_TEAMS:
        team_open = [r for r in pop.open if team_of(r) == team]
        team_closed = [r for r in pop.closed if team_of(r) == team]
        entry = {
            "total": len(team_open) + len(team_closed),
            "open": len(team_open),
            "closed": len(team_closed),
            "overdue": sum(1 for r in team_open if is_overdue(r, clock)),
        }
        entry.update(_detail(team_open, [i for i in overdue_issues if i["team"] == team]))
        out[team] = entry
    return out


def assignee_detailed_data(pop, overdue_issues, clock):
    open_main = pop.in_teams(pop.open, MAIN_TEAMS)
    closed_main = pop.in_teams(pop.closed, MAIN_TEAMS)
    out = {}
    for a in _unique(r.assignee for r in open_main):
        person_open = [r for r in open_main if r.assignee == a]
        entry = {
            "open": len(person_open),
            "closed": sum(1 for r in closed_main if r.assignee == a),
            "overdue": sum(1 for r in person_open if is_overdue(r, clock)),
            "weighted": weighted(person_open),
        }
        entry.update(_detail(person_open, [i for i in overdue_issues if i["assignee"] == a]))
        out[a] = entry
    return out


def performance_data(pop):
    """Closed-work throughput per assignee with open or closed main-team issues."""
    open_main = pop.in_teams(pop.open, MAIN_TEAMS)
    closed_main = pop.in_teams(pop.closed, MAIN_TEAMS)
    out = []
    for a in _unique([r.assignee for r in open_main] + [r.assignee for r in closed_main]):
        person_closed = [r for r in closed_main if r.assignee == a]
        size_counts = Counter(r.shirt_size for r in person_closed)
        by_size = [
            {"size": size.value, "count": size_counts[size], "points": SHIRT_WEIGHTS[size] * size_counts[size]}
            for size in SHIRT_ORDER if size_counts[size] > 0
        ]
        out.append({
            "assignee": a,
            "closed_count": len(person_closed),
            "avg_lead_time": avg_cycle_days(person_closed, ndigits=1),
            "total_points": sum(e["points"] for e in by_size),
            "by_shirt_size": by_size,
        })
    return out


# ----------------------------
# Summary
# ----------------------------
def _canceled_lists(rows, key):
    grouped = defaultdict(list)
    for r in rows:
        grouped[key(r)].append(issue_ref(r, team=team_of(r), state=False))
    return grouped


def summary_stats(pop, taxonomy, clock, issues_by_status, issues_by_size):
    open_all = pop.in_teams(pop.open, ALL_TEAMS)
    closed_all = pop.in_teams(pop.closed, ALL_TEAMS)
    closed_main = pop.in_teams(pop.closed, MAIN_TEAMS)
    open_main = pop.in_teams(pop.open, MAIN_TEAMS)
    canceled_all = pop.in_teams(pop.canceled, ALL_TEAMS)
    duplicated_all = pop.in_teams(pop.duplicated, ALL_TEAMS)

    by_status = [{"status": s, "count": len(lst)} for s, lst in issues_by_status.items()]
    total_open = sum(e["count"] for e in by_status)

    prev = closed_in_prev_window([r for r in closed_main if r.created_at and r.completed_at], clock)
    _, _, sla = sla_counts(closed_main)
    _, _, sla_prev = sla_counts(prev)

    overdue_issues = sorted(
        (overdue_ref(r, team_of(r), clock.today) for r in open_all if is_overdue(r, clock)),
        key=lambda i: -i["days_overdue"],
    )
    due_soon_issues = [due_soon_ref(r, team_of(r)) for r in open_all if is_due_soon(r, clock)]
    # most recent first; rows without a completion date keep their order at the end
    closed_issues = [closed_ref(r, team_of(r)) for r in sorted(
        closed_all, key=lambda r: (r.completed_at is None, -r.completed_at.timestamp() if r.completed_at else 0))]

    by_size = [
        {"size": size, "count": len(lst), "weight": SHIRT_WEIGHTS[ShirtSize(size)]}
        for size, lst in issues_by_size.items() if lst
    ]
    if not by_size:
        by_size = [{"size": s.value, "count": total_open if s == ShirtSize.MISSING else 0,
                    "weight": SHIRT_WEIGHTS[s]} for s in SHIRT_ORDER]

    open_assignees = _unique(r.assignee for r in open_main)
    by_assignee = []
    for a in open_assignees:
        person_open = [r for r in open_main if r.assignee == a]
        by_assignee.append({
            "assignee": a,
            "open": len(person_open),
            "weighted": weighted(person_open),
            "overdue": sum(1 for r in person_open if is_overdue(r, clock)),
        })

    canceled_by_team = _canceled_lists(canceled_all, team_of)
    duplicated_by_team = _canceled_lists(duplicated_all, team_of)
    canceled_by_assignee = _canceled_lists(canceled_all, lambda r: r.assignee)
    duplicated_by_assignee = _canceled_lists(duplicated_all, lambda r: r.assignee)
    reconciled_assignees = list(dict.fromkeys(r.assignee for r in canceled_all + duplicated_all))

    return {
        "total": len(pop.in_teams(pop.active, ALL_TEAMS)),
        "totalOpen": total_open,
        "totalClosed": len(closed_all),
        "overdue": len(overdue_issues),
        "dueSoon": len(due_soon_issues),
        "noDueDate": sum(1 for r in open_all if not r.due_date),
        "unassigned": sum(1 for r in open_all if r.assignee == UNASSIGNED),
        "avgCycleTime": avg_cycle_days(closed_main) or 0,
        "avgCycleTimePrev": avg_cycle_days(prev) or 0,
        "velocity": velocity(closed_main, clock),
        "velocityPrev": round_half_up(len(prev) / PREV_WINDOW_WEEKS[1], 1) if prev else 0,
        "slaCompliance": sla,
        "slaCompliancePrev": sla_prev,
        "byStatus": by_status,
        "byPriority": count_list("priority", Counter(r.priority.value for r in open_all), order=PRIORITY_ORDER),
        "byShirtSize": by_size,
        "byWorkType": [
            {"type": "OKRs", "count": sum(1 for r in open_all if is_okr_work(r.labels))},
            {"type": "BAU", "count": sum(1 for r in open_all if is_bau_work(r.labels))},
            {"type": "Unclassified", "count": sum(1 for r in open_all
                                                  if not is_okr_work(r.labels) and not is_bau_work(r.labels))},
        ],
        "byTeam": [team_breakdown(t, pop.active, taxonomy, clock) for t in reported_teams(pop.active)],
        "byAssignee": by_assignee,
        "overdueIssues": overdue_issues,
        "dueSoonIssues": due_soon_issues,
        "closedIssues": closed_issues,
        "canceledCount": len(canceled_all),
        "duplicatedCount": len(duplicated_all),
        "canceledByTeam": {t: canceled_by_team.get(t, []) for t in ALL_TEAMS},
        "duplicatedByTeam": {t: duplicated_by_team.get(t, []) for t in ALL_TEAMS},
        "canceledByAssignee": {a: canceled_by_assignee.get(a, []) for a in reconciled_assignees},
        "duplicatedByAssignee": {a: duplicated_by_assignee.get(a, []) for a in reconciled_assignees},
    }


# ----------------------------
# Data quality
# ----------------------------
def quality_data(pop):
    """Per main team: four required fields checked on every open issue, plus drill-down lists."""
    quality, issues = [], {}
    for team in MAIN_TEAMS:
        team_open = [r for r in pop.open if team_of(r) == team]
        missing = {
            "missingShirt": [r for r in team_open if r.shirt_size == ShirtSize.MISSING],
            "missingCompany": [r for r in team_open if not has_company(r.labels)],
            "missingGroup": [r for r in team_open if r.group is None],
            "missingWorkType": [r for r in team_open if not (is_okr_work(r.labels) or is_bau_work(r.labels))],
        }
        total_fields = len(team_open) * len(QUALITY_FIELDS)
        missing_fields = sum(len(v) for v in missing.values())
        entry = {"team": team, "open": len(team_open)}
        entry.update({k: len(v) for k, v in missing.items()})
        entry["completeness"] = pct(total_fields - missing_fields, total_fields) if total_fields else 100
        quality.append(entry)
        issues[team] = {k: [quality_ref(r) for r in v] for k, v in missing.items()}
    return quality, issues


# ----------------------------
# Weekly trend + cycle time
# ----------------------------
def _in_week(dt, week_start):
    return dt is not None and week_start <= dt.date() < week_start + timedelta(days=7)


def weekly_data(pop, clock, total_open):
    """
    Created / closed per week for the main teams over the last 11 Monday-start weeks.

    openEnd walks back from today's open count, removing each later week's net change
    (created - closed). There is no state history, so this assumes every issue open now was
    open throughout.
    """
    active_main = pop.in_teams(pop.active, MAIN_TEAMS)
    closed_main = pop.in_teams(pop.closed, MAIN_TEAMS)
    current = clock.week_start()
    starts = [current - timedelta(weeks=WEEKLY_BUCKETS - 1 - i) for i in range(WEEKLY_BUCKETS)]
    created = [sum(1 for r in active_main if _in_week(r.created_at, ws)) for ws in starts]
    closed = [sum(1 for r in closed_main if _in_week(r.completed_at, ws)) for ws in starts]

    out = []
    for idx, ws in enumerate(starts):
        later_delta = sum(created[j] - closed[j] for j in range(idx + 1, len(starts)))
        out.append({
            "week": f"W{ws.isocalendar()[1]:02d}",
            "weekKey": iso_week(ws),
            "weekStart": ws.isoformat(),
            "created": created[idx],
            "closed": closed[idx],
            "openEnd": total_open - later_delta,
        })
    return out


def cycle_time_data(pop):
    closed_main = [r for r in pop.in_teams(pop.closed, MAIN_TEAMS) if r.created_at and r.completed_at]
    counts = {label: 0 for label, _ in CYCLE_BUCKETS}
    for r in closed_main:
        days = days_between(r.created_at, r.completed_at)
        for label, upper in CYCLE_BUCKETS:
            if upper is None or days <= upper:
                counts[label] += 1
                break
    total = sum(counts.values())
    return [{"range": label, "count": n, "pct": pct(n, total) or 0} for label, n in counts.items()]


# ----------------------------
# OKR / DKR rollup
# ----------------------------
def completion(closed, total):
    return pct(closed, total) or 0


def dkr_status(pct_done):
    if pct_done >= 100:
        return "done"
    if pct_done >= 50:
        return "on_track"
    if pct_done >= 25:
        return "at_risk"
    return "blocked"


def okr_status(pct_done, any_on_hold, latest_due, today):
    """On Hold beats everything; a passed due date on an unfinished OKR is at risk."""
    if any_on_hold:
        return "blocked"
    if pct_done < 100 and latest_due is not None and today > latest_due:
        return "at_risk"
    return dkr_status(pct_done)


def dkr_team(row):
    return dkr_dashboard_team(row.team, row.assignee, [c.assignee for c in row.children])


def _dkr_sort_key(row):
    n = dkr_number(row.title)
    return (n is None, n or 0, row.title)


def dkr_nodes(active):
    """Top-level DKR issues attributed to a main team."""
    return [r for r in active if r.parent_id is None and dkr_number(r.title) is not None
            and dkr_team(r) in MAIN_TEAMS]


def dkr_rollup(pop, taxonomy):
    """Per main team, DKR rows ordered by DKR number, plus each DKR's member issue list."""
    states = taxonomy.default
    rows_by_team = {t: [] for t in MAIN_TEAMS}
    members_by_dkr = {}
    nodes = dkr_nodes(pop.active)
    for team in MAIN_TEAMS:
        for r in sorted((n for n in nodes if dkr_team(n) == team), key=_dkr_sort_key):
            members = list(r.children) or [r]
            n_open = sum(1 for m in members if states.is_open(m.state))
            n_closed = sum(1 for m in members if states.is_closed(m.state))
            pct_done = completion(n_closed, len(members))
            project_name = r.project or (r.children[0].project_name if r.children else None)
            members_by_dkr[r.id] = [issue_ref(m, team=team, state=False) for m in members]
            rows_by_team[team].append({
                "row": r,
                "identifier": r.id,
                "name": r.title,
                "team": team,
                "total": len(members),
                "open": n_open,
                "closed": n_closed,
                "completion": pct_done,
                "target": 100,
                "status": dkr_status(pct_done),
                "okrNum": okr_number(project_name),
                "projectName": project_name,
            })
    return rows_by_team, members_by_dkr


_DKR_SUMMARY_KEYS = ("identifier", "name", "team", "total", "open", "closed", "completion", "target",
                     "status", "okrNum")


def okr_cards(rows_by_team, taxonomy, clock):
    """OKR 1-3 cards per team; counts are DKR parents in the bucket, not their sub-issues."""
    states = taxonomy.default
    cards, parents = {}, {}
    for team in MAIN_TEAMS:
        cards[team] = []
        for n in OKR_NUMBERS:
            dkrs = [d for d in rows_by_team[team] if d["okrNum"] == n]
            total = len(dkrs)
            n_open = sum(1 for d in dkrs if states.is_open(d["row"].state))
            n_closed = sum(1 for d in dkrs if states.is_closed(d["row"].state))
            name = dkrs[0]["projectName"] if dkrs and dkrs[0]["projectName"] else f"OKR{n}"
            if dkrs:
                parents[f"{team}:{name}"] = [issue_ref(d["row"], team=team) for d in dkrs]
            pct_done = completion(n_closed, total)
            dues = [d["row"].due_date for d in dkrs if d["row"].due_date]
            status = okr_status(
                pct_done,
                any(state_is(d["row"], "On Hold") for d in dkrs),
                max(dues) if dues else None,
                clock.today,
            )
            cards[team].append({
                "name": name,
                "team": team,
                "total": total,
                "open": n_open,
                "closed": n_closed,
                "completion": pct_done,
                "target": 100,
                "status": status,
                "url": dkrs[0]["row"].project_url if dkrs else None,
                "burndown": [
                    {"day": "start", "remaining": total, "ideal": total},
                    {"day": "mid", "remaining": n_open + int(round_half_up(n_closed * 0.3)),
                     "ideal": int(round_half_up(total * 0.5))},
                    {"day": clock.today.isoformat(), "remaining": n_open, "ideal": 0},
                ],
            })
    return cards, parents


# ----------------------------
# Entry point
# ----------------------------
def build_analytics(issues, now, taxonomy=DEFAULT_TAXONOMY):
    """Raw Linear issues + the run's "now" -> dashboard analytics model (plain dicts and lists)."""
    issues = validate_issues(issues)
    clock = Clock.at(now)
    rows = [normalize(it) for it in issues]
    pop = split_populations(rows, taxonomy)
    open_all = pop.in_teams(pop.open, ALL_TEAMS)

    issues_by_status = defaultdict(list)
    issues_by_priority = defaultdict(list)
    for r in open_all:
        issues_by_status[r.state or "Backlog"].append(issue_ref(r, team=team_of(r)))
        issues_by_priority[r.priority.value].append(issue_ref(r, team=team_of(r)))
    issues_by_size = refs_by_size(open_all)

    summary = summary_stats(pop, taxonomy, clock, issues_by_status, issues_by_size)
    quality, quality_issues = quality_data(pop)
    dkr_rows, issues_by_okr = dkr_rollup(pop, taxonomy)
    okrs, okr_parents = okr_cards(dkr_rows, taxonomy, clock)
    issues_by_okr.update(okr_parents)

    return {
        "summaryStats": summary,
        "teamDetailedData": team_detailed_data(pop, summary["overdueIssues"], clock),
        "assigneeDetailedData": assignee_detailed_data(pop, summary["overdueIssues"], clock),
        "performanceData": performance_data(pop),
        "qualityData": quality,
        "dataQualityIssues": quality_issues,
        "weeklyData": weekly_data(pop, clock, summary["totalOpen"]),
        "cycleTimeData": cycle_time_data(pop),
        "deletedIssueIds": [r.id for r in rows if is_eliminated(r) or r.assignee == UNASSIGNED],
        "issuesByStatus": dict(issues_by_status),
        "issuesByPriority": dict(issues_by_priority),
        "issuesByShirtSize": issues_by_size,
        "okrsDataByTeam": okrs,
        "dkrSummaryByTeam": {t: [{k: d[k] for k in _DKR_SUMMARY_KEYS} for d in dkr_rows[t]] for t in MAIN_TEAMS},
        "issuesByOKR": issues_by_okr,
        "canceledIssues": [issue_ref(r, team=team_of(r), state=False) for r in pop.in_teams(pop.canceled, ALL_TEAMS)],
        "duplicatedIssues": [issue_ref(r, team=team_of(r), state=False)
                             for r in pop.in_teams(pop.duplicated, ALL_TEAMS)],
    }


# ----------------------------
# Runner
# ----------------------------
def _is_mcp_record(it):
    return "status" in it or isinstance(it.get("team"), str) or isinstance(it.get("assignee"), str)


def load_issues(path):
    """Pre-fetched issues file: a JSON list of Linear nodes or of MCP export records."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("issues", data.get("nodes", data))
    if isinstance(data, list):
        return [from_mcp_issue(it) if isinstance(it, dict) and _is_mcp_record(it) else it for it in data]
    return data


def main():
    load_dotenv()
    issues_path = os.environ.get("LINEAR_ISSUES_FILE")
    if not issues_path:
        raise RuntimeError("Missing env var. Set LINEAR_ISSUES_FILE to a pre-fetched issues JSON file.")
    out_path = os.environ.get("DASHBOARD_OUTPUT") or os.path.join(
        os.path.dirname(os.path.abspath(__file__)), "linear_dashboard_latest.json")
    now = parse_dt(os.environ.get("DASHBOARD_NOW")) or datetime.now(timezone.utc)

    print(f"Reading issues from {issues_path}...")
    issues = load_issues(issues_path)
    print(f"Found {len(issues)} issues.")

    data = build_analytics(issues, now)
    s = data["summaryStats"]
    print(f"Excluded (trashed/eliminated/unassigned): {len(data['deletedIssueIds'])}")
    print(f"Summary: {s['totalOpen']} open, {s['overdue']} overdue, {s['totalClosed']} closed.")
    print(f"Velocity: {s['velocity']}/week (prev {s['velocityPrev']}), SLA: {s['slaCompliance']}%, "
          f"avg cycle time: {s['avgCycleTime']} days")

    if s["byTeam"]:
        view = pd.DataFrame(s["byTeam"])[["team", "open", "closed", "overdue", "velocity", "sla", "avgCycleTime"]]
        print("\nBy team:")
        print(view.to_string(index=False))
    quality = pd.DataFrame(data["qualityData"])
    if not quality.empty:
        print("\nData quality (open issues, main teams):")
        print(quality.to_string(index=False))

    dump(data, out_path)
    print(f"\nResults saved to: {out_path}")
    print("\nDone.")


if __name__ == "__main__":
    main()
