"""
Classification rules for Linear issues: team attribution, eliminated states,
open/closed taxonomies and the label heuristics (company, work type, OKR/DKR numbering).
"""
import re
from dataclasses import dataclass, field


# ----------------------------
# Config
# ----------------------------
MAIN_TEAMS = ["Comp-leg", "FCP", "LTO", "RPA"]  # "All" = sum of these 4 (excludes PGA)
ALL_TEAMS = MAIN_TEAMS + ["PGA"]
KNOWN_TEAM_KEYS = frozenset(ALL_TEAMS)

TEAM_NAME_MAP = {
    "Comp-leg": "Comp-leg",
    "Financial Crime Prevention": "FCP",
    "Legal Tech Operations": "LTO",
    "Regulatory and Public Affairs": "RPA",
    "Regulatory Public Affairs": "RPA",
    "PGA": "PGA",
}

# Issues assigned to these people count for that team, whatever team they were filed under.
ASSIGNEE_TO_TEAM = {
    "yanina acosta": "FCP", "yani": "FCP", "yanina": "FCP",
    "guadalupe assorati": "LTO", "guadalupe": "LTO",
    "pasto": "LTO",
    "sofita": "RPA", "sofia": "RPA",
    "alfonso martel seward": "RPA", "alfonso martel": "RPA",
}

ELIMINATED_STATES = frozenset({"canceled", "duplicate", "deleted", "archived", "trashed"})
_ELIMINATED_FRAGMENTS = ("delete", "trash", "restore")

COMPANY_LABELS = [
    "Roxom Ltd", "Roxom Markets", "Roxom Seychelles", "Beat the chain", "Prigui", "Moxor",
    "Roxom TV Ltd", "LL21", "Intergalatic Media", "21 Dragons", "Orange Pill",
]

UNASSIGNED = "Unassigned"

_DKR_TITLE_RE = re.compile(r"DKR\s*(\d+)", re.IGNORECASE)
_OKR_PROJECT_RE = re.compile(r"OKR\s*([123])\b", re.IGNORECASE)


# ----------------------------
# Open / closed taxonomies
# ----------------------------
def _state_key(state):
    return (state or "").strip().lower()


@dataclass(frozen=True)
class StateTaxonomy:
    open_states: frozenset
    closed_states: frozenset

    @classmethod
    def of(cls, open_states, closed_states):
        return cls(frozenset(_state_key(s) for s in open_states),
                   frozenset(_state_key(s) for s in closed_states))

    def is_open(self, state):
        return _state_key(state) in self.open_states

    def is_closed(self, state):
        return _state_key(state) in self.closed_states


@dataclass(frozen=True)
class TaxonomyConfig:
    """Default open/closed state sets plus per-team overrides (PGA has its own workflow)."""
    default: StateTaxonomy
    per_team: dict = field(default_factory=dict)

    def for_team(self, team):
        return self.per_team.get(team, self.default)

    def is_open(self, state, team=None):
        return self.for_team(team).is_open(state)

    def is_closed(self, state, team=None):
        return self.for_team(team).is_closed(state)


# Open excludes Pending Signature; closed is exactly Done (not Canceled/Ongoing/Ended).
DEFAULT_STATES = StateTaxonomy.of(
    ["Backlog", "Todo", "In Progress", "In Review", "On Hold"],
    ["Done"],
)
PGA_STATES = StateTaxonomy.of(
    ["Backlog", "Todo", "In Progress", "Pending Signature"],
    ["On Going", "Ongoing", "Ended"],
)
DEFAULT_TAXONOMY = TaxonomyConfig(default=DEFAULT_STATES, per_team={"PGA": PGA_STATES})


# ----------------------------
# Team attribution
# ----------------------------
def normalize_team(team_name, team_key=None):
    if team_name in TEAM_NAME_MAP:
        return TEAM_NAME_MAP[team_name]
    if team_key and team_key in KNOWN_TEAM_KEYS:
        return team_key
    return team_name or "Unknown"


def _assignee_team(assignee):
    return ASSIGNEE_TO_TEAM.get((assignee or "").strip().lower())


def dashboard_team(team, assignee):
    """Team an issue is reported under: an assignee override wins over the filing team."""
    override = _assignee_team(assignee)
    if override:
        return override
    if team in KNOWN_TEAM_KEYS:
        return team
    return TEAM_NAME_MAP.get(team, team)


def dkr_dashboard_team(team, assignee, child_assignees=()):
    """
    Team for a DKR parent: its own dashboard team when that is a main team, else the
    override team of the first child whose assignee has one, else its own team.
    """
    own = dashboard_team(team, assignee)
    if own in MAIN_TEAMS:
        return own
    for child_assignee in child_assignees:
        override = _assignee_team(child_assignee)
        if override:
            return override
    return own


# ----------------------------
# Eliminated / active
# ----------------------------
def is_eliminated_state(state):
    if not state or not isinstance(state, str):
        return False
    s = state.lower()
    if s in ELIMINATED_STATES:
        return True
    return any(frag in s for frag in _ELIMINATED_FRAGMENTS)


def is_eliminated(row):
    return bool(row.trashed) or is_eliminated_state(row.state)


def is_active(row):
    """ActiveRow membership: not eliminated and assigned to someone."""
    return not is_eliminated(row) and row.assignee != UNASSIGNED


def state_is(row, state):
    return _state_key(row.state) == _state_key(state)


# ----------------------------
# Label heuristics
# ----------------------------
def _lower_labels(labels):
    return [str(l).strip().lower() for l in (labels or []) if l]


def has_company(labels):
    """True if any label names one of the legal entities."""
    wanted = [c.lower() for c in COMPANY_LABELS]
    return any(c in l for l in _lower_labels(labels) for c in wanted)


def is_okr_work(labels):
    return any("okr" in l for l in _lower_labels(labels))


def is_bau_work(labels):
    return any("bau" in l for l in _lower_labels(labels))


def work_types(labels):
    """Work-type buckets for a label list. OKRs and BAU are not exclusive."""
    out = []
    if is_okr_work(labels):
        out.append("OKRs")
    if is_bau_work(labels):
        out.append("BAU")
    return out or ["Unclassified"]


def dkr_number(title):
    """'DKR 3 - Onboarding' -> 3; None when the title carries no DKR number."""
    m = _DKR_TITLE_RE.search(title or "")
    return int(m.group(1)) if m else None


def is_dkr_title(title):
    return dkr_number(title) is not None


def okr_number(project_name):
    """'Q1 OKR 2: Licensing' -> 2; only OKRs 1-3 exist per team."""
    if not project_name:
        return None
    m = _OKR_PROJECT_RE.search(str(project_name))
    return int(m.group(1)) if m else None
