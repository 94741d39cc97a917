# src/req_integrity/features/relationship_resolver.py
"""
Resolves the parent/child neighbourhood of a single Jira issue.

Jira exposes child issues in several places that rarely agree with each other:
the JQL `parent` relation, the subtask list, the Epic Link (for Epics) and the
generic issue-link graph. The RelationshipResolver asks each of these sources
in a fixed order and folds their answers into one de-duplicated, ordered list
of children:

1. root issue (parent, summary, description, issue type)
2. `parent = KEY` search
3. subtasks of the root issue
4. Epic children (only for Epics), with a custom-field fallback query
5. outward issue links that describe a parent -> child relation
6. detail backfill for children that arrived without a summary

Every discovery phase returns a PhaseResult. A failed phase contributes
nothing and does not stop the phases after it; only a failed root fetch
ends the resolution early with an empty record.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Optional, Tuple

from req_integrity.utils.config import (
    JIRA_EPIC_ISSUE_TYPE,
    JIRA_CF_EPIC_LINK,
    BACKFILL_MAX_WORKERS,
    CHILD_LINK_TYPE_NAME,
    CHILD_LINK_TYPE_FRAGMENT,
    CHILD_LINK_OUTWARD_VERBS,
)
from req_integrity.utils.issue_models import IssueRef, RelationshipRecord, issue_ref_from_payload
from req_integrity.utils.issue_store import IssueStore
from req_integrity.utils.logger_config import logger

ROOT_FIELDS = "parent,summary,description,issuetype"
CHILD_FIELDS = "summary,issuetype"


@dataclass(frozen=True)
class PhaseResult:
    """Outcome of one discovery phase: either candidates or the error that stopped it."""
    name: str
    candidates: Tuple[IssueRef, ...] = ()
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class DiscoveryState:
    """Children admitted so far, in order of first discovery, with their best known detail."""
    keys: Tuple[str, ...] = ()
    details: Dict[str, IssueRef] = field(default_factory=dict)

    def missing_detail(self) -> Tuple[str, ...]:
        return tuple(k for k in self.keys if not self.details[k].summary)


def _fill_missing(known: IssueRef, extra: IssueRef) -> IssueRef:
    # first non-empty value wins, field by field
    updates = {}
    if not known.summary and extra.summary:
        updates["summary"] = extra.summary
    if not known.issue_type and extra.issue_type:
        updates["issue_type"] = extra.issue_type
    return known.model_copy(update=updates) if updates else known


def merge_candidates(state: DiscoveryState, candidates: Iterable[IssueRef]) -> DiscoveryState:
    """
    Folds one phase's candidates into the state.

    A key keeps the position of the phase that saw it first. Later sightings may
    only add a summary or issue type that is still missing.
    """
    keys = list(state.keys)
    details = dict(state.details)
    for ref in candidates:
        known = details.get(ref.key)
        if known is None:
            keys.append(ref.key)
            details[ref.key] = ref
        else:
            details[ref.key] = _fill_missing(known, ref)
    return DiscoveryState(tuple(keys), details)


def fold_phase_results(results: Iterable[PhaseResult], state: DiscoveryState = None) -> DiscoveryState:
    """Merges phase results in order. Failed phases count as empty."""
    state = state or DiscoveryState()
    for result in results:
        if result.ok:
            state = merge_candidates(state, result.candidates)
    return state


def is_child_link(link_type: dict) -> bool:
    """True if an issue link type describes a parent -> child relation on its outward side."""
    name = link_type.get("name") or ""
    outward = (link_type.get("outward") or "").strip().lower()
    return (
        name == CHILD_LINK_TYPE_NAME
        or CHILD_LINK_TYPE_FRAGMENT in name.lower()
        or outward in CHILD_LINK_OUTWARD_VERBS
    )


def epic_fallback_jql(epic_link_field: str, issue_key: str) -> str:
    """'customfield_10008' or '10008' -> cf[10008] = "KEY"."""
    field_id = str(epic_link_field).split("_")[-1]
    return f'cf[{field_id}] = "{issue_key}"'


class RelationshipResolver:
    """
    Builds a RelationshipRecord for one issue from an IssueStore.

    resolve() never raises. What could be gathered is returned; sources that
    failed are logged and simply contribute nothing.
    """

    def __init__(self, store: IssueStore, epic_issue_type: str = JIRA_EPIC_ISSUE_TYPE,
                 epic_link_field: Optional[str] = JIRA_CF_EPIC_LINK,
                 max_workers: int = BACKFILL_MAX_WORKERS):
        self.store = store
        self.epic_issue_type = epic_issue_type
        self.epic_link_field = epic_link_field
        self.max_workers = max(1, max_workers)

    # ---------- phases ----------
    def _run_phase(self, name: str, discover: Callable[[], Iterable[IssueRef]]) -> PhaseResult:
        try:
            candidates = tuple(discover())
        except Exception as e:
            logger.warning(f"Phase '{name}' failed, continuing without it: {e}")
            return PhaseResult(name, error=e)
        logger.info(f"Phase '{name}': {len(candidates)} issues found.")
        return PhaseResult(name, candidates)

    def _direct_children(self, issue_key: str):
        return self.store.search(f'parent = "{issue_key}"', CHILD_FIELDS)

    def _subtasks(self, issue_key: str):
        fields = self.store.get_issue(issue_key, "subtasks")
        return [issue_ref_from_payload(st) for st in (fields.get("subtasks") or [])]

    def _epic_children(self, issue_key: str):
        try:
            return self.store.search(f'"Epic Link" = "{issue_key}"', CHILD_FIELDS)
        except Exception as e:
            if not self.epic_link_field:
                raise
            logger.info(f"Epic Link query for {issue_key} failed ({e}); trying {self.epic_link_field}.")
        return self.store.search(epic_fallback_jql(self.epic_link_field, issue_key), CHILD_FIELDS)

    def _linked_children(self, issue_key: str):
        fields = self.store.get_issue(issue_key, "issuelinks")
        children = []
        for link in (fields.get("issuelinks") or []):
            outward = link.get("outwardIssue")
            if not outward:
                continue
            if is_child_link(link.get("type") or {}):
                children.append(issue_ref_from_payload(outward))
        return children

    def _is_epic(self, issue_type: Optional[str]) -> bool:
        return (issue_type or "").lower() == (self.epic_issue_type or "").lower()

    # ---------- detail backfill ----------
    def _fetch_detail(self, key: str) -> IssueRef:
        try:
            fields = self.store.get_issue(key, CHILD_FIELDS)
        except Exception as e:
            logger.warning(f"Could not fetch details for {key}: {e}")
            return IssueRef(key=key, summary="")
        return issue_ref_from_payload({"key": key, "fields": fields})

    def _backfill(self, state: DiscoveryState) -> DiscoveryState:
        missing = state.missing_detail()
        if not missing:
            return state
        logger.info(f"Fetching details for {len(missing)} children.")
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(missing))) as pool:
            fetched = list(pool.map(self._fetch_detail, missing))
        return merge_candidates(state, fetched)

    # ---------- public API ----------
    def discover(self, issue_key: str, issue_type: Optional[str] = None):
        """Runs phases 2-5 in order and yields their PhaseResults."""
        yield self._run_phase("parent query", lambda: self._direct_children(issue_key))
        yield self._run_phase("subtasks", lambda: self._subtasks(issue_key))
        if self._is_epic(issue_type):
            yield self._run_phase("epic children", lambda: self._epic_children(issue_key))
        yield self._run_phase("issue links", lambda: self._linked_children(issue_key))

    def resolve(self, issue_key: str) -> RelationshipRecord:
        logger.info(f"Resolving relationships for {issue_key}")
        try:
            root = self.store.get_issue(issue_key, ROOT_FIELDS)
        except Exception as e:
            logger.error(f"Root issue {issue_key} could not be fetched: {e}")
            return RelationshipRecord(root_found=False)

        parent = (root.get("parent") or {}).get("key")
        issue_type = (root.get("issuetype") or {}).get("name")

        # the root is never its own child
        results = [
            PhaseResult(r.name, tuple(c for c in r.candidates if c.key != issue_key), r.error)
            for r in self.discover(issue_key, issue_type)
        ]
        state = self._backfill(fold_phase_results(results))

        failed = [r.name for r in results if not r.ok]
        logger.info(
            f"{issue_key}: {len(state.keys)} children"
            + (f", failed phases: {', '.join(failed)}" if failed else "")
        )
        return RelationshipRecord(
            parent=parent,
            children=list(state.keys),
            children_details=[state.details[k] for k in state.keys],
            summary=root.get("summary") or "",
            description=root.get("description") or "",
        )
