"""
Pytest fixtures for the requirement integrity tests.
"""

import os
import tempfile
import threading

# Keep log files of the test run out of the working directory.
os.environ.setdefault("REQ_INTEGRITY_LOGS_DIR", tempfile.mkdtemp(prefix="req_integrity_logs_"))

import pytest

from req_integrity.utils.issue_models import IssueRef


class FakeIssueStore:
    """
    In-memory IssueStore.

    issues:  key -> Jira "fields" dict
    queries: JQL -> list of IssueRef
    Keys or JQL strings listed in failing_* raise on access; a (key, fields)
    tuple in failing_issues fails only that particular field selection.
    """

    def __init__(self, issues=None, queries=None, failing_issues=(), failing_queries=()):
        self.issues = dict(issues or {})
        self.queries = dict(queries or {})
        self.failing_issues = set(failing_issues)
        self.failing_queries = set(failing_queries)
        self.calls = []
        self._lock = threading.Lock()

    def _record(self, *call):
        with self._lock:
            self.calls.append(call)

    def get_issue(self, key, fields):
        self._record("get_issue", key, fields)
        if key in self.failing_issues or (key, fields) in self.failing_issues:
            raise RuntimeError(f"GET {key} failed")
        if key not in self.issues:
            raise LookupError(f"Issue {key} does not exist")
        wanted = fields.split(",")
        return {name: value for name, value in self.issues[key].items() if name in wanted}

    def search(self, jql, fields):
        self._record("search", jql, fields)
        if jql in self.failing_queries:
            raise RuntimeError(f"JQL rejected: {jql}")
        return list(self.queries.get(jql, []))

    def detail_fetches(self, key):
        return [c for c in self.calls if c[0] == "get_issue" and c[1] == key and c[2] == "summary,issuetype"]

    def searched(self, jql):
        return any(c[0] == "search" and c[1] == jql for c in self.calls)


def ref(key, summary="", issue_type=None):
    return IssueRef(key=key, summary=summary, issue_type=issue_type)


def embedded(key, summary=None, issue_type=None):
    """Issue as embedded by Jira in subtask lists and issue links."""
    fields = {}
    if summary is not None:
        fields["summary"] = summary
    if issue_type is not None:
        fields["issuetype"] = {"name": issue_type}
    return {"key": key, "fields": fields}


def link(type_name, outward_issue=None, inward_issue=None, outward="", inward=""):
    data = {"type": {"name": type_name, "outward": outward, "inward": inward}}
    if outward_issue is not None:
        data["outwardIssue"] = outward_issue
    if inward_issue is not None:
        data["inwardIssue"] = inward_issue
    return data


@pytest.fixture
def make_store():
    return FakeIssueStore


@pytest.fixture
def login_store():
    """Root 'Add login' with one subtask and one Parent/Child link without summary."""
    return FakeIssueStore(
        issues={
            "ROOT-1": {
                "summary": "Add login",
                "issuetype": {"name": "Story"},
                "subtasks": [embedded("CHILD-1", "Build form")],
                "issuelinks": [link("Parent/Child", outward_issue=embedded("CHILD-2"))],
            },
            "CHILD-1": {"summary": "Build form", "issuetype": {"name": "Sub-task"}},
            "CHILD-2": {"summary": "Add validation", "issuetype": {"name": "Story"}},
        }
    )
