"""
Tests for the command line entry point.
"""

import json
from unittest.mock import MagicMock

import pytest

from req_integrity import main_analyzer
from req_integrity.features.relationship_resolver import RelationshipResolver


class StoreWithKeys:
    """Wraps the fake store with the key normalisation of JiraIssueStore."""

    def __init__(self, store):
        self.store = store

    def get_issue(self, key, fields):
        return self.store.get_issue(key, fields)

    def search(self, jql, fields):
        return self.store.search(jql, fields)

    def resolve_issue_key(self, issue):
        return issue.strip().upper()


@pytest.fixture
def store(login_store):
    return StoreWithKeys(login_store)


class TestAnalyzeIssue:

    def test_json_output(self, store, capsys):
        analyzer = MagicMock()
        analyzer.analyze.return_value = {"content": "ok", "missingIssues": []}

        ok = main_analyzer.analyze_issue("root-1", store, RelationshipResolver(store), analyzer, as_json=True)

        assert ok
        out = json.loads(capsys.readouterr().out)
        assert out["issueKey"] == "ROOT-1"
        assert out["relationships"]["children"] == ["CHILD-1", "CHILD-2"]
        assert out["analysis"] == {"content": "ok", "missingIssues": []}
        summary, description, children = analyzer.analyze.call_args.args
        assert summary == "Add login"
        assert [c.key for c in children] == ["CHILD-1", "CHILD-2"]

    def test_console_output_without_analysis(self, store, capsys):
        ok = main_analyzer.analyze_issue("ROOT-1", store, RelationshipResolver(store))

        assert ok
        out = capsys.readouterr().out
        assert "Analyzing Issue: ROOT-1" in out
        assert "Add validation" in out
        assert "--- Analysis ---" not in out

    def test_missing_root_skips_analysis(self, make_store, capsys):
        store = StoreWithKeys(make_store())
        analyzer = MagicMock()

        ok = main_analyzer.analyze_issue("GONE-1", store, RelationshipResolver(store), analyzer)

        assert not ok
        analyzer.analyze.assert_not_called()


class TestIssuesFromFile:

    def test_reads_keys(self, tmp_path):
        path = tmp_path / "issues.txt"
        path.write_text("PROJ-1 login epic\n\nnotes without key\n  OTHER-22\n", encoding="utf-8")

        assert main_analyzer.get_issues_from_file(str(path)) == ["PROJ-1", "OTHER-22"]

    def test_missing_file(self, tmp_path):
        assert main_analyzer.get_issues_from_file(str(tmp_path / "missing.txt")) == []


class TestMain:

    def test_requires_issue(self):
        with pytest.raises(SystemExit):
            main_analyzer.main([])

    def test_missing_token_exits_with_error_code(self, monkeypatch):
        monkeypatch.delenv("JIRA_API_TOKEN", raising=False)
        monkeypatch.delenv("JIRA_TOKEN", raising=False)

        assert main_analyzer.main(["PROJ-1", "--skip-analysis"]) == 2

    def test_token_report_without_log(self, monkeypatch, tmp_path, capsys):
        monkeypatch.setattr(main_analyzer, "TOKEN_LOG_FILE", str(tmp_path / "usage.jsonl"))

        assert main_analyzer.main(["--token-report"]) == 0
        assert "No token usage logged yet." in capsys.readouterr().out
