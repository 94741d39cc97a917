"""
Tests for the gap-analysis prompt.
"""

from req_integrity.features.analysis_request_builder import (
    NO_CHILDREN,
    NO_DESCRIPTION,
    build_analysis_prompt,
)
from req_integrity.utils.issue_models import IssueRef

TEMPLATE = "S={summary}|D={description}|N={child_count}\n{children}"


class TestBuildAnalysisPrompt:

    def test_formats_children_in_order(self):
        children = [
            IssueRef(key="C-1", summary="Build form", issue_type="Sub-task"),
            {"key": "C-2", "summary": "Add validation"},
            {"key": "C-3", "summary": ""},
        ]

        prompt = build_analysis_prompt("Add login", "Users log in", children, template=TEMPLATE)

        assert prompt == (
            "S=Add login|D=Users log in|N=3\n"
            "- C-1 [Sub-task]: Build form\n"
            "- C-2: Add validation\n"
            "- C-3"
        )

    def test_adf_description_is_flattened(self):
        adf = {"content": [{"content": [{"text": "Line "}, {"text": "one"}]}, {"content": [{"text": "two"}]}]}

        prompt = build_analysis_prompt("S", adf, [], template=TEMPLATE)

        assert "D=Line one\ntwo|" in prompt

    def test_placeholders_for_empty_inputs(self):
        prompt = build_analysis_prompt("S", "", [], template=TEMPLATE)

        assert f"D={NO_DESCRIPTION}" in prompt
        assert "N=0" in prompt
        assert prompt.endswith(NO_CHILDREN)

    def test_braces_in_issue_text_are_kept(self):
        prompt = build_analysis_prompt("Use {json}", "{}", [{"key": "C-1", "summary": "{x}"}], template=TEMPLATE)

        assert "S=Use {json}" in prompt
        assert "- C-1: {x}" in prompt

    def test_default_template_forbids_invented_requirements(self):
        prompt = build_analysis_prompt(
            "Add login", "Users can log in with email.", [IssueRef(key="C-1", summary="Build form")]
        )

        assert "Add login" in prompt
        assert "Users can log in with email." in prompt
        assert "- C-1: Build form" in prompt
        assert "Do NOT invent requirements" in prompt
        assert '{"missingIssues": [{"proposedSummary": "...", "rationale": "..."}]}' in prompt

    def test_deterministic(self):
        args = ("Add login", "desc", [{"key": "C-1", "summary": "a"}])

        assert build_analysis_prompt(*args) == build_analysis_prompt(*args)
