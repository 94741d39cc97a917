"""
Tests for the ADF plain-text extraction.
"""

import json

import pytest

from req_integrity.utils.adf_text import extract_text_from_adf


def paragraph(*texts):
    return {"type": "paragraph", "content": [{"type": "text", "text": t} for t in texts]}


class TestExtractTextFromAdf:

    @pytest.mark.parametrize("value", [None, "", {}, []])
    def test_empty_input(self, value):
        assert extract_text_from_adf(value) == ""

    def test_plain_string_unchanged(self):
        assert extract_text_from_adf("  As a user I want  ") == "  As a user I want  "

    def test_blocks_joined_by_newline_inline_without_separator(self):
        doc = {"type": "doc", "version": 1, "content": [
            paragraph("As a ", "user", " I want to log in."),
            paragraph("Passwords are hashed."),
        ]}

        assert extract_text_from_adf(doc) == "As a user I want to log in.\nPasswords are hashed."

    def test_block_level_text_and_missing_inline_text(self):
        doc = {"content": [
            {"type": "text", "text": "top-level"},
            {"type": "paragraph", "content": [{"type": "hardBreak"}, {"type": "text", "text": "x"}]},
            {"type": "rule"},
        ]}

        assert extract_text_from_adf(doc) == "top-level\nx\n"

    def test_document_without_content_list_is_dumped(self):
        doc = {"type": "doc", "content": "not a list"}

        assert extract_text_from_adf(doc) == json.dumps(doc)

    def test_malformed_nodes_are_dumped(self):
        doc = {"type": "doc", "content": ["just a string"]}

        assert extract_text_from_adf(doc) == json.dumps(doc)

    def test_non_dict_value_is_dumped(self):
        assert extract_text_from_adf(["a", "b"]) == '["a", "b"]'
