# src/req_integrity/features/console_reporter.py
import textwrap
from typing import Optional

from req_integrity.utils.adf_text import extract_text_from_adf
from req_integrity.utils.issue_models import RelationshipRecord

ROOT_FETCH_ERROR = "Failed to load issue data. Please check the issue key and your connection and try again."


class ConsoleReporter:
    """
    Text output of a resolved issue and its integrity analysis.
    Empty sections are shown as "None"; only a missing root issue is an error.
    """

    def __init__(self, width: int = 80):
        self.width = width

    def _wrap(self, text: str, indent: str = "  ") -> str:
        lines = []
        for paragraph in text.splitlines() or [""]:
            lines.append(textwrap.fill(paragraph, width=self.width, initial_indent=indent,
                                       subsequent_indent=indent) or indent.rstrip())
        return "\n".join(lines)

    def render_relationships(self, issue_key: str, record: RelationshipRecord) -> str:
        if not record.root_found:
            return f"ERROR: {ROOT_FETCH_ERROR}"

        lines = [
            "=" * self.width,
            " Requirement Integrity Analysis",
            "=" * self.width,
            f"\nAnalyzing Issue: {issue_key}",
            "\n--- Summary ---",
            self._wrap(record.summary or ""),
        ]
        description = extract_text_from_adf(record.description).strip()
        if description:
            lines += ["\n--- Description ---", self._wrap(description)]
        if record.parent:
            lines += ["\n--- Parent Issue ---", f"  {record.parent}"]

        if record.children_details:
            lines.append("\n--- Child Issues ---")
            for child in record.children_details:
                type_str = f" [{child.issue_type}]" if child.issue_type else ""
                lines.append(f"  - {child.key:<12}{type_str} {child.summary}".rstrip())
        else:
            lines.append("\n--- Child Issues: None ---")
        return "\n".join(lines)

    def render_analysis(self, analysis: dict) -> str:
        if "error" in analysis:
            return f"\n--- Analysis ---\nERROR: {analysis['error']}"

        lines = ["\n--- Analysis ---", self._wrap(analysis.get("content") or "")]
        missing = analysis.get("missingIssues") or []
        lines.append(f"\n--- Proposed Missing Issues: {len(missing) if missing else 'None'} ---")
        for issue in missing:
            lines.append(f"  - {issue['proposedSummary']}")
            if issue.get("rationale"):
                lines.append(self._wrap(issue["rationale"], indent="      > "))
        return "\n".join(lines)

    def report(self, issue_key: str, record: RelationshipRecord, analysis: Optional[dict] = None):
        """Gibt Beziehungen und optional die Analyse auf der Konsole aus."""
        print(self.render_relationships(issue_key, record))
        if analysis is not None and record.root_found:
            print(self.render_analysis(analysis))
