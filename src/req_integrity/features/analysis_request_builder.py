# src/req_integrity/features/analysis_request_builder.py
from typing import Iterable, Optional, Union

from req_integrity.utils.adf_text import extract_text_from_adf
from req_integrity.utils.config import INTEGRITY_PROMPT_FILE
from req_integrity.utils.issue_models import IssueRef
from req_integrity.utils.prompt_loader import load_prompt_template

NO_DESCRIPTION = "(no description)"
NO_CHILDREN = "(no child issues)"


def _child_line(child: Union[IssueRef, dict]) -> str:
    if isinstance(child, IssueRef):
        key, summary, issue_type = child.key, child.summary, child.issue_type
    else:
        key = child.get("key", "")
        summary = child.get("summary") or ""
        issue_type = child.get("issueType") or child.get("issue_type")
    line = f"- {key}"
    if issue_type:
        line += f" [{issue_type}]"
    return f"{line}: {summary}" if summary else line


def build_analysis_prompt(summary: str, description, children: Iterable[Union[IssueRef, dict]],
                          template: Optional[str] = None) -> str:
    """
    Formats the gap-analysis prompt for a parent issue and its children.

    The description may be ADF or plain text. Output depends only on the inputs
    and the template, children keep their given order.
    """
    if template is None:
        template = load_prompt_template(INTEGRITY_PROMPT_FILE, "user_prompt_template")
    children = list(children)
    return template.format(
        summary=summary or "",
        description=extract_text_from_adf(description).strip() or NO_DESCRIPTION,
        child_count=len(children),
        children="\n".join(_child_line(c) for c in children) or NO_CHILDREN,
    )
