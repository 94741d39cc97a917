# src/req_integrity/utils/issue_models.py
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class IssueRef(BaseModel):
    """Lightweight view of a Jira issue. An empty summary means "not known yet"."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    key: str
    summary: str = ""
    issue_type: Optional[str] = Field(default=None, alias="issueType")
    description: Optional[Any] = None


class RelationshipRecord(BaseModel):
    """Parent/child view of one issue as produced by the RelationshipResolver."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    parent: Optional[str] = None
    children: Tuple[str, ...] = ()
    children_details: Tuple[IssueRef, ...] = Field(default=(), alias="childrenDetails")
    summary: str = ""
    description: Any = ""
    root_found: bool = Field(default=True, alias="rootFound")

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


def issue_ref_from_payload(payload: dict) -> IssueRef:
    """
    Builds an IssueRef from a raw Jira issue payload ({"key": ..., "fields": {...}}).
    Works for search hits as well as for the issues embedded in subtasks and links.
    """
    f = payload.get("fields") or {}
    issuetype = f.get("issuetype") or {}
    return IssueRef(
        key=payload["key"],
        summary=f.get("summary") or "",
        issue_type=issuetype.get("name"),
    )
