# src/req_integrity/utils/issue_store.py
from typing import List, Optional, Protocol

from req_integrity.utils.config import JIRA_CF_EPIC_LINK
from req_integrity.utils.issue_models import IssueRef, issue_ref_from_payload
from req_integrity.utils.jira_api_client import JiraApiClient
from req_integrity.utils.logger_config import logger


class IssueStore(Protocol):
    """
    Read access to issues as needed by the RelationshipResolver.

    Both calls raise on failure. An issue without the requested fields yields {},
    a query without hits yields [].
    """

    def get_issue(self, key: str, fields: str) -> dict:
        ...

    def search(self, jql: str, fields: str) -> List[IssueRef]:
        ...


class JiraIssueStore:
    """IssueStore backed by the Jira REST API."""

    def __init__(self, client: JiraApiClient):
        self.client = client

    def get_issue(self, key: str, fields: str) -> dict:
        return self.client.get_issue(key, fields=fields).get("fields") or {}

    def search(self, jql: str, fields: str) -> List[IssueRef]:
        return [issue_ref_from_payload(issue) for issue in self.client.search(jql, fields=fields)]

    def get_issue_key(self, issue_id: str) -> str:
        """Maps a numeric issue id (as passed by Jira UI modules) to its key."""
        return self.client.get_issue(issue_id, fields="summary")["key"]

    def resolve_issue_key(self, issue: str) -> str:
        """Accepts "PROJ-123", a .../browse/PROJ-123 URL or a numeric issue id."""
        issue = issue.strip()
        if "/browse/" in issue:
            issue = issue.split("/browse/")[1].split("?")[0].strip("/")
        if issue.isdigit():
            return self.get_issue_key(issue)
        return issue.upper()


def resolve_epic_link_field(client: JiraApiClient, configured: Optional[str] = JIRA_CF_EPIC_LINK) -> Optional[str]:
    """
    Custom field for the epic fallback query: the configured one, otherwise
    the "Epic Link" field as reported by /field. None if neither is available.
    """
    if configured:
        return configured
    try:
        field_id = client.epic_link_field_id()
    except Exception as e:
        logger.warning(f"Could not look up the Epic Link field: {e}")
        return None
    if field_id:
        logger.info(f"Using Epic Link field {field_id} for the epic fallback query.")
    return field_id
