# src/req_integrity/utils/jira_api_client.py
import os
import requests

from req_integrity.utils.config import (
    JIRA_BASE_URL,
    JIRA_API_VERSION,
    JIRA_TIMEOUT,
    JIRA_SEARCH_MAX_RESULTS,
)


class JiraQueryError(requests.HTTPError):
    """Jira rejected a JQL query (HTTP 400), e.g. an unknown field or function."""


class JiraApiClient:
    """
    Thin wrapper around the Jira REST API using a Bearer token.
    Expects JIRA_API_TOKEN or JIRA_TOKEN to be set (can live in a .env file).

    Only read calls are offered; the client never changes Jira state.
    """
    def __init__(self, base_url=JIRA_BASE_URL, token=None, timeout=JIRA_TIMEOUT,
                 api_version=JIRA_API_VERSION, session=None):
        self.base_url = base_url.rstrip("/")
        self.api = f"{self.base_url}/rest/api/{api_version}"
        self.browse = f"{self.base_url}/browse"
        self.timeout = timeout

        token = token or os.getenv("JIRA_API_TOKEN") or os.getenv("JIRA_TOKEN")
        if not token:
            raise RuntimeError("No API token found. Set JIRA_API_TOKEN (or JIRA_TOKEN).")

        self.s = session or requests.Session()
        self.s.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/json"
        })

    def ping(self):
        r = self.s.get(f"{self.api}/myself", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def get_issue(self, key, fields=None, expand=None):
        params = {}
        if fields: params["fields"] = fields
        if expand: params["expand"] = expand
        r = self.s.get(f"{self.api}/issue/{key}", params=params, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def _search_page(self, jql, fields, start_at, max_results):
        """
        One page of a JQL search: try GET first (often allowed behind corp
        proxies), then fall back to POST.
        """
        params = {"jql": jql, "startAt": start_at, "maxResults": max_results}
        if fields:
            params["fields"] = fields

        # 1) Try GET
        r = self.s.get(f"{self.api}/search", params=params, timeout=self.timeout)
        if r.status_code == 200:
            return r.json()
        if r.status_code == 400:
            raise JiraQueryError(f"Jira rejected JQL '{jql}': {r.text}", response=r)

        # 2) Fallback: POST
        payload = {"jql": jql, "startAt": start_at, "maxResults": max_results}
        if fields:
            payload["fields"] = [f.strip() for f in fields.split(",")] if isinstance(fields, str) else fields
        r = self.s.post(f"{self.api}/search", json=payload, timeout=self.timeout)
        if r.status_code == 200:
            return r.json()
        if r.status_code == 400:
            raise JiraQueryError(f"Jira rejected JQL '{jql}': {r.text}", response=r)

        r.raise_for_status()
        return {}

    def search(self, jql, fields=None, max_results=JIRA_SEARCH_MAX_RESULTS):
        """
        JQL search over all result pages (startAt/total). The server may cap
        the page size below max_results.

        An empty hit list is returned as []. A rejected query raises
        JiraQueryError so callers can tell it apart from "no matches".
        """
        out = []
        start = 0
        while True:
            data = self._search_page(jql, fields, start, max_results)
            issues = data.get("issues") or []
            out.extend(issues)
            start += len(issues)
            if not issues or start >= data.get("total", 0):
                break
        return out

    def epic_link_field_id(self):
        """Find the custom field id of "Epic Link", e.g. "customfield_10008"."""
        r = self.s.get(f"{self.api}/field", timeout=self.timeout)
        r.raise_for_status()
        for f in r.json():
            name = (f.get("name") or "").lower()
            if name == "epic link":
                return f["id"]
        return None
