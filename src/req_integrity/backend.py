# backend.py
from functools import lru_cache
from typing import Any, List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from req_integrity.features.integrity_analyzer import IntegrityAnalyzer
from req_integrity.features.relationship_resolver import RelationshipResolver
from req_integrity.utils.azure_ai_client import AzureAIClient
from req_integrity.utils.config import LLM_MODEL_INTEGRITY, TOKEN_LOG_FILE
from req_integrity.utils.issue_store import JiraIssueStore, resolve_epic_link_field
from req_integrity.utils.jira_api_client import JiraApiClient
from req_integrity.utils.logger_config import logger
from req_integrity.utils.token_usage_class import TokenUsage

app = FastAPI(title="Requirement Integrity API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class RelationshipsRequest(BaseModel):
    issue: str  # "PROJ-123", browse URL or numeric issue id


class RelationshipsResponse(BaseModel):
    issueKey: str
    relationships: dict


class ChildIssue(BaseModel):
    key: str
    summary: str = ""


class AnalyzeRequest(BaseModel):
    mainSummary: str = ""
    mainDescription: Any = ""
    childIssues: List[ChildIssue] = Field(default_factory=list)
    issueKey: Optional[str] = None


# ---- dependencies (overridable in tests) ----
@lru_cache
def get_issue_store() -> JiraIssueStore:
    try:
        return JiraIssueStore(JiraApiClient())
    except RuntimeError as e:
        logger.error(str(e))
        raise HTTPException(status_code=503, detail=str(e))


@lru_cache
def _cached_epic_link_field(client) -> str:
    field = resolve_epic_link_field(client)
    if field is None:
        # nicht cachen, beim nächsten Request erneut nachschlagen
        raise LookupError("Epic Link field id unknown")
    return field


def get_epic_link_field(client) -> Optional[str]:
    try:
        return _cached_epic_link_field(client)
    except LookupError:
        return None


def get_resolver(store=Depends(get_issue_store)) -> RelationshipResolver:
    return RelationshipResolver(store, epic_link_field=get_epic_link_field(store.client))


@lru_cache
def get_analyzer() -> IntegrityAnalyzer:
    return IntegrityAnalyzer(AzureAIClient(), model_name=LLM_MODEL_INTEGRITY,
                             token_tracker=TokenUsage(log_file_path=TOKEN_LOG_FILE))


@app.get("/api/issues/{issue_id}/key")
def get_issue_key(issue_id: str, store=Depends(get_issue_store)):
    try:
        return {"key": store.get_issue_key(issue_id)}
    except Exception as e:
        logger.error(f"Could not map issue id {issue_id} to a key: {e}")
        raise HTTPException(status_code=404, detail=f"Issue {issue_id} not found.")


@app.post("/api/relationships", response_model=RelationshipsResponse)
def get_relationships(req: RelationshipsRequest, store=Depends(get_issue_store),
                      resolver: RelationshipResolver = Depends(get_resolver)):
    try:
        issue_key = store.resolve_issue_key(req.issue)
    except Exception as e:
        logger.error(f"Could not determine issue key for '{req.issue}': {e}")
        raise HTTPException(status_code=404, detail=f"Issue {req.issue} not found.")

    record = resolver.resolve(issue_key)
    return RelationshipsResponse(issueKey=issue_key, relationships=record.to_dict())


@app.post("/api/analyze")
def analyze_requirements(req: AnalyzeRequest, analyzer: IntegrityAnalyzer = Depends(get_analyzer)):
    children = [c.model_dump() for c in req.childIssues]
    return analyzer.analyze(req.mainSummary, req.mainDescription, children, issue_key=req.issueKey)
