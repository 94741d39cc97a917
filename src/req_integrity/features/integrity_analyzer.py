# src/req_integrity/features/integrity_analyzer.py
from typing import Iterable, List, Optional

from req_integrity.features.analysis_request_builder import build_analysis_prompt
from req_integrity.utils.azure_ai_client import AzureAIClient
from req_integrity.utils.config import LLM_MODEL_INTEGRITY, LLM_MAX_OUTPUT_TOKENS, INTEGRITY_PROMPT_FILE
from req_integrity.utils.json_parser import parse_llm_json
from req_integrity.utils.logger_config import logger
from req_integrity.utils.prompt_loader import load_prompt_template
from req_integrity.utils.token_usage_class import TokenUsage

NO_CONTENT = "No analysis content was returned."


def extract_output_text(output) -> str:
    """
    Returns the first non-empty text block of a list of output items.

    Each item may carry a list of content parts; the texts of one item's parts
    are joined. Items without text (e.g. reasoning items) are skipped.
    """
    for item in output or []:
        content = item.get("content") if isinstance(item, dict) else None
        if not isinstance(content, list):
            continue
        text = "".join(part.get("text") or "" for part in content if isinstance(part, dict))
        if text.strip():
            return text
    return NO_CONTENT


def extract_missing_issues(content: str) -> List[dict]:
    """Reads the trailing {"missingIssues": [...]} block of the model answer, if any."""
    missing = parse_llm_json(content).get("missingIssues") or []
    if not isinstance(missing, list):
        return []
    return [
        {"proposedSummary": m["proposedSummary"], "rationale": m.get("rationale") or ""}
        for m in missing
        if isinstance(m, dict) and m.get("proposedSummary")
    ]


class IntegrityAnalyzer:
    """
    Asks an LLM whether the child issues cover the scope of their parent.

    analyze() returns {"content": ..., "missingIssues": [...]} on success and
    {"error": ...} when the service call fails; it never raises.
    """

    def __init__(self, ai_client: AzureAIClient, model_name: str = LLM_MODEL_INTEGRITY,
                 token_tracker: Optional[TokenUsage] = None, max_tokens: int = LLM_MAX_OUTPUT_TOKENS):
        self.ai_client = ai_client
        self.ai_client.system_prompt = load_prompt_template(INTEGRITY_PROMPT_FILE, "system_prompt")
        self.prompt_template = load_prompt_template(INTEGRITY_PROMPT_FILE, "user_prompt_template")
        self.model_name = model_name
        self.token_tracker = token_tracker
        self.max_tokens = max_tokens

    def analyze(self, summary: str, description, children: Iterable, issue_key: Optional[str] = None) -> dict:
        children = list(children)
        logger.info(f"Starting integrity analysis for {issue_key or 'issue'} with {len(children)} children ({self.model_name}).")
        try:
            prompt = build_analysis_prompt(summary, description, children, template=self.prompt_template)
            response = self.ai_client.respond(self.model_name, prompt, max_tokens=self.max_tokens)
        except Exception as e:
            logger.error(f"Integrity analysis failed: {e}")
            return {"error": str(e) or e.__class__.__name__}

        content = extract_output_text(response.get("output"))
        self._log_token_usage(response.get("usage") or {}, issue_key)
        return {"content": content, "missingIssues": extract_missing_issues(content)}

    def _log_token_usage(self, usage: dict, issue_key: Optional[str]):
        if not self.token_tracker:
            return
        try:
            self.token_tracker.log_usage(
                model=self.model_name,
                input_tokens=usage.get("input_tokens", 0),
                output_tokens=usage.get("output_tokens", 0),
                task_name="integrity_analysis",
                entity_id=issue_key,
            )
        except Exception as e:
            logger.warning(f"Token usage could not be logged: {e}")
