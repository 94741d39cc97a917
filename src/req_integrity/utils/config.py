import os
from dotenv import load_dotenv, find_dotenv

# Lade Umgebungsvariablen aus der .env-Datei im Projekt-Root
load_dotenv(find_dotenv(usecwd=True))

# Base paths
PACKAGE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
PROMPTS_DIR = os.path.join(PACKAGE_DIR, 'prompts')
LOGS_DIR = os.getenv("REQ_INTEGRITY_LOGS_DIR", os.path.join(os.getcwd(), 'logs'))

TOKEN_LOG_FILE = os.path.join(LOGS_DIR, "token_usage.jsonl")

# --- Jira REST API ---
JIRA_BASE_URL = os.getenv("JIRA_BASE_URL", "https://your-domain.atlassian.net").rstrip("/")
JIRA_API_VERSION = os.getenv("JIRA_API_VERSION", "2")
JIRA_TIMEOUT = float(os.getenv("JIRA_TIMEOUT", "60"))
JIRA_SEARCH_MAX_RESULTS = int(os.getenv("JIRA_SEARCH_MAX_RESULTS", "500"))

# Name des Issue-Typs, für den zusätzlich nach Epic-Kindern gesucht wird
JIRA_EPIC_ISSUE_TYPE = os.getenv("JIRA_EPIC_ISSUE_TYPE", "Epic")

# Custom field for the epic fallback query, e.g. "customfield_10008".
# Differs per Jira instance; when unset the field id is looked up via /field.
JIRA_CF_EPIC_LINK = os.getenv("JIRA_CF_EPIC_LINK")

# --- Child detection on issue links ---
# A link counts as parent -> child when its type name equals
# CHILD_LINK_TYPE_NAME, contains CHILD_LINK_TYPE_FRAGMENT (case-insensitive)
# or its outward verb is one of CHILD_LINK_OUTWARD_VERBS.
CHILD_LINK_TYPE_NAME = "Parent/Child"
CHILD_LINK_TYPE_FRAGMENT = "subtask"
CHILD_LINK_OUTWARD_VERBS = [
    "is parent of",
    "contains",
    "has",
]

# Parallele Abrufe beim Nachladen der Kind-Details
BACKFILL_MAX_WORKERS = int(os.getenv("BACKFILL_MAX_WORKERS", "4"))

# LLM Models
LLM_MODEL_INTEGRITY = os.getenv("LLM_MODEL_INTEGRITY", "gpt-4.1-mini")
LLM_MAX_OUTPUT_TOKENS = int(os.getenv("LLM_MAX_OUTPUT_TOKENS", "2048"))

INTEGRITY_PROMPT_FILE = "integrity_prompt.yaml"
