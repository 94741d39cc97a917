# src/req_integrity/main_analyzer.py

import os
import re
import sys
import json
import argparse

from req_integrity.utils.jira_api_client import JiraApiClient
from req_integrity.utils.issue_store import JiraIssueStore, resolve_epic_link_field
from req_integrity.utils.azure_ai_client import AzureAIClient
from req_integrity.utils.token_usage_class import TokenUsage
from req_integrity.utils.logger_config import logger
from req_integrity.features.relationship_resolver import RelationshipResolver
from req_integrity.features.integrity_analyzer import IntegrityAnalyzer
from req_integrity.features.console_reporter import ConsoleReporter

from req_integrity.utils.config import (
    JIRA_BASE_URL,
    LLM_MODEL_INTEGRITY,
    TOKEN_LOG_FILE,
)

ISSUE_KEY_PATTERN = re.compile(r'[A-Z][A-Z0-9]*-\d+')


def get_issues_from_file(file_path):
    """
    Lädt Issue-Keys aus einer Textdatei (ein Key pro Zeile, weiterer Text wird ignoriert).
    """
    if not os.path.exists(file_path):
        logger.error(f"Die Datei {file_path} existiert nicht.")
        return []

    issues = []
    with open(file_path, 'r', encoding='utf-8') as file:
        for line in file:
            match = ISSUE_KEY_PATTERN.search(line)
            if match:
                issues.append(match.group(0))
    logger.info(f"{len(issues)} Issues in {file_path} gefunden.")
    return issues


def analyze_issue(issue, store, resolver, analyzer=None, reporter=None, as_json=False):
    """
    Resolves one issue, optionally runs the integrity analysis and prints the result.

    Returns:
        bool: False if the root issue could not be loaded.
    """
    try:
        issue_key = store.resolve_issue_key(issue)
    except Exception as e:
        logger.error(f"Could not determine issue key for '{issue}': {e}")
        return False

    record = resolver.resolve(issue_key)
    analysis = None
    if analyzer is not None and record.root_found:
        analysis = analyzer.analyze(record.summary, record.description, record.children_details, issue_key=issue_key)

    if as_json:
        output = {"issueKey": issue_key, "relationships": record.to_dict()}
        if analysis is not None:
            output["analysis"] = analysis
        print(json.dumps(output, indent=2, ensure_ascii=False, default=str))
    else:
        (reporter or ConsoleReporter()).report(issue_key, record, analysis)
    return record.root_found


def main(argv=None):
    """
    Hauptfunktion: Beziehungen auflösen, Analyse ausführen, Ergebnis ausgeben.
    """
    parser = argparse.ArgumentParser(description='Requirement integrity analysis for Jira issues')
    parser.add_argument('issue', nargs='?', default=None, help='Issue key, browse URL or numeric issue id')
    parser.add_argument('--file', type=str, default=None, help='Text file with one issue key per line')
    parser.add_argument('--skip-analysis', action='store_true', help='Only resolve relationships, no LLM call')
    parser.add_argument('--json', action='store_true', help='Print the result as JSON')
    parser.add_argument('--model', type=str, default=LLM_MODEL_INTEGRITY, help='LLM model for the analysis')
    parser.add_argument('--base-url', type=str, default=JIRA_BASE_URL, help='Jira base URL')
    parser.add_argument('--token-report', action='store_true', help='Print the token usage summary and exit')

    args = parser.parse_args(argv)

    token_tracker = TokenUsage(log_file_path=TOKEN_LOG_FILE)
    if args.token_report:
        summary = token_tracker.get_summary()
        print("No token usage logged yet." if summary.empty else summary.to_string())
        return 0

    issues = [args.issue] if args.issue else (get_issues_from_file(args.file) if args.file else [])
    if not issues:
        parser.error("Either an issue or --file with issue keys is required.")

    try:
        client = JiraApiClient(base_url=args.base_url)
    except RuntimeError as e:
        logger.error(str(e))
        return 2

    store = JiraIssueStore(client)
    resolver = RelationshipResolver(store, epic_link_field=resolve_epic_link_field(client))
    analyzer = None
    if not args.skip_analysis:
        analyzer = IntegrityAnalyzer(AzureAIClient(), model_name=args.model, token_tracker=token_tracker)

    reporter = ConsoleReporter()
    failures = 0
    for issue in issues:
        if not analyze_issue(issue, store, resolver, analyzer, reporter, as_json=args.json):
            failures += 1

    logger.info(f"Done. {len(issues) - failures}/{len(issues)} issues analysed.")
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
