import json
import re
from req_integrity.utils.logger_config import logger

class LLMJsonParser:
    """Pulls a JSON object out of free-form LLM output."""

    def __init__(self):
        self.json_pattern = re.compile(r'```json\s*(.*?)\s*```', re.DOTALL)
        self.curly_pattern = re.compile(r'(\{.*\})', re.DOTALL)

    def extract_and_parse_json(self, text):
        """
        Extracts and parses JSON from LLM output text.

        Args:
            text (str): The text output from an LLM that might contain JSON

        Returns:
            dict: The parsed JSON data or empty dict if parsing fails
        """
        if not text:
            return {}

        # Method 1: Try direct parsing (in case it's already valid JSON)
        try:
            parsed = json.loads(text)
            if isinstance(parsed, dict):
                return parsed
        except json.JSONDecodeError:
            pass

        # Method 2: Look for JSON code blocks (the last one wins, prose may quote examples)
        blocks = self.json_pattern.findall(text)
        for json_text in reversed(blocks):
            try:
                parsed = json.loads(json_text)
                if isinstance(parsed, dict):
                    return parsed
            except json.JSONDecodeError:
                logger.info("JSON code block could not be parsed, trying next method")

        # Method 3: Look for text between curly braces
        curly_match = self.curly_pattern.search(text)
        if curly_match:
            try:
                return json.loads(curly_match.group(1))
            except json.JSONDecodeError:
                logger.info("Text between curly braces is not valid JSON, trying to repair it")
            return self._clean_and_fix_json(curly_match.group(1))

        return {}

    def _clean_and_fix_json(self, json_text):
        """
        Attempts to repair common LLM JSON mistakes.

        Args:
            json_text (str): Text between the outermost curly braces

        Returns:
            dict: Parsed JSON or empty dict if all attempts fail
        """
        # 1. Fix unquoted keys
        json_text = re.sub(r'([{,])\s*([a-zA-Z0-9_]+)\s*:', r'\1"\2":', json_text)
        # 2. Fix single quoted strings
        json_text = re.sub(r"'([^']*)'", r'"\1"', json_text)
        # 3. Remove trailing commas
        json_text = re.sub(r',\s*([}\]])', r'\1', json_text)
        try:
            return json.loads(json_text)
        except json.JSONDecodeError:
            logger.error("JSON Text konnte mit keiner json_parser Methode fehlerfrei gelesen werden")
            return {}


def parse_llm_json(result_text):
    parser = LLMJsonParser()
    return parser.extract_and_parse_json(result_text)
