# src/req_integrity/utils/adf_text.py
import json

from req_integrity.utils.logger_config import logger


def extract_text_from_adf(description) -> str:
    """
    Extracts plain text from an Atlassian Document Format (ADF) description.

    Plain strings are returned unchanged. For an ADF document the texts of the
    inline nodes of each top-level block are concatenated and the blocks are
    joined with newlines. Anything else is dumped as JSON.

    Args:
        description: ADF dict, plain string or None.

    Returns:
        str: The extracted text, '' for empty input.
    """
    if not description:
        return ""
    if isinstance(description, str):
        return description

    try:
        content = description.get("content") if isinstance(description, dict) else None
        if isinstance(content, list):
            blocks = []
            for block in content:
                inline = block.get("content")
                if isinstance(inline, list):
                    blocks.append("".join(item.get("text") or "" for item in inline))
                else:
                    blocks.append(block.get("text") or "")
            return "\n".join(blocks)
    except (AttributeError, TypeError) as e:
        logger.warning(f"Malformed ADF description, falling back to JSON dump: {e}")

    return json.dumps(description, ensure_ascii=False, default=str)
