import os
import yaml
from req_integrity.utils.logger_config import logger

from req_integrity.utils.config import PROMPTS_DIR

def load_prompt_template(filename: str, key: str, prompts_dir: str = PROMPTS_DIR) -> str:
    """
    Lädt eine Prompt-Vorlage aus einer YAML-Datei im PROMPTS_DIR.

    Args:
        filename (str): Der Name der YAML-Datei (z.B. 'integrity_prompt.yaml').
        key (str): Der Schlüssel innerhalb der YAML-Datei, dessen Wert geladen werden soll.
        prompts_dir (str): Verzeichnis der Prompt-Dateien.

    Returns:
        str: Die geladene Prompt-Vorlage als String.
    """
    file_path = os.path.join(prompts_dir, filename)
    try:
        with open(file_path, 'r', encoding='utf-8') as file:
            prompts = yaml.safe_load(file)
            return prompts[key]
    except FileNotFoundError:
        logger.error(f"Prompt-Datei nicht gefunden: {file_path}")
        raise
    except KeyError:
        logger.error(f"Schlüssel '{key}' nicht in der Prompt-Datei '{filename}' gefunden.")
        raise
