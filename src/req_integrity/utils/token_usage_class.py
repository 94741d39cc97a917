"""
Tracking of token consumption for the LLM calls of the integrity analysis.

Every call is appended as one JSON line (timestamp, model, token counts,
cost, task, issue key) to a JSONL file. get_summary() aggregates the log per
model with pandas.
"""

import json
import datetime
from pathlib import Path
from typing import Dict, Optional

import pandas as pd

from req_integrity.utils.config import TOKEN_LOG_FILE
from req_integrity.utils.logger_config import logger


class TokenUsage:
    """
    Logs and summarises token usage of LLM API calls.
    """

    # Preisstruktur für verschiedene Modelle (in USD pro 1000 Tokens)
    MODEL_PRICING = {
        "gpt-4.1": {"input": 0.002, "output": 0.008},
        "gpt-4.1-mini": {"input": 0.0004, "output": 0.0016},
        "gpt-4o": {"input": 0.0025, "output": 0.01},
        "o3-mini": {"input": 0.0011, "output": 0.0044},
        "o4-mini": {"input": 0.0011, "output": 0.0044},
        "DeepSeek-V3-0324": {"input": 0.00114, "output": 0.00456},
        "Llama-3.3-70B-Instruct": {"input": 0.00071, "output": 0.00071},
    }

    def __init__(self, log_file_path: str = TOKEN_LOG_FILE):
        self.log_file_path = Path(log_file_path)
        self.log_file_path.parent.mkdir(exist_ok=True, parents=True)

    def log_usage(self,
                  model: str,
                  input_tokens: int,
                  output_tokens: int,
                  task_name: Optional[str] = None,
                  entity_id: Optional[str] = None) -> Dict:
        """
        Protokolliert einen Token-Verbrauch in der Log-Datei.

        Args:
            model: Name des verwendeten LLM-Modells
            input_tokens: Anzahl der Input-Tokens
            output_tokens: Anzahl der Output-Tokens
            task_name: Optionaler Name der Aufgabe (z.B. "integrity_analysis")
            entity_id: Optionale ID der Entität (z.B. "PROJ-123")

        Returns:
            Das geloggte Nutzungsobjekt mit Zeitstempel
        """
        usage_entry = {
            "timestamp": datetime.datetime.now().isoformat(),
            "model": model,
            "input_tokens": input_tokens,
            "output_tokens": output_tokens,
            "total_tokens": input_tokens + output_tokens,
            "cost_usd": self._calculate_cost(model, input_tokens, output_tokens),
        }
        if task_name:
            usage_entry["task_name"] = task_name
        if entity_id:
            usage_entry["entity_id"] = entity_id

        with open(self.log_file_path, "a", encoding="utf-8") as log_file:
            log_file.write(json.dumps(usage_entry) + "\n")

        return usage_entry

    def _calculate_cost(self, model: str, input_tokens: int, output_tokens: int) -> float:
        pricing = self.MODEL_PRICING.get(model)
        if not pricing:
            logger.warning(f"Keine Preisinformation für Modell '{model}' gefunden")
            return 0.0
        input_cost = (input_tokens / 1000) * pricing["input"]
        output_cost = (output_tokens / 1000) * pricing["output"]
        return round(input_cost + output_cost, 6)

    def get_usage_data(self) -> pd.DataFrame:
        """Lädt alle Token-Nutzungsdaten aus der Log-Datei in ein DataFrame."""
        if not self.log_file_path.exists():
            return pd.DataFrame()
        entries = []
        with open(self.log_file_path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(json.loads(line))
                except json.JSONDecodeError:
                    logger.warning(f"Ungültige Zeile in {self.log_file_path} übersprungen")
        return pd.DataFrame(entries)

    def get_summary(self) -> pd.DataFrame:
        """
        Summiert Tokens, Kosten und Aufrufe pro Modell.

        Returns:
            DataFrame indexed by model with the columns calls, input_tokens,
            output_tokens, total_tokens and cost_usd. Empty if nothing was logged.
        """
        df = self.get_usage_data()
        if df.empty:
            return df
        summary = df.groupby("model").agg(
            calls=("timestamp", "count"),
            input_tokens=("input_tokens", "sum"),
            output_tokens=("output_tokens", "sum"),
            total_tokens=("total_tokens", "sum"),
            cost_usd=("cost_usd", "sum"),
        )
        return summary.sort_values("cost_usd", ascending=False)
