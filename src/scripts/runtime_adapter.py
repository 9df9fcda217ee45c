#!/usr/bin/env python3

"""
runtime_adapter.py

Shared runtime pieces for the line translation pipeline:
- Pipeline configuration (defaults + optional YAML overlay)
- Standardized translation errors with retry hints
- Trace logging of translation calls (JSONL)

Env:
  TRANSLATE_CONFIG      optional path to a pipeline.yaml
  TRANSLATE_TRACE_PATH  optional JSONL trace path (tracing disabled if unset)
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


# ============================================================================
# Configuration
# ============================================================================

DEFAULT_PIPELINE_CONFIG: Dict[str, Any] = {
    "input_file": "pt-br.yml",
    "output_dir": ".",
    "output_ext": "yml",
    "source_lang": "pt",
    "log_dir": "logs",
    "progress_dir": "reports",
    "batch_size": 5,
    "pacing_ms": 2000,
    "checkpoint_every": 500,
    "progress_every": 100,
    "max_attempts": 5,
    "initial_backoff_ms": 1000,
    "request_timeout_s": 30,
    "service_urls": ["translate.googleapis.com"],
}


def load_pipeline_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load pipeline configuration from pipeline.yaml or use defaults."""
    if config_path is None:
        config_path = os.getenv("TRANSLATE_CONFIG", "").strip() or None
    if config_path is None:
        config_path = Path(__file__).parent.parent / "config" / "pipeline.yaml"

    config = DEFAULT_PIPELINE_CONFIG.copy()

    if Path(config_path).exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}
            section = yaml_config.get("translate_lines") if isinstance(yaml_config, dict) else None
            if isinstance(section, dict):
                config.update(section)
        except (OSError, yaml.YAMLError) as e:
            _trace({
                "type": "pipeline_config_load_error",
                "error": str(e),
                "config_path": str(config_path),
            })

    return config


# ============================================================================
# Results and errors
# ============================================================================

@dataclass
class TranslateResult:
    """Result of a successful translation call."""
    text: str
    latency_ms: int = 0
    raw: Optional[Any] = None
    source_lang: Optional[str] = None
    target_lang: Optional[str] = None


class TranslateError(Exception):
    """
    Standardized translation error.

    Kinds:
      - timeout: Request timeout
      - network: Network error
      - upstream: Unexpected response status from the service
      - parse: Response parse error
      - language: Unknown source or target language code

    The retrier treats every kind alike; the kind only labels the failure.
    """
    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind


def _trace(event: Dict[str, Any]) -> None:
    """Append trace event to JSONL file."""
    path = os.getenv("TRANSLATE_TRACE_PATH", "").strip()
    if not path:
        return
    try:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        event["timestamp"] = datetime.now().isoformat()
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(event, ensure_ascii=False) + "\n")
    except Exception:
        pass  # Tracing should never break the main flow
