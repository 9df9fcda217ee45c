#!/usr/bin/env python3
"""
Progress Reporter - user-visible notices for one language pass

Two channels:
- Terminal: emoji-prefixed lines, flushed immediately (warnings and
  terminal failures go to stderr)
- Progress log: <progress_dir>/translate_<lang>_progress.jsonl (optional)
"""

import json
import os
import sys
from datetime import datetime
from typing import Any, Dict, Optional

# Keep notices visible when stdout is piped
if hasattr(sys.stdout, 'reconfigure'):
    sys.stdout.reconfigure(line_buffering=True)


class ProgressReporter:
    """Notices and JSONL progress events for a single target language."""

    def __init__(self, lang: str, progress_dir: Optional[str] = None):
        self.lang = lang
        self.progress_dir = progress_dir
        self.start_time = datetime.now()
        self.progress_path = None

        if progress_dir:
            os.makedirs(progress_dir, exist_ok=True)
            self.progress_path = os.path.join(progress_dir, f"translate_{lang}_progress.jsonl")

            # Events from an earlier run
            if os.path.exists(self.progress_path):
                os.remove(self.progress_path)

    def start(self, metadata: Dict[str, Any] = None):
        self._write_progress("step_start", dict(metadata or {}))
        self._print(f"🚀 {self.lang}: Iniciando tradução")

    def lines_processed(self, count: int):
        """Periodic progress notice (every N source lines)."""
        self._print(f"✔️ {self.lang}: {count} linhas processadas")

    def batch_complete(self, batch_num: int, batch_size: int):
        self._write_progress("batch_complete", {
            "batch_num": batch_num,
            "batch_size": batch_size,
        })

    def checkpoint(self, count: int, path: str):
        self._write_progress("checkpoint", {"lines": count, "path": path})
        self._print(f"💾 {self.lang}: Salvo parcial em {count} linhas")

    def retry(self, text: str, error: str, backoff_ms: int, attempts_remaining: int):
        self._write_progress("retry", {
            "text": text,
            "error": error,
            "backoff_ms": backoff_ms,
            "attempts_remaining": attempts_remaining,
        })
        self._print(
            f"⚠️ Erro ao traduzir \"{text}\": {error}. Tentando novamente em {backoff_ms}ms...",
            err=True,
        )

    def fallback(self, text: str, error: str):
        """Terminal failure: the original text is kept."""
        self._write_progress("fallback", {"text": text, "error": error})
        self._print(f"❌ Falha definitiva ao traduzir: \"{text}\". Erro: {error}", err=True)

    def complete(self, summary: Dict[str, Any]):
        elapsed = (datetime.now() - self.start_time).total_seconds()
        self._write_progress("step_complete", {**summary, "elapsed_seconds": elapsed})
        self._print(f"✅ {self.lang}: Tradução concluída e arquivo salvo.")

    def _write_progress(self, event: str, data: Dict[str, Any]):
        if not self.progress_path:
            return
        record = {
            "timestamp": datetime.now().isoformat(),
            "lang": self.lang,
            "event": event,
            **data
        }
        with open(self.progress_path, 'a', encoding='utf-8') as f:
            f.write(json.dumps(record, ensure_ascii=False) + '\n')

    def _print(self, msg: str, err: bool = False):
        stream = sys.stderr if err else sys.stdout
        print(msg, file=stream)
        stream.flush()
