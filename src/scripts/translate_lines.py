#!/usr/bin/env python3

"""
translate_lines.py
Purpose:
  Translate a single-level YAML localization file (pt-br.yml) line by line
  into one or more target languages:
  - passthrough of lines without key/value structure
  - batches of 5 concurrent translations, 2s pause between batches
  - retry + exponential backoff, original text kept after the last failure
  - partial save every 500 lines, final save at the end

Usage:
  python -m scripts.translate_lines en es
  translate-lines en es

Outputs:
  <lang>.yml                      one file per target language
  logs/erro-traducao-<lang>.log   one record per failed attempt

Env:
  TRANSLATE_CONFIG      alternative pipeline.yaml
  TRANSLATE_TRACE_PATH  JSONL trace of translation calls
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from lib.line_parser import EmptyEntry, Entry, classify_line, format_empty_entry
from scripts.async_adapter import AsyncFileIO, AsyncTranslateClient
from scripts.batch_scheduler import BatchScheduler, TranslationJob
from scripts.checkpoint_writer import CheckpointWriter, OutputBuffer
from scripts.progress_reporter import ProgressReporter
from scripts.runtime_adapter import _trace, load_pipeline_config
from scripts.translate_retry import Sleep, TranslationRetrier


class DriverState(Enum):
    READING = "reading"
    BUFFERING_BATCH = "buffering_batch"
    DRAINING = "draining"
    DONE = "done"


@dataclass
class LanguageSummary:
    """Counters of one finished language pass."""
    lang: str
    total_lines: int = 0
    passthrough: int = 0
    empty_entries: int = 0
    translated: int = 0
    fallbacks: int = 0
    checkpoints: int = 0
    output_path: str = ""


class LanguageDriver:
    """One full pass of the source file for a single target language."""

    def __init__(
        self,
        target_lang: str,
        translator: Any,
        config: Dict[str, Any],
        sleep: Sleep = asyncio.sleep,
    ):
        self.target_lang = target_lang
        self.config = config
        self.state = DriverState.READING

        self.reporter = ProgressReporter(target_lang, config.get("progress_dir"))
        self.retrier = TranslationRetrier(
            translator,
            source_lang=config["source_lang"],
            log_dir=config["log_dir"],
            max_attempts=config["max_attempts"],
            initial_backoff_ms=config["initial_backoff_ms"],
            reporter=self.reporter,
            sleep=sleep,
        )
        self.scheduler = BatchScheduler(
            self.retrier,
            batch_size=config["batch_size"],
            pacing_ms=config["pacing_ms"],
            reporter=self.reporter,
            sleep=sleep,
        )
        self.writer = CheckpointWriter(
            output_dir=config["output_dir"],
            output_ext=config["output_ext"],
            checkpoint_every=config["checkpoint_every"],
        )
        self.buffer = OutputBuffer()

    async def run(self) -> LanguageSummary:
        summary = LanguageSummary(lang=self.target_lang)
        progress_every = self.config["progress_every"]

        self.reporter.start({"input_file": self.config["input_file"]})

        async for line in AsyncFileIO.iter_lines_async(self.config["input_file"]):
            self.state = DriverState.READING
            parsed = classify_line(line)

            if isinstance(parsed, Entry):
                index = self.buffer.reserve()
                job = TranslationJob(index, parsed.key, parsed.value, self.target_lang)
                if self.scheduler.enqueue(job):
                    self.state = DriverState.BUFFERING_BATCH
                    summary.translated += await self.scheduler.run_batch(self.buffer)
                    self.state = DriverState.READING
            elif isinstance(parsed, EmptyEntry):
                self.buffer.append(format_empty_entry(parsed.key))
                summary.empty_entries += 1
            else:
                self.buffer.append(parsed.line)
                summary.passthrough += 1

            summary.total_lines += 1
            if progress_every > 0 and summary.total_lines % progress_every == 0:
                self.reporter.lines_processed(summary.total_lines)
            if self.writer.is_due(summary.total_lines):
                path = await self.writer.flush(self.buffer, self.target_lang)
                self.reporter.checkpoint(summary.total_lines, str(path))

        if self.scheduler.pending_count:
            self.state = DriverState.DRAINING
            summary.translated += await self.scheduler.drain(self.buffer)

        path = await self.writer.flush(self.buffer, self.target_lang)
        self.state = DriverState.DONE

        summary.fallbacks = self.retrier.fallback_count
        summary.translated -= summary.fallbacks
        summary.checkpoints = self.writer.flush_count - 1
        summary.output_path = str(path)

        self.reporter.complete(asdict(summary))
        _trace({"type": "language_pass_complete", **asdict(summary)})
        return summary


async def translate_languages(
    languages: Sequence[str],
    config: Optional[Dict[str, Any]] = None,
    translator: Any = None,
    sleep: Sleep = asyncio.sleep,
) -> List[LanguageSummary]:
    """Run one LanguageDriver per language, strictly one after the other."""
    config = config or load_pipeline_config()

    if translator is not None:
        return [
            await LanguageDriver(lang, translator, config, sleep=sleep).run()
            for lang in languages
        ]

    async with AsyncTranslateClient(config=config) as client:
        return [
            await LanguageDriver(lang, client, config, sleep=sleep).run()
            for lang in languages
        ]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="translate-lines",
        description="Translate a key/value YAML localization file into target languages",
    )
    parser.add_argument("languages", nargs="*", help="Target language codes (e.g. en es)")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if not args.languages:
        print("❌ Informe pelo menos um idioma. Ex: translate-lines en", file=sys.stderr)
        return 1

    config = load_pipeline_config()
    if not Path(config["input_file"]).exists():
        print(f"❌ Arquivo de entrada não encontrado: {config['input_file']}", file=sys.stderr)
        return 1

    asyncio.run(translate_languages(args.languages, config))
    return 0


if __name__ == "__main__":
    sys.exit(main())
