#!/usr/bin/env python3

"""
batch_scheduler.py

Groups translation jobs into fixed-size batches. All jobs of a batch run
concurrently; results are written back by output index, so the output
order never depends on which translation finishes first. A pacing delay
follows every full batch to rate-limit the translation service.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import List, Optional

from lib.line_parser import format_entry
from scripts.checkpoint_writer import OutputBuffer
from scripts.progress_reporter import ProgressReporter
from scripts.runtime_adapter import DEFAULT_PIPELINE_CONFIG
from scripts.translate_retry import Sleep, TranslationRetrier


@dataclass(frozen=True)
class TranslationJob:
    """Pending work item tied to its output slot by index."""
    output_index: int
    key: str
    text: str
    target_lang: str


class BatchScheduler:
    """At most one batch in flight; the next starts after pacing."""

    def __init__(
        self,
        retrier: TranslationRetrier,
        batch_size: int = DEFAULT_PIPELINE_CONFIG["batch_size"],
        pacing_ms: int = DEFAULT_PIPELINE_CONFIG["pacing_ms"],
        reporter: Optional[ProgressReporter] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.retrier = retrier
        self.batch_size = batch_size
        self.pacing_ms = pacing_ms
        self.reporter = reporter
        self.sleep = sleep
        self.batches_run = 0
        self._pending: List[TranslationJob] = []

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def enqueue(self, job: TranslationJob) -> bool:
        """Queue a job; returns True once the batch is full."""
        self._pending.append(job)
        return len(self._pending) >= self.batch_size

    async def run_batch(self, buffer: OutputBuffer, pace: bool = True) -> int:
        """
        Resolve every queued job concurrently, then wait the pacing delay.

        Returns:
            Number of jobs resolved
        """
        jobs, self._pending = self._pending, []
        if not jobs:
            return 0

        results = await asyncio.gather(
            *(self.retrier.translate(job.text, job.target_lang) for job in jobs)
        )
        for job, translated in zip(jobs, results):
            buffer.resolve(job.output_index, format_entry(job.key, translated))

        self.batches_run += 1
        if self.reporter:
            self.reporter.batch_complete(self.batches_run, len(jobs))

        if pace and self.pacing_ms > 0:
            await self.sleep(self.pacing_ms / 1000)
        return len(jobs)

    async def drain(self, buffer: OutputBuffer) -> int:
        """Resolve a trailing partial batch; no pacing afterwards."""
        return await self.run_batch(buffer, pace=False)
