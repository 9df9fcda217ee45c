#!/usr/bin/env python3

"""
translate_retry.py

Wraps a single translation call with bounded exponential backoff:
- every failed attempt is appended to logs/erro-traducao-<lang>.log
- after the last attempt the original text is returned, never an error
"""

from __future__ import annotations

import asyncio
import os
import re
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

from scripts.async_adapter import AsyncFileIO
from scripts.progress_reporter import ProgressReporter
from scripts.runtime_adapter import DEFAULT_PIPELINE_CONFIG

NEWLINE_RE = re.compile(r"\r?\n")

Sleep = Callable[[float], Awaitable[Any]]


def error_log_path(log_dir: str, target_lang: str) -> str:
    return os.path.join(log_dir, f"erro-traducao-{target_lang}.log")


def format_error_record(text: str, message: str, when: Optional[datetime] = None) -> str:
    """Render one failure record, e.g. `[2024-05-01T12:00:00.000Z] "Olá" - Erro: boom`."""
    when = when or datetime.now(timezone.utc)
    stamp = when.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    # one record per line, whatever the error text carries
    message = NEWLINE_RE.sub(" ", str(message))
    return f'[{stamp}] "{text}" - Erro: {message}'


class TranslationRetrier:
    """
    Retry wrapper around a translator exposing
    `async translate(text, source_lang, target_lang)`.

    The retry state (attempts remaining, backoff) lives only inside one
    `translate` call, so concurrent jobs never share it.
    """

    def __init__(
        self,
        translator: Any,
        source_lang: str = DEFAULT_PIPELINE_CONFIG["source_lang"],
        log_dir: str = DEFAULT_PIPELINE_CONFIG["log_dir"],
        max_attempts: int = DEFAULT_PIPELINE_CONFIG["max_attempts"],
        initial_backoff_ms: int = DEFAULT_PIPELINE_CONFIG["initial_backoff_ms"],
        reporter: Optional[ProgressReporter] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.translator = translator
        self.source_lang = source_lang
        self.log_dir = log_dir
        self.max_attempts = max_attempts
        self.initial_backoff_ms = initial_backoff_ms
        self.reporter = reporter
        self.sleep = sleep
        self.fallback_count = 0

    async def translate(
        self,
        text: str,
        target_lang: str,
        attempts_remaining: Optional[int] = None,
        backoff_ms: Optional[int] = None,
    ) -> str:
        """
        Translate `text`, retrying on failure.

        Args:
            text: Normalized source value
            target_lang: Target language code
            attempts_remaining: Calls still allowed, including this one
            backoff_ms: Delay before the next retry; doubles on every retry

        Returns:
            Translated text with newlines flattened, or `text` itself once
            every attempt failed
        """
        if attempts_remaining is None:
            attempts_remaining = self.max_attempts
        if backoff_ms is None:
            backoff_ms = self.initial_backoff_ms

        while True:
            try:
                result = await self.translator.translate(text, self.source_lang, target_lang)
                return NEWLINE_RE.sub(" ", result.text)
            except Exception as e:
                error = str(e)
                await self._log_failure(text, target_lang, error)

                attempts_remaining -= 1
                if attempts_remaining <= 0:
                    self.fallback_count += 1
                    if self.reporter:
                        self.reporter.fallback(text, error)
                    return text

                if self.reporter:
                    self.reporter.retry(text, error, backoff_ms, attempts_remaining)
                await self.sleep(backoff_ms / 1000)
                backoff_ms *= 2

    async def _log_failure(self, text: str, target_lang: str, error: str) -> None:
        await AsyncFileIO.append_line_async(
            error_log_path(self.log_dir, target_lang),
            format_error_record(text, error),
        )
