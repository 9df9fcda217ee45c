#!/usr/bin/env python3

"""
async_adapter.py - Async I/O for the line translation pipeline

This module provides the asynchronous building blocks used by the
language driver:
- AsyncTranslateClient: googletrans Translator wrapper with standardized errors
- AsyncFileIO: streaming line reader, whole-file writer and line appender

Every network, HTTP or parse failure surfaces as a TranslateError so callers
can decide about retries.
"""

from __future__ import annotations

import json
import os
import time
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Optional

import aiofiles
import httpx
from googletrans import Translator

from scripts.runtime_adapter import (
    DEFAULT_PIPELINE_CONFIG,
    TranslateError,
    TranslateResult,
    _trace,
)


# ============================================================================
# Async Translate Client
# ============================================================================

class AsyncTranslateClient:
    """
    Asynchronous Google Translate client built on googletrans.

    Usage:
        async with AsyncTranslateClient() as client:
            result = await client.translate("Olá Mundo", "pt", "en")
            print(result.text)
    """

    def __init__(
        self,
        service_urls: Optional[list] = None,
        timeout_s: Optional[int] = None,
        config: Optional[Dict[str, Any]] = None,
    ):
        self.config = config or DEFAULT_PIPELINE_CONFIG
        self.service_urls = list(service_urls or self.config.get("service_urls") or [])
        self.timeout_s = timeout_s or int(self.config.get("request_timeout_s", 30))
        self._translator: Optional[Translator] = None

    def _initialize(self) -> Translator:
        """Lazy creation of the googletrans Translator (and its httpx client)."""
        if self._translator is None:
            self._translator = Translator(
                service_urls=self.service_urls or None,
                raise_exception=True,
                timeout=httpx.Timeout(self.timeout_s, connect=10),
            )
        return self._translator

    async def close(self) -> None:
        """Close the underlying httpx client."""
        if self._translator is not None:
            await self._translator.client.aclose()
        self._translator = None

    async def __aenter__(self):
        self._initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def translate(self, text: str, source_lang: str, target_lang: str) -> TranslateResult:
        """
        Translate a single text.

        Args:
            text: Source text
            source_lang: Source language code (e.g. "pt")
            target_lang: Target language code (e.g. "en")

        Returns:
            TranslateResult with the translated text

        Raises:
            TranslateError: on transport, HTTP or parse failures
        """
        translator = self._initialize()

        t0 = time.time()
        try:
            translated = await translator.translate(text, src=source_lang, dest=target_lang)
        except httpx.TimeoutException:
            raise TranslateError("timeout", f"Request timeout after {self.timeout_s}s")
        except httpx.HTTPError as e:
            raise TranslateError("network", f"Network error: {e}")
        except json.JSONDecodeError as e:
            raise TranslateError("parse", f"Response parse error: {e}")
        except ValueError as e:
            # googletrans rejects unknown language codes before any request
            raise TranslateError("language", str(e))
        except Exception as e:
            # raise_exception=True reports non-200 responses as plain Exception
            raise TranslateError("upstream", f"Upstream error: {e}")
        latency_ms = int((time.time() - t0) * 1000)

        _trace({
            "type": "translate_call",
            "source_lang": source_lang,
            "target_lang": target_lang,
            "latency_ms": latency_ms,
            "req_chars": len(text),
            "resp_chars": len(translated.text or ""),
        })

        return TranslateResult(
            text=translated.text or "",
            latency_ms=latency_ms,
            raw=translated.extra_data,
            source_lang=source_lang,
            target_lang=target_lang,
        )


# ============================================================================
# Async File I/O
# ============================================================================

class AsyncFileIO:
    """Async file operations for line-oriented resources."""

    @staticmethod
    async def iter_lines_async(
        file_path: str,
        encoding: str = "utf-8",
    ) -> AsyncIterator[str]:
        """Stream lines of a text file without their line terminators."""
        async with aiofiles.open(file_path, "r", encoding=encoding, newline="") as f:
            async for line in f:
                yield line.rstrip("\n").rstrip("\r")

    @staticmethod
    async def write_text_async(
        file_path: str,
        content: str,
        encoding: str = "utf-8",
    ) -> None:
        """Overwrite a file with the given content."""
        Path(file_path).parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(file_path, "w", encoding=encoding, newline="") as f:
            await f.write(content)

    @staticmethod
    async def append_line_async(
        file_path: str,
        line: str,
        encoding: str = "utf-8",
    ) -> None:
        """Append one line with a single write call."""
        os.makedirs(os.path.dirname(file_path) or ".", exist_ok=True)
        async with aiofiles.open(file_path, "a", encoding=encoding) as f:
            await f.write(line + "\n")


__all__ = [
    "AsyncTranslateClient",
    "AsyncFileIO",
]
