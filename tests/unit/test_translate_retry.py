"""
Unit tests for scripts/translate_retry.py

Backoff delays are recorded by an injected sleep, never actually awaited.
"""

import re
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from scripts.runtime_adapter import TranslateError, TranslateResult
from scripts.translate_retry import (
    TranslationRetrier,
    error_log_path,
    format_error_record,
)

RECORD_RE = re.compile(r'^\[\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z\] "(?P<text>.*)" - Erro: (?P<msg>.*)$')


def _log_lines(log_dir, lang):
    path = Path(error_log_path(str(log_dir), lang))
    if not path.exists():
        return []
    return path.read_text(encoding="utf-8").splitlines()


class TestFormatErrorRecord:

    def test_record_layout(self):
        when = datetime(2024, 5, 1, 12, 30, 45, 123000, tzinfo=timezone.utc)
        record = format_error_record("Olá", "boom", when)
        assert record == '[2024-05-01T12:30:45.123Z] "Olá" - Erro: boom'

    def test_default_timestamp_matches_iso_format(self):
        assert RECORD_RE.match(format_error_record("Olá", "boom"))

    def test_multiline_message_stays_on_one_line(self):
        when = datetime(2024, 5, 1, 12, 30, 45, 123000, tzinfo=timezone.utc)
        record = format_error_record("Olá", "HTTP error 400:\r\n<html>\nBad</html>", when)
        assert record == '[2024-05-01T12:30:45.123Z] "Olá" - Erro: HTTP error 400: <html> Bad</html>'

    def test_log_path_per_language(self):
        assert error_log_path("logs", "en").endswith("erro-traducao-en.log")


class TestTranslationRetrier:

    @pytest.mark.asyncio
    async def test_success_returns_translation(self, tmp_path, mock_translator, recording_sleep):
        translator = mock_translator(mapping={"Olá Mundo": "Hello World"})
        retrier = TranslationRetrier(translator, log_dir=str(tmp_path), sleep=recording_sleep)

        result = await retrier.translate("Olá Mundo", "en")

        assert result == "Hello World"
        assert translator.calls == [("Olá Mundo", "pt", "en")]
        assert recording_sleep.delays == []
        assert _log_lines(tmp_path, "en") == []

    @pytest.mark.asyncio
    async def test_newlines_are_flattened(self, tmp_path, recording_sleep):
        translator = AsyncMock()
        translator.translate = AsyncMock(return_value=TranslateResult(text="line one\nline two\r\nthree"))
        retrier = TranslationRetrier(translator, log_dir=str(tmp_path), sleep=recording_sleep)

        assert await retrier.translate("x", "en") == "line one line two three"

    @pytest.mark.asyncio
    async def test_transient_failure_is_retried(self, tmp_path, mock_translator, recording_sleep):
        translator = mock_translator(mapping={"Sair": "Exit"}, fail_times={"Sair": 2})
        retrier = TranslationRetrier(translator, log_dir=str(tmp_path), sleep=recording_sleep)

        result = await retrier.translate("Sair", "en")

        assert result == "Exit"
        assert len(translator.calls) == 3
        assert recording_sleep.delays == [1.0, 2.0]
        lines = _log_lines(tmp_path, "en")
        assert len(lines) == 2
        assert all(RECORD_RE.match(line).group("msg") == "connection reset" for line in lines)
        assert retrier.fallback_count == 0

    @pytest.mark.asyncio
    async def test_exhausted_retries_return_original_text(self, tmp_path, mock_translator, recording_sleep):
        translator = mock_translator(fail_texts={"Olá"})
        retrier = TranslationRetrier(translator, log_dir=str(tmp_path), sleep=recording_sleep)

        result = await retrier.translate("Olá", "es")

        assert result == "Olá"
        assert len(translator.calls) == 5
        assert recording_sleep.delays == [1.0, 2.0, 4.0, 8.0]
        lines = _log_lines(tmp_path, "es")
        assert len(lines) == 5
        assert all(RECORD_RE.match(line).group("text") == "Olá" for line in lines)
        assert retrier.fallback_count == 1

    @pytest.mark.asyncio
    async def test_multiline_errors_keep_one_record_per_attempt(self, tmp_path, recording_sleep):
        translator = AsyncMock()
        translator.translate = AsyncMock(
            side_effect=TranslateError("upstream", "HTTP error 400: <html>\n<body>Bad</body>\n</html>")
        )
        retrier = TranslationRetrier(translator, log_dir=str(tmp_path), sleep=recording_sleep)

        assert await retrier.translate("Olá", "en") == "Olá"

        lines = _log_lines(tmp_path, "en")
        assert len(lines) == 5
        assert all(
            RECORD_RE.match(line).group("msg") == "HTTP error 400: <html> <body>Bad</body> </html>"
            for line in lines
        )

    @pytest.mark.asyncio
    async def test_explicit_retry_state(self, tmp_path, mock_translator, recording_sleep):
        translator = mock_translator(fail_texts={"Olá"})
        retrier = TranslationRetrier(translator, log_dir=str(tmp_path), sleep=recording_sleep)

        result = await retrier.translate("Olá", "en", attempts_remaining=2, backoff_ms=250)

        assert result == "Olá"
        assert len(translator.calls) == 2
        assert recording_sleep.delays == [0.25]

    @pytest.mark.asyncio
    async def test_any_exception_is_contained(self, tmp_path, recording_sleep):
        translator = AsyncMock()
        translator.translate = AsyncMock(side_effect=RuntimeError("unexpected"))
        retrier = TranslationRetrier(translator, log_dir=str(tmp_path), max_attempts=1, sleep=recording_sleep)

        assert await retrier.translate("Olá", "en") == "Olá"
        assert RECORD_RE.match(_log_lines(tmp_path, "en")[0]).group("msg") == "unexpected"

    @pytest.mark.asyncio
    async def test_log_dir_is_created(self, tmp_path, mock_translator, recording_sleep):
        log_dir = tmp_path / "nested" / "logs"
        retrier = TranslationRetrier(
            mock_translator(fail_texts={"a"}), log_dir=str(log_dir), max_attempts=1, sleep=recording_sleep
        )

        await retrier.translate("a", "fr")

        assert (log_dir / "erro-traducao-fr.log").exists()

    @pytest.mark.asyncio
    async def test_notices_are_printed(self, tmp_path, mock_translator, recording_sleep, capsys):
        from scripts.progress_reporter import ProgressReporter

        retrier = TranslationRetrier(
            mock_translator(fail_texts={"Olá"}),
            log_dir=str(tmp_path),
            max_attempts=2,
            reporter=ProgressReporter("en"),
            sleep=recording_sleep,
        )

        await retrier.translate("Olá", "en")

        err = capsys.readouterr().err
        assert "Tentando novamente em 1000ms" in err
        assert 'Falha definitiva ao traduzir: "Olá"' in err
