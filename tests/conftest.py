"""Pytest configuration and shared fixtures for translate-lines tests."""
import asyncio
import sys
from pathlib import Path

import pytest

# Add src directory to Python path for imports
PROJECT_ROOT = Path(__file__).parent.parent
SRC_DIR = PROJECT_ROOT / 'src'
sys.path.insert(0, str(SRC_DIR))

from scripts.runtime_adapter import DEFAULT_PIPELINE_CONFIG, TranslateError, TranslateResult  # noqa: E402


class MockTranslator:
    """
    Scriptable stand-in for AsyncTranslateClient.

    Args:
        mapping: exact source text -> translated text (default: "<lang>:<text>")
        fail_texts: texts whose translation always raises TranslateError
        fail_times: text -> number of failures before succeeding
        delays: text -> seconds to wait before answering
        on_call: sync hook called with (text, target_lang) before answering
    """

    def __init__(self, mapping=None, fail_texts=(), fail_times=None, delays=None, on_call=None):
        self.mapping = dict(mapping or {})
        self.fail_texts = set(fail_texts)
        self.fail_times = dict(fail_times or {})
        self.delays = dict(delays or {})
        self.on_call = on_call
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def translate(self, text, source_lang, target_lang):
        self.calls.append((text, source_lang, target_lang))
        if self.on_call:
            self.on_call(text, target_lang)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(text, 0))
            if text in self.fail_texts:
                raise TranslateError("upstream", f"service unavailable for {text}")
            if self.fail_times.get(text, 0) > 0:
                self.fail_times[text] -= 1
                raise TranslateError("network", "connection reset")
            translated = self.mapping.get(text, f"{target_lang}:{text}")
            return TranslateResult(text=translated, source_lang=source_lang, target_lang=target_lang)
        finally:
            self.in_flight -= 1


class RecordingSleep:
    """Async sleep replacement that records requested delays without waiting."""

    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


@pytest.fixture
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def mock_translator():
    """Factory for MockTranslator instances."""
    return MockTranslator


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def pipeline_config(tmp_path):
    """Pipeline config writing everything below tmp_path."""
    config = DEFAULT_PIPELINE_CONFIG.copy()
    config.update({
        "input_file": str(tmp_path / "pt-br.yml"),
        "output_dir": str(tmp_path / "out"),
        "log_dir": str(tmp_path / "logs"),
        "progress_dir": None,
    })
    return config


@pytest.fixture
def write_source(pipeline_config):
    """Write the source resource file from a list of lines."""
    def _write(lines):
        path = Path(pipeline_config["input_file"])
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path
    return _write
