#!/usr/bin/env python3

"""
checkpoint_writer.py

In-order output buffer for one language pass and the writer that persists
it. Pending slots are rendered as empty lines, so a checkpoint file is
always well-formed even mid-pass.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from scripts.async_adapter import AsyncFileIO
from scripts.runtime_adapter import DEFAULT_PIPELINE_CONFIG


class OutputBuffer:
    """Output lines indexed by source line number; `None` marks a pending slot."""

    def __init__(self):
        self._lines: List[Optional[str]] = []

    def __len__(self) -> int:
        return len(self._lines)

    def append(self, line: str) -> int:
        self._lines.append(line)
        return len(self._lines) - 1

    def reserve(self) -> int:
        """Append a pending slot and return its index."""
        self._lines.append(None)
        return len(self._lines) - 1

    def resolve(self, index: int, line: str) -> None:
        if self._lines[index] is not None:
            raise ValueError(f"Output line {index} already resolved")
        self._lines[index] = line

    @property
    def pending_count(self) -> int:
        return sum(1 for line in self._lines if line is None)

    def render(self) -> List[str]:
        return [line if line is not None else "" for line in self._lines]


class CheckpointWriter:
    """Writes `<output_dir>/<lang>.<ext>`, overwriting previous content."""

    def __init__(
        self,
        output_dir: str = DEFAULT_PIPELINE_CONFIG["output_dir"],
        output_ext: str = DEFAULT_PIPELINE_CONFIG["output_ext"],
        checkpoint_every: int = DEFAULT_PIPELINE_CONFIG["checkpoint_every"],
    ):
        self.output_dir = output_dir
        self.output_ext = output_ext
        self.checkpoint_every = checkpoint_every
        self.flush_count = 0

    def output_path(self, target_lang: str) -> Path:
        return Path(self.output_dir) / f"{target_lang}.{self.output_ext}"

    def is_due(self, processed_lines: int) -> bool:
        return self.checkpoint_every > 0 and processed_lines % self.checkpoint_every == 0

    async def flush(self, buffer: OutputBuffer, target_lang: str) -> Path:
        path = self.output_path(target_lang)
        await AsyncFileIO.write_text_async(str(path), "\n".join(buffer.render()))
        self.flush_count += 1
        return path
