"""Sinks that write JSON lines to the standard output and error streams."""

from __future__ import annotations

import sys
import threading
from typing import Sequence, TextIO

from logmgr.entry import Entry, Sink


class _StreamSink(Sink):
    """Writes each batch as JSON lines to a text stream, flushing after every batch."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self._lock = threading.Lock()

    def _default_stream(self) -> TextIO:
        raise NotImplementedError

    @property
    def stream(self) -> TextIO:
        """The stream written to; the process stream is looked up at write time by default."""
        return self._stream if self._stream is not None else self._default_stream()

    @staticmethod
    def _render(entries: Sequence[Entry]) -> str:
        lines = []
        for entry in entries:
            try:
                lines.append(entry.marshal_json() + "\n")
            except Exception:  # noqa: BLE001 - a malformed entry must not sink the batch
                continue
        return "".join(lines)

    def write(self, entries: Sequence[Entry]) -> None:
        """Write the batch in a single call, skipping entries that cannot be encoded."""
        text = self._render(entries)
        with self._lock:
            stream = self.stream
            if text:
                stream.write(text)
            stream.flush()

    def close(self) -> None:
        """Flush pending output; the underlying stream is left open."""
        with self._lock:
            self.stream.flush()


class ConsoleSink(_StreamSink):
    """Writes log entries to standard output as JSON lines."""

    def __init__(self, stream: TextIO | None = None) -> None:
        super().__init__(stream)

    def _default_stream(self) -> TextIO:
        return sys.stdout

    def write(self, entries: Sequence[Entry]) -> None:
        super().write(entries)

    def close(self) -> None:
        super().close()


class StderrSink(_StreamSink):
    """Writes log entries to standard error as JSON lines."""

    def __init__(self, stream: TextIO | None = None) -> None:
        super().__init__(stream)

    def _default_stream(self) -> TextIO:
        return sys.stderr

    def write(self, entries: Sequence[Entry]) -> None:
        super().write(entries)

    def close(self) -> None:
        super().close()


DEFAULT_CONSOLE_SINK = ConsoleSink()