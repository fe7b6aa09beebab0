"""File sinks with age- and size-based rotation, synchronous and in the background."""

from __future__ import annotations

import os
import queue
import threading
import time
from datetime import datetime, timedelta
from typing import BinaryIO, Sequence, Union

from logmgr.entry import Entry, Sink

DEFAULT_MAX_SIZE = 100 * 1024 * 1024
_WRITE_BUFFER_SIZE = 16384
_ASYNC_POLL_INTERVAL = 0.1
_ROTATION_STAMP = "%Y-%m-%d_%H-%M-%S"

Duration = Union[float, int, timedelta]


def _seconds(duration: Duration) -> float:
    if isinstance(duration, timedelta):
        return duration.total_seconds()
    return float(duration)


def _split_ext(path: str) -> tuple[str, str]:
    """Split off the extension of the last path element, dot included."""
    separator = path.rfind(os.sep)
    if os.altsep:
        separator = max(separator, path.rfind(os.altsep))
    dot = path.rfind(".")
    if dot > separator:
        return path[:dot], path[dot:]
    return path, ""


def _render(entries: Sequence[Entry]) -> bytes:
    lines = []
    for entry in entries:
        try:
            lines.append(entry.marshal_json() + "\n")
        except Exception:  # noqa: BLE001 - a malformed entry must not sink the batch
            continue
    return "".join(lines).encode("utf-8")


class FileSink(Sink):
    """Appends JSON lines to a file, rotating it when it grows too old or too large.

    A max_age or max_size of zero disables that kind of rotation. Rotated files are
    renamed to ``<base>_YYYY-MM-DD_HH-MM-SS<ext>``.
    """

    def __init__(self, filename: str | os.PathLike[str], max_age: Duration = 0, max_size: int = 0) -> None:
        self.filename = os.fspath(filename)
        self.max_age = _seconds(max_age)
        self.max_size = max_size
        self._lock = threading.Lock()
        self._file: BinaryIO | None = None
        self._size = 0
        self._last_rotation = time.monotonic()
        self._open()

    @property
    def size(self) -> int:
        """Bytes in the current file, counting what was there when it was opened."""
        return self._size

    @property
    def closed(self) -> bool:
        return self._file is None

    def _open(self) -> None:
        directory = os.path.dirname(self.filename) or "."
        os.makedirs(directory, exist_ok=True)
        handle = open(self.filename, "ab", buffering=_WRITE_BUFFER_SIZE)
        try:
            size = os.fstat(handle.fileno()).st_size
        except OSError:
            handle.close()
            raise
        self._file = handle
        self._size = size

    def _should_rotate(self) -> bool:
        if self.max_age > 0 and time.monotonic() - self._last_rotation >= self.max_age:
            return True
        return self.max_size > 0 and self._size >= self.max_size

    def _rotate(self) -> None:
        handle, self._file = self._file, None
        if handle is not None:
            handle.close()
        base, ext = _split_ext(self.filename)
        rotated = f"{base}_{datetime.now().strftime(_ROTATION_STAMP)}{ext}"
        try:
            has_content = os.stat(self.filename).st_size > 0
        except OSError:
            has_content = False
        if has_content:
            os.replace(self.filename, rotated)
        self._last_rotation = time.monotonic()
        self._size = 0
        self._open()

    def write(self, entries: Sequence[Entry]) -> None:
        """Write the batch as JSON lines, rotating first when a limit has been reached."""
        with self._lock:
            if self._file is None:
                raise ValueError("cannot write to closed file sink")
            if self._should_rotate():
                self._rotate()
            assert self._file is not None
            data = _render(entries)
            if data:
                self._file.write(data)
                self._size += len(data)
            self._file.flush()

    def close(self) -> None:
        """Flush and close the file; closing again does nothing."""
        with self._lock:
            handle, self._file = self._file, None
            if handle is not None:
                handle.close()

    def __enter__(self) -> FileSink:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def new_default_file_sink(filename: str | os.PathLike[str], max_age: Duration) -> FileSink:
    """Create a file sink with a 100 MiB size limit, raising RuntimeError on failure."""
    try:
        return FileSink(filename, max_age, DEFAULT_MAX_SIZE)
    except OSError as exc:
        raise RuntimeError(f"failed to create file sink: {exc}") from exc


class AsyncFileSink(FileSink):
    """A file sink that hands batches to a background thread.

    When the queue of pending batches is full, or buffer_size is zero, the batch is
    written synchronously instead.
    """

    def __init__(
        self,
        filename: str | os.PathLike[str],
        max_age: Duration = 0,
        max_size: int = 0,
        buffer_size: int = 1000,
    ) -> None:
        if buffer_size < 0:
            raise ValueError("buffer size must not be negative")
        super().__init__(filename, max_age, max_size)
        self.buffer_size = buffer_size
        self._state_lock = threading.Lock()
        self._closed = False
        self._done = threading.Event()
        self._pending: queue.Queue[list[Entry]] | None = None
        self._thread: threading.Thread | None = None
        if buffer_size > 0:
            self._pending = queue.Queue(maxsize=buffer_size)
            self._thread = threading.Thread(
                target=self._writer_loop, name="logmgr-async-file", daemon=True
            )
            self._thread.start()

    @property
    def closed(self) -> bool:
        return self._closed

    def _write_quietly(self, batch: list[Entry]) -> None:
        try:
            super().write(batch)
        except Exception:  # noqa: BLE001 - the background writer keeps going
            pass

    def _writer_loop(self) -> None:
        assert self._pending is not None
        while not self._done.is_set():
            try:
                batch = self._pending.get(timeout=_ASYNC_POLL_INTERVAL)
            except queue.Empty:
                continue
            self._write_quietly(batch)
        while True:
            try:
                batch = self._pending.get_nowait()
            except queue.Empty:
                return
            self._write_quietly(batch)

    def write(self, entries: Sequence[Entry]) -> None:
        """Queue a copy of the batch, or write it directly if the queue is full."""
        with self._state_lock:
            closed = self._closed
        if closed:
            raise ValueError("cannot write to closed async file sink")
        batch = list(entries)
        if self._pending is not None:
            try:
                self._pending.put_nowait(batch)
                return
            except queue.Full:
                pass
        super().write(batch)

    def close(self) -> None:
        """Stop the background thread after it has written every queued batch."""
        with self._state_lock:
            if self._closed:
                return
            self._closed = True
            self._done.set()
            if self._thread is not None:
                self._thread.join()
            super().close()