"""Asynchronous logger core: ring buffer, background workers and the global logger."""

from __future__ import annotations

import os
import sys
import threading
from datetime import datetime
from typing import NoReturn

from logmgr.entry import Entry, Level, LogField, Sink

DEFAULT_BUFFER_SIZE = 8192
DEFAULT_BATCH_SIZE = 256
FLUSH_INTERVAL = 0.01


class RingBuffer:
    """Bounded FIFO of entries whose capacity is a power of two."""

    def __init__(self, size: int) -> None:
        if size < 0 or size & (size - 1):
            raise ValueError("ring buffer size must be power of 2")
        self._slots: list[Entry | None] = [None] * size
        self._mask = size - 1
        self._write_pos = 0
        self._read_pos = 0
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return len(self._slots)

    def push(self, entry: Entry) -> bool:
        """Append an entry; return False and drop it when the buffer is full."""
        with self._lock:
            if self._write_pos - self._read_pos >= len(self._slots):
                return False
            self._slots[self._write_pos & self._mask] = entry
            self._write_pos += 1
            return True

    def pop(self, max_count: int) -> list[Entry]:
        """Remove and return up to max_count entries in insertion order."""
        with self._lock:
            count = min(self._write_pos - self._read_pos, max_count)
            if count <= 0:
                return []
            positions = [(self._read_pos + offset) & self._mask for offset in range(count)]
            entries = [self._slots[pos] for pos in positions]
            for pos in positions:
                self._slots[pos] = None
            self._read_pos += count
            return entries

    def __len__(self) -> int:
        with self._lock:
            return self._write_pos - self._read_pos


class Worker:
    """Moves batches of entries from a logger's buffer to its sinks."""

    def __init__(self, worker_id: int, logger: Logger, batch_size: int) -> None:
        self.worker_id = worker_id
        self.logger = logger
        self.batch_size = batch_size
        self._stopped = threading.Event()

    @property
    def stopped(self) -> bool:
        return self._stopped.is_set()

    def run(self) -> None:
        """Flush periodically until stopped, then flush once more."""
        while not self._stopped.wait(FLUSH_INTERVAL):
            self.flush()
        self.flush()

    def flush(self) -> int:
        """Deliver one batch to every sink; return how many entries it held."""
        batch = self.logger.buffer.pop(self.batch_size)
        if not batch:
            return 0
        for sink in self.logger.snapshot_sinks():
            try:
                sink.write(batch)
            except Exception:  # noqa: BLE001 - one failing sink must not starve the others
                continue
        return len(batch)

    def stop(self) -> None:
        self._stopped.set()


class Logger:
    """Level-filtered logger that hands entries to sinks from background workers."""

    def __init__(
        self,
        level: int = Level.INFO,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        sinks: list[Sink] | None = None,
    ) -> None:
        self.level = level
        self.buffer = RingBuffer(buffer_size)
        self.workers: list[Worker] = []
        self._threads: list[threading.Thread] = []
        self._sinks: list[Sink] = list(sinks or ())
        self._sinks_lock = threading.Lock()

    def start(self, num_workers: int | None = None, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        """Start background workers, one per CPU by default."""
        if self.workers:
            raise RuntimeError("logger already started")
        count = num_workers if num_workers is not None else (os.cpu_count() or 1)
        for worker_id in range(count):
            worker = Worker(worker_id, self, batch_size)
            thread = threading.Thread(
                target=worker.run, name=f"logmgr-worker-{worker_id}", daemon=True
            )
            self.workers.append(worker)
            self._threads.append(thread)
            thread.start()

    def log(self, level: int, message: str, *args: LogField) -> None:
        """Queue an entry if level passes the filter; drop it if the buffer is full."""
        if level < self.level:
            return
        entry = Entry(
            level=level,
            timestamp=datetime.now().astimezone(),
            message=message,
            fields={item.key: item.value for item in args},
        )
        self.buffer.push(entry)

    def add_sink(self, sink: Sink) -> None:
        with self._sinks_lock:
            self._sinks.append(sink)

    def set_sinks(self, *args: Sink) -> None:
        """Replace all sinks with the given ones."""
        with self._sinks_lock:
            self._sinks = list(args)

    def snapshot_sinks(self) -> list[Sink]:
        with self._sinks_lock:
            return list(self._sinks)

    def shutdown(self) -> None:
        """Stop workers, wait for their final flush and close every sink."""
        for worker in self.workers:
            worker.stop()
        for thread in self._threads:
            thread.join()
        for sink in self.snapshot_sinks():
            try:
                sink.close()
            except Exception:  # noqa: BLE001 - closing continues past a failing sink
                continue


_global_logger: Logger | None = None
_global_lock = threading.Lock()


def get_logger() -> Logger:
    """Return the process-wide logger, creating and starting it on first use."""
    global _global_logger
    with _global_lock:
        if _global_logger is None:
            logger = Logger()
            logger.start()
            _global_logger = logger
        return _global_logger


def set_level(level: int) -> None:
    get_logger().level = level


def get_level() -> int:
    return get_logger().level


def add_sink(sink: Sink) -> None:
    get_logger().add_sink(sink)


def set_sinks(*args: Sink) -> None:
    get_logger().set_sinks(*args)


def debug(message: str, *args: LogField) -> None:
    get_logger().log(Level.DEBUG, message, *args)


def info(message: str, *args: LogField) -> None:
    get_logger().log(Level.INFO, message, *args)


def warn(message: str, *args: LogField) -> None:
    get_logger().log(Level.WARN, message, *args)


def error(message: str, *args: LogField) -> None:
    get_logger().log(Level.ERROR, message, *args)


def fatal(message: str, *args: LogField) -> NoReturn:
    """Log at fatal level, flush everything and exit with status 1."""
    get_logger().log(Level.FATAL, message, *args)
    shutdown()
    sys.exit(1)


def shutdown() -> None:
    get_logger().shutdown()


def reset_global_logger() -> None:
    """Shut down the process-wide logger and forget it."""
    global _global_logger
    with _global_lock:
        logger, _global_logger = _global_logger, None
    if logger is not None:
        logger.shutdown()