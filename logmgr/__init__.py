"""Structured JSON logging with background workers, console sinks and rotating file sinks."""

__version__ = "0.1.0"

__all__ = ["entry", "logger", "console", "file_sink", "cli"]