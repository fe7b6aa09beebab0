# logmgr

Structured JSON logging for Python applications. A log call only queues an
entry. Background worker threads take entries from the queue in batches and
pass each batch to every configured sink. Each entry is written as one line
of JSON. Its structured fields are flattened into the top-level object:

```
{"level":"info","timestamp":"2024-01-15T10:30:45.123456Z","message":"User logged in","user_id":12345}
```

Timestamps are RFC 3339 in local time. Trailing zeros of the fraction are
dropped, and a zero UTC offset is written as `Z`.

## Installation

```
pip install .
```

To run the tests, install the `test` extra and run pytest:

```
pip install ".[test]"
pytest
```

## Usage

```python
from logmgr.entry import Level, field
from logmgr.logger import set_level, add_sink, info, warn, error, shutdown
from logmgr.console import ConsoleSink
from logmgr.file_sink import FileSink, AsyncFileSink

set_level(Level.DEBUG)
add_sink(ConsoleSink())

# Rotate after a day or at 100 MiB, whichever comes first.
add_sink(FileSink("logs/app.log", 24 * 60 * 60, 100 * 1024 * 1024))

# Batches are written on a background thread. When its queue of
# 1000 batches is full, a batch is written synchronously instead.
add_sink(AsyncFileSink("logs/async.log", 24 * 60 * 60, 100 * 1024 * 1024, 1000))

info("User logged in", field("user_id", 12345), field("action", "login"))
warn("High memory usage", field("memory_percent", 85.5))
error("Database connection failed", field("error", "connection timeout"))

shutdown()  # stop the workers, deliver pending entries, close every sink
```

### The global logger (`logmgr.logger`)

The first call to any module-level function creates the process-wide
`Logger` and starts it. It gets one worker thread per CPU, a queue of 8192
entries, and flushes batches of up to 256 entries every 10 ms.

- `debug`, `info`, `warn` and `error` take a message followed by any number
  of `field(key, value)` values.
- `fatal(...)` logs the entry, calls `shutdown()` and then exits with
  status 1.
- `set_level` and `get_level` set and return the minimum level. Entries below
  the minimum level are discarded.
- `add_sink(sink)` adds one sink. `set_sinks(*sinks)` replaces all sinks.
- `shutdown()` stops the workers, waits for their final flush and closes
  every sink.
- `reset_global_logger()` shuts the logger down and discards it. The next
  call creates a new one.
- `get_logger()` returns the process-wide `Logger`.

Each `Logger` can also be used on its own. `Logger(level, buffer_size, sinks)`
creates it. `start(num_workers, batch_size)` starts its workers. `log(level,
message, *fields)` queues an entry, and `shutdown()` stops the logger.

The queue is a `RingBuffer`. Its size must be a power of two; any other size
raises `ValueError`. When the queue is full, new entries are dropped.

### Levels and entries (`logmgr.entry`)

The levels, from lowest to highest, are `Level.DEBUG`, `Level.INFO`,
`Level.WARN`, `Level.ERROR` and `Level.FATAL`. The default level is `INFO`.
`str(level)` returns the lower-case name.

`Entry(level, timestamp, message, fields)` is a single record.
`Entry.marshal_json()` returns it as one line of JSON.

`encode_json_value` encodes field values:

- Strings, booleans, integers, floats and `None` become their JSON
  equivalents.
- `datetime` values become RFC 3339 strings.
- Any other value is encoded with `json.dumps`. A value that cannot be
  encoded becomes `null`.

### Sinks

A sink is any subclass of `logmgr.entry.Sink` that provides `write(entries)`
and `close()`. The package provides the following sinks:

- `logmgr.console.ConsoleSink(stream=None)` writes to standard output, or to
  the given stream. It flushes after every batch. `DEFAULT_CONSOLE_SINK` is a
  ready-made instance.
- `logmgr.console.StderrSink(stream=None)` writes to standard error.
- `logmgr.file_sink.FileSink(filename, max_age, max_size)` appends to a file
  and creates any missing directories. `max_age` is in seconds or is a
  `timedelta`. Before each batch is written, the file is rotated if it is at
  least `max_age` old or at least `max_size` bytes in size. A value of 0
  turns that limit off. If the file is not empty, rotation renames it to
  `name_YYYY-MM-DD_HH-MM-SS.ext`. Writing to a closed sink raises
  `ValueError`. The sink can also be used as a context manager.
- `logmgr.file_sink.new_default_file_sink(filename, max_age)` returns a
  `FileSink` with a 100 MiB size limit. It raises `RuntimeError` if the file
  cannot be opened.
- `logmgr.file_sink.AsyncFileSink(filename, max_age, max_size, buffer_size)`
  works like `FileSink`, but hands batches to a background thread. When the
  queue is full, or `buffer_size` is 0, the batch is written synchronously.
  `close()` waits until every queued batch has been written.

Sinks skip an entry that cannot be encoded and go on with the rest of the
batch. The workers ignore errors raised by a sink, so one failing sink does
not stop the others.

## Example program

```
logmgr-example
logmgr-example --directory logs
```

The example program logs a few sample messages at every level from debug to
error. It writes them to the console and to `app.log` and `async.log` in the
given directory, which defaults to the current one. It then shuts the logger
down.

## Limitations

- Old rotated files are never deleted or compressed.
- Entries logged while the queue is full are lost without notice.
- After `shutdown()` the global logger has no running workers, so later log
  calls are not delivered. Use `reset_global_logger()` to start over.