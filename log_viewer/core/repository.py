import codecs
import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed

from PySide6.QtCore import qDebug, qWarning

from log_viewer.core.parser import parse_lines
from log_viewer.core.record import LogFile
from log_viewer.core.streams import classify, flatten, merge_streams

MISSING = "missing"
NOT_A_FILE = "not a file"
UNREADABLE = "unreadable"
UNDECODABLE = "undecodable"

# Share of the progress bar given to reading files; merging takes the rest.
READ_PROGRESS_SHARE = 80


class OpenLogsException(Exception):
    """
    Raised when a batch of log files cannot be opened.
    `failures` holds one (path, reason, detail) tuple per failing path.
    """

    def __init__(self, message, failures=None):
        super().__init__(message)
        self.failures = list(failures or [])

    @property
    def paths(self):
        return [path for path, _, _ in self.failures]

    def __str__(self):
        text = super().__str__()
        if not self.failures:
            return text
        details = "; ".join(f"{path}: {reason} ({detail})" for path, reason, detail in self.failures)
        return f"{text}: {details}"


class OpenLogsCancelledException(OpenLogsException):
    pass


class ProgressReporter:
    """Receives progress of open_log_files. Implemented by the caller."""

    def on_progress(self, percent, description):
        pass

    def fail_progress(self):
        pass


class _RepositoryState:
    def __init__(self, files=(), streams=(), logs=()):
        self.files = tuple(files)
        self.streams = tuple(streams)
        self.logs = tuple(logs)


def check_charset(charset):
    try:
        info = codecs.lookup(charset)
    except (LookupError, TypeError) as e:
        raise OpenLogsException(f"Unsupported charset {charset!r}", [(None, UNDECODABLE, str(e))]) from e

    # Codecs like hex or rot13 are known to codecs but can't decode files
    if not getattr(info, "_is_text_encoding", True):
        raise OpenLogsException(f"Unsupported charset {charset!r}", [(None, UNDECODABLE, "Not a text encoding")])
    return info.name


def check_log_path(path):
    """Returns a (path, reason, detail) failure for a path that cannot be read, None otherwise."""
    if not os.path.exists(path):
        return (path, MISSING, "No such file")
    if not os.path.isfile(path):
        return (path, NOT_A_FILE, "Not a regular file")
    if not os.access(path, os.R_OK):
        return (path, UNREADABLE, "Permission denied")
    return None


def read_log_file(path, charset, order, cancel_event=None):
    """Reads and parses one file. Returns a LogFile, possibly with no records."""
    if cancel_event is not None and cancel_event.is_set():
        raise OpenLogsCancelledException("Opening logs was cancelled")

    try:
        with open(path, "r", encoding=charset, errors="strict") as f:
            records = parse_lines(f, source=path, file_order=order)
    except (UnicodeDecodeError, LookupError) as e:
        raise OpenLogsException("Could not decode log file", [(path, UNDECODABLE, str(e))]) from e
    except OSError as e:
        raise OpenLogsException("Could not read log file", [(path, UNREADABLE, e.strerror or str(e))]) from e

    return LogFile(path, charset, order, records, classify(path))


class LogsRepository:
    """
    Holds the currently opened logs.

    open_log_files builds a complete new state on the side and swaps it in at
    the end, so readers only ever see the previous or the new set of logs.
    """

    def __init__(self, max_workers=4):
        self.max_workers = max(1, int(max_workers))
        self._lock = threading.RLock()
        self._state = _RepositoryState()
        self._first_visible_index = 0
        self._last_visible_index = 0
        self._cancel_event = None

    # --- Opening ---

    def open_log_files(self, files, charset, reporter):
        cancel_event = threading.Event()
        with self._lock:
            self._cancel_event = cancel_event

        try:
            state = self._load([os.fspath(f) for f in files], charset, reporter, cancel_event)
        except OpenLogsException as e:
            qWarning(f"Failed to open logs: {e}")
            reporter.fail_progress()
            raise
        finally:
            with self._lock:
                if self._cancel_event is cancel_event:
                    self._cancel_event = None

        self._publish(state)
        reporter.on_progress(100, f"Opened {len(state.logs)} logs from {len(state.files)} files")
        qDebug(f"Opened {len(state.files)} log files, {len(state.streams)} streams, {len(state.logs)} logs")

    def cancel(self):
        """Stops the open_log_files call in flight, if any."""
        with self._lock:
            if self._cancel_event is not None:
                self._cancel_event.set()

    def close_logs(self):
        self._publish(_RepositoryState())

    def _load(self, paths, charset, reporter, cancel_event):
        reporter.on_progress(0, "Checking log files...")
        charset = check_charset(charset)

        failures = [f for f in (check_log_path(p) for p in paths) if f is not None]
        if failures:
            raise OpenLogsException("Could not open log files", failures)

        log_files = [None] * len(paths)
        total = len(paths)
        done = 0
        with ThreadPoolExecutor(max_workers=min(self.max_workers, max(1, total))) as executor:
            futures = {executor.submit(read_log_file, path, charset, order, cancel_event): order
                       for order, path in enumerate(paths)}
            try:
                for future in as_completed(futures):
                    log_file = future.result()
                    log_files[futures[future]] = log_file
                    done += 1
                    qDebug(f"Parsed {len(log_file)} logs from {log_file.path}")
                    reporter.on_progress(done * READ_PROGRESS_SHARE // total,
                                         f"Read log file {done}/{total}: {log_file.name}")
            except OpenLogsException:
                cancel_event.set()
                for future in futures:
                    future.cancel()
                raise

        if cancel_event.is_set():
            raise OpenLogsCancelledException("Opening logs was cancelled")

        opened = [f for f in log_files if f.records]
        reporter.on_progress(READ_PROGRESS_SHARE, "Merging log streams...")
        streams = merge_streams(opened)
        logs = flatten(streams)

        if cancel_event.is_set():
            raise OpenLogsCancelledException("Opening logs was cancelled")
        return _RepositoryState(opened, streams, logs)

    def _publish(self, state):
        with self._lock:
            self._state = state
            self._first_visible_index = 0
            self._last_visible_index = max(len(state.logs) - 1, 0)

    # --- Accessors ---

    @property
    def available_streams(self):
        return list(self._state.streams)

    @property
    def currently_opened_log_files(self):
        return list(self._state.files)

    @property
    def all_logs(self):
        return list(self._state.logs)

    @property
    def currently_opened_logs(self):
        with self._lock:
            logs = self._state.logs
            first, last = self._first_visible_index, self._last_visible_index
        if not logs or first > last:
            return []
        return list(logs[first:last + 1])

    @property
    def first_visible_index(self):
        return self._first_visible_index

    @first_visible_index.setter
    def first_visible_index(self, value):
        with self._lock:
            self._first_visible_index = 0 if value < 0 else value

    @property
    def last_visible_index(self):
        return self._last_visible_index

    @last_visible_index.setter
    def last_visible_index(self, value):
        with self._lock:
            if value < 0:
                value = max(len(self._state.logs) - 1, 0)
            self._last_visible_index = value
