import os
import threading

from PySide6.QtCore import QObject, Signal, qWarning

from .config import get_config
from .core.filter import apply_filters
from .core.repository import LogsRepository, OpenLogsException


class LogController(QObject):
    """
    Opens log files in the background and exposes the repository to the UI.
    """
    progress_changed = Signal(int, str) # percent, description
    logs_loaded = Signal(int) # number of logs
    load_failed = Signal(str) # error message
    window_changed = Signal(int, int) # first, last visible index
    filter_results_ready = Signal(object) # matched indices

    def __init__(self, repository=None, config=None):
        super().__init__()
        self.config = config if config is not None else get_config()
        self.repository = repository if repository is not None else LogsRepository(self.config.parse_workers)
        self.is_loading = False
        self.last_error = None
        self._thread = None
        self._load_lock = threading.Lock()

    def open_logs(self, paths, charset=None):
        """Starts opening paths. Returns False if another open is still running."""
        paths = list(paths or [])
        if not paths: return False

        with self._load_lock:
            if self.is_loading: return False
            self.is_loading = True

        charset = charset or self.config.default_encoding
        self.config.last_log_dir = os.path.dirname(os.path.abspath(paths[0]))
        self.last_error = None

        self._thread = threading.Thread(target=self._worker_open_logs, args=(paths, charset), daemon=True)
        self._thread.start()
        return True

    def _worker_open_logs(self, paths, charset):
        try:
            self.repository.open_log_files(paths, charset, self)
        except OpenLogsException as e:
            self.last_error = e
            self.load_failed.emit(str(e))
            return
        finally:
            self.is_loading = False

        self.logs_loaded.emit(len(self.repository.all_logs))
        self.window_changed.emit(self.repository.first_visible_index, self.repository.last_visible_index)

    # ProgressReporter

    def on_progress(self, percent, description):
        self.progress_changed.emit(percent, description)

    def fail_progress(self):
        qWarning("Opening logs failed")

    def cancel(self):
        if self.is_loading:
            self.repository.cancel()

    def wait(self, timeout=None):
        """Blocks until the running open finishes. Returns False on timeout."""
        thread = self._thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def set_visible_window(self, first, last):
        self.repository.first_visible_index = first
        self.repository.last_visible_index = last
        self.window_changed.emit(self.repository.first_visible_index, self.repository.last_visible_index)

    def visible_logs(self):
        return self.repository.currently_opened_logs

    def apply_filters(self, filters):
        if self.is_loading: return None
        try:
            matched = apply_filters(filters, self.repository.all_logs)
        except Exception as e:
            qWarning(f"Filter error: {e}")
            return None
        self.filter_results_ready.emit(matched)
        return matched
