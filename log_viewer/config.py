import os

from PySide6.QtCore import QObject, QSettings, Signal

ORGANIZATION_NAME = "LogViewer"
APPLICATION_NAME = "Log Viewer"


class ConfigManager(QObject):
    """
    Engine settings stored with QSettings.
    Share one instance through get_config() instead of creating new ones.
    """

    encodingChanged = Signal(str)
    parseWorkersChanged = Signal(int)

    def __init__(self, settings=None):
        super().__init__()
        self.settings = settings if settings is not None else QSettings(ORGANIZATION_NAME, APPLICATION_NAME)

    def get(self, key, default=None):
        return self.settings.value(key, default)

    def set(self, key, value):
        self.settings.setValue(key, value)

    # 1. Reading
    @property
    def default_encoding(self):
        return str(self.settings.value("general/default_encoding", "UTF-8"))

    @default_encoding.setter
    def default_encoding(self, value):
        if self.default_encoding != value:
            self.settings.setValue("general/default_encoding", value)
            self.encodingChanged.emit(value)

    @property
    def parse_workers(self):
        default = min(4, os.cpu_count() or 1)
        try:
            value = int(self.settings.value("general/parse_workers", default))
        except (TypeError, ValueError):
            return default
        return max(1, value)

    @parse_workers.setter
    def parse_workers(self, value):
        value = max(1, int(value))
        if self.parse_workers != value:
            self.settings.setValue("general/parse_workers", value)
            self.parseWorkersChanged.emit(value)

    # 2. Paths
    @property
    def last_log_dir(self):
        return str(self.settings.value("general/last_log_dir", os.path.expanduser("~")))

    @last_log_dir.setter
    def last_log_dir(self, value):
        self.settings.setValue("general/last_log_dir", value)

# Global instance
_config_instance = None

def get_config():
    global _config_instance
    if _config_instance is None:
        _config_instance = ConfigManager()
    return _config_instance
