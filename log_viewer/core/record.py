import os
from collections import namedtuple
from enum import IntEnum


class LogLevel(IntEnum):
    VERBOSE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4
    FATAL = 5
    ASSERT = 6

    @property
    def letter(self):
        return _LEVEL_LETTERS[self]

    @classmethod
    def from_letter(cls, letter):
        """Returns the level for a priority letter, or None if it is not one."""
        return _LETTER_LEVELS.get(letter)


_LEVEL_LETTERS = {
    LogLevel.VERBOSE: "V",
    LogLevel.DEBUG: "D",
    LogLevel.INFO: "I",
    LogLevel.WARN: "W",
    LogLevel.ERROR: "E",
    LogLevel.FATAL: "F",
    LogLevel.ASSERT: "A",
}
_LETTER_LEVELS = {v: k for k, v in _LEVEL_LETTERS.items()}


class LogTimestamp(namedtuple("LogTimestamp", "year month day hour minute second millis")):
    """
    Timestamp of a log line. Logcat usually omits the year, in which case
    year is 0 so that tuple ordering still works.
    """
    __slots__ = ()

    def __str__(self):
        text = "%02d-%02d %02d:%02d:%02d.%03d" % (
            self.month, self.day, self.hour, self.minute, self.second, self.millis)
        if self.year:
            return "%04d-%s" % (self.year, text)
        return text


class LogRecord(namedtuple("LogRecord", "timestamp pid tid level tag message text source file_order index")):
    """One logical log entry. May span several physical lines."""
    __slots__ = ()

    @property
    def sort_key(self):
        return (self.timestamp, self.file_order, self.index)

    @property
    def file_name(self):
        return os.path.basename(self.source) if self.source else ""

    def with_continuation(self, line):
        return self._replace(message=self.message + "\n" + line,
                             text=self.text + "\n" + line)

    def same_entry(self, other):
        """True when both records hold the same parsed content, wherever they came from."""
        return (self.timestamp, self.pid, self.tid, self.level, self.tag, self.message) == \
            (other.timestamp, other.pid, other.tid, other.level, other.tag, other.message)

    def __str__(self):
        return self.text


class LogFile:
    def __init__(self, path, charset, order, records, stream):
        self.path = path
        self.charset = charset
        self.order = order # Arrival order inside the opened batch
        self.records = tuple(records)
        self.stream = stream

    @property
    def name(self):
        return os.path.basename(self.path)

    def __len__(self):
        return len(self.records)

    def __repr__(self):
        return f"LogFile({self.path!r}, stream={self.stream!r}, records={len(self.records)})"
