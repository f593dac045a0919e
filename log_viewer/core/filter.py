import re
import threading

from log_viewer.core.record import LogLevel
from log_viewer.core.streams import classify
from log_viewer.utils.helpers import (decode_base64, encode_base64, hex_to_rgb,
                                      is_potential_regex, rgb_to_hex)

FILE_EXTENSION = "filter"

# Flag value filter files are written with for case-insensitive patterns
CASE_INSENSITIVE = 2


class FilterException(Exception):
    pass


class ContextInfo:
    """Per-stream hit counts of a filter for the logs it was last applied to."""

    def __init__(self):
        self.lines_found = {}
        self.allowed_streams = None # None means every stream
        self._lock = threading.Lock()

    def set_allowed_streams(self, streams):
        self.allowed_streams = set(streams) if streams is not None else None

    @property
    def total_lines_found(self):
        return sum(count for stream, count in self.lines_found.items()
                   if self.allowed_streams is None or stream in self.allowed_streams)

    def increment_line_count(self, stream):
        # Filters may be applied from several threads
        with self._lock:
            self.lines_found[stream] = self.lines_found.get(stream, 0) + 1

    def __eq__(self, other):
        if not isinstance(other, ContextInfo):
            return NotImplemented
        return self.lines_found == other.lines_found and self.allowed_streams == other.allowed_streams


class Filter:
    def __init__(self, name, pattern, color="#000000", verbosity=LogLevel.VERBOSE, case_sensitive=False, applied=False):
        self.applied = applied
        self.temporary_info = None
        self.was_loaded_from_legacy_file = False
        self.update_filter(name, pattern, color, verbosity, case_sensitive)

    def update_filter(self, name, pattern, color, verbosity=LogLevel.VERBOSE, case_sensitive=False):
        if not name or not pattern or not color:
            raise FilterException("You must provide a name, a regex pattern and a color for the filter")

        self.flags = 0 if case_sensitive else CASE_INSENSITIVE
        self.name = name
        self.color = color
        self.pattern = self._compile(pattern)
        self.verbosity = LogLevel(verbosity)
        self.is_simple_filter = not is_potential_regex(pattern)

    def copy(self):
        # Temporary info is not copied
        return Filter(self.name, self.pattern_string, self.color, self.verbosity, self.case_sensitive, self.applied)

    @property
    def case_sensitive(self):
        return not (self.flags & CASE_INSENSITIVE)

    @property
    def pattern_string(self):
        return self.pattern.pattern

    def name_is_pattern(self):
        return self.name == self.pattern_string

    def _compile(self, pattern):
        try:
            return re.compile(pattern, 0 if self.case_sensitive else re.IGNORECASE)
        except re.error as e:
            raise FilterException(f"Invalid pattern: {pattern}") from e

    def init_temporary_info(self):
        self.temporary_info = ContextInfo()

    def reset_temporary_info(self):
        self.temporary_info = None

    def applies_to(self, record):
        """Whether a log record matches this filter's pattern and verbosity."""
        text = record.text
        if self.is_simple_filter:
            if self.case_sensitive:
                found = self.pattern_string in text
            else:
                found = self.pattern_string.lower() in text.lower()
        else:
            found = self.pattern.search(text) is not None

        return found and self.verbosity <= record.level

    def serialize_filter(self):
        r, g, b = hex_to_rgb(self.color)
        return "%s,%s,%d,%d:%d:%d,%s" % (
            self.name.replace(",", " "),
            encode_base64(self.pattern_string),
            self.flags,
            r, g, b,
            self.verbosity.name,
        )

    @classmethod
    def create_from_string(cls, filter_string):
        """Parses a line written by serialize_filter. Four-field lines come from older versions."""
        try:
            params = filter_string.strip().split(",")
            if len(params) < 4:
                raise ValueError("Not enough fields")

            rgb = params[3].split(":")
            if len(rgb) != 3:
                raise ValueError("Wrong color format")

            is_legacy = len(params) == 4
            name = params[0]
            pattern = decode_base64(params[1])
            color = rgb_to_hex(*(int(c) for c in rgb))
            verbosity = LogLevel.VERBOSE if is_legacy else LogLevel[params[4]]
            case_sensitive = (int(params[2]) & CASE_INSENSITIVE) == 0

            flt = cls(name, pattern, color, verbosity, case_sensitive)
            flt.was_loaded_from_legacy_file = is_legacy
            return flt
        except (ValueError, KeyError, FilterException) as e:
            raise FilterException(f"Wrong filter format: {filter_string}") from e

    def __eq__(self, other):
        if not isinstance(other, Filter):
            return NotImplemented
        return (self.flags == other.flags and self.name == other.name and self.color == other.color
                and self.pattern_string == other.pattern_string and self.temporary_info == other.temporary_info)

    __hash__ = None

    def __repr__(self):
        return (f"Filter: [Name={self.name}, pattern={self.pattern_string}, flags={self.flags}, "
                f"color={self.color}, verbosity={self.verbosity.name}, applied={self.applied}]")


def apply_filters(filters, logs):
    """
    Runs every applied filter over logs and counts hits per stream.
    Returns the indices of the logs matched by at least one filter.
    """
    applied = [f for f in filters if f.applied]
    for flt in applied:
        flt.init_temporary_info()

    streams = {}
    matched = []
    for i, record in enumerate(logs):
        hit = False
        for flt in applied:
            if flt.applies_to(record):
                if record.source not in streams:
                    streams[record.source] = classify(record.source)
                flt.temporary_info.increment_line_count(streams[record.source])
                hit = True
        if hit:
            matched.append(i)
    return matched
