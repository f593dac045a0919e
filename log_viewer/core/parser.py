import re
from collections import namedtuple

from log_viewer.core.record import LogLevel, LogRecord, LogTimestamp

_TIMESTAMP = (
    r'(?:(?P<year>\d{4})-)?(?P<month>\d{2})-(?P<day>\d{2})\s+'
    r'(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})\.(?P<millis>\d{3})'
)

# Tried in order, first match wins.
LOG_LINE_PATTERNS = (
    # Android Studio: 01-06 20:46:26.091 821-2168/? V/ThermalMonitor: message
    re.compile(
        r'^' + _TIMESTAMP + r'\s+'
        r'(?P<pid>\d+)-(?P<tid>\d+)/\S*\s+'
        r'(?P<level>[A-Z])/(?P<tag>[^:]*?)\s*: ?(?P<message>.*)$'
    ),
    # adb logcat -v threadtime: 01-06 20:46:26.091   821  2168 V ThermalMonitor: message
    re.compile(
        r'^' + _TIMESTAMP + r'\s+'
        r'(?P<pid>\d+)\s+(?P<tid>\d+)\s+'
        r'(?P<level>[A-Z])\s+(?P<tag>[^:]*?)\s*: ?(?P<message>.*)$'
    ),
)

ParseResult = namedtuple("ParseResult", "record is_continuation")


def _strip_line_break(raw_line):
    return raw_line.rstrip("\r\n")


def match_line(line):
    """Returns the match of the first log line pattern that accepts line, or None."""
    for pattern in LOG_LINE_PATTERNS:
        m = pattern.match(line)
        if m and LogLevel.from_letter(m.group("level")) is not None:
            return m
    return None


def parse_line(raw_line, previous=None, source=None, file_order=0, index=0):
    """
    Parses one physical line.

    A structured line becomes a new record. Anything else is a continuation of
    `previous` (e.g. a stack trace line) when there is one, and is discarded
    otherwise. Pure: the caller carries `previous` from line to line.
    """
    line = _strip_line_break(raw_line)
    m = match_line(line)
    if m is None:
        if previous is None:
            return ParseResult(None, False)
        return ParseResult(previous.with_continuation(line), True)

    timestamp = LogTimestamp(
        int(m.group("year") or 0),
        int(m.group("month")),
        int(m.group("day")),
        int(m.group("hour")),
        int(m.group("minute")),
        int(m.group("second")),
        int(m.group("millis")),
    )
    record = LogRecord(
        timestamp=timestamp,
        pid=int(m.group("pid")),
        tid=int(m.group("tid")),
        level=LogLevel.from_letter(m.group("level")),
        tag=m.group("tag"),
        message=m.group("message") or "",
        text=line,
        source=source,
        file_order=file_order,
        index=index,
    )
    return ParseResult(record, False)


def parse_lines(lines, source=None, file_order=0):
    """Folds the lines of one file into its list of records."""
    records = []
    previous = None
    for line_number, raw_line in enumerate(lines):
        if line_number == 0:
            # Byte order mark left by editors saving as UTF-8
            raw_line = raw_line.lstrip("\ufeff")
        result = parse_line(raw_line, previous, source, file_order, len(records))
        if result.record is None:
            continue

        if result.is_continuation:
            records[-1] = result.record
        else:
            records.append(result.record)
        previous = result.record
    return records
