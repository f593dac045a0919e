import heapq
import os

MAIN = "main"
SYSTEM = "system"
RADIO = "radio"
EVENTS = "events"
DEFAULT_STREAM = "unknown"

# (stream name, identifiers found in the file name). Checked in order, first match wins.
STREAM_IDENTIFIERS = (
    (MAIN, ("main", "-m.")),
    (SYSTEM, ("system", "-s.")),
    (RADIO, ("radio", "-r.")),
    (EVENTS, ("events", "-e.")),
)


def classify(file_name, identifiers=STREAM_IDENTIFIERS):
    """Infers the log buffer a file was dumped from, looking only at its name."""
    name = os.path.basename(file_name or "").upper()
    if not name:
        return DEFAULT_STREAM

    for stream, possibilities in identifiers:
        if any(p.upper() in name for p in possibilities):
            return stream
    return DEFAULT_STREAM


def record_sort_key(record):
    return record.sort_key


class LogStream:
    """All records of one log buffer, merged from every file classified into it."""

    def __init__(self, name, files, records):
        self.name = name
        self.files = tuple(files)
        self.records = tuple(records)

    def __len__(self):
        return len(self.records)

    def __repr__(self):
        return f"LogStream({self.name!r}, files={len(self.files)}, records={len(self.records)})"


def merge(stream_name, log_files):
    records = []
    for log_file in log_files:
        records.extend(log_file.records)
    # list.sort is stable and file_order/index make the key unique anyway
    records.sort(key=record_sort_key)
    return LogStream(stream_name, log_files, records)


def group_by_stream(log_files):
    """Groups files by their stream, keeping the order in which streams are first seen."""
    groups = {}
    for log_file in log_files:
        groups.setdefault(log_file.stream, []).append(log_file)
    return groups


def merge_streams(log_files):
    streams = []
    for name, files in group_by_stream(log_files).items():
        stream = merge(name, files)
        if stream.records:
            streams.append(stream)
    return streams


def flatten(streams):
    """Interleaves already sorted streams into one chronological sequence."""
    return list(heapq.merge(*(s.records for s in streams), key=record_sort_key))
