import argparse
import sys

from PySide6.QtCore import QtMsgType, qInstallMessageHandler

from log_viewer.config import get_config
from log_viewer.core.repository import LogsRepository, OpenLogsException, ProgressReporter
from log_viewer.utils.helpers import expand_log_paths


def qt_message_handler(mode, context, message):
    if mode == QtMsgType.QtDebugMsg and not _verbose:
        return

    if mode == QtMsgType.QtInfoMsg: mode_str = "Info"
    elif mode == QtMsgType.QtWarningMsg: mode_str = "Warning"
    elif mode == QtMsgType.QtCriticalMsg: mode_str = "Critical"
    elif mode == QtMsgType.QtFatalMsg: mode_str = "Fatal"
    else: mode_str = "Debug"
    print(f"[{mode_str}] {message}", file=sys.stderr)

_verbose = False


class ConsoleProgressReporter(ProgressReporter):
    def __init__(self, stream=None):
        self.stream = stream

    def on_progress(self, percent, description):
        print(f"[{percent:3d}%] {description}", file=self.stream or sys.stderr)

    def fail_progress(self):
        print("[Error] Could not open logs.", file=self.stream or sys.stderr)


def build_parser():
    parser = argparse.ArgumentParser(description="Log Viewer", fromfile_prefix_chars='@')
    parser.add_argument("logs", nargs="+", help="Log files to open (supports wildcards like *.txt)")
    parser.add_argument("-c", "--charset", help="Charset of the log files (default from settings)")
    parser.add_argument("--first", type=int, default=-1, help="First visible log index")
    parser.add_argument("--last", type=int, default=-1, help="Last visible log index")
    parser.add_argument("--streams", action="store_true", help="Only list the streams found")
    parser.add_argument("-v", "--verbose", action="store_true", help="Print debug messages")
    return parser


def main(argv=None):
    global _verbose
    args = build_parser().parse_args(argv)
    _verbose = args.verbose
    qInstallMessageHandler(qt_message_handler)

    config = get_config()
    repository = LogsRepository(config.parse_workers)
    charset = args.charset or config.default_encoding

    try:
        repository.open_log_files(expand_log_paths(args.logs), charset, ConsoleProgressReporter())
    except OpenLogsException as e:
        print(f"[Error] {e}", file=sys.stderr)
        return 1

    if args.streams:
        for stream in repository.available_streams:
            files = ", ".join(f.name for f in stream.files)
            print(f"{stream.name}: {len(stream)} logs ({files})")
        return 0

    repository.first_visible_index = args.first
    repository.last_visible_index = args.last
    for record in repository.currently_opened_logs:
        print(record.text)
    return 0

if __name__ == "__main__":
    sys.exit(main())
