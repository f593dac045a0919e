import unittest

from log_viewer.core.parser import parse_line, parse_lines
from log_viewer.core.record import LogLevel, LogTimestamp

LINE = "01-06 20:46:39.491 821-1054/? W/ActivityManager:   Force finishing activity com.example/.UserProfileActivity\n"


class TestParseLine(unittest.TestCase):
    def test_structured_line(self):
        result = parse_line(LINE, source="main.txt", file_order=2, index=7)

        self.assertFalse(result.is_continuation)
        record = result.record
        self.assertEqual(LogTimestamp(0, 1, 6, 20, 46, 39, 491), record.timestamp)
        self.assertEqual(821, record.pid)
        self.assertEqual(1054, record.tid)
        self.assertEqual(LogLevel.WARN, record.level)
        self.assertEqual("ActivityManager", record.tag)
        self.assertEqual("  Force finishing activity com.example/.UserProfileActivity", record.message)
        self.assertEqual(LINE.rstrip("\n"), record.text)
        self.assertEqual(("main.txt", 2, 7), (record.source, record.file_order, record.index))

    def test_every_priority_letter(self):
        for letter, level in zip("VDIWEFA", LogLevel):
            line = f"01-06 20:46:26.091 821-2168/com.app {letter}/Tag: message"
            self.assertEqual(level, parse_line(line).record.level)

    def test_unknown_priority_is_not_a_log_line(self):
        line = "01-06 20:46:26.091 821-2168/? X/Tag: message"
        self.assertEqual((None, False), parse_line(line))

    def test_timestamp_with_year(self):
        record = parse_line("2024-01-06 20:46:26.091 821-2168/? I/Tag: message").record
        self.assertEqual(2024, record.timestamp.year)
        self.assertEqual("2024-01-06 20:46:26.091", str(record.timestamp))

    def test_timestamp_without_year(self):
        record = parse_line(LINE).record
        self.assertEqual("01-06 20:46:39.491", str(record.timestamp))

    def test_threadtime_format(self):
        record = parse_line("01-06 20:46:26.091   821  2168 E AndroidRuntime: FATAL EXCEPTION: main").record
        self.assertEqual((821, 2168, LogLevel.ERROR), (record.pid, record.tid, record.level))
        self.assertEqual("AndroidRuntime", record.tag)
        self.assertEqual("FATAL EXCEPTION: main", record.message)

    def test_empty_message(self):
        record = parse_line("01-06 20:46:26.091 821-2168/? I/Tag:").record
        self.assertEqual("Tag", record.tag)
        self.assertEqual("", record.message)

    def test_continuation(self):
        previous = parse_line("01-06 20:46:39.481 25175-25175/? E/AndroidRuntime: FATAL EXCEPTION: main").record
        result = parse_line("\tat com.example.Main.run(Main.java:10)\n", previous)

        self.assertTrue(result.is_continuation)
        self.assertEqual("FATAL EXCEPTION: main\n\tat com.example.Main.run(Main.java:10)", result.record.message)
        self.assertEqual(previous.index, result.record.index)
        self.assertEqual("FATAL EXCEPTION: main", previous.message)

    def test_unmatched_line_without_previous_is_discarded(self):
        self.assertEqual((None, False), parse_line("--------- beginning of main"))

    def test_parsing_is_deterministic(self):
        self.assertTrue(parse_line(LINE).record.same_entry(parse_line(LINE).record))


class TestParseLines(unittest.TestCase):
    def test_stack_trace_is_stitched(self):
        lines = [
            "--------- beginning of crash\n",
            "01-06 20:46:39.481 25175-25175/? E/AndroidRuntime: FATAL EXCEPTION: main\n",
            "java.lang.NullPointerException\n",
            "\tat com.example.Main.run(Main.java:10)\n",
            "01-06 20:46:39.491 821-1054/? W/ActivityManager: Force finishing\n",
        ]
        records = parse_lines(lines, source="crash.txt", file_order=1)

        self.assertEqual(2, len(records))
        self.assertEqual([0, 1], [r.index for r in records])
        self.assertEqual("FATAL EXCEPTION: main\njava.lang.NullPointerException\n\tat com.example.Main.run(Main.java:10)",
                         records[0].message)
        self.assertTrue(all(r.source == "crash.txt" and r.file_order == 1 for r in records))

    def test_byte_order_mark_on_first_line(self):
        records = parse_lines(["\ufeff" + LINE, LINE])

        self.assertEqual(2, len(records))
        self.assertEqual(LINE.rstrip("\n"), records[0].text)
        self.assertTrue(records[0].same_entry(records[1]))

    def test_no_lines(self):
        self.assertEqual([], parse_lines([]))

if __name__ == '__main__':
    unittest.main()
