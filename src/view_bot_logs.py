#!/usr/bin/env python3
"""
Bot Log Viewer - Tool for reading the reaction bot's log file

Features:
- Show the most recent log lines
- Filter by level or text
- Per-level summary
- Clear the log file
"""

import argparse
import os
import re
from collections import Counter
from typing import Dict, List, Optional

from bot_logger import DEFAULT_LOG_FILE, BotLogger

LINE_PATTERN = re.compile(r"^\[(?P<timestamp>[^\]]+)\] \[(?P<level>[A-Z]+)\] (?P<message>.*)$")


class BotLogViewer:
    """Utility for viewing the bot's plain text log"""

    def __init__(self, log_file: str = DEFAULT_LOG_FILE):
        self.sink = BotLogger(log_file=log_file, name="view_bot_logs", log_to_file=False)

    def recent_lines(self, lines: int = 50) -> List[str]:
        text = self.sink.get_recent_logs(lines)
        return [line for line in text.splitlines() if line.strip()]

    def filter_lines(self, lines: List[str], level: Optional[str] = None, search: Optional[str] = None) -> List[str]:
        """Filter lines based on level tag and/or text"""
        filtered = lines

        if level:
            tag = level.upper()
            filtered = [line for line in filtered if self.parse_level(line) == tag]

        if search:
            needle = search.lower()
            filtered = [line for line in filtered if needle in line.lower()]

        return filtered

    @staticmethod
    def parse_level(line: str) -> Optional[str]:
        match = LINE_PATTERN.match(line)
        return match.group("level") if match else None

    def summarize(self, lines: List[str]) -> Dict[str, int]:
        return dict(Counter(self.parse_level(line) or "OTHER" for line in lines))

    def print_summary(self, lines: List[str]):
        if not lines:
            print("📊 No entries found")
            return

        counts = self.summarize(lines)
        print(f"\n📊 **Log Summary** ({len(lines)} lines)\n")
        for level in ("ERROR", "WARN", "INFO", "DEBUG", "OTHER"):
            if level in counts:
                print(f"  • {level}: {counts[level]}")

        first = LINE_PATTERN.match(lines[0])
        last = LINE_PATTERN.match(lines[-1])
        if first and last:
            print(f"  • Time range: {first.group('timestamp')} to {last.group('timestamp')}")
        print()

    def print_lines(self, lines: List[str]):
        for line in lines:
            print(line)

    def clear(self):
        self.sink.clear_logs()


def main():
    parser = argparse.ArgumentParser(description="View the W/L reaction bot log")
    parser.add_argument("--lines", type=int, default=50, help="Number of recent lines to read (default: 50)")
    parser.add_argument("--level", choices=["error", "warn", "info", "debug"], help="Only show lines of this level")
    parser.add_argument("--search", help="Only show lines containing this text (case-insensitive)")
    parser.add_argument("--summary", action="store_true", help="Print per-level counts")
    parser.add_argument("--clear", action="store_true", help="Truncate the log file")
    parser.add_argument("--log-file", default=os.getenv("LOG_FILE", DEFAULT_LOG_FILE), help="Log file path")

    args = parser.parse_args()

    viewer = BotLogViewer(args.log_file)

    if args.clear:
        viewer.clear()
        print(f"🧹 Cleared {args.log_file}")
        return

    lines = viewer.filter_lines(viewer.recent_lines(args.lines), level=args.level, search=args.search)

    if args.summary:
        viewer.print_summary(lines)

    if not lines:
        print("❌ No matching log lines")
        return

    viewer.print_lines(lines)


if __name__ == "__main__":
    main()
