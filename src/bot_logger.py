"""
Bot logger - level-filtered log sink for the reaction bot.

Every record is rendered as a single line:

    [2024-01-01T12:00:00.000Z] [INFO] message arg1 arg2

and written to the console (coloured by level) and appended to a plain
text log file. The sink configures the root logger by default, so module
loggers obtained with logging.getLogger(__name__) share the same output.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

DEFAULT_LOG_FILE = "bot.log"

# Ordered from most to least severe
LOG_LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

LEVEL_TAGS = {
    logging.CRITICAL: "ERROR",
    logging.ERROR: "ERROR",
    logging.WARNING: "WARN",
    logging.INFO: "INFO",
    logging.DEBUG: "DEBUG",
}

LEVEL_COLORS = {
    logging.CRITICAL: "\x1b[31m",
    logging.ERROR: "\x1b[31m",    # red
    logging.WARNING: "\x1b[33m",  # yellow
    logging.INFO: "\x1b[36m",     # cyan
    logging.DEBUG: "\x1b[37m",    # white
}
RESET_COLOR = "\x1b[0m"


class LineFormatter(logging.Formatter):
    """Formats records as `[ISO-timestamp] [LEVEL] message`."""

    def __init__(self):
        super().__init__("[%(asctime)s] [%(level_tag)s] %(message)s")

    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return created.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    def format(self, record: logging.LogRecord) -> str:
        record.level_tag = LEVEL_TAGS.get(record.levelno, record.levelname)
        return super().format(record)


class ColorFormatter(LineFormatter):
    """Line formatter that wraps the whole line in an ANSI colour."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        if not color:
            return line
        return f"{color}{line}{RESET_COLOR}"


class SafeFileHandler(logging.FileHandler):
    """File handler that reports write failures on stderr instead of raising."""

    def handleError(self, record: logging.LogRecord) -> None:
        error = sys.exc_info()[1]
        print(f"Failed to write to log file: {error}", file=sys.stderr)


def format_arg(arg: Any) -> str:
    """Render an extra log argument: containers as JSON, everything else via str()."""
    if isinstance(arg, (dict, list, tuple)):
        try:
            return json.dumps(arg, ensure_ascii=False, default=str)
        except (TypeError, ValueError):
            return str(arg)
    return str(arg)


class BotLogger:
    """
    Level-filtered logger writing to the console and a log file.

    The threshold is one of error < warn < info < debug; calls less severe
    than the threshold are dropped. With log_to_file=False records only go
    to the console, while clear_logs and get_recent_logs still act on
    log_file.
    """

    def __init__(
        self,
        log_file=DEFAULT_LOG_FILE,
        level: str = "info",
        name: Optional[str] = None,
        log_to_file: bool = True,
    ):
        self.log_file = Path(log_file)
        self.log_to_file = log_to_file
        self._logger = logging.getLogger(name)
        self._logger.setLevel(LOG_LEVELS.get(level, logging.INFO))
        if name:
            self._logger.propagate = False
        self._install_handlers()

    def _install_handlers(self) -> None:
        # Drop handlers left behind by an earlier BotLogger on the same logger
        for handler in list(self._logger.handlers):
            if getattr(handler, "bot_logger_handler", False):
                self._logger.removeHandler(handler)
                handler.close()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(ColorFormatter())
        console_handler.bot_logger_handler = True
        self._logger.addHandler(console_handler)

        if not self.log_to_file:
            return

        try:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = SafeFileHandler(self.log_file, mode="a", encoding="utf-8")
        except OSError as e:
            print(f"Failed to open log file {self.log_file}: {e}", file=sys.stderr)
            return

        file_handler.setFormatter(LineFormatter())
        file_handler.bot_logger_handler = True
        self._logger.addHandler(file_handler)

    @property
    def level(self) -> str:
        current = self._logger.level
        for name, levelno in LOG_LEVELS.items():
            if levelno == current:
                return name
        return logging.getLevelName(current).lower()

    def set_level(self, level: str) -> None:
        """Change the threshold; unknown level names are ignored."""
        if level in LOG_LEVELS:
            self._logger.setLevel(LOG_LEVELS[level])

    def log(self, level: str, message: str, *args: Any) -> None:
        levelno = LOG_LEVELS.get(level)
        if levelno is None or not self._logger.isEnabledFor(levelno):
            return

        text = str(message)
        if args:
            text += " " + " ".join(format_arg(arg) for arg in args)
        self._logger.log(levelno, text)

    def error(self, message: str, *args: Any) -> None:
        self.log("error", message, *args)

    def warn(self, message: str, *args: Any) -> None:
        self.log("warn", message, *args)

    def info(self, message: str, *args: Any) -> None:
        self.log("info", message, *args)

    def debug(self, message: str, *args: Any) -> None:
        self.log("debug", message, *args)

    def clear_logs(self) -> None:
        """Truncate the log file and record that it happened."""
        try:
            with open(self.log_file, "w", encoding="utf-8"):
                pass
            self.info("Log file cleared")
        except OSError as e:
            self.error("Failed to clear log file:", str(e))

    def get_recent_logs(self, lines: int = 50) -> str:
        """Return the last `lines` non-blank lines of the log file."""
        try:
            with open(self.log_file, "r", encoding="utf-8") as f:
                log_lines = [line.rstrip("\n") for line in f if line.strip()]
        except (OSError, UnicodeDecodeError) as e:
            self.error("Failed to read log file:", str(e))
            return "Error reading logs"

        if lines <= 0:
            return ""
        return "\n".join(log_lines[-lines:])

    def close(self) -> None:
        """Detach and close this logger's handlers."""
        for handler in list(self._logger.handlers):
            if getattr(handler, "bot_logger_handler", False):
                self._logger.removeHandler(handler)
                handler.close()
