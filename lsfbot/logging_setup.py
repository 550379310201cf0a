import logging
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_TELEGRAM_TOKEN_RE = re.compile(r"\b\d{8,12}:[A-Za-z0-9_-]{20,}\b")
_KEY_VALUE_RE = re.compile(r"(?i)\b(BOT_TOKEN|TELEGRAM_PROXY)\s*[:=]\s*([^\s]+)")
# Proxy URLs and portal links may carry basic auth credentials.
_URL_CREDENTIALS_RE = re.compile(r"(?i)\b([a-z][a-z0-9+.-]*://)[^/\s:@]+:[^/\s@]+@")


def redact(text: str) -> str:
    redacted = _TELEGRAM_TOKEN_RE.sub("[REDACTED]", text)
    redacted = _KEY_VALUE_RE.sub(lambda match: f"{match.group(1)}=[REDACTED]", redacted)
    return _URL_CREDENTIALS_RE.sub(lambda match: f"{match.group(1)}[REDACTED]@", redacted)


class RedactingFormatter(logging.Formatter):
    """Redacts the fully rendered record, traceback included."""

    def format(self, record: logging.LogRecord) -> str:
        return redact(super().format(record))


def setup_logging(log_path: Optional[str] = "data/bot.log", level: int = logging.INFO) -> None:
    """
    stdout, plus a rotating file when `log_path` is set.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_path:
        path = Path(log_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(path, maxBytes=5 * 1024 * 1024, backupCount=2, encoding="utf-8"))

    formatter = RedactingFormatter(LOG_FORMAT)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    # One "Running job" line per reminder cycle is noise.
    logging.getLogger("apscheduler.executors.default").setLevel(logging.WARNING)
