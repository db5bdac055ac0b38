# newsengine/logging_setup.py
"""
Logging for the news engine.

Every record carries the current request id. Event-style messages
(``FEED_CACHE_HIT``, ``INGEST_DONE`` ...) pass their details through
``extra=``; ``EventFormatter`` appends those fields as ``key=value`` pairs so
they survive into the console and the daily log file.
"""
import logging
from logging.config import dictConfig
from pathlib import Path
from typing import Optional
import contextvars
import os

request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")

# attributes every LogRecord has; anything else came in through extra=
_RESERVED = set(vars(logging.LogRecord("x", logging.INFO, "x", 0, "", None, None))) | {
    "message", "asctime", "request_id",
}


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


class EventFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = {k: v for k, v in vars(record).items() if k not in _RESERVED and not k.startswith("_")}
        if not fields:
            return line
        return line + " | " + " ".join(f"{k}={v!r}" for k, v in sorted(fields.items()))


BASE_DIR = Path(__file__).resolve().parents[1]

# third-party clients that log every request at INFO
QUIET_LOGGERS = ("httpx", "openai", "anthropic", "google_genai", "urllib3", "trafilatura")


def setup_logging(level: Optional[str] = None, log_dir: Optional[str] = None) -> Path:
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    directory = Path(log_dir or os.getenv("LOG_DIR") or BASE_DIR / "logs")
    directory.mkdir(parents=True, exist_ok=True)
    log_file = directory / "newsengine.log"

    handlers = ["console", "file"]
    dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"request_id": {"()": RequestIdFilter}},
        "formatters": {
            "event": {
                "()": EventFormatter,
                "format": "%(asctime)s %(levelname)-7s %(name)s [req=%(request_id)s] %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "event",
                "filters": ["request_id"],
            },
            "file": {
                "class": "logging.handlers.TimedRotatingFileHandler",
                "formatter": "event",
                "filters": ["request_id"],
                "filename": str(log_file),
                "when": "midnight",
                "backupCount": 14,
                "encoding": "utf-8",
            },
        },
        "loggers": {
            "newsengine": {"handlers": handlers, "level": level, "propagate": False},
            **{name: {"handlers": handlers, "level": "WARNING", "propagate": False} for name in QUIET_LOGGERS},
        },
        "root": {"handlers": handlers, "level": level},
    })

    logging.getLogger("newsengine").info("LOGGING_READY", extra={"log_file": str(log_file), "level": level})
    return log_file


def get_logger(name: str = "newsengine") -> logging.Logger:
    return logging.getLogger(name)
