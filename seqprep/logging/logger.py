# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Structured JSON logger for seqprep.

Every log line is one JSON object with a timestamp, level, the emitting
module and the message. Anything passed through `extra=` is merged into
the object, which is how the preprocessor reports things like the chosen
tokenizer type or how many subwords were dropped on truncation:

  {"ts": "2026-...", "level": "INFO", "module": "seqprep.processor.text_preprocessor",
   "msg": "Text preprocessor ready", "tokenizer_type": "bert", "max_seq_len": 128}

`get_logger` is the only place loggers get configured. Modules call it once
at import time and keep the returned instance.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

# Attributes every LogRecord carries. Anything else on the record came in
# through `extra=` and belongs in the JSON line.
_RECORD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "relativeCreated",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "pathname",
        "filename",
        "module",
        "levelno",
        "levelname",
        "processName",
        "process",
        "threadName",
        "thread",
        "message",
        "msecs",
        "taskName",
    }
)

_VALID_LOG_LEVELS = ("CRITICAL", "DEBUG", "ERROR", "INFO", "WARNING")


class JsonFormatter(logging.Formatter):
    """Render a log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "msg": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS and not key.startswith("_"):
                entry[key] = value

        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def _resolve_log_level(level_name: str) -> int:
    upper = level_name.upper()
    if upper not in _VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level '{level_name}'. Must be one of: {', '.join(_VALID_LOG_LEVELS)}"
        )
    return getattr(logging, upper)


def get_logger(
    name: str,
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Return a logger that writes JSON lines to stdout and, optionally, a file.

    Calling this again for a name that already has handlers updates the
    level and adds the file handler if a new log_file is given, so modules
    and the CLI can both ask for the same logger without duplicating output.

    Args:
        name: Logger name, usually the caller's __name__.
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL.
        log_file: Extra destination for the same JSON lines.

    Raises:
        ValueError: If log_level is not a known level name.
    """
    logger = logging.getLogger(name)
    level = _resolve_log_level(log_level)
    logger.setLevel(level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
    else:
        stdout_handler = logging.StreamHandler(stream=sys.stdout)
        stdout_handler.setLevel(level)
        stdout_handler.setFormatter(JsonFormatter())
        logger.addHandler(stdout_handler)

    if log_file is not None and not _has_file_handler(logger, log_file):
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(JsonFormatter())
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


def _has_file_handler(logger: logging.Logger, log_file: Path) -> bool:
    target = os.path.abspath(str(log_file))
    return any(
        isinstance(handler, logging.FileHandler) and handler.baseFilename == target
        for handler in logger.handlers
    )
