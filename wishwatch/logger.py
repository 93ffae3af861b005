# wishwatch/logger.py
import logging
import os
import sys
from logging.handlers import RotatingFileHandler

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


def _file_handler(path: str) -> logging.Handler:
    log_dir = os.path.dirname(path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    return RotatingFileHandler(
        path,
        maxBytes=int(os.getenv("LOG_MAX_BYTES", str(1024 * 1024))),
        backupCount=int(os.getenv("LOG_BACKUPS", "3")),
        encoding="utf-8",
    )


def setup_logging():
    """
    Configure the root logger once from LOG_* environment variables.
    Handlers already installed by an embedding app (or pytest) are kept
    as they are.
    """
    global _configured
    if _configured:
        return
    _configured = True

    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)
    if root.handlers:
        return

    handlers: list[logging.Handler] = []
    if _env_flag("LOG_TO_STDOUT", "true"):
        handlers.append(logging.StreamHandler(sys.stdout))

    file_error = None
    if _env_flag("LOG_TO_FILE", "false"):
        log_file = os.getenv("LOG_FILE", "data/wishwatch.log")
        try:
            handlers.append(_file_handler(log_file))
        except OSError as e:
            file_error = (log_file, e)

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    if file_error:
        root.warning("Could not open log file %s: %s", *file_error)


def get_logger(name: str | None = None) -> logging.Logger:
    setup_logging()
    return logging.getLogger(name)
