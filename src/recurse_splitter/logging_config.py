"""
Логирование для Recurse Splitter.

Использует contextvars, чтобы все события одного job'а были помечены
одним маркером (job_id), даже когда несколько job'ов идут параллельно.
"""

import logging
import sys
from contextvars import ContextVar
from typing import Optional

from pythonjsonlogger import jsonlogger


# Маркер текущего job'а
job_marker: ContextVar[str] = ContextVar("job_marker", default="")

_logging_configured = False


def set_job_marker(marker: Optional[str]) -> str:
    """Установить маркер текущего job'а. Возвращает установленный маркер."""
    marker = marker or ""
    job_marker.set(marker)
    return marker


def clear_job_marker() -> None:
    """Очистить маркер job'а."""
    job_marker.set("")


def get_job_marker() -> str:
    """Получить текущий маркер job'а."""
    return job_marker.get()


class MarkerFilter(logging.Filter):
    """Кладёт маркер из contextvars в record.job."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.job = job_marker.get() or "-"
        return True


def setup_logging(level: str = "INFO", environment: str = "development", force: bool = False) -> None:
    """Настроить логирование. Повторный вызов ничего не делает без force=True."""
    global _logging_configured
    if _logging_configured and not force:
        return

    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.addFilter(MarkerFilter())

    if environment == "production":
        # JSON формат для production
        formatter = jsonlogger.JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(job)s %(message)s",
            timestamp=True,
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(job)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Тишина для шумных библиотек
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    _logging_configured = True


def get_logger(name: str) -> logging.Logger:
    """Получить logger."""
    return logging.getLogger(name)
