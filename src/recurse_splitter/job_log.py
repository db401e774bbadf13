"""
Журнал job'а - побочный канал, который опрашивает драйвер.

Каждая запись дублируется в stdlib logging в формате "Message | key=value".
"""

from __future__ import annotations
import logging
import threading
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from recurse_splitter.contracts import JobStatus, StepResult
from recurse_splitter.logging_config import get_logger

LEVELS = {
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def format_fields(fields: Dict[str, Any]) -> str:
    return " ".join(f"{key}={value}" for key, value in fields.items())


class JobLog:
    """Сообщения, статус и результат одного job'а."""

    def __init__(self, job_id: str, target_entity: str, logger_name: str = "splitter.job"):
        self.job_id = job_id
        self.target_entity = target_entity
        self.status = JobStatus.ACCEPTED
        self.messages: List[Dict[str, Any]] = []
        self.outputs: List[Dict[str, Any]] = []
        self.error: Optional[Dict[str, str]] = None
        self.started_at = datetime.now(timezone.utc).isoformat()
        self.finished_at: Optional[str] = None
        self._logger = get_logger(logger_name)
        self._lock = threading.Lock()

    def _add(self, level: str, message: str, fields: Dict[str, Any]) -> None:
        entry = {
            "level": level,
            "message": message,
            "metadata": fields,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        with self._lock:
            self.messages.append(entry)

        line = f"{message} | {format_fields(fields)}" if fields else message
        if level == "success":
            line = f"✅ {line}"
        self._logger.log(LEVELS[level], line)

    def info(self, message: str, **fields: Any) -> None:
        self._add("info", message, fields)

    def success(self, message: str, **fields: Any) -> None:
        self._add("success", message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._add("warning", message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._add("error", message, fields)

    # === Status ===

    def mark_running(self) -> None:
        self.status = JobStatus.RUNNING

    def mark_done(self, result: StepResult) -> None:
        with self._lock:
            self.outputs.append(result.as_dict())
        self.status = JobStatus.DONE
        self.finished_at = datetime.now(timezone.utc).isoformat()

    def mark_error(self, exc: BaseException) -> None:
        self.error = {"type": type(exc).__name__, "message": str(exc)}
        self.status = JobStatus.ERROR
        self.finished_at = datetime.now(timezone.utc).isoformat()

    @property
    def finished(self) -> bool:
        return self.status in (JobStatus.DONE, JobStatus.ERROR)

    def as_dict(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "job_id": self.job_id,
                "target_entity": self.target_entity,
                "status": self.status.value,
                "started_at": self.started_at,
                "finished_at": self.finished_at,
                "messages": list(self.messages),
                "outputs": list(self.outputs),
                "error": self.error,
            }


class JobRegistry:
    """Журналы job'ов в памяти процесса, не больше retention штук."""

    def __init__(self, retention: int = 1000):
        self.retention = retention
        self._logs: "OrderedDict[str, JobLog]" = OrderedDict()
        self._lock = threading.Lock()

    def register(self, job_log: JobLog) -> JobLog:
        with self._lock:
            self._logs[job_log.job_id] = job_log
            self._logs.move_to_end(job_log.job_id)
            self._evict()
        return job_log

    def get(self, job_id: str) -> Optional[JobLog]:
        with self._lock:
            return self._logs.get(job_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._logs)

    def _evict(self) -> None:
        # Сначала выбрасываем самые старые завершённые журналы
        while len(self._logs) > self.retention:
            victim = next(
                (job_id for job_id, log in self._logs.items() if log.finished),
                next(iter(self._logs)),
            )
            del self._logs[victim]
