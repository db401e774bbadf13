"""
Job - принять запрос сразу, выполнить шаг позже (в фоне).
"""

from __future__ import annotations
from typing import Any, Callable, Dict, Optional

from recurse_splitter.contracts import JobRequest, StepResult
from recurse_splitter.job_log import JobLog, JobRegistry
from recurse_splitter.logging_config import clear_job_marker, get_logger, set_job_marker

logger = get_logger("splitter.jobs")

Step = Callable[[JobRequest, Optional[JobLog]], StepResult]


class Job:
    """Один принятый job и его журнал."""

    def __init__(self, request: JobRequest, log: JobLog, agent_id: str = "", agent_version: str = ""):
        self.request = request
        self.log = log
        self.agent_id = agent_id
        self.agent_version = agent_version

    @classmethod
    def accept(
        cls,
        request: JobRequest,
        registry: JobRegistry,
        agent_id: str = "",
        agent_version: str = "",
    ) -> "Job":
        """Зарегистрировать журнал job'а в статусе accepted."""
        log = registry.register(JobLog(request.job_id, request.target_entity))
        logger.info(f"Job accepted | job_id={request.job_id} target={request.target_entity}")
        return cls(request, log, agent_id=agent_id, agent_version=agent_version)

    @property
    def accept_response(self) -> Dict[str, Any]:
        return {
            "accepted": True,
            "job_id": self.request.job_id,
            "agent_id": self.agent_id,
            "agent_version": self.agent_version,
        }

    def run(self, step: Step) -> StepResult:
        """
        Выполнить шаг и записать результат в журнал.

        Ошибка записывается в журнал и пробрасывается дальше.
        """
        set_job_marker(self.request.job_id)
        self.log.mark_running()
        try:
            result = step(self.request, self.log)
        except Exception as exc:
            self.log.mark_error(exc)
            logger.exception(f"Job failed | job_id={self.request.job_id} error={exc}")
            raise
        else:
            self.log.mark_done(result)
            return result
        finally:
            clear_job_marker()
