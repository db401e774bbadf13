"""
Контракты Recurse Splitter.

Типы данных шага и Protocol хранилища записей.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Literal, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, Field


@dataclass
class RecordSnapshot:
    """Снимок записи, прочитанный в начале шага."""

    id: str
    properties: Dict[str, Any] = field(default_factory=dict)
    tip: Optional[str] = None  # только для логов, для записи tip читается заново


@dataclass(frozen=True)
class StepResult:
    """Результат шага: драйвер по done решает, вызывать ли шаг снова."""

    entity_id: str
    done: bool

    def as_dict(self) -> Dict[str, Any]:
        return {"entity_id": self.entity_id, "done": self.done}


class JobRequest(BaseModel):
    """Входящий запрос на обработку одной записи."""

    job_id: str
    target_entity: str
    target_collection: Optional[str] = None
    job_collection: Optional[str] = None
    api_base: Optional[str] = None
    network: Optional[Literal["test", "main"]] = None
    recurse_depth: int = Field(default=0, ge=0)


class JobStatus(str, Enum):
    """Статусы job'а в журнале."""
    ACCEPTED = "accepted"
    RUNNING = "running"
    DONE = "done"
    ERROR = "error"


@runtime_checkable
class RecordStore(Protocol):
    """Протокол версионированного хранилища записей."""

    def fetch_record(self, entity_id: str) -> RecordSnapshot:
        """Прочитать текущие свойства записи."""
        ...

    def fetch_tip(self, entity_id: str) -> str:
        """Прочитать текущий tip (версию) записи."""
        ...

    def update_record(self, entity_id: str, expect_tip: str, properties: Dict[str, Any]) -> str:
        """Записать свойства, если tip не изменился. Возвращает новый tip."""
        ...
