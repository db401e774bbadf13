"""
Ошибки шага разбиения.

Каждая ошибка фатальна для текущего вызова: запись не изменяется,
повтор - забота внешнего драйвера.
"""

from typing import Any, Optional


class StepError(Exception):
    """Базовая ошибка шага."""

    def __init__(self, message: str, entity_id: Optional[str] = None, detail: Any = None):
        super().__init__(message)
        self.entity_id = entity_id
        self.detail = detail


class RecordFetchError(StepError):
    """Не удалось прочитать запись."""


class TipFetchError(StepError):
    """Не удалось получить актуальный tip (версию) перед записью."""


class WriteConflictError(StepError):
    """Условная запись отклонена: запись изменилась после чтения tip."""


class RecordUpdateError(StepError):
    """Запись отклонена хранилищем по другой причине."""


class MalformedRecordError(StepError, TypeError):
    """Свойства записи не соответствуют схеме (например, сегмент не строка)."""
