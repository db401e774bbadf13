"""
Хранилища записей для Recurse Splitter.

- ArkeRecordStore: HTTP API с условной записью по tip (expect_tip)
- InMemoryRecordStore: тот же контракт в памяти, для локальных прогонов и тестов
"""

from __future__ import annotations
import copy
import itertools
import threading
from typing import Any, Dict, Optional

import requests

from recurse_splitter.contracts import RecordSnapshot
from recurse_splitter.errors import (
    RecordFetchError,
    RecordUpdateError,
    TipFetchError,
    WriteConflictError,
)
from recurse_splitter.logging_config import get_logger

logger = get_logger("splitter.repository")

# Статусы, которыми API отвечает на устаревший expect_tip
CONFLICT_STATUSES = (409, 412)


def _error_body(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _json_object(response: requests.Response) -> Optional[Dict[str, Any]]:
    """Тело ответа как JSON-объект или None, если это не объект."""
    try:
        data = response.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


class ArkeRecordStore:
    """Записи Arke через REST API."""

    def __init__(
        self,
        api_base: str,
        agent_key: str = "",
        network: str = "test",
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "X-Arke-Network": network,
        })
        if agent_key:
            self.session.headers["Authorization"] = f"ApiKey {agent_key}"

    def _url(self, entity_id: str, suffix: str = "") -> str:
        return f"{self.api_base}/entities/{entity_id}{suffix}"

    def fetch_record(self, entity_id: str) -> RecordSnapshot:
        """Прочитать свойства записи."""
        try:
            response = self.session.get(self._url(entity_id), timeout=self.timeout)
        except requests.RequestException as exc:
            raise RecordFetchError(
                f"Failed to fetch entity {entity_id}: {exc}", entity_id=entity_id
            ) from exc

        if not response.ok:
            raise RecordFetchError(
                f"Failed to fetch entity {entity_id}: HTTP {response.status_code}",
                entity_id=entity_id,
                detail=_error_body(response),
            )

        data = _json_object(response)
        if data is None:
            raise RecordFetchError(
                f"Entity {entity_id} response is not a JSON object",
                entity_id=entity_id,
                detail=response.text,
            )
        properties = data.get("properties") or {}
        if not isinstance(properties, dict):
            raise RecordFetchError(
                f"Entity {entity_id} has malformed properties", entity_id=entity_id, detail=data
            )
        return RecordSnapshot(id=data.get("id", entity_id), properties=properties, tip=data.get("cid"))

    def fetch_tip(self, entity_id: str) -> str:
        """Прочитать текущий tip записи."""
        try:
            response = self.session.get(self._url(entity_id, "/tip"), timeout=self.timeout)
        except requests.RequestException as exc:
            raise TipFetchError(
                f"Failed to get entity tip: {exc}", entity_id=entity_id
            ) from exc

        if not response.ok:
            raise TipFetchError(
                f"Failed to get entity tip: HTTP {response.status_code}",
                entity_id=entity_id,
                detail=_error_body(response),
            )

        data = _json_object(response)
        if data is None:
            raise TipFetchError(
                "Failed to get entity tip: response is not a JSON object",
                entity_id=entity_id,
                detail=response.text,
            )
        tip = data.get("cid")
        if not tip:
            raise TipFetchError("Failed to get entity tip: empty cid", entity_id=entity_id)
        return tip

    def update_record(self, entity_id: str, expect_tip: str, properties: Dict[str, Any]) -> str:
        """Условная запись свойств. Возвращает новый tip."""
        try:
            response = self.session.put(
                self._url(entity_id),
                json={"expect_tip": expect_tip, "properties": properties},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise RecordUpdateError(
                f"Failed to update entity: {exc}", entity_id=entity_id
            ) from exc

        if response.status_code in CONFLICT_STATUSES:
            raise WriteConflictError(
                f"Entity {entity_id} changed since tip {expect_tip}",
                entity_id=entity_id,
                detail=_error_body(response),
            )
        if not response.ok:
            raise RecordUpdateError(
                f"Failed to update entity: HTTP {response.status_code}",
                entity_id=entity_id,
                detail=_error_body(response),
            )

        data = _json_object(response) or {}
        return data.get("cid") or ""


class InMemoryRecordStore:
    """Версионированное хранилище в памяти с тем же CAS-контрактом."""

    def __init__(self):
        self._lock = threading.Lock()
        self._records: Dict[str, Dict[str, Any]] = {}
        self._tips: Dict[str, str] = {}
        self._counter = itertools.count(1)
        self.write_count = 0

    def _next_tip(self) -> str:
        return f"tip-{next(self._counter)}"

    def create_record(self, entity_id: str, properties: Dict[str, Any]) -> str:
        """Создать запись. Возвращает её tip."""
        with self._lock:
            self._records[entity_id] = copy.deepcopy(properties)
            tip = self._next_tip()
            self._tips[entity_id] = tip
            return tip

    def get_properties(self, entity_id: str) -> Dict[str, Any]:
        """Копия текущих свойств (для проверок)."""
        with self._lock:
            return copy.deepcopy(self._records[entity_id])

    def fetch_record(self, entity_id: str) -> RecordSnapshot:
        with self._lock:
            if entity_id not in self._records:
                raise RecordFetchError(f"Entity {entity_id} not found", entity_id=entity_id)
            return RecordSnapshot(
                id=entity_id,
                properties=copy.deepcopy(self._records[entity_id]),
                tip=self._tips[entity_id],
            )

    def fetch_tip(self, entity_id: str) -> str:
        with self._lock:
            if entity_id not in self._tips:
                raise TipFetchError(f"Entity {entity_id} not found", entity_id=entity_id)
            return self._tips[entity_id]

    def update_record(self, entity_id: str, expect_tip: str, properties: Dict[str, Any]) -> str:
        with self._lock:
            if entity_id not in self._records:
                raise RecordUpdateError(f"Entity {entity_id} not found", entity_id=entity_id)
            current = self._tips[entity_id]
            if current != expect_tip:
                raise WriteConflictError(
                    f"Entity {entity_id} changed since tip {expect_tip}",
                    entity_id=entity_id,
                    detail={"expected": expect_tip, "actual": current},
                )
            self._records[entity_id] = copy.deepcopy(properties)
            tip = self._next_tip()
            self._tips[entity_id] = tip
            self.write_count += 1
            logger.debug(f"Record updated | id={entity_id} tip={tip}")
            return tip
