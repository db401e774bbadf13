"""
Сборка хранилища записей по настройкам.

ARKE_AGENT_KEY уходит только на хост ARKE_API_BASE и хосты из
ARKE_TRUSTED_HOSTS. Кэшируются только хранилища для ARKE_API_BASE,
api_base из запроса получает отдельное хранилище на один job.
"""

from typing import Dict, Optional
from urllib.parse import urlsplit

from recurse_splitter.contracts import JobRequest, RecordStore
from recurse_splitter.logging_config import get_logger
from recurse_splitter.repository import ArkeRecordStore, InMemoryRecordStore
from recurse_splitter.settings import Settings

logger = get_logger("splitter.stores")

STORE_BACKENDS = ("arke", "memory")


def _host(url: str) -> str:
    return (urlsplit(url).hostname or "").lower()


class RecordStoreFactory:
    """Выдаёт хранилище для запроса job'а."""

    def __init__(self, settings: Settings):
        backend = settings.STORE_BACKEND
        if backend not in STORE_BACKENDS:
            logger.warning(f"Unknown store backend '{backend}', falling back to arke")
            backend = "arke"
        self.backend = backend
        self.settings = settings
        self.api_base = settings.ARKE_API_BASE.rstrip("/")
        self.trusted_hosts = {_host(self.api_base)} | {
            host.lower() for host in settings.ARKE_TRUSTED_HOSTS if host
        }
        self._memory: Optional[InMemoryRecordStore] = None
        # network -> хранилище для ARKE_API_BASE, не больше двух
        self._arke: Dict[str, ArkeRecordStore] = {}
        logger.info(f"Using {backend} record store | api_base={self.api_base}")

    def is_trusted(self, api_base: str) -> bool:
        """Можно ли отправлять ключ агента на этот api_base."""
        return _host(api_base) in self.trusted_hosts

    def _build(self, api_base: str, network: str) -> ArkeRecordStore:
        agent_key = self.settings.ARKE_AGENT_KEY
        if agent_key and not self.is_trusted(api_base):
            logger.warning(f"Untrusted api_base, agent key not sent | api_base={api_base}")
            agent_key = ""
        return ArkeRecordStore(
            api_base=api_base,
            agent_key=agent_key,
            network=network,
            timeout=self.settings.REQUEST_TIMEOUT,
        )

    def __call__(self, request: Optional[JobRequest] = None) -> RecordStore:
        if self.backend == "memory":
            if self._memory is None:
                self._memory = InMemoryRecordStore()
            return self._memory

        # api_base и network из запроса важнее настроек
        network = (request.network if request and request.network else self.settings.ARKE_NETWORK)
        api_base = (request.api_base if request and request.api_base else self.api_base).rstrip("/")

        if api_base != self.api_base:
            return self._build(api_base, network)

        if network not in self._arke:
            self._arke[network] = self._build(api_base, network)
        return self._arke[network]
