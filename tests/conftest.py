"""
Конфигурация pytest для Recurse Splitter.
"""
import sys
import os
from pathlib import Path

import pytest

# Загружаем тестовые ENV
env_file = Path(__file__).parent.parent / ".env.test"
if env_file.exists():
    with open(env_file) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith('#') and '=' in line:
                key, value = line.split('=', 1)
                os.environ.setdefault(key, value)

# Добавляем src в путь
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))


@pytest.fixture
def memory_store():
    """Пустое хранилище записей в памяти."""
    from recurse_splitter.repository import InMemoryRecordStore
    return InMemoryRecordStore()


@pytest.fixture
def split_step(memory_store):
    """SplitStep поверх memory_store."""
    from recurse_splitter.step import SplitStep
    return SplitStep(repository=memory_store)


@pytest.fixture
def make_request():
    """Фабрика JobRequest."""
    from recurse_splitter.contracts import JobRequest

    def _make(target_entity: str = "entity-1", job_id: str = "job-1", recurse_depth: int = 0):
        return JobRequest(job_id=job_id, target_entity=target_entity, recurse_depth=recurse_depth)

    return _make


@pytest.fixture
def app_settings():
    """Настройки приложения для тестов API."""
    from recurse_splitter.settings import Settings
    return Settings(
        APP_NAME="recurse-splitter-test",
        AGENT_ID="klados-test",
        AGENT_VERSION="9.9.9",
        VERIFICATION_TOKEN="verify-me",
        STORE_BACKEND="memory",
        JOB_LOG_RETENTION=10,
    )


@pytest.fixture
def test_app(app_settings):
    """FastAPI приложение с хранилищем в памяти."""
    from recurse_splitter.main import create_app
    return create_app(app_settings)


@pytest.fixture
def test_client(test_app):
    """FastAPI test client."""
    from fastapi.testclient import TestClient
    return TestClient(test_app)
