"""
Recurse Splitter - точка входа HTTP-сервиса.

Рекурсивно делит текстовые сегменты записи пополам, пока все они не станут
не длиннее порога. Каждый вызов /process - ровно один шаг; решение вызвать
шаг снова принимает внешний оркестратор по полю done.
"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from recurse_splitter.api import router
from recurse_splitter.job_log import JobRegistry
from recurse_splitter.logging_config import get_logger, setup_logging
from recurse_splitter.settings import Settings, get_settings
from recurse_splitter.stores import RecordStoreFactory

logger = get_logger("splitter.main")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Собрать приложение для заданных настроек."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifecycle: startup и shutdown."""
        setup_logging(settings.LOG_LEVEL, settings.ENVIRONMENT)
        logger.info(f"🚀 {settings.APP_NAME} v{settings.AGENT_VERSION} starting...")
        logger.info(f"  Agent: {settings.AGENT_ID or '-'} | network={settings.ARKE_NETWORK}")
        logger.info(f"  Store: {settings.STORE_BACKEND} | api_base={settings.ARKE_API_BASE}")
        yield
        logger.info("👋 Recurse Splitter shutting down...")

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.AGENT_VERSION,
        description="Recursive text splitter step",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.registry = JobRegistry(retention=settings.JOB_LOG_RETENTION)
    app.state.store_factory = RecordStoreFactory(settings)
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("recurse_splitter.main:app", host="0.0.0.0", port=8000)
