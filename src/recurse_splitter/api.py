"""
HTTP-эндпоинты Recurse Splitter.

- GET  /health
- GET  /.well-known/arke-verification
- POST /process        - принять job, шаг выполняется в фоне
- GET  /jobs/{job_id}  - журнал job'а (его опрашивает драйвер)
"""

from typing import Any, Dict

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request

from recurse_splitter.contracts import JobRequest
from recurse_splitter.job_log import JobRegistry
from recurse_splitter.jobs import Job
from recurse_splitter.settings import Settings
from recurse_splitter.step import SplitStep
from recurse_splitter.stores import RecordStoreFactory

router = APIRouter()


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_registry(request: Request) -> JobRegistry:
    return request.app.state.registry


def get_store_factory(request: Request) -> RecordStoreFactory:
    return request.app.state.store_factory


@router.get("/health", tags=["Health"])
async def health(settings: Settings = Depends(get_app_settings)) -> Dict[str, Any]:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "agent_id": settings.AGENT_ID,
        "version": settings.AGENT_VERSION,
    }


@router.get("/.well-known/arke-verification", tags=["Health"])
async def verification(settings: Settings = Depends(get_app_settings)) -> Dict[str, str]:
    """Подтверждение владения эндпоинтом перед активацией агента."""
    token = settings.VERIFICATION_TOKEN
    klados_id = settings.ARKE_VERIFY_AGENT_ID or settings.AGENT_ID
    if not token or not klados_id:
        raise HTTPException(status_code=500, detail="Verification not configured")
    return {"verification_token": token, "klados_id": klados_id}


@router.post("/process", tags=["Jobs"])
def process(
    job_request: JobRequest,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_app_settings),
    registry: JobRegistry = Depends(get_registry),
    store_factory: RecordStoreFactory = Depends(get_store_factory),
) -> Dict[str, Any]:
    """Принять job сразу, сам шаг - фоновой задачей."""
    job = Job.accept(
        job_request,
        registry,
        agent_id=settings.AGENT_ID,
        agent_version=settings.AGENT_VERSION,
    )
    step = SplitStep(repository=store_factory(job_request))
    background_tasks.add_task(job.run, step)
    return job.accept_response


@router.get("/jobs/{job_id}", tags=["Jobs"])
def job_status(job_id: str, registry: JobRegistry = Depends(get_registry)) -> Dict[str, Any]:
    """Журнал job'а: статус, сообщения, результат."""
    job_log = registry.get(job_id)
    if job_log is None:
        raise HTTPException(status_code=404, detail=f"Job {job_id} not found")
    return job_log.as_dict()
