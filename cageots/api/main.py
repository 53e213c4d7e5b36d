"""FastAPI main application."""
import logging
from datetime import datetime, timezone
from typing import Optional

import httpx
from fastapi import FastAPI, HTTPException, BackgroundTasks, Depends
from fastapi.security import APIKeyHeader
from pydantic import BaseModel

from cageots.config import LEGACY_ACCEPTED_STATUSES, config
from cageots.errors import AuthenticationError
from cageots.jobs.metrics_exporter import read_recent_metrics
from cageots.jobs.runner import KonnectorRunner
from cageots.store.state import BillStateDB

logger = logging.getLogger(__name__)

app = FastAPI(title="Les P'tits Cageots connector API", version="0.1.0")

# API Key security (if configured)
API_KEY_HEADER = APIKeyHeader(name="X-API-KEY", auto_error=False)

state_db = BillStateDB()

# Status of the runs started by this process, by run id
_runs: dict[str, dict] = {}
_active_run: Optional[str] = None


def verify_api_key(api_key: str = Depends(API_KEY_HEADER)) -> bool:
    """Verify API key if configured."""
    if config.API_KEY:
        if not api_key or api_key != config.API_KEY:
            raise HTTPException(status_code=403, detail="Invalid API key")
    return True


class RunRequest(BaseModel):
    """Request model for an import run."""
    login: Optional[str] = None
    password: Optional[str] = None
    dry_run: bool = False
    legacy_statuses: bool = False
    statuses: Optional[list[str]] = None


class RunStarted(BaseModel):
    """Response model for a started import run."""
    run_id: str
    status: str


class RunStatus(BaseModel):
    """State of an import run."""
    run_id: str
    status: str
    outcome: Optional[str] = None
    counters: dict = {}
    saved: list[str] = []
    errors: list[str] = []
    error: Optional[str] = None


@app.get("/health")
async def health():
    """Health check endpoint (no auth required)."""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "running": _active_run is not None,
    }


@app.post("/run", response_model=RunStarted, status_code=202)
async def run_import(
    request: RunRequest,
    background_tasks: BackgroundTasks,
    _: bool = Depends(verify_api_key),
):
    """Start one import in the background. Only one run at a time."""
    global _active_run

    login = request.login or config.LOGIN
    password = request.password or config.PASSWORD
    if not login or not password:
        raise HTTPException(status_code=400, detail="login and password are required")
    if _active_run is not None:
        raise HTTPException(status_code=409, detail=f"Run {_active_run} is already in progress")

    if request.legacy_statuses:
        statuses = LEGACY_ACCEPTED_STATUSES
    else:
        statuses = request.statuses or config.ACCEPTED_STATUSES

    runner = KonnectorRunner(
        login=login,
        password=password,
        accepted_statuses=statuses,
        dry_run=request.dry_run,
    )
    _active_run = runner.run_id
    _runs[runner.run_id] = {"run_id": runner.run_id, "status": "running"}

    background_tasks.add_task(_execute_run, runner)
    return RunStarted(run_id=runner.run_id, status="started")


@app.get("/run/{run_id}", response_model=RunStatus)
async def get_run(run_id: str, _: bool = Depends(verify_api_key)):
    """State of a run started by this process."""
    if run_id not in _runs:
        raise HTTPException(status_code=404, detail="Unknown run")
    return RunStatus(**_runs[run_id])


async def _execute_run(runner: KonnectorRunner):
    """Run the import (background task)."""
    global _active_run

    state = _runs[runner.run_id]
    try:
        summary = await runner.run()
        state.update(
            status="done",
            outcome=summary.outcome,
            counters=summary.counters,
            saved=summary.saved,
            errors=summary.errors,
        )
    except AuthenticationError as e:
        logger.error(f"Run {runner.run_id} refused: {e}")
        state.update(status="failed", error=e.kind.value)
    except httpx.HTTPError as e:
        logger.error(f"Vendor site unreachable: {e}")
        state.update(status="failed", error=f"Vendor site error: {e}")
    except Exception as e:
        logger.error(f"Run {runner.run_id} failed: {e}", exc_info=True)
        state.update(status="failed", error=str(e))
    finally:
        _active_run = None


@app.get("/bills")
async def list_bills(limit: int = 100, _: bool = Depends(verify_api_key)):
    """Bills already saved, most recent first."""
    await state_db.initialize()
    return {"bills": await state_db.list_bills(limit)}


@app.get("/metrics")
async def get_metrics(_: bool = Depends(verify_api_key)):
    """Last exported runs (requires API key if configured)."""
    metrics = read_recent_metrics()
    if not metrics:
        return {"error": "No metrics available"}
    return {"metrics": metrics}


if __name__ == "__main__":
    import uvicorn
    from cageots.logging_conf import setup_logging
    setup_logging()
    uvicorn.run(app, host="0.0.0.0", port=8000)
