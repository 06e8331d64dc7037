"""
Scheduled job endpoints

Inspect the scheduler and trigger the insight refresh manually (admins only).
"""
from fastapi import APIRouter, Depends, HTTPException

from sensai.api.deps import require_admin
from sensai.scheduler import get_scheduled_jobs, run_job_now

router = APIRouter(prefix="/jobs", tags=["jobs"], dependencies=[Depends(require_admin)])


@router.get("")
async def list_jobs():
    """List scheduled jobs and their next run time"""
    return {"jobs": get_scheduled_jobs()}


@router.post("/{job_name}/run")
async def run_job(job_name: str):
    """
    Run a job now (e.g. POST /jobs/insights/run)

    Blocks until the job finishes; per-industry failures are reported in the
    result rather than as an error. A job that is already running (scheduled
    or manual) is not started twice.
    """
    outcome = await run_job_now(job_name)
    if not outcome['success']:
        if outcome['error'].startswith("Unknown job"):
            status = 404
        elif outcome.get('running'):
            status = 409
        else:
            status = 500
        raise HTTPException(status_code=status, detail=outcome['error'])
    return outcome
