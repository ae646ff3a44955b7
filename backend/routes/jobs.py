"""Job status API.

GET    /api/jobs/{job_id}  → poll status, progress and the eventual result
DELETE /api/jobs/{job_id}  → cancel (record removed, in-flight task cancelled)
GET    /api/jobs           → live records plus ids of units still running
"""

from fastapi import APIRouter, Depends, HTTPException, status

from backend.deps import Services, get_services
from vca.jobs import Job, JobList

router = APIRouter()


@router.get("/jobs", response_model=JobList)
async def list_jobs(services: Services = Depends(get_services)):
    return JobList(jobs=services.registry.list_jobs(), running_job_ids=services.executor.running_job_ids())


@router.get("/jobs/{job_id}", response_model=Job)
async def get_job(job_id: str, services: Services = Depends(get_services)):
    job = services.registry.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
    return job


@router.delete("/jobs/{job_id}")
async def cancel_job(job_id: str, services: Services = Depends(get_services)):
    if not services.executor.cancel_job(job_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
    return {"job_id": job_id, "cancelled": True}
