from fastapi import APIRouter, Depends
from taskmarket.modules.admin.schemas import OverviewStats, StorageStatus
from taskmarket.modules.admin.service import overview_stats
from taskmarket.modules.files.cloudinary import check_config
from taskmarket.modules.jobs.routes import get_job_service
from taskmarket.modules.jobs.service import JobService
from taskmarket.modules.submissions.routes import get_submission_service
from taskmarket.modules.submissions.schemas import DataSource
from taskmarket.modules.submissions.service import SubmissionService
from taskmarket.core.dependencies import require_admin
from typing import Dict

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/overview", response_model=OverviewStats)
async def get_overview(
    source: DataSource = "view",
    user_data: Dict = Depends(require_admin),
    job_service: JobService = Depends(get_job_service),
    submission_service: SubmissionService = Depends(get_submission_service),
):
    """Dashboard counters over jobs and the latest submissions"""
    return overview_stats(job_service.list_jobs(), submission_service.list_submissions(source))


@router.get("/storage-status", response_model=StorageStatus)
async def get_storage_status(user_data: Dict = Depends(require_admin)):
    """Whether job files go to a real hosting account or the temporary demo one"""
    return check_config()
