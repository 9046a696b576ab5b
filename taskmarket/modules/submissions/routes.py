from fastapi import APIRouter, Depends, HTTPException
from taskmarket.database.supabase_client import get_request_supabase
from taskmarket.modules.files.downloads import fetch_download, to_response
from taskmarket.modules.submissions.schemas import (
    DataSource, ReviewRequest, ReviewResponse, StatusFilter, SubmissionResponse
)
from taskmarket.modules.submissions.service import SubmissionService, filter_submissions
from taskmarket.core.dependencies import require_admin
from supabase import Client
from typing import Dict, List, Optional

router = APIRouter(prefix="/admin/submissions", tags=["submissions"])


def get_submission_service(supabase: Client = Depends(get_request_supabase)) -> SubmissionService:
    return SubmissionService(supabase)


@router.get("", response_model=List[SubmissionResponse])
async def list_submissions(
    source: DataSource = "view",
    search: Optional[str] = None,
    status: StatusFilter = "all",
    user_data: Dict = Depends(require_admin),
    service: SubmissionService = Depends(get_submission_service),
):
    """Latest submissions, optionally narrowed by free-text search and status"""
    return filter_submissions(service.list_submissions(source), search=search, status=status)


@router.post("/{submission_id}/review", response_model=ReviewResponse)
async def review_submission(
    submission_id: str,
    review: ReviewRequest,
    user_data: Dict = Depends(require_admin),
    service: SubmissionService = Depends(get_submission_service),
):
    """Approve (crediting the worker) or reject a pending submission"""
    return service.review_submission(submission_id, review.status, review.feedback, user_data["id"])


@router.get("/{submission_id}/download")
async def download_submission_file(
    submission_id: str,
    user_data: Dict = Depends(require_admin),
    service: SubmissionService = Depends(get_submission_service),
):
    """Serve the deliverable as an attachment, or redirect to it if it cannot be fetched"""
    submission = service.get_submission(submission_id)
    if not submission.download_url:
        raise HTTPException(status_code=404, detail="This submission does not have an attached file")
    result = await fetch_download(submission.download_url, submission.download_name)
    return to_response(result)
