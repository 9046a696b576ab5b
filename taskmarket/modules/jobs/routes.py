from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from taskmarket.database.supabase_client import get_request_supabase
from taskmarket.modules.auth.service import AuthService
from taskmarket.modules.files.cloudinary import CloudinaryUploader, get_uploader
from taskmarket.modules.jobs.schemas import Attachment, CategoryResponse, JobForm, JobResponse, JobWriteResponse
from taskmarket.modules.jobs.service import JobService
from taskmarket.core.dependencies import get_auth_service, get_current_user, require_admin
from supabase import Client
from typing import Dict, List, Optional

router = APIRouter(tags=["jobs"])


def get_job_service(
    supabase: Client = Depends(get_request_supabase),
    uploader: CloudinaryUploader = Depends(get_uploader),
) -> JobService:
    return JobService(supabase, uploader)


def job_form(
    title: str = Form(...),
    description: str = Form(...),
    instructions: str = Form(...),
    payment_amount: float = Form(...),
    difficulty: str = Form("easy"),
    required_tier: str = Form("regular"),
    estimated_time: Optional[str] = Form(None),
    category_id: Optional[str] = Form(None),
) -> JobForm:
    try:
        return JobForm(
            title=title,
            description=description,
            instructions=instructions,
            payment_amount=payment_amount,
            difficulty=difficulty,
            required_tier=required_tier,
            estimated_time=estimated_time,
            category_id=category_id,
        )
    except ValidationError as e:
        raise RequestValidationError(e.errors())


async def read_attachment(file: Optional[UploadFile] = File(None)) -> Optional[Attachment]:
    if file is None or not file.filename:
        return None
    content = await file.read()
    return Attachment(content=content, filename=file.filename, content_type=file.content_type)


@router.get("/jobs", response_model=List[JobResponse])
async def list_available_jobs(
    current_user: Dict = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
    service: JobService = Depends(get_job_service),
):
    """Active jobs unlocked by the caller's membership tier"""
    profile = auth_service.get_profile(current_user["id"])
    return service.list_available_jobs(profile.membership_tier if profile else None)


@router.get("/admin/jobs", response_model=List[JobResponse])
async def list_jobs(
    user_data: Dict = Depends(require_admin),
    service: JobService = Depends(get_job_service),
):
    return service.list_jobs()


@router.get("/admin/categories", response_model=List[CategoryResponse])
async def list_categories(
    user_data: Dict = Depends(require_admin),
    service: JobService = Depends(get_job_service),
):
    return service.list_categories()


@router.post("/admin/jobs", response_model=JobWriteResponse, status_code=201)
async def create_job(
    user_data: Dict = Depends(require_admin),
    form: JobForm = Depends(job_form),
    attachment: Optional[Attachment] = Depends(read_attachment),
    service: JobService = Depends(get_job_service),
):
    """Create a job; an attachment upload that fails does not block the job"""
    return await service.create_job(form, attachment)


@router.put("/admin/jobs/{job_id}", response_model=JobWriteResponse)
async def update_job(
    job_id: str,
    user_data: Dict = Depends(require_admin),
    form: JobForm = Depends(job_form),
    attachment: Optional[Attachment] = Depends(read_attachment),
    service: JobService = Depends(get_job_service),
):
    return await service.update_job(job_id, form, attachment)


@router.delete("/admin/jobs/{job_id}", status_code=204)
async def delete_job(
    job_id: str,
    user_data: Dict = Depends(require_admin),
    service: JobService = Depends(get_job_service),
):
    if not service.delete_job(job_id):
        raise HTTPException(status_code=404, detail="Job not found")
    return None


@router.post("/admin/jobs/{job_id}/toggle", response_model=JobResponse)
async def toggle_job_status(
    job_id: str,
    user_data: Dict = Depends(require_admin),
    service: JobService = Depends(get_job_service),
):
    """Flip is_active"""
    return service.toggle_job_status(job_id)
