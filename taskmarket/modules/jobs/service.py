from supabase import Client
from taskmarket.config import settings
from taskmarket.modules.checkout.plans import tier_allows
from taskmarket.modules.files.cloudinary import CloudinaryUploader, UploadResult, format_file_size
from taskmarket.modules.jobs.schemas import Attachment, CategoryResponse, JobForm, JobResponse, JobWriteResponse
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

JOB_COLUMNS = "*, category:job_categories(name)"


class JobService:
    def __init__(self, supabase: Client, uploader: Optional[CloudinaryUploader] = None):
        self.supabase = supabase
        self.uploader = uploader

    def list_jobs(self) -> List[JobResponse]:
        """All jobs with their category name, newest first"""
        try:
            result = self.supabase.table("jobs")\
                .select(JOB_COLUMNS)\
                .order("created_at", desc=True)\
                .execute()
            return [JobResponse(**job) for job in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_available_jobs(self, member_tier: Optional[str]) -> List[JobResponse]:
        """Active jobs the member's tier unlocks"""
        try:
            result = self.supabase.table("jobs")\
                .select(JOB_COLUMNS)\
                .eq("is_active", True)\
                .order("created_at", desc=True)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        jobs = [JobResponse(**job) for job in result.data or []]
        return [job for job in jobs if tier_allows(member_tier, job.required_tier)]

    def list_categories(self) -> List[CategoryResponse]:
        try:
            result = self.supabase.table("job_categories").select("*").order("name").execute()
            return [CategoryResponse(**c) for c in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_job(self, job_id: str) -> JobResponse:
        try:
            result = self.supabase.table("jobs").select(JOB_COLUMNS).eq("id", job_id).maybe_single().execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Job not found")
        return JobResponse(**result.data)

    def check_attachment(self, attachment: Optional[Attachment]) -> None:
        if attachment is not None and attachment.size > settings.max_job_file_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"File too large. Maximum file size is {format_file_size(settings.max_job_file_bytes)}"
            )

    async def _upload_attachment(self, attachment: Optional[Attachment]) -> Optional[UploadResult]:
        """Upload failures are logged and the job is written without a file"""
        if attachment is None or self.uploader is None:
            return None
        try:
            return await self.uploader.upload(attachment.content, attachment.filename, attachment.content_type)
        except Exception as e:
            logger.warning(f"Job file upload failed: {e}")
            return None

    @staticmethod
    def _file_columns(attachment: Attachment, upload: UploadResult) -> Dict[str, Any]:
        return {
            "job_file_url": upload.url,
            "job_file_name": attachment.filename,
            "job_file_type": attachment.content_type,
        }

    async def create_job(self, form: JobForm, attachment: Optional[Attachment] = None) -> JobWriteResponse:
        self.check_attachment(attachment)
        upload = await self._upload_attachment(attachment)
        row = form.to_row()
        row.update({"job_file_url": None, "job_file_name": None, "job_file_type": None})
        if upload is not None:
            row.update(self._file_columns(attachment, upload))
        try:
            result = self.supabase.table("jobs").insert([row]).execute()
        except Exception as e:
            logger.error(f"Error creating job: {e}")
            raise HTTPException(status_code=500, detail=str(e) or "Failed to create job")
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create job")
        return JobWriteResponse(
            job=JobResponse(**result.data[0]),
            file_attached=upload is not None,
            file_durable=upload.durable if upload else None,
            message="Job created with file" if upload else "Job created without file",
        )

    async def update_job(self, job_id: str, form: JobForm, attachment: Optional[Attachment] = None) -> JobWriteResponse:
        """Update job fields; without a new attachment the stored file is left as is"""
        self.check_attachment(attachment)
        upload = await self._upload_attachment(attachment)
        update_data = form.to_row()
        if upload is not None:
            update_data.update(self._file_columns(attachment, upload))
        try:
            result = self.supabase.table("jobs")\
                .update(update_data)\
                .eq("id", job_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e) or "Failed to update job")
        if not result.data:
            raise HTTPException(status_code=404, detail="Job not found")
        return JobWriteResponse(
            job=JobResponse(**result.data[0]),
            file_attached=upload is not None,
            file_durable=upload.durable if upload else None,
            message="Job updated successfully",
        )

    def delete_job(self, job_id: str) -> bool:
        try:
            result = self.supabase.table("jobs").delete().eq("id", job_id).execute()
            return len(result.data or []) > 0
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def toggle_job_status(self, job_id: str) -> JobResponse:
        job = self.get_job(job_id)
        try:
            result = self.supabase.table("jobs")\
                .update({"is_active": not job.is_active})\
                .eq("id", job_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result.data:
            raise HTTPException(status_code=404, detail="Job not found")
        return JobResponse(**result.data[0])
