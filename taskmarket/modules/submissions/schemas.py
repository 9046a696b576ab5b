from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime

SubmissionStatus = Literal["pending", "approved", "rejected"]
ReviewDecision = Literal["approved", "rejected"]
StatusFilter = Literal["all", "pending", "approved", "rejected"]
DataSource = Literal["view", "table"]


class SubmissionResponse(BaseModel):
    id: str
    submission_content: Optional[str] = None
    submission_url: Optional[str] = None
    file_url: Optional[str] = None
    worker_file_url: Optional[str] = None
    file_name: Optional[str] = None
    worker_file_name: Optional[str] = None
    status: SubmissionStatus = "pending"
    admin_feedback: Optional[str] = None
    payment_amount: float = 0
    created_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    job_title: Optional[str] = None
    user_id: str
    user_email: Optional[str] = None
    user_name: Optional[str] = None

    @property
    def download_url(self) -> Optional[str]:
        return self.submission_url or self.file_url or self.worker_file_url

    @property
    def download_name(self) -> str:
        return self.file_name or self.worker_file_name or "Submitted File"


class ReviewRequest(BaseModel):
    status: ReviewDecision
    feedback: Optional[str] = None


class ReviewResponse(BaseModel):
    submission_id: str
    status: ReviewDecision
    earnings_updated: bool = False
    message: str
