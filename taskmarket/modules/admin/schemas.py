from pydantic import BaseModel


class OverviewStats(BaseModel):
    total_jobs: int
    active_jobs: int
    pending_reviews: int
    total_submissions: int


class StorageStatus(BaseModel):
    configured: bool
    is_demo: bool
    message: str
