from pydantic import BaseModel, field_validator
from typing import Optional, Literal, Dict, Any
from datetime import datetime
from dataclasses import dataclass

Difficulty = Literal["easy", "medium", "hard"]
RequiredTier = Literal["none", "regular", "pro", "vip"]


@dataclass(frozen=True)
class Attachment:
    content: bytes
    filename: str
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)


class JobForm(BaseModel):
    title: str
    description: str
    instructions: str
    payment_amount: float
    difficulty: Difficulty = "easy"
    required_tier: RequiredTier = "regular"
    estimated_time: Optional[str] = None
    category_id: Optional[str] = None

    @field_validator("title", "description", "instructions")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("This field is required")
        return value.strip()

    @field_validator("payment_amount")
    @classmethod
    def positive_amount(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("Payment amount must be greater than 0")
        return value

    @field_validator("estimated_time", "category_id")
    @classmethod
    def empty_to_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump()


class CategoryResponse(BaseModel):
    id: str
    name: str


class JobResponse(BaseModel):
    id: str
    title: str
    description: str
    instructions: str
    payment_amount: float
    difficulty: str
    required_tier: str
    estimated_time: Optional[str] = None
    is_active: bool = True
    current_submissions: int = 0
    category_id: Optional[str] = None
    category: Optional[Dict[str, Any]] = None
    job_file_url: Optional[str] = None
    job_file_name: Optional[str] = None
    job_file_type: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class JobWriteResponse(BaseModel):
    job: JobResponse
    file_attached: bool = False
    file_durable: Optional[bool] = None
    message: str
