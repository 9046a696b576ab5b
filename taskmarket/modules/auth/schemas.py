import re
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, Literal, Dict, Any
from datetime import datetime

MembershipTier = Literal["none", "regular", "pro", "vip"]

PASSWORD_MIN_LENGTH = 6
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")

STRENGTH_LABELS = ["Very Weak", "Weak", "Fair", "Strong"]


def password_strength(password: str) -> int:
    """0..4, one point each for length, lowercase, uppercase and a digit."""
    if not password:
        return 0
    strength = 0
    if len(password) >= PASSWORD_MIN_LENGTH:
        strength += 1
    if re.search(r"[a-z]", password):
        strength += 1
    if re.search(r"[A-Z]", password):
        strength += 1
    if re.search(r"\d", password):
        strength += 1
    return strength


class SignInRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def password_required(cls, value: str) -> str:
        if not value:
            raise ValueError("Password is required")
        return value


class SignUpRequest(BaseModel):
    full_name: str
    email: EmailStr
    password: str
    confirm_password: str
    accept_terms: bool = Field(False, validate_default=True)

    @field_validator("full_name")
    @classmethod
    def name_length(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise ValueError("Name must be at least 2 characters")
        return value

    @field_validator("password")
    @classmethod
    def password_complexity(cls, value: str) -> str:
        if len(value) < PASSWORD_MIN_LENGTH:
            raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
        if not PASSWORD_PATTERN.match(value):
            raise ValueError(
                "Password must contain at least one uppercase letter, one lowercase letter, and one number"
            )
        return value

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, value: str, info) -> str:
        # password is missing from info.data when it failed its own validation
        password = info.data.get("password")
        if password is not None and value != password:
            raise ValueError("Passwords don't match")
        return value

    @field_validator("accept_terms")
    @classmethod
    def terms_accepted(cls, value: bool) -> bool:
        if value is not True:
            raise ValueError("You must accept the terms and conditions")
        return value


class SignUpResponse(BaseModel):
    email: str
    user_id: Optional[str] = None
    verification_sent: bool = True
    message: str = "Account created. Please check your inbox to verify your email."


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str


class Profile(BaseModel):
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    membership_tier: MembershipTier = "none"
    membership_expires_at: Optional[datetime] = None
    membership_status: Optional[str] = None
    daily_tasks_used: int = 0
    last_task_reset_date: Optional[str] = None
    total_earnings: float = 0
    pending_earnings: float = 0
    approved_earnings: float = 0
    tasks_completed: int = 0
    rating: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        extra = "allow"


class MeResponse(BaseModel):
    user: Dict[str, Any]
    profile: Optional[Profile] = None
    is_admin: bool = False


class PasswordStrengthRequest(BaseModel):
    password: str


class PasswordStrengthResponse(BaseModel):
    strength: int
    label: str

    @classmethod
    def for_password(cls, password: str) -> "PasswordStrengthResponse":
        strength = password_strength(password)
        label = STRENGTH_LABELS[strength - 1] if strength > 0 else ""
        return cls(strength=strength, label=label)
