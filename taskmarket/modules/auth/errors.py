"""Classification of backend auth errors into user-facing categories."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class AuthErrorCategory(str, Enum):
    INVALID_CREDENTIALS = "invalid_credentials"
    EMAIL_NOT_CONFIRMED = "email_not_confirmed"
    ALREADY_REGISTERED = "already_registered"
    UNKNOWN = "unknown"


# Checked in order, case-insensitive substring match on the backend message
_KNOWN_MESSAGES = (
    ("invalid login", AuthErrorCategory.INVALID_CREDENTIALS),
    ("invalid credentials", AuthErrorCategory.INVALID_CREDENTIALS),
    ("email not confirmed", AuthErrorCategory.EMAIL_NOT_CONFIRMED),
    ("already registered", AuthErrorCategory.ALREADY_REGISTERED),
    ("already exists", AuthErrorCategory.ALREADY_REGISTERED),
)

USER_MESSAGES = {
    AuthErrorCategory.INVALID_CREDENTIALS: "Invalid email or password. Please try again.",
    AuthErrorCategory.EMAIL_NOT_CONFIRMED: "Please verify your email first. Check your inbox.",
    AuthErrorCategory.ALREADY_REGISTERED: "This email is already registered. Please sign in instead.",
    AuthErrorCategory.UNKNOWN: "An unexpected error occurred. Please try again.",
}

STATUS_CODES = {
    AuthErrorCategory.INVALID_CREDENTIALS: 401,
    AuthErrorCategory.EMAIL_NOT_CONFIRMED: 403,
    AuthErrorCategory.ALREADY_REGISTERED: 409,
    AuthErrorCategory.UNKNOWN: 500,
}


def classify_auth_error(message: Optional[str]) -> AuthErrorCategory:
    lowered = (message or "").lower()
    for needle, category in _KNOWN_MESSAGES:
        if needle in lowered:
            return category
    return AuthErrorCategory.UNKNOWN


@dataclass(frozen=True)
class AuthResult:
    """What sign-in / sign-up hand back instead of raising."""
    ok: bool
    category: Optional[AuthErrorCategory] = None
    message: Optional[str] = None
    detail: Optional[str] = None

    @classmethod
    def success(cls) -> "AuthResult":
        return cls(ok=True)

    @classmethod
    def from_error(cls, error: Union[BaseException, str]) -> "AuthResult":
        raw = str(error)
        category = classify_auth_error(raw)
        return cls(ok=False, category=category, message=USER_MESSAGES[category], detail=raw)

    @property
    def status_code(self) -> int:
        return 200 if self.ok else STATUS_CODES[self.category]
