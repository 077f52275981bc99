"""
Authentication request and response models.
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..db.models import PrincipalKind


class LoginRequest(BaseModel):
    """Login body. ``username`` may hold a username or an admin email."""
    username: Optional[str] = None
    password: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    """Change-password body."""
    model_config = ConfigDict(populate_by_name=True)

    current_password: Optional[str] = Field(None, alias="currentPassword")
    new_password: Optional[str] = Field(None, alias="newPassword")


class MessageResponse(BaseModel):
    message: str


class ChangePasswordResponse(MessageResponse):
    model_config = ConfigDict(populate_by_name=True)

    sessions_invalidated: bool = Field(True, alias="sessionsInvalidated")
    rate_limit_cleared: bool = Field(True, alias="rateLimitCleared")


def user_payload(principal: Any, kind: PrincipalKind, role: str) -> Dict[str, Any]:
    """Client view of a principal: every column except the password hash."""
    return {
        **principal.public_dict(),
        "userType": kind.value,
        "role": role,
        "mustChangePassword": not principal.password_changed,
    }
