"""
Account administration models.
"""
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..db.models import AdminRole


class AccountOut(BaseModel):
    """An admin or family-member login account."""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    user_type: str = Field(alias="userType")
    username: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str
    is_active: bool
    password_changed: bool
    last_login: Optional[datetime] = None


class AccountList(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    admins: List[AccountOut]
    family_members: List[AccountOut] = Field(alias="familyMembers")


class ProvisionedAccount(BaseModel):
    """Credentials generated for a family member."""
    id: int
    username: str
    password: str
    message: str


class PasswordResetOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    temp_password: Optional[str] = Field(None, alias="tempPassword")


class AuditEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    admin_id: Optional[int] = Field(None, alias="adminId")
    action: str
    target_type: str = Field(alias="targetType")
    target_id: Optional[str] = Field(None, alias="targetId")
    details: Optional[Any] = None
    ip_address: Optional[str] = Field(None, alias="ipAddress")
    created_at: datetime = Field(alias="createdAt")


class AuditPage(BaseModel):
    entries: List[AuditEntryOut]
    page: int
    limit: int
    total: int


class AdminUserCreate(BaseModel):
    """Body for creating an admin-table account; the password is generated."""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    first_name: Optional[str] = Field(None, alias="firstName", max_length=100)
    last_name: Optional[str] = Field(None, alias="lastName", max_length=100)
    phone: Optional[str] = Field(None, max_length=50)
    username: Optional[str] = Field(None, min_length=1, max_length=50)
    role: AdminRole = AdminRole.MEMBER


class AdminUserUpdate(BaseModel):
    """Partial update of an admin-table account."""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    email: Optional[str] = Field(None, min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    first_name: Optional[str] = Field(None, alias="firstName", max_length=100)
    last_name: Optional[str] = Field(None, alias="lastName", max_length=100)
    phone: Optional[str] = Field(None, max_length=50)
    username: Optional[str] = Field(None, min_length=1, max_length=50)
    is_active: Optional[bool] = Field(None, alias="isActive")
    role: Optional[AdminRole] = None


class AdminUserOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    user: AccountOut
    temp_password: Optional[str] = Field(None, alias="tempPassword")


class DashboardStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    admins: int
    family_accounts: int = Field(alias="familyAccounts")
    family_tree_members: int = Field(alias="familyTreeMembers")
    published_blogs: int = Field(alias="publishedBlogs")
    published_news: int = Field(alias="publishedNews")
    published_archives: int = Field(alias="publishedArchives")
    pending_submissions: int = Field(alias="pendingSubmissions")
