"""
Account administration: admin-table users, family logins, activation and
password resets.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth.exceptions import BadRequest, PrincipalNotFound
from ..auth.rate_limiting import LoginRateLimiter
from ..core.security import PasswordHasher, generate_temporary_password
from ..db.models import Admin, AdminRole, FamilyMember, PrincipalKind
from ..schemas.admin import AccountList, AccountOut, AdminUserCreate, AdminUserUpdate
from .family import FamilyService
from .principals import Principal, PrincipalRepository
from .sessions import SessionStore

logger = logging.getLogger(__name__)


@dataclass
class Credentials:
    principal_id: int
    username: str
    password: str


def account_out(principal: Principal) -> AccountOut:
    return AccountOut(
        id=principal.id,
        user_type=principal.kind.value,
        username=principal.username,
        email=getattr(principal, "email", None),
        first_name=principal.first_name,
        last_name=principal.last_name,
        role=principal.effective_role,
        is_active=principal.is_active,
        password_changed=principal.password_changed,
        last_login=principal.last_login,
    )


class AccountService:
    """Admin-side account operations. Never commits; callers own the transaction."""

    def __init__(self, db: AsyncSession, hasher: PasswordHasher, rate_limiter: LoginRateLimiter):
        self.db = db
        self.hasher = hasher
        self.rate_limiter = rate_limiter
        self.principals = PrincipalRepository(db)
        self.sessions = SessionStore(db)

    async def list_accounts(self) -> AccountList:
        admins = await self.db.execute(select(Admin).order_by(Admin.id))
        members = await self.db.execute(
            select(FamilyMember)
            .where(FamilyMember.username.is_not(None))
            .order_by(FamilyMember.first_name, FamilyMember.last_name)
        )
        return AccountList(
            admins=[account_out(admin) for admin in admins.scalars().all()],
            family_members=[account_out(member) for member in members.scalars().all()],
        )

    async def _check_unique(
        self, email: Optional[str], username: Optional[str], exclude_id: Optional[int] = None
    ) -> None:
        if email is not None:
            admin = await self.principals.get_admin_by_email(email)
            if admin is not None and admin.id != exclude_id:
                raise BadRequest("An admin with this email already exists")
        if username is not None:
            admin = await self.principals.get_admin_by_username(username)
            if admin is not None and admin.id != exclude_id:
                raise BadRequest("An admin with this username already exists")

    async def create_admin(
        self,
        email: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        role: AdminRole = AdminRole.ADMIN,
        username: Optional[str] = None,
        created_by: Optional[int] = None,
        phone: Optional[str] = None,
        password_changed: bool = True,
    ) -> Admin:
        await self._check_unique(email, username)
        admin = Admin(
            email=email,
            username=username,
            first_name=first_name,
            last_name=last_name,
            role=role.value,
            password_hash=await self.hasher.hash_async(password),
            password_changed=password_changed,
            created_by=created_by,
            phone=phone,
        )
        self.db.add(admin)
        await self.db.flush()
        logger.info("Created admin %s (%s)", admin.id, admin.email)
        return admin

    async def provision_family_account(self, member_id: int) -> Credentials:
        """Give a family member a login; the initial password is the username."""
        family = FamilyService(self.db)
        member = await family.get_or_404(member_id)
        if member.username and member.password_hash:
            raise BadRequest("Family member already has an account")

        username = member.username or await family.unique_username(member)
        member.username = username
        await self.principals.set_password(
            member, await self.hasher.hash_async(username), changed=False
        )
        logger.info("Provisioned account %s for family member %s", username, member.id)
        return Credentials(principal_id=member.id, username=username, password=username)

    async def _get_target(self, kind: PrincipalKind, principal_id: int, actor_id: int, action: str) -> Principal:
        if kind == PrincipalKind.ADMIN and principal_id == actor_id:
            raise BadRequest(f"You cannot {action} your own account")
        principal = await self.principals.get(kind, principal_id)
        if principal is None:
            raise PrincipalNotFound()
        return principal

    async def set_active(self, kind: PrincipalKind, principal_id: int, active: bool, actor_id: int) -> int:
        """Activate or deactivate an account. Deactivation ends all its sessions."""
        await self._get_target(kind, principal_id, actor_id, "activate" if active else "deactivate")
        await self.principals.set_active(kind, principal_id, active)
        ended = 0
        if not active:
            ended = await self.sessions.deactivate_all(kind, principal_id)
        logger.info(
            "Account %s %s %s by admin %s", kind.value, principal_id,
            "activated" if active else "deactivated", actor_id,
        )
        return ended

    async def reset_password(self, kind: PrincipalKind, principal_id: int, actor_id: int) -> str:
        """Replace the password with a random temporary one and end all sessions."""
        principal = await self._get_target(kind, principal_id, actor_id, "reset the password of")
        temp_password = generate_temporary_password()
        await self.principals.set_password(
            principal, await self.hasher.hash_async(temp_password), changed=False
        )
        await self.sessions.deactivate_all(kind, principal_id)
        await self.rate_limiter.clear_principal(principal_id, kind)
        logger.info("Password reset for %s %s by admin %s", kind.value, principal_id, actor_id)
        return temp_password

    async def create_admin_user(self, data: AdminUserCreate, actor_id: int) -> Tuple[Admin, str]:
        """Create an admin-table account with a temporary password to change at first login."""
        temp_password = generate_temporary_password()
        admin = await self.create_admin(
            email=data.email,
            password=temp_password,
            first_name=data.first_name,
            last_name=data.last_name,
            role=data.role,
            username=data.username,
            created_by=actor_id,
            phone=data.phone,
            password_changed=False,
        )
        return admin, temp_password

    async def update_admin(self, admin_id: int, data: AdminUserUpdate, actor_id: int) -> Admin:
        """Change an admin-table account. Deactivation ends its sessions."""
        admin = await self.principals.get(PrincipalKind.ADMIN, admin_id)
        if admin is None:
            raise PrincipalNotFound()
        values = data.model_dump(exclude_unset=True)
        if admin_id == actor_id:
            if values.get("is_active") is False:
                raise BadRequest("You cannot deactivate your own account")
            if values.get("role") not in (None, AdminRole.ADMIN):
                raise BadRequest("You cannot change your own role")
        for field in ("email", "is_active", "role"):
            if field in values and values[field] is None:
                raise BadRequest(f"{field} cannot be empty")
        await self._check_unique(values.get("email"), values.get("username"), exclude_id=admin_id)

        if "role" in values:
            values["role"] = values["role"].value
        for field, value in values.items():
            setattr(admin, field, value)
        await self.db.flush()
        if values.get("is_active") is False:
            await self.sessions.deactivate_all(PrincipalKind.ADMIN, admin_id)
        logger.info("Admin %s updated by admin %s (%s)", admin_id, actor_id, ", ".join(sorted(values)))
        return admin

    async def delete_admin(self, admin_id: int, actor_id: int) -> int:
        """Deactivate an admin-table account; rows are never physically removed."""
        await self._get_target(PrincipalKind.ADMIN, admin_id, actor_id, "delete")
        return await self.set_active(PrincipalKind.ADMIN, admin_id, False, actor_id)


__all__ = ["AccountService", "Credentials", "account_out"]
