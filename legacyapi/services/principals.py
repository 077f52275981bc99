"""
Credential store: lookups over the administrator and family-member tables.
"""
from typing import Optional, Tuple, Type, Union

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.models import Admin, FamilyMember, PrincipalKind
from ..utils.datetime import utcnow

Principal = Union[Admin, FamilyMember]

MODELS: dict[PrincipalKind, Type[Principal]] = {
    PrincipalKind.ADMIN: Admin,
    PrincipalKind.FAMILY_MEMBER: FamilyMember,
}


def is_email(handle: str) -> bool:
    return "@" in handle


class PrincipalRepository:
    """Reads and writes principal rows. Never commits; callers own the transaction."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, kind: PrincipalKind, principal_id: int) -> Optional[Principal]:
        model = MODELS[kind]
        result = await self.db.execute(select(model).where(model.id == principal_id))
        return result.scalar_one_or_none()

    async def get_admin_by_email(self, email: str) -> Optional[Admin]:
        result = await self.db.execute(select(Admin).where(Admin.email == email))
        return result.scalar_one_or_none()

    async def get_admin_by_username(self, username: str) -> Optional[Admin]:
        result = await self.db.execute(select(Admin).where(Admin.username == username))
        return result.scalar_one_or_none()

    async def get_family_member_by_username(self, username: str) -> Optional[FamilyMember]:
        result = await self.db.execute(select(FamilyMember).where(FamilyMember.username == username))
        return result.scalar_one_or_none()

    async def find_by_handle(self, handle: str) -> Optional[Principal]:
        """Resolve a login handle with fixed precedence.

        An email only ever matches the admin table. A username matches a
        family member first and an admin second, so a username present in
        both tables always resolves to the family member.
        """
        if is_email(handle):
            return await self.get_admin_by_email(handle)

        member = await self.get_family_member_by_username(handle)
        if member is not None:
            return member
        return await self.get_admin_by_username(handle)

    async def find_for_rate_limit(self, handle: str) -> Optional[Tuple[PrincipalKind, int]]:
        """Resolve a handle to (kind, id) for rate-limit keying.

        Tries family member by username, admin by username, then admin by
        email when the handle looks like one.
        """
        member = await self.get_family_member_by_username(handle)
        if member is not None:
            return PrincipalKind.FAMILY_MEMBER, member.id

        admin = await self.get_admin_by_username(handle)
        if admin is None and is_email(handle):
            admin = await self.get_admin_by_email(handle)
        if admin is not None:
            return PrincipalKind.ADMIN, admin.id
        return None

    async def touch_last_login(self, principal: Principal) -> None:
        principal.last_login = utcnow()
        await self.db.flush()

    async def set_password(self, principal: Principal, password_hash: str, *, changed: bool) -> None:
        principal.password_hash = password_hash
        principal.password_changed = changed
        await self.db.flush()

    async def set_active(self, kind: PrincipalKind, principal_id: int, active: bool) -> bool:
        model = MODELS[kind]
        result = await self.db.execute(
            update(model).where(model.id == principal_id).values(is_active=active)
        )
        return result.rowcount > 0

    async def display_name(self, kind: Optional[PrincipalKind], principal_id: Optional[int]) -> Optional[str]:
        """Name of an author or uploader, or None when the principal is gone."""
        if kind is None or principal_id is None:
            return None
        principal = await self.get(kind, principal_id)
        return principal.display_name if principal is not None else None
