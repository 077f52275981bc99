"""
Family tree records and family-member account provisioning.
"""
import logging
import re
from typing import Any, Dict, List, Optional

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth.exceptions import BadRequest, PrincipalNotFound
from ..db.models import FamilyMember, TimelineEvent
from ..schemas.family import FamilyMemberCreate, FamilyMemberOut, FamilyMemberUpdate

logger = logging.getLogger(__name__)

LINK_FIELDS = ("father_id", "mother_id", "spouse_id")
USERNAME_MAX_LENGTH = FamilyMember.__table__.c.username.type.length


def base_username(first_name: Optional[str], last_name: Optional[str]) -> str:
    """``first.last`` lowercased with everything but letters and digits removed."""
    first = re.sub(r"[^a-z0-9]", "", (first_name or "").strip().lower())
    last = re.sub(r"[^a-z0-9]", "", (last_name or "").strip().lower())
    return f"{first}.{last}"


class FamilyService:
    """CRUD over family tree records. Never commits; callers own the transaction."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, member_id: int) -> Optional[FamilyMember]:
        result = await self.db.execute(select(FamilyMember).where(FamilyMember.id == member_id))
        return result.scalar_one_or_none()

    async def get_or_404(self, member_id: int) -> FamilyMember:
        member = await self.get(member_id)
        if member is None:
            raise PrincipalNotFound("Family member not found")
        return member

    async def list_members(self) -> List[FamilyMemberOut]:
        result = await self.db.execute(
            select(FamilyMember).order_by(FamilyMember.first_name, FamilyMember.last_name)
        )
        return [FamilyMemberOut.model_validate(member) for member in result.scalars().all()]

    async def detail(self, member_id: int) -> FamilyMemberOut:
        """A record with the names of its parents and spouse filled in."""
        member = await self.get_or_404(member_id)
        out = FamilyMemberOut.model_validate(member)
        for field in LINK_FIELDS:
            linked_id = getattr(member, field)
            if linked_id is None:
                continue
            linked = await self.get(linked_id)
            if linked is not None:
                setattr(out, field.replace("_id", "_name"), linked.display_name)
        return out

    async def _validate_links(self, values: Dict[str, Any], member_id: Optional[int] = None) -> None:
        for field in LINK_FIELDS:
            linked_id = values.get(field)
            if linked_id is None:
                continue
            if linked_id == member_id:
                raise BadRequest(f"{field} cannot reference the member itself")
            if await self.get(linked_id) is None:
                raise BadRequest(f"{field} references a family member that does not exist")

    async def create(self, data: FamilyMemberCreate) -> FamilyMember:
        values = data.model_dump()
        await self._validate_links(values)
        member = FamilyMember(**values)
        self.db.add(member)
        await self.db.flush()
        logger.info("Created family member %s", member.id)
        return member

    async def update(self, member_id: int, data: FamilyMemberUpdate) -> FamilyMember:
        member = await self.get_or_404(member_id)
        values = data.model_dump(exclude_unset=True)
        await self._validate_links(values, member_id)
        for field, value in values.items():
            setattr(member, field, value)
        await self.db.flush()
        return member

    async def delete(self, member_id: int) -> None:
        """Delete a record and clear every link that pointed at it."""
        member = await self.get_or_404(member_id)
        for field in LINK_FIELDS:
            column = getattr(FamilyMember, field)
            await self.db.execute(
                update(FamilyMember).where(column == member_id).values({field: None})
            )
        await self.db.execute(
            update(TimelineEvent)
            .where(TimelineEvent.associated_member_id == member_id)
            .values(associated_member_id=None)
        )
        await self.db.delete(member)
        await self.db.flush()
        logger.info("Deleted family member %s", member_id)

    async def username_taken(self, username: str) -> bool:
        result = await self.db.execute(
            select(FamilyMember.id).where(FamilyMember.username == username)
        )
        return result.first() is not None

    async def unique_username(self, member: FamilyMember) -> str:
        """``first.last``, then ``first.last1``, ``first.last2``... until unused.

        The base is shortened so that it plus any counter fits the column.
        """
        base = base_username(member.first_name, member.last_name)[:USERNAME_MAX_LENGTH]
        username = base
        counter = 1
        while await self.username_taken(username):
            suffix = str(counter)
            username = f"{base[:USERNAME_MAX_LENGTH - len(suffix)]}{suffix}"
            counter += 1
        return username

    async def without_accounts(self) -> List[FamilyMember]:
        result = await self.db.execute(
            select(FamilyMember)
            .where(or_(FamilyMember.username.is_(None), FamilyMember.password_hash.is_(None)))
            .order_by(FamilyMember.id)
        )
        return list(result.scalars().all())
