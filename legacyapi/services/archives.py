"""
Archive item metadata.

Files themselves are uploaded to external object storage by the client; this
service only records and queries what was uploaded. Uploaders may change or
remove their own items; admins may change or remove any item.
"""
import logging
from typing import List, Optional

from sqlalchemy import String, case, cast, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth.exceptions import BadRequest, PrincipalNotFound
from ..db.models import ArchiveItem, ContentStatus, PrincipalKind
from ..schemas.archives import ArchiveCreate, ArchiveOut, ArchiveStats, ArchiveUpdate
from .principals import PrincipalRepository

logger = logging.getLogger(__name__)

DOCUMENT_TYPES = or_(ArchiveItem.file_type.like("application/%"), ArchiveItem.file_type == "text/plain")


def _count(condition):
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


class ArchiveService:
    """Archive metadata operations. Never commits; callers own the transaction."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def out(self, item: ArchiveItem) -> ArchiveOut:
        out = ArchiveOut.model_validate(item)
        out.uploaded_by_name = await PrincipalRepository(self.db).display_name(
            item.uploaded_by_kind, item.uploaded_by_id
        )
        return out

    async def list_published(
        self,
        category: Optional[str] = None,
        file_type: Optional[str] = None,
        search: Optional[str] = None,
        decade: Optional[str] = None,
    ) -> List[ArchiveOut]:
        """Published items, newest first, narrowed by the optional filters.

        ``file_type`` matches a MIME prefix (``image`` matches ``image/png``);
        ``search`` looks in the title, description and tags; ``decade`` looks
        in the tags only.
        """
        tags = cast(ArchiveItem.tags, String)
        query = select(ArchiveItem).where(ArchiveItem.status == ContentStatus.PUBLISHED.value)
        if category:
            query = query.where(ArchiveItem.category == category)
        if file_type:
            query = query.where(ArchiveItem.file_type.like(f"{file_type}%"))
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(
                ArchiveItem.title.ilike(pattern),
                ArchiveItem.description.ilike(pattern),
                tags.ilike(pattern),
            ))
        if decade:
            query = query.where(tags.ilike(f"%{decade}%"))

        result = await self.db.execute(
            query.order_by(ArchiveItem.created_at.desc(), ArchiveItem.id.desc())
        )
        return [await self.out(item) for item in result.scalars().all()]

    async def get(self, item_id: int) -> Optional[ArchiveItem]:
        result = await self.db.execute(select(ArchiveItem).where(ArchiveItem.id == item_id))
        return result.scalar_one_or_none()

    async def get_published_or_404(self, item_id: int) -> ArchiveItem:
        item = await self.get(item_id)
        if item is None or item.status != ContentStatus.PUBLISHED.value:
            raise PrincipalNotFound("Archive not found")
        return item

    async def create(
        self,
        data: ArchiveCreate,
        uploader_kind: Optional[PrincipalKind],
        uploader_id: Optional[int],
    ) -> ArchiveItem:
        item = ArchiveItem(
            **data.model_dump(),
            status=ContentStatus.PUBLISHED.value,
            uploaded_by_kind=uploader_kind,
            uploaded_by_id=uploader_id,
        )
        self.db.add(item)
        await self.db.flush()
        logger.info("Created archive item %s (%s)", item.id, item.file_type)
        return item

    async def _editable(
        self, item_id: int, kind: PrincipalKind, principal_id: int, is_admin: bool, action: str
    ) -> ArchiveItem:
        item = await self.get(item_id)
        owns = item is not None and item.uploaded_by_kind == kind and item.uploaded_by_id == principal_id
        if item is None or not (owns or is_admin):
            raise PrincipalNotFound(f"Archive not found or you do not have permission to {action} it")
        return item

    async def update(
        self, item_id: int, data: ArchiveUpdate, kind: PrincipalKind, principal_id: int, is_admin: bool
    ) -> ArchiveItem:
        item = await self._editable(item_id, kind, principal_id, is_admin, "update")
        values = data.model_dump(exclude_unset=True)
        if values.get("status") is not None:
            values["status"] = values["status"].value
        for field in ("title", "status"):
            if field in values and values[field] is None:
                raise BadRequest(f"{field} cannot be empty")
        if "tags" in values and values["tags"] is None:
            values["tags"] = []
        for field, value in values.items():
            setattr(item, field, value)
        await self.db.flush()
        return item

    async def delete(self, item_id: int, kind: PrincipalKind, principal_id: int, is_admin: bool) -> ArchiveItem:
        item = await self._editable(item_id, kind, principal_id, is_admin, "delete")
        await self.db.delete(item)
        await self.db.flush()
        logger.info("Deleted archive item %s", item_id)
        return item

    async def uploaded_by(self, kind: PrincipalKind, principal_id: int) -> List[ArchiveOut]:
        """Every item the principal uploaded, whatever its status."""
        result = await self.db.execute(
            select(ArchiveItem)
            .where(ArchiveItem.uploaded_by_kind == kind, ArchiveItem.uploaded_by_id == principal_id)
            .order_by(ArchiveItem.created_at.desc(), ArchiveItem.id.desc())
        )
        return [await self.out(item) for item in result.scalars().all()]

    async def stats(self) -> ArchiveStats:
        result = await self.db.execute(
            select(
                _count(DOCUMENT_TYPES).label("documents"),
                _count(ArchiveItem.file_type.like("image/%")).label("photos"),
                _count(ArchiveItem.file_type.like("video/%")).label("videos"),
                _count(ArchiveItem.file_type.like("audio/%")).label("audio"),
                func.count(ArchiveItem.id).label("total"),
                func.min(ArchiveItem.date_taken).label("earliest_date"),
                func.max(ArchiveItem.date_taken).label("latest_date"),
            ).where(ArchiveItem.status == ContentStatus.PUBLISHED.value)
        )
        row = result.one()
        stats = ArchiveStats(**row._mapping)
        if stats.earliest_date and stats.latest_date:
            stats.years_covered = stats.latest_date.year - stats.earliest_date.year + 1
        return stats


__all__ = ["ArchiveService"]
