"""
Family history timeline.
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth.exceptions import BadRequest, PrincipalNotFound
from ..db.models import FamilyMember, TimelineEvent
from ..schemas.timeline import TimelineEventCreate, TimelineEventOut, TimelineEventUpdate

logger = logging.getLogger(__name__)


class TimelineService:
    """CRUD and queries over timeline events. Never commits."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _outs(self, events: List[TimelineEvent]) -> List[TimelineEventOut]:
        member_ids = {event.associated_member_id for event in events if event.associated_member_id}
        names: Dict[int, str] = {}
        if member_ids:
            result = await self.db.execute(select(FamilyMember).where(FamilyMember.id.in_(member_ids)))
            names = {member.id: member.display_name for member in result.scalars().all()}

        outs = []
        for event in events:
            out = TimelineEventOut.model_validate(event)
            out.associated_member_name = names.get(event.associated_member_id)
            outs.append(out)
        return outs

    async def out(self, event: TimelineEvent) -> TimelineEventOut:
        return (await self._outs([event]))[0]

    async def get_or_404(self, event_id: int) -> TimelineEvent:
        result = await self.db.execute(select(TimelineEvent).where(TimelineEvent.id == event_id))
        event = result.scalar_one_or_none()
        if event is None:
            raise PrincipalNotFound("Timeline event not found")
        return event

    async def list_events(self) -> List[TimelineEventOut]:
        """Every event, most recent first."""
        result = await self.db.execute(
            select(TimelineEvent).order_by(TimelineEvent.event_date.desc(), TimelineEvent.id.desc())
        )
        return await self._outs(list(result.scalars().all()))

    async def in_range(self, start: date, end: date) -> List[TimelineEventOut]:
        """Events between ``start`` and ``end`` inclusive, oldest first."""
        if start > end:
            raise BadRequest("Start date must not be after end date")
        result = await self.db.execute(
            select(TimelineEvent)
            .where(TimelineEvent.event_date.between(start, end))
            .order_by(TimelineEvent.event_date, TimelineEvent.id)
        )
        return await self._outs(list(result.scalars().all()))

    async def by_type(self, event_type: str) -> List[TimelineEventOut]:
        result = await self.db.execute(
            select(TimelineEvent)
            .where(TimelineEvent.event_type == event_type)
            .order_by(TimelineEvent.event_date.desc(), TimelineEvent.id.desc())
        )
        return await self._outs(list(result.scalars().all()))

    async def _check_member(self, values: Dict[str, Any]) -> None:
        member_id = values.get("associated_member_id")
        if member_id is None:
            return
        result = await self.db.execute(select(FamilyMember.id).where(FamilyMember.id == member_id))
        if result.first() is None:
            raise BadRequest("associated_member_id references a family member that does not exist")

    async def create(self, data: TimelineEventCreate, created_by: Optional[int] = None) -> TimelineEvent:
        values = data.model_dump()
        await self._check_member(values)
        event = TimelineEvent(**values, created_by=created_by)
        self.db.add(event)
        await self.db.flush()
        logger.info("Created timeline event %s", event.id)
        return event

    async def update(self, event_id: int, data: TimelineEventUpdate) -> TimelineEvent:
        event = await self.get_or_404(event_id)
        values = data.model_dump(exclude_unset=True)
        if "title" in values and values["title"] is None:
            raise BadRequest("title cannot be empty")
        if "event_date" in values and values["event_date"] is None:
            raise BadRequest("eventDate cannot be empty")
        await self._check_member(values)
        for field, value in values.items():
            setattr(event, field, value)
        await self.db.flush()
        return event

    async def delete(self, event_id: int) -> None:
        event = await self.get_or_404(event_id)
        await self.db.delete(event)
        await self.db.flush()
        logger.info("Deleted timeline event %s", event_id)


__all__ = ["TimelineService"]
