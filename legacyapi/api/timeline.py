"""
Family timeline routes. Reads are public; writes require an admin.
"""
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth.audit import AuditAction, AuditService
from ..auth.dependencies import require_admin
from ..auth.exceptions import BadRequest
from ..db import get_db
from ..db.models import PrincipalKind
from ..schemas.timeline import TimelineEventCreate, TimelineEventOut, TimelineEventUpdate
from ..services.auth import CurrentPrincipal
from ..services.timeline import TimelineService

router = APIRouter()


@router.get("", response_model=List[TimelineEventOut], summary="List timeline events")
async def list_events(db: AsyncSession = Depends(get_db)) -> Any:
    return await TimelineService(db).list_events()


@router.get("/range", response_model=List[TimelineEventOut], summary="Events between two dates")
async def events_in_range(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
) -> Any:
    if start_date is None or end_date is None:
        raise BadRequest("Start date and end date are required")
    return await TimelineService(db).in_range(start_date, end_date)


@router.get("/type/{event_type}", response_model=List[TimelineEventOut], summary="Events of one type")
async def events_by_type(event_type: str, db: AsyncSession = Depends(get_db)) -> Any:
    return await TimelineService(db).by_type(event_type)


@router.get("/{event_id}", response_model=TimelineEventOut, summary="Get a timeline event")
async def get_event(event_id: int, db: AsyncSession = Depends(get_db)) -> Any:
    service = TimelineService(db)
    return await service.out(await service.get_or_404(event_id))


@router.post(
    "",
    response_model=TimelineEventOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a timeline event",
)
async def create_event(
    body: TimelineEventCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: CurrentPrincipal = Depends(require_admin),
) -> Any:
    service = TimelineService(db)
    created_by = admin.id if admin.kind == PrincipalKind.ADMIN else None
    event = await service.create(body, created_by=created_by)
    await AuditService.log_admin_action(
        db, admin.id, AuditAction.TIMELINE_CREATE, "timeline_event", event.id, request,
        details={"title": event.title},
    )
    return await service.out(event)


@router.put("/{event_id}", response_model=TimelineEventOut, summary="Update a timeline event")
async def update_event(
    event_id: int,
    body: TimelineEventUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: CurrentPrincipal = Depends(require_admin),
) -> Any:
    service = TimelineService(db)
    event = await service.update(event_id, body)
    await AuditService.log_admin_action(
        db, admin.id, AuditAction.TIMELINE_UPDATE, "timeline_event", event_id, request,
        details={"fields": sorted(body.model_dump(exclude_unset=True))},
    )
    return await service.out(event)


@router.delete("/{event_id}", summary="Delete a timeline event")
async def delete_event(
    event_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: CurrentPrincipal = Depends(require_admin),
) -> Dict[str, str]:
    await TimelineService(db).delete(event_id)
    await AuditService.log_admin_action(
        db, admin.id, AuditAction.TIMELINE_DELETE, "timeline_event", event_id, request,
    )
    return {"message": "Timeline event deleted successfully"}
