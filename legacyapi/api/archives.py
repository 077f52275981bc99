"""
Family archive routes.

Anyone may browse published items. Signed-in members record items they have
uploaded to object storage and may change or remove their own; admins may
change or remove any item.
"""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth.audit import AuditAction, AuditService
from ..auth.dependencies import require_member
from ..db import get_db
from ..schemas.archives import ArchiveCreate, ArchiveOut, ArchiveStats, ArchiveUpdate
from ..services.archives import ArchiveService
from ..services.auth import CurrentPrincipal

router = APIRouter()

ANY = "All"


def _filter(value: Optional[str]) -> Optional[str]:
    return None if not value or value == ANY else value


def _audit_admin(current: CurrentPrincipal) -> Optional[int]:
    return current.id if current.is_admin else None


@router.get("", summary="List published archive items")
async def list_archives(
    category: Optional[str] = Query(None),
    file_type: Optional[str] = Query(None, alias="type"),
    search: Optional[str] = Query(None),
    decade: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    """Filters set to ``All`` or left empty are ignored."""
    items = await ArchiveService(db).list_published(
        category=_filter(category),
        file_type=_filter(file_type),
        search=_filter(search),
        decade=_filter(decade),
    )
    return {"success": True, "data": [item.model_dump(mode="json") for item in items], "count": len(items)}


@router.get("/stats", response_model=ArchiveStats, summary="Archive statistics")
async def archive_stats(db: AsyncSession = Depends(get_db)) -> Any:
    return await ArchiveService(db).stats()


@router.get("/user/my-archives", response_model=List[ArchiveOut], summary="Items I uploaded")
async def my_archives(
    db: AsyncSession = Depends(get_db),
    current: CurrentPrincipal = Depends(require_member),
) -> Any:
    return await ArchiveService(db).uploaded_by(current.kind, current.id)


@router.get("/{archive_id}", response_model=ArchiveOut, summary="Get a published archive item")
async def get_archive(archive_id: int, db: AsyncSession = Depends(get_db)) -> Any:
    service = ArchiveService(db)
    return await service.out(await service.get_published_or_404(archive_id))


@router.post(
    "",
    response_model=ArchiveOut,
    status_code=status.HTTP_201_CREATED,
    summary="Record an uploaded archive item",
)
async def create_archive(
    body: ArchiveCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current: CurrentPrincipal = Depends(require_member),
) -> Any:
    service = ArchiveService(db)
    item = await service.create(body, current.kind, current.id)
    await AuditService.log_admin_action(
        db, _audit_admin(current), AuditAction.ARCHIVE_CREATE, "archive", item.id, request,
        details={"title": item.title, "uploadedBy": f"{current.kind.value}:{current.id}"},
    )
    return await service.out(item)


@router.put("/{archive_id}", response_model=ArchiveOut, summary="Update an archive item")
async def update_archive(
    archive_id: int,
    body: ArchiveUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current: CurrentPrincipal = Depends(require_member),
) -> Any:
    service = ArchiveService(db)
    item = await service.update(archive_id, body, current.kind, current.id, current.is_admin)
    await AuditService.log_admin_action(
        db, _audit_admin(current), AuditAction.ARCHIVE_UPDATE, "archive", archive_id, request,
        details={"fields": sorted(body.model_dump(exclude_unset=True))},
    )
    return await service.out(item)


@router.delete("/{archive_id}", summary="Delete an archive item")
async def delete_archive(
    archive_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current: CurrentPrincipal = Depends(require_member),
) -> Dict[str, str]:
    item = await ArchiveService(db).delete(archive_id, current.kind, current.id, current.is_admin)
    await AuditService.log_admin_action(
        db, _audit_admin(current), AuditAction.ARCHIVE_DELETE, "archive", archive_id, request,
        details={"title": item.title},
    )
    return {"message": "Archive deleted successfully"}
