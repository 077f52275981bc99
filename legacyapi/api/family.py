"""
Family tree routes.

Reads are public; signed-in callers get a ``viewer`` field describing who
they are. Writes require an admin.
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth.audit import AuditAction, AuditService
from ..auth.dependencies import get_optional_principal, require_admin
from ..db import get_db
from ..schemas.family import FamilyMemberCreate, FamilyMemberOut, FamilyMemberUpdate
from ..services.auth import CurrentPrincipal
from ..services.family import FamilyService

router = APIRouter()


def viewer(current: Optional[CurrentPrincipal]) -> Optional[Dict[str, Any]]:
    if current is None:
        return None
    return {"id": current.id, "userType": current.kind.value, "role": current.role}


@router.get("", summary="List family members")
async def list_family(
    db: AsyncSession = Depends(get_db),
    current: Optional[CurrentPrincipal] = Depends(get_optional_principal),
) -> Dict[str, Any]:
    members = await FamilyService(db).list_members()
    return {"members": members, "viewer": viewer(current)}


@router.get("/{member_id}", summary="Get a family member with parent and spouse names")
async def get_family_member(
    member_id: int,
    db: AsyncSession = Depends(get_db),
    current: Optional[CurrentPrincipal] = Depends(get_optional_principal),
) -> Dict[str, Any]:
    member = await FamilyService(db).detail(member_id)
    return {"member": member, "viewer": viewer(current)}


@router.post(
    "",
    response_model=FamilyMemberOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a family member",
)
async def create_family_member(
    body: FamilyMemberCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: CurrentPrincipal = Depends(require_admin),
) -> Any:
    member = await FamilyService(db).create(body)
    await AuditService.log_admin_action(
        db, admin.id, AuditAction.FAMILY_CREATE, "family_member", member.id, request,
    )
    return member


@router.put("/{member_id}", response_model=FamilyMemberOut, summary="Update a family member")
async def update_family_member(
    member_id: int,
    body: FamilyMemberUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: CurrentPrincipal = Depends(require_admin),
) -> Any:
    member = await FamilyService(db).update(member_id, body)
    await AuditService.log_admin_action(
        db, admin.id, AuditAction.FAMILY_UPDATE, "family_member", member_id, request,
        details={"fields": sorted(body.model_dump(exclude_unset=True))},
    )
    return member


@router.delete("/{member_id}", summary="Delete a family member")
async def delete_family_member(
    member_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: CurrentPrincipal = Depends(require_admin),
) -> Dict[str, str]:
    await FamilyService(db).delete(member_id)
    await AuditService.log_admin_action(
        db, admin.id, AuditAction.FAMILY_DELETE, "family_member", member_id, request,
    )
    return {"message": "Family member deleted successfully"}
