"""
Account administration routes. Every route requires an admin and every
change is written to the admin audit log.
"""
import json
from typing import Any, Dict

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth.audit import AuditAction, AuditService
from ..auth.dependencies import get_app_settings, get_hasher, get_rate_limiter, require_admin
from ..auth.rate_limiting import LoginRateLimiter
from ..core.config import Settings
from ..core.security import PasswordHasher
from ..db import get_db
from ..db.models import PrincipalKind
from ..schemas.admin import (
    AccountList,
    AdminUserCreate,
    AdminUserOut,
    AdminUserUpdate,
    AuditEntryOut,
    AuditPage,
    DashboardStats,
    PasswordResetOut,
    ProvisionedAccount,
)
from ..services.accounts import AccountService, account_out
from ..services.auth import CurrentPrincipal
from ..services.dashboard import dashboard_stats

router = APIRouter(dependencies=[Depends(require_admin)])


def get_account_service(
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_hasher),
    rate_limiter: LoginRateLimiter = Depends(get_rate_limiter),
) -> AccountService:
    return AccountService(db, hasher, rate_limiter)


@router.post(
    "/family/{member_id}/account",
    response_model=ProvisionedAccount,
    summary="Create login credentials for a family member",
)
async def provision_family_account(
    member_id: int,
    request: Request,
    admin: CurrentPrincipal = Depends(require_admin),
    accounts: AccountService = Depends(get_account_service),
) -> Any:
    """
    Generate a unique ``first.last`` username for a family member.

    The initial password equals the username and must be changed at first login.
    """
    credentials = await accounts.provision_family_account(member_id)
    await AuditService.log_admin_action(
        accounts.db, admin.id, AuditAction.ACCOUNT_CREATE, PrincipalKind.FAMILY_MEMBER.value,
        member_id, request, details={"username": credentials.username},
    )
    return ProvisionedAccount(
        id=credentials.principal_id,
        username=credentials.username,
        password=credentials.password,
        message="Account created. The initial password is the username.",
    )


@router.get("/accounts", response_model=AccountList, summary="List login accounts")
async def list_accounts(accounts: AccountService = Depends(get_account_service)) -> Any:
    return await accounts.list_accounts()


@router.post("/accounts/{kind}/{principal_id}/deactivate", summary="Deactivate an account")
async def deactivate_account(
    kind: PrincipalKind,
    principal_id: int,
    request: Request,
    admin: CurrentPrincipal = Depends(require_admin),
    accounts: AccountService = Depends(get_account_service),
) -> Dict[str, Any]:
    ended = await accounts.set_active(kind, principal_id, False, admin.id)
    await AuditService.log_admin_action(
        accounts.db, admin.id, AuditAction.ACCOUNT_DEACTIVATE, kind.value, principal_id, request,
        details={"sessionsInvalidated": ended},
    )
    return {"message": "Account deactivated", "sessionsInvalidated": ended}


@router.post("/accounts/{kind}/{principal_id}/activate", summary="Activate an account")
async def activate_account(
    kind: PrincipalKind,
    principal_id: int,
    request: Request,
    admin: CurrentPrincipal = Depends(require_admin),
    accounts: AccountService = Depends(get_account_service),
) -> Dict[str, Any]:
    await accounts.set_active(kind, principal_id, True, admin.id)
    await AuditService.log_admin_action(
        accounts.db, admin.id, AuditAction.ACCOUNT_ACTIVATE, kind.value, principal_id, request,
    )
    return {"message": "Account activated"}


@router.post(
    "/accounts/{kind}/{principal_id}/reset-password",
    response_model=PasswordResetOut,
    response_model_exclude_none=True,
    summary="Reset an account's password",
)
async def reset_password(
    kind: PrincipalKind,
    principal_id: int,
    request: Request,
    admin: CurrentPrincipal = Depends(require_admin),
    accounts: AccountService = Depends(get_account_service),
    settings: Settings = Depends(get_app_settings),
) -> Any:
    """
    Replace the password with a random temporary one and end all sessions.

    The temporary password is only returned in development.
    """
    temp_password = await accounts.reset_password(kind, principal_id, admin.id)
    await AuditService.log_admin_action(
        accounts.db, admin.id, AuditAction.PASSWORD_RESET, kind.value, principal_id, request,
    )
    return PasswordResetOut(
        message="Password reset successfully. The user must change it at next login.",
        temp_password=temp_password if settings.ENV == "development" else None,
    )


@router.get("/audit-log", response_model=AuditPage, summary="Browse the admin audit log")
async def audit_log(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
) -> Any:
    entries, total = await AuditService.get_audit_log(db, page=page, limit=limit)
    return AuditPage(
        entries=[
            AuditEntryOut(
                id=entry.id,
                admin_id=entry.admin_id,
                action=entry.action,
                target_type=entry.target_type,
                target_id=entry.target_id,
                details=json.loads(entry.details) if entry.details else None,
                ip_address=entry.ip_address,
                created_at=entry.created_at,
            )
            for entry in entries
        ],
        page=page,
        limit=limit,
        total=total,
    )


@router.get("/auth/rate-limits", summary="Login rate limiter statistics")
async def rate_limit_stats(
    rate_limiter: LoginRateLimiter = Depends(get_rate_limiter),
) -> Dict[str, int]:
    return rate_limiter.stats()


@router.get("/dashboard/stats", response_model=DashboardStats, summary="Dashboard counts")
async def get_dashboard_stats(db: AsyncSession = Depends(get_db)) -> Any:
    return await dashboard_stats(db)


@router.post(
    "/users",
    response_model=AdminUserOut,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Create an admin-table user",
)
async def create_user(
    body: AdminUserCreate,
    request: Request,
    admin: CurrentPrincipal = Depends(require_admin),
    accounts: AccountService = Depends(get_account_service),
    settings: Settings = Depends(get_app_settings),
) -> Any:
    """
    The password is generated and must be changed at first login.

    It is only returned in development.
    """
    user, temp_password = await accounts.create_admin_user(body, admin.id)
    await AuditService.log_admin_action(
        accounts.db, admin.id, AuditAction.ACCOUNT_CREATE, PrincipalKind.ADMIN.value, user.id, request,
        details={"email": user.email, "role": user.role},
    )
    return AdminUserOut(
        message="User created successfully",
        user=account_out(user),
        temp_password=temp_password if settings.ENV == "development" else None,
    )


@router.put("/users/{admin_id}", summary="Update an admin-table user")
async def update_user(
    admin_id: int,
    body: AdminUserUpdate,
    request: Request,
    admin: CurrentPrincipal = Depends(require_admin),
    accounts: AccountService = Depends(get_account_service),
) -> Dict[str, Any]:
    user = await accounts.update_admin(admin_id, body, admin.id)
    await AuditService.log_admin_action(
        accounts.db, admin.id, AuditAction.ACCOUNT_UPDATE, PrincipalKind.ADMIN.value, admin_id, request,
        details={"fields": sorted(body.model_dump(exclude_unset=True))},
    )
    return {
        "message": "User updated successfully",
        "user": account_out(user).model_dump(mode="json", by_alias=True),
    }


@router.delete("/users/{admin_id}", summary="Deactivate an admin-table user")
async def delete_user(
    admin_id: int,
    request: Request,
    admin: CurrentPrincipal = Depends(require_admin),
    accounts: AccountService = Depends(get_account_service),
) -> Dict[str, Any]:
    ended = await accounts.delete_admin(admin_id, admin.id)
    await AuditService.log_admin_action(
        accounts.db, admin.id, AuditAction.ACCOUNT_DELETE, PrincipalKind.ADMIN.value, admin_id, request,
        details={"sessionsInvalidated": ended},
    )
    return {"message": "User deactivated successfully"}
