"""
Authentication routes for the Legacy API.
"""
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Request, Response

from ..auth.dependencies import (
    get_app_settings,
    get_auth_service,
    get_client_meta,
    require_member,
    session_token_from,
)
from ..core.config import Settings
from ..schemas.auth import (
    ChangePasswordRequest,
    ChangePasswordResponse,
    LoginRequest,
    MessageResponse,
    user_payload,
)
from ..services.auth import AuthService, CurrentPrincipal
from ..services.sessions import ClientMeta, SessionInfo

# Create router
router = APIRouter()


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_TTL_HOURS * 3600,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


@router.post(
    "/login",
    summary="Log in as an admin or a family member",
    response_description="The authenticated user",
)
async def login(
    body: LoginRequest,
    response: Response,
    client: ClientMeta = Depends(get_client_meta),
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_app_settings),
) -> Dict[str, Any]:
    """
    Log in with a username or an admin email address.

    - **username**: family-member username, admin username or admin email
    - **password**: account password

    Sets the ``session_token`` cookie on success.
    """
    result = await service.login(body.username, body.password, client)
    set_session_cookie(response, result.token, settings)
    return {
        "user": user_payload(result.principal, result.kind, result.role),
        "message": "Login successful",
    }


@router.post("/logout", response_model=MessageResponse, summary="End the current session")
async def logout(
    request: Request,
    response: Response,
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_app_settings),
) -> Any:
    await service.logout(session_token_from(request))
    clear_session_cookie(response, settings)
    return {"message": "Logout successful"}


@router.post(
    "/change-password",
    response_model=ChangePasswordResponse,
    summary="Change the current user's password",
)
async def change_password(
    body: ChangePasswordRequest,
    response: Response,
    current: CurrentPrincipal = Depends(require_member),
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_app_settings),
) -> Any:
    """
    Change the caller's password.

    Every session of the caller, including the current one, is ended; the
    client has to log in again with the new password.
    """
    await service.change_password(current.id, current.kind, body.current_password, body.new_password)
    clear_session_cookie(response, settings)
    return ChangePasswordResponse(
        message="Password changed successfully. Please log in again with your new password.",
    )


@router.get("/me", summary="Get current user information")
async def read_me(current: CurrentPrincipal = Depends(require_member)) -> Dict[str, Any]:
    return {"user": user_payload(current.principal, current.kind, current.role)}


@router.get(
    "/sessions",
    response_model=List[SessionInfo],
    summary="List the current user's active sessions",
)
async def list_sessions(
    current: CurrentPrincipal = Depends(require_member),
    service: AuthService = Depends(get_auth_service),
) -> Any:
    return await service.sessions.list_active(current.kind, current.id, current.session_token)
