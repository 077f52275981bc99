"""
Content submission routes. Members submit; admins review.
"""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth.audit import AuditAction, AuditService
from ..auth.dependencies import require_admin, require_member
from ..db import get_db
from ..schemas.submissions import SubmissionCreate, SubmissionOut, SubmissionReview, SubmissionStats
from ..services.auth import CurrentPrincipal
from ..services.submissions import SubmissionService

router = APIRouter()


def _audit_admin(current: CurrentPrincipal) -> Optional[int]:
    return current.id if current.is_admin else None


@router.get(
    "",
    response_model=List[SubmissionOut],
    dependencies=[Depends(require_admin)],
    summary="List all submissions",
)
async def list_submissions(db: AsyncSession = Depends(get_db)) -> Any:
    return await SubmissionService(db).list_all()


@router.get("/my-submissions", response_model=List[SubmissionOut], summary="My submissions")
async def my_submissions(
    db: AsyncSession = Depends(get_db),
    current: CurrentPrincipal = Depends(require_member),
) -> Any:
    return await SubmissionService(db).submitted_by(current.kind, current.id)


@router.get(
    "/stats/overview",
    response_model=SubmissionStats,
    dependencies=[Depends(require_admin)],
    summary="Submission counts by status",
)
async def submission_stats(db: AsyncSession = Depends(get_db)) -> Any:
    return await SubmissionService(db).stats()


@router.post("", status_code=status.HTTP_201_CREATED, summary="Submit content for review")
async def create_submission(
    body: SubmissionCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current: CurrentPrincipal = Depends(require_member),
) -> Dict[str, Any]:
    """``content`` must match the draft shape of the submission ``type``."""
    service = SubmissionService(db)
    submission = await service.create(body, current.kind, current.id)
    await AuditService.log_admin_action(
        db, _audit_admin(current), AuditAction.SUBMISSION_CREATE, "submission", submission.id, request,
        details={"type": submission.type, "submittedBy": f"{current.kind.value}:{current.id}"},
    )
    out = await service.out(submission)
    return {"message": "Submission created successfully", "submission": out.model_dump(mode="json")}


@router.get(
    "/{submission_id}",
    response_model=SubmissionOut,
    dependencies=[Depends(require_admin)],
    summary="Get a submission",
)
async def get_submission(submission_id: int, db: AsyncSession = Depends(get_db)) -> Any:
    service = SubmissionService(db)
    return await service.out(await service.get_or_404(submission_id))


@router.patch("/{submission_id}/review", summary="Approve or reject a submission")
async def review_submission(
    submission_id: int,
    body: SubmissionReview,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: CurrentPrincipal = Depends(require_admin),
) -> Dict[str, Any]:
    """Approving publishes the submitted content and records its id."""
    service = SubmissionService(db)
    submission = await service.review(submission_id, body.status, admin.id, body.review_notes)
    await AuditService.log_admin_action(
        db, admin.id, AuditAction.SUBMISSION_REVIEW, "submission", submission_id, request,
        details={"status": submission.status, "publishedId": submission.published_id},
    )
    out = await service.out(submission)
    return {
        "message": f"Submission {submission.status} successfully",
        "submission": out.model_dump(mode="json"),
    }


@router.delete("/{submission_id}", summary="Withdraw a pending submission")
async def delete_submission(
    submission_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current: CurrentPrincipal = Depends(require_member),
) -> Dict[str, str]:
    await SubmissionService(db).delete(submission_id, current.kind, current.id, current.is_admin)
    await AuditService.log_admin_action(
        db, _audit_admin(current), AuditAction.SUBMISSION_DELETE, "submission", submission_id, request,
    )
    return {"message": "Submission deleted successfully"}
