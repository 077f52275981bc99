"""
Member content submissions and their moderation.

Any signed-in principal may propose a blog post, news article or archive
item. An admin approves or rejects it; approval publishes the content in the
same transaction, so a failure leaves the submission pending.
"""
import logging
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth.exceptions import BadRequest, Forbidden, PrincipalNotFound
from ..db.models import ContentSubmission, PrincipalKind, SubmissionStatus, SubmissionType
from ..schemas.archives import ArchiveCreate
from ..schemas.submissions import (
    DRAFT_MODELS,
    ArchiveDraft,
    ArticleDraft,
    SubmissionCreate,
    SubmissionOut,
    SubmissionStats,
)
from ..utils.datetime import utcnow
from .archives import ArchiveService
from .articles import BlogService, NewsService
from .principals import PrincipalRepository

logger = logging.getLogger(__name__)

ARTICLE_SERVICES = {
    SubmissionType.BLOG: BlogService,
    SubmissionType.NEWS: NewsService,
}


class SubmissionService:
    """Submission queue operations. Never commits; callers own the transaction."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def out(self, submission: ContentSubmission) -> SubmissionOut:
        return SubmissionOut(
            id=submission.id,
            type=submission.type,
            title=submission.title,
            content=submission.content,
            status=submission.status,
            submitter_type=submission.submitter_kind.value,
            submitter_id=submission.submitter_id,
            submitter_name=await PrincipalRepository(self.db).display_name(
                submission.submitter_kind, submission.submitter_id
            ),
            reviewed_by=submission.reviewed_by,
            review_notes=submission.review_notes,
            reviewed_at=submission.reviewed_at,
            published_id=submission.published_id,
            created_at=submission.created_at,
        )

    async def _outs(self, query) -> List[SubmissionOut]:
        result = await self.db.execute(
            query.order_by(ContentSubmission.created_at.desc(), ContentSubmission.id.desc())
        )
        return [await self.out(submission) for submission in result.scalars().all()]

    async def list_all(self) -> List[SubmissionOut]:
        return await self._outs(select(ContentSubmission))

    async def submitted_by(self, kind: PrincipalKind, principal_id: int) -> List[SubmissionOut]:
        return await self._outs(
            select(ContentSubmission).where(
                ContentSubmission.submitter_kind == kind,
                ContentSubmission.submitter_id == principal_id,
            )
        )

    async def get_or_404(self, submission_id: int) -> ContentSubmission:
        result = await self.db.execute(
            select(ContentSubmission).where(ContentSubmission.id == submission_id)
        )
        submission = result.scalar_one_or_none()
        if submission is None:
            raise PrincipalNotFound("Submission not found")
        return submission

    async def create(self, data: SubmissionCreate, kind: PrincipalKind, principal_id: int) -> ContentSubmission:
        try:
            DRAFT_MODELS[data.type].model_validate(data.content)
        except ValidationError as e:
            fields = ", ".join(".".join(str(part) for part in error["loc"]) for error in e.errors())
            raise BadRequest(f"Invalid {data.type.value} content: {fields}") from e

        submission = ContentSubmission(
            type=data.type.value,
            title=data.title,
            content=data.content,
            status=SubmissionStatus.PENDING.value,
            submitter_kind=kind,
            submitter_id=principal_id,
        )
        self.db.add(submission)
        await self.db.flush()
        logger.info(
            "Submission %s (%s) created by %s %s", submission.id, submission.type, kind.value, principal_id,
        )
        return submission

    async def _publish(self, submission: ContentSubmission) -> int:
        """Create the content an approved submission describes and return its id."""
        submission_type = SubmissionType(submission.type)
        if submission_type == SubmissionType.ARCHIVE:
            draft = ArchiveDraft.model_validate(submission.content)
            values = draft.model_dump()
            values["title"] = draft.title or submission.title
            item = await ArchiveService(self.db).create(
                ArchiveCreate(**values), submission.submitter_kind, submission.submitter_id
            )
            return item.id

        draft = ArticleDraft.model_validate(submission.content)
        article = await ARTICLE_SERVICES[submission_type](self.db).publish_draft(
            title=draft.title or submission.title,
            excerpt=draft.excerpt,
            content=draft.content,
            featured_image_url=draft.featured_image_url,
            author_kind=submission.submitter_kind,
            author_id=submission.submitter_id,
        )
        return article.id

    async def review(
        self,
        submission_id: int,
        status: SubmissionStatus,
        reviewer_id: int,
        notes: Optional[str] = None,
    ) -> ContentSubmission:
        """Approve or reject a pending submission. Approval publishes it."""
        if status == SubmissionStatus.PENDING:
            raise BadRequest("Invalid status")
        submission = await self.get_or_404(submission_id)
        if submission.status != SubmissionStatus.PENDING.value:
            raise BadRequest("Submission has already been reviewed")

        if status == SubmissionStatus.APPROVED:
            submission.published_id = await self._publish(submission)
        submission.status = status.value
        submission.reviewed_by = reviewer_id
        submission.review_notes = notes
        submission.reviewed_at = utcnow()
        await self.db.flush()
        logger.info("Submission %s %s by admin %s", submission_id, status.value, reviewer_id)
        return submission

    async def delete(
        self, submission_id: int, kind: PrincipalKind, principal_id: int, is_admin: bool
    ) -> ContentSubmission:
        """Withdraw a pending submission. Only its submitter or an admin may."""
        submission = await self.get_or_404(submission_id)
        owns = submission.submitter_kind == kind and submission.submitter_id == principal_id
        if not (owns or is_admin):
            raise Forbidden("Not authorized to delete this submission")
        if submission.status != SubmissionStatus.PENDING.value:
            raise BadRequest("Can only delete pending submissions")
        await self.db.delete(submission)
        await self.db.flush()
        return submission

    async def stats(self) -> SubmissionStats:
        result = await self.db.execute(
            select(ContentSubmission.status, func.count(ContentSubmission.id))
            .group_by(ContentSubmission.status)
        )
        counts = {status: count for status, count in result.all()}
        return SubmissionStats(**counts, total=sum(counts.values()))


__all__ = ["SubmissionService"]
