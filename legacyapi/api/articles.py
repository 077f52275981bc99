"""
Blog and news routes.

Both publications expose the same surface, so one factory builds a router
per article service: public reads of published entries by slug, and
admin-only writes addressed by id.
"""
from typing import Any, Dict, List, Type

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth.audit import AuditAction, AuditService
from ..auth.dependencies import require_admin
from ..db import get_db
from ..schemas.articles import ArticleCreate, ArticleOut, ArticleUpdate
from ..services.articles import ArticleService
from ..services.auth import CurrentPrincipal


def article_router(service_class: Type[ArticleService]) -> APIRouter:
    router = APIRouter()
    noun = service_class.noun
    target_type = service_class.target_type

    def audit_action(verb: str) -> AuditAction:
        return AuditAction(f"{target_type}_{verb}")

    @router.get("", response_model=List[ArticleOut], summary=f"List published {noun.lower()}s")
    async def list_articles(db: AsyncSession = Depends(get_db)) -> Any:
        return await service_class(db).list_published()

    @router.get("/{slug}", response_model=ArticleOut, summary=f"Get a published {noun.lower()} by slug")
    async def get_article(slug: str, db: AsyncSession = Depends(get_db)) -> Any:
        return await service_class(db).published_by_slug(slug)

    @router.post(
        "",
        response_model=ArticleOut,
        status_code=status.HTTP_201_CREATED,
        summary=f"Create a {noun.lower()}",
    )
    async def create_article(
        body: ArticleCreate,
        request: Request,
        db: AsyncSession = Depends(get_db),
        admin: CurrentPrincipal = Depends(require_admin),
    ) -> Any:
        """Publishing now (``status: published``) stamps ``published_at``."""
        service = service_class(db)
        article = await service.create(body, author_kind=admin.kind, author_id=admin.id)
        await AuditService.log_admin_action(
            db, admin.id, audit_action("create"), target_type, article.id, request,
            details={"title": article.title, "status": article.status},
        )
        return await service.out(article)

    @router.put("/{article_id}", response_model=ArticleOut, summary=f"Update a {noun.lower()}")
    async def update_article(
        article_id: int,
        body: ArticleUpdate,
        request: Request,
        db: AsyncSession = Depends(get_db),
        admin: CurrentPrincipal = Depends(require_admin),
    ) -> Any:
        service = service_class(db)
        article = await service.update(article_id, body)
        await AuditService.log_admin_action(
            db, admin.id, audit_action("update"), target_type, article_id, request,
            details={"fields": sorted(body.model_dump(exclude_unset=True)), "status": article.status},
        )
        return await service.out(article)

    @router.delete("/{article_id}", summary=f"Delete a {noun.lower()}")
    async def delete_article(
        article_id: int,
        request: Request,
        db: AsyncSession = Depends(get_db),
        admin: CurrentPrincipal = Depends(require_admin),
    ) -> Dict[str, str]:
        article = await service_class(db).delete(article_id)
        await AuditService.log_admin_action(
            db, admin.id, audit_action("delete"), target_type, article_id, request,
            details={"title": article.title},
        )
        return {"message": f"{noun} deleted successfully"}

    return router
