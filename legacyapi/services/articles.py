"""
Blog posts and news articles.

Both publications behave the same way: the public only ever sees published
entries, addressed by slug, and ``published_at`` is stamped the first time an
entry is published.
"""
import logging
import re
from typing import ClassVar, List, Optional, Type, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth.exceptions import BadRequest, PrincipalNotFound
from ..db.models import BlogPost, ContentStatus, NewsArticle, PrincipalKind
from ..schemas.articles import ArticleCreate, ArticleOut, ArticleUpdate
from ..utils.datetime import utcnow
from .principals import PrincipalRepository

logger = logging.getLogger(__name__)

Article = Union[BlogPost, NewsArticle]

SLUG_MAX_LENGTH = 200
REQUIRED_FIELDS = ("title", "slug", "content", "status")


def slugify(title: str) -> str:
    """URL-friendly slug: lowercase words joined by single hyphens."""
    slug = re.sub(r"[^\w\s-]", "", title.lower())
    slug = re.sub(r"[\s_]+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


class ArticleService:
    """CRUD over one publication. Never commits; callers own the transaction."""

    model: ClassVar[Type[Article]]
    noun: ClassVar[str]
    target_type: ClassVar[str]

    def __init__(self, db: AsyncSession):
        self.db = db

    async def out(self, article: Article) -> ArticleOut:
        out = ArticleOut.model_validate(article)
        out.author_name = await PrincipalRepository(self.db).display_name(
            article.author_kind, article.author_id
        )
        return out

    async def get(self, article_id: int) -> Optional[Article]:
        result = await self.db.execute(select(self.model).where(self.model.id == article_id))
        return result.scalar_one_or_none()

    async def get_or_404(self, article_id: int) -> Article:
        article = await self.get(article_id)
        if article is None:
            raise PrincipalNotFound(f"{self.noun} not found")
        return article

    async def list_published(self) -> List[ArticleOut]:
        result = await self.db.execute(
            select(self.model)
            .where(self.model.status == ContentStatus.PUBLISHED.value)
            .order_by(self.model.published_at.desc(), self.model.id.desc())
        )
        return [await self.out(article) for article in result.scalars().all()]

    async def published_by_slug(self, slug: str) -> ArticleOut:
        result = await self.db.execute(
            select(self.model).where(
                self.model.slug == slug,
                self.model.status == ContentStatus.PUBLISHED.value,
            )
        )
        article = result.scalar_one_or_none()
        if article is None:
            raise PrincipalNotFound(f"{self.noun} not found")
        return await self.out(article)

    async def slug_taken(self, slug: str, exclude_id: Optional[int] = None) -> bool:
        query = select(self.model.id).where(self.model.slug == slug)
        if exclude_id is not None:
            query = query.where(self.model.id != exclude_id)
        result = await self.db.execute(query)
        return result.first() is not None

    async def unique_slug(self, title: str) -> str:
        """Slug for ``title``, suffixed ``-2``, ``-3``... when already used."""
        base = slugify(title)[:SLUG_MAX_LENGTH] or self.target_type.replace("_", "-")
        slug = base
        counter = 2
        while await self.slug_taken(slug):
            suffix = f"-{counter}"
            slug = f"{base[:SLUG_MAX_LENGTH - len(suffix)]}{suffix}"
            counter += 1
        return slug

    def _stamp_published(self, article: Article) -> None:
        if article.is_published and article.published_at is None:
            article.published_at = utcnow()

    async def create(
        self,
        data: ArticleCreate,
        author_kind: Optional[PrincipalKind] = None,
        author_id: Optional[int] = None,
    ) -> Article:
        slug = data.slug.lower()
        if await self.slug_taken(slug):
            raise BadRequest(f"A {self.noun.lower()} with this slug already exists")

        values = data.model_dump()
        values.update(slug=slug, status=data.status.value)
        article = self.model(**values, author_kind=author_kind, author_id=author_id)
        self._stamp_published(article)
        self.db.add(article)
        await self.db.flush()
        logger.info("Created %s %s (%s)", self.target_type, article.id, article.slug)
        return article

    async def update(self, article_id: int, data: ArticleUpdate) -> Article:
        article = await self.get_or_404(article_id)
        values = data.model_dump(exclude_unset=True)
        for field in REQUIRED_FIELDS:
            if field in values and values[field] is None:
                raise BadRequest(f"{field} cannot be empty")
        if values.get("slug") is not None:
            values["slug"] = values["slug"].lower()
            if await self.slug_taken(values["slug"], exclude_id=article_id):
                raise BadRequest(f"A {self.noun.lower()} with this slug already exists")
        if values.get("status") is not None:
            values["status"] = values["status"].value

        for field, value in values.items():
            setattr(article, field, value)
        self._stamp_published(article)
        await self.db.flush()
        return article

    async def delete(self, article_id: int) -> Article:
        article = await self.get_or_404(article_id)
        await self.db.delete(article)
        await self.db.flush()
        logger.info("Deleted %s %s", self.target_type, article_id)
        return article

    async def publish_draft(
        self,
        title: str,
        excerpt: Optional[str],
        content: str,
        featured_image_url: Optional[str],
        author_kind: PrincipalKind,
        author_id: int,
    ) -> Article:
        """Publish an approved submission under a generated slug."""
        article = self.model(
            title=title,
            slug=await self.unique_slug(title),
            excerpt=excerpt,
            content=content,
            featured_image_url=featured_image_url,
            status=ContentStatus.PUBLISHED.value,
            author_kind=author_kind,
            author_id=author_id,
        )
        self._stamp_published(article)
        self.db.add(article)
        await self.db.flush()
        logger.info("Published %s %s from a submission", self.target_type, article.id)
        return article


class BlogService(ArticleService):
    model = BlogPost
    noun = "Blog post"
    target_type = "blog_post"


class NewsService(ArticleService):
    model = NewsArticle
    noun = "News article"
    target_type = "news_article"


__all__ = ["ArticleService", "BlogService", "NewsService", "slugify"]
