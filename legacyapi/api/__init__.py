"""
API routers for the Legacy API.

This module contains all the API routers for the application.
"""
from fastapi import APIRouter

# Create the main API router
router = APIRouter(prefix="/api")

from . import admin, archives, auth, family, submissions, timeline
from .articles import article_router
from ..services.articles import BlogService, NewsService

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(family.router, prefix="/family", tags=["family"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
router.include_router(article_router(BlogService), prefix="/blog", tags=["blog"])
router.include_router(article_router(NewsService), prefix="/news", tags=["news"])
router.include_router(timeline.router, prefix="/timeline", tags=["timeline"])
router.include_router(archives.router, prefix="/archives", tags=["archives"])
router.include_router(submissions.router, prefix="/submissions", tags=["submissions"])

__all__ = ["router"]
