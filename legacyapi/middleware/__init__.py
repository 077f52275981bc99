# middleware/__init__.py
"""
Legacy API middleware.
"""
import logging as log
from typing import List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .base import LegacyMiddleware
from .logging import RequestLoggingMiddleware

logger = log.getLogger("legacy.middleware")


def setup_middleware(
    app: FastAPI,
    cors_origins: List[str],
    excluded_paths: Optional[List[str]] = None,
) -> None:
    """Install request logging and CORS. Cookies need credentialed CORS."""
    app.add_middleware(
        RequestLoggingMiddleware,
        excluded_paths=excluded_paths or ['/health'],
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    logger.info("Middleware installed (CORS origins: %s)", ", ".join(cors_origins) or "none")


__all__ = ['LegacyMiddleware', 'RequestLoggingMiddleware', 'setup_middleware']
