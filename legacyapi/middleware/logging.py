# middleware/logging.py
"""Request logging and timing middleware."""
import logging
import re
import time
from typing import List

from starlette.requests import Request
from starlette.responses import Response

from .base import LegacyMiddleware

logger = logging.getLogger("legacy.middleware.logging")


class RequestLoggingMiddleware(LegacyMiddleware):
    """
    Logs one line per request and adds the processing time to the response.

    Options:
        excluded_paths: path patterns that are never logged (default ``/health``)
        time_header: response header carrying the processing time
    """

    def setup(self):
        self.excluded_paths = self.config.get('excluded_paths', ['/health'])
        self.time_header = self.config.get('time_header', 'X-Process-Time')
        self._excluded_patterns = self._compile_patterns(self.excluded_paths)

    def _compile_patterns(self, paths: List[str]) -> List[re.Pattern]:
        """Compile regex patterns for path matching."""
        patterns = []
        for path in paths:
            try:
                if any(char in path for char in r'.*+?{}[]|()'):
                    patterns.append(re.compile(path))
                else:
                    patterns.append(re.compile(re.escape(path)))
            except re.error as e:
                logger.warning(f"Invalid regex pattern '{path}': {e}")
        return patterns

    def should_log_request(self, path: str) -> bool:
        return not any(pattern.match(path) for pattern in self._excluded_patterns)

    async def after_response(self, request: Request, response: Response) -> Response:
        process_time = time.perf_counter() - request.state.start_time
        response.headers[self.time_header] = f"{process_time:.4f} sec"

        if self.should_log_request(request.url.path):
            level = logging.WARNING if response.status_code >= 500 else logging.INFO
            logger.log(
                level,
                "%s %s -> %d (%.1f ms)",
                request.method, request.url.path, response.status_code, process_time * 1000,
                extra={
                    "request_id": request.state.request_id,
                    "ip": request.client.host if request.client else None,
                },
            )
        return response

    async def handle_exception(self, request: Request, exc: Exception) -> Response:
        logger.exception(
            "Unhandled error on %s %s", request.method, request.url.path,
            extra={"request_id": request.state.request_id},
        )
        raise exc
