from __future__ import annotations

import logging
import traceback
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

log = logging.getLogger("buildrev.errors")


class SafeErrorMiddleware(BaseHTTPMiddleware):
    """
    Unhandled errors (e.g. git failing mid-probe) become a bare 500; the
    traceback is logged, never returned.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            log.error(
                "Unhandled error: %s path=%s\n%s",
                str(e),
                request.url.path,
                traceback.format_exc(),
            )
            return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})
