from __future__ import annotations

from fastapi import FastAPI

from buildrev import __version__
from buildrev.api.endpoints import health, revision
from buildrev.api.middleware.error_shaping import SafeErrorMiddleware

app = FastAPI(
    title="buildrev API",
    version=__version__,
)

app.add_middleware(SafeErrorMiddleware)

app.include_router(health.router)
app.include_router(revision.router)
