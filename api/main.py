"""Stub backend entry point (FastAPI).

Run with:
    python -m api.main
"""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from api.routes import router
from config.settings import settings
from utils.helpers import get_logger

log = get_logger(__name__)

SESSION_COOKIE = "session_id"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown lifecycle."""
    log.info("voicecast stub backend starting up")
    log.info("Listening on %s:%s", settings.api_host, settings.api_port)
    yield
    log.info("voicecast stub backend shutting down")


app = FastAPI(
    title="voicecast stub backend",
    description="Canned voice cloning, faceswap and narrator speech endpoints",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def session_cookie(request: Request, call_next):
    """Issue a session cookie to clients that do not present one."""
    response = await call_next(request)
    if SESSION_COOKIE not in request.cookies:
        response.set_cookie(SESSION_COOKIE, uuid.uuid4().hex, httponly=True, samesite="lax")
    return response


app.include_router(router, prefix="/api", tags=["services"])


# Health check
@app.get("/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
    )
