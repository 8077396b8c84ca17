# watchworthy/main.py
from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
import logging
import time

import uvicorn

from watchworthy.core import config

# ------------ Router imports ------------
from watchworthy.routers import (
    football_routes,
    games_routes,
    nba_routes,
    nhl_routes,
)

# ------------ Logging ------------
logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger("watchworthy")

# ------------ App ------------
app = FastAPI(
    title="Watchworthy API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url=None,
    openapi_url="/openapi.json",
)


# ------------ Access log middleware ------------
class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        t0 = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
        finally:
            dt = (time.perf_counter() - t0) * 1000
            logger.info(
                "ACCESS %s %s q=%s -> %s in %.1fms",
                request.method,
                request.url.path,
                request.url.query,
                status,
                dt,
            )
        return response


app.add_middleware(AccessLogMiddleware)

# ------------ CORS ------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------ Global error handler ------------
@app.exception_handler(Exception)
async def _unhandled(request: Request, exc: Exception):
    logger.exception("UNHANDLED ERROR: %s %s", request.method, request.url)
    return JSONResponse(status_code=500, content={"error": "internal_error"})


# ------------ Health & status ------------
@app.get("/health")
async def health():
    return {"ok": True}


@app.get("/status")
async def status():
    return {
        "ok": True,
        "sports": ["football", "nba", "nhl"],
        "timezone": config.DEFAULT_TZ,
        "espn_timeout": config.ESPN_TIMEOUT,
        "espn_max_tries": config.ESPN_MAX_TRIES,
        "espn_concurrency": config.ESPN_CONCURRENCY,
    }


# ------------ Mount routers ------------
app.include_router(football_routes.router, prefix="/api/football")
app.include_router(nba_routes.router, prefix="/api/nba")
app.include_router(nhl_routes.router, prefix="/api/nhl")

# Combined list across sports
app.include_router(games_routes.router, prefix="/api")


def run() -> None:
    """Console entry point: serve the app with uvicorn on HOST:PORT."""
    uvicorn.run(app, host=config.HOST, port=config.PORT, log_level=config.LOG_LEVEL.lower())
