import logging
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from signage_cms.api import customer, layout, player, player_device, schedule, site
from signage_cms.db import Database
from signage_cms.errors import AppError

API_KEY = os.getenv("SIGNAGE_API_KEY", "").strip()
SERVER_PORT = int(os.getenv("SIGNAGE_SERVER_PORT", "8000"))
LOG_LEVEL = (os.getenv("SIGNAGE_LOG_LEVEL", "INFO") or "INFO").strip().upper()
QUIET_ACCESS_LOG = os.getenv("SIGNAGE_QUIET_ACCESS_LOG", "1").strip().lower() in {"1", "true", "yes", "on"}

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

if QUIET_ACCESS_LOG:
    # Keep warning/error lines, suppress normal access noise (200/201 etc).
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def create_app(database: Database | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        db = database or Database()
        db.create_all()
        app.state.database = db
        logger.info("Database ready at %s", db.engine.url.render_as_string(hide_password=True))

        yield

        # A database handed in by the caller stays open for the caller.
        if database is None:
            db.dispose()

    app = FastAPI(title="Signage CMS", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        log = logger.error if exc.status_code >= 500 else logger.warning
        log("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse({"detail": exc.message}, status_code=exc.status_code)

    @app.middleware("http")
    async def api_key_middleware(request: Request, call_next):
        if not API_KEY:
            return await call_next(request)
        path = request.url.path
        if path in {"/", "/healthz"} or path.startswith("/docs") or path.startswith("/openapi.json") or path.startswith("/redoc"):
            return await call_next(request)
        if request.headers.get("X-API-Key") != API_KEY:
            return JSONResponse({"detail": "Unauthorized"}, status_code=401)
        return await call_next(request)

    @app.get("/")
    def root():
        return {
            "ok": True,
            "service": "signage-cms",
            "time_utc": datetime.now(timezone.utc).isoformat(),
            "docs": "/docs",
        }

    @app.get("/healthz")
    def healthz(request: Request):
        with request.app.state.database.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"ok": True, "server_port": SERVER_PORT}

    app.include_router(customer.router)
    app.include_router(site.router)
    app.include_router(player.router)
    app.include_router(layout.router)
    app.include_router(schedule.router)
    app.include_router(player_device.router)
    return app


app = create_app()
