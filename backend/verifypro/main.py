import logging
import sqlite3
from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from verifypro.config import settings
from verifypro.database import get_db
from verifypro.errors import ApplicationError
from verifypro.models import AppConfig
from verifypro.routers import auth, dashboard, digilocker, documents, requests, state, views

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("verifypro")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create/migrate the database and integrity-check it
    try:
        from verifypro.database import init_db
        from verifypro.utils.filesystem import ensure_data_dirs
        ensure_data_dirs()
        init_db()
        conn = sqlite3.connect(str(settings.db_path))
        result = conn.execute("PRAGMA integrity_check").fetchone()
        conn.close()
        if result and result[0] == "ok":
            logger.info("Database integrity check passed.")
        else:
            logger.error("DATABASE INTEGRITY CHECK FAILED: %s", result)
    except (OSError, sqlite3.Error) as exc:
        logger.error("Could not run startup migration/integrity check: %s", exc)
    yield
    # Shutdown: stop in-flight verifications and drop sessions
    from verifypro.services.auth_service import auth_service
    from verifypro.services.verification_runner import verification_runner
    cancelled = verification_runner.cancel_all()
    if cancelled:
        logger.info("Cancelled %d pending verifications.", cancelled)
    auth_service.clear()


app = FastAPI(
    title="VerifyPro",
    description="Document verification workflow: candidate uploads, HR review and simulated AI scoring",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://127.0.0.1:5173",
        "http://localhost:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ApplicationError)
async def handle_application_error(_: Request, exc: ApplicationError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code, "field": exc.field},
    )


app.include_router(auth.router, prefix=settings.api_prefix)
app.include_router(documents.router, prefix=settings.api_prefix)
app.include_router(requests.router, prefix=settings.api_prefix)
app.include_router(digilocker.router, prefix=settings.api_prefix)
app.include_router(dashboard.router, prefix=settings.api_prefix)
app.include_router(state.router, prefix=settings.api_prefix)
app.include_router(views.router)


@app.get("/health")
async def health(db: Session = Depends(get_db)):
    row = db.get(AppConfig, "schema_version")
    return {"status": "ok", "version": "0.1.0", "schema_version": int(row.value) if row else None}
