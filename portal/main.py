# portal/main.py

import os
import sys
import time

import psutil
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from portal.core.config import settings
from portal.core.database import test_connection, init_db, AsyncSessionLocal
from portal.core.exceptions import LoginRequired, InsufficientRole
from portal.core.rate_limiter import limiter
from portal.models.enums import UserRole
from portal.services.user_service import get_user_by_email, create_user

# Routers
from portal.api.endpoints import (
    auth as auth_router,
    users as users_router,
    posts as posts_router,
    labs as labs_router,
    attachments as attachments_router,
    contact_messages as contact_router,
    records as records_router,
    manage as manage_router,
    logs as logs_router,
)

# ------------------------------------------------------------
# LOGURU CONFIGURATION
# ------------------------------------------------------------
logger.remove()
logger.add(
    sys.stdout,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
           "<level>{level}</level> | "
           "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
           "<level>{message}</level>",
    colorize=True,
    backtrace=True,
    diagnose=settings.ENV != "prod",
)

# ------------------------------------------------------------
# FASTAPI APP INIT
# ------------------------------------------------------------
app = FastAPI(
    title="Department Portal Backend",
    version="1.0.0",
    description="Bulletins, labs, people, programs and attachments for the department website.",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

START_TIME = time.time()
DB_STATUS = "Connecting..."


# ------------------------------------------------------------
# ROUTE GATE RESPONSES
# ------------------------------------------------------------
@app.exception_handler(LoginRequired)
async def login_required_handler(request: Request, exc: LoginRequired):
    if exc.wants_json:
        return JSONResponse(
            status_code=403,
            content={"message": "Unauthenticated.", "required_role": exc.required_role, "user_role": None},
        )
    return RedirectResponse(url=settings.LOGIN_URL, status_code=302)


@app.exception_handler(InsufficientRole)
async def insufficient_role_handler(request: Request, exc: InsufficientRole):
    if exc.wants_json:
        return JSONResponse(
            status_code=403,
            content={
                "message": "Insufficient privileges for this action.",
                "required_role": exc.required_role,
                "user_role": exc.user_role,
            },
        )
    return PlainTextResponse(exc.detail, status_code=403)


# ------------------------------------------------------------
# PUBLIC STORAGE (/storage/<path> for the local disk)
# ------------------------------------------------------------
if settings.STORAGE_BACKEND == "local":
    app.mount(
        "/storage",
        StaticFiles(directory=settings.PUBLIC_STORAGE_ROOT, check_dir=False),
        name="storage",
    )


# ------------------------------------------------------------
# METRICS API
# ------------------------------------------------------------
@app.get("/api/metrics", tags=["System"])
async def metrics():
    uptime_seconds = int(time.time() - START_TIME)
    cpu_usage = psutil.cpu_percent(interval=None)
    ram_usage = psutil.virtual_memory().percent
    try:
        disk_usage = psutil.disk_usage('/').percent
    except OSError:
        disk_usage = 0

    db_start = time.time()
    db_latency = 0
    try:
        await test_connection()
        current_db_status = "Connected"
        db_latency = round((time.time() - db_start) * 1000, 2)
    except Exception as e:
        logger.error(f"Metrics DB ping failed: {e}")
        current_db_status = "Error"

    storage_root = settings.PUBLIC_STORAGE_ROOT if settings.STORAGE_BACKEND == "local" else None

    return {
        "status": "Online",
        "version": app.version,
        "cpu": cpu_usage,
        "ram": ram_usage,
        "disk": disk_usage,
        "uptime": uptime_seconds,
        "database": current_db_status,
        "db_latency": db_latency,
        "storage_backend": settings.STORAGE_BACKEND,
        "storage_ready": os.path.isdir(storage_root) if storage_root else True,
    }


# ------------------------------------------------------------
# CORS CONFIGURATION
# ------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL, "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "X-Requested-With"],
)

# ------------------------------------------------------------
# REGISTER ROUTERS
# ------------------------------------------------------------
app.include_router(auth_router.router)
app.include_router(users_router.router)
app.include_router(posts_router.router)
app.include_router(posts_router.category_router)
app.include_router(labs_router.router)
app.include_router(attachments_router.public_router)
app.include_router(attachments_router.router)
app.include_router(contact_router.router)
app.include_router(records_router.router)
app.include_router(manage_router.router)
app.include_router(logs_router.router)


# ------------------------------------------------------------
# APPLICATION STARTUP EVENTS
# ------------------------------------------------------------
@app.on_event("startup")
async def on_startup():
    global DB_STATUS
    logger.info("Starting Department Portal Backend...")

    # 1) Database connection test
    try:
        await test_connection()
        DB_STATUS = "Connected"
        logger.success("Database connection established.")
    except Exception:
        DB_STATUS = "Error"
        logger.exception("Startup aborted: Database connection failed.")

    # 2) Initialize database tables
    if DB_STATUS == "Connected":
        try:
            await init_db()
            logger.success("Database tables ready.")
        except Exception as e:
            logger.warning(f"Table initialization encountered an issue: {e}")

    # 3) Seed Super Admin
    if DB_STATUS == "Connected":
        try:
            async with AsyncSessionLocal() as session:
                if not settings.SUPER_ADMIN_EMAIL or not settings.SUPER_ADMIN_PASSWORD:
                    logger.warning("Missing Super Admin credentials in settings.")
                else:
                    existing = await get_user_by_email(session, settings.SUPER_ADMIN_EMAIL)
                    if not existing:
                        logger.info(f"Seeding Super Admin: {settings.SUPER_ADMIN_EMAIL}")
                        await create_user(
                            session=session,
                            name=settings.SUPER_ADMIN_NAME or "Super Admin",
                            email=settings.SUPER_ADMIN_EMAIL,
                            password=settings.SUPER_ADMIN_PASSWORD,
                            role=UserRole.Admin,
                        )
                        logger.success("Super Admin created successfully.")
                    else:
                        logger.info("Super Admin already exists. Skipping.")
        except Exception:
            logger.exception("Super Admin seeding failed.")

    logger.success("Backend startup completed successfully.")


# ------------------------------------------------------------
# ROOT HEALTH CHECK
# ------------------------------------------------------------
@app.get("/", tags=["System"])
async def root():
    return {
        "status": "ok",
        "service": "Department Portal Backend",
        "version": app.version,
        "database": DB_STATUS,
    }
