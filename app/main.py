import logging
import asyncio

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routers import (
    exercises_router,
    execution_router,
    progress_router,
    submissions_router,
    system_router,
)
from .db import init_db
from .dependencies import get_sandbox_client
from .settings import (
    APP_DESCRIPTION,
    APP_TITLE,
    APP_VERSION,
    AUTO_CREATE_TABLES,
    CONTENT_API_URL,
    CORS_ALLOW_ORIGINS,
    LOG_LEVEL,
    SANDBOX_API_URL,
)

logging.basicConfig(level=getattr(logging, LOG_LEVEL.upper(), logging.INFO), format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

app = FastAPI(
    title=APP_TITLE,
    version=APP_VERSION,
    description=APP_DESCRIPTION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    logger.info(f"Starting {APP_TITLE} v{APP_VERSION}...")

    if AUTO_CREATE_TABLES:
        init_db()

    if CONTENT_API_URL:
        logger.info(f"Content API configured: {CONTENT_API_URL[:50]}...")
    else:
        logger.info("CONTENT_API_URL not set - reading exercises from database")

    # Kiểm tra sandbox nhưng không chặn khởi động: chấm bài sẽ báo lỗi từng test nếu sandbox chết.
    reachable = await asyncio.to_thread(get_sandbox_client().health_check)
    if reachable:
        logger.info(f"Execution sandbox reachable at {SANDBOX_API_URL}")
    else:
        logger.warning(f"Execution sandbox at {SANDBOX_API_URL} is not reachable (continuing)")

    logger.info("Startup complete")


app.include_router(exercises_router)
app.include_router(execution_router)
app.include_router(progress_router)
app.include_router(submissions_router)
app.include_router(system_router)


__all__ = ["app"]
