"""System/utility endpoints
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.dependencies import get_sandbox_client
from app.settings import (
	APP_TITLE,
	APP_VERSION,
	EXEC_NETWORK_ACCESS,
	EXEC_TIMEOUT_SECONDS,
	GRADING_MAX_CONCURRENCY,
	GRADING_OVERALL_DEADLINE_SECONDS,
)
from domain.grading.languages import LANGUAGES
from infra.services import SandboxClient

logger = logging.getLogger(__name__)

router = APIRouter(tags=["system"])


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str


class SandboxHealthResponse(BaseModel):
    reachable: bool


@router.get("/health", response_model=HealthResponse)
async def health_check():
    return {"status": "healthy", "service": APP_TITLE, "version": APP_VERSION}


@router.get("/api/config")
async def get_config():
	return {
		"timeout_seconds": EXEC_TIMEOUT_SECONDS,
		"network_access": EXEC_NETWORK_ACCESS,
		"max_parallel_test_cases": GRADING_MAX_CONCURRENCY,
		"grading_deadline_seconds": GRADING_OVERALL_DEADLINE_SECONDS,
		"languages": [{"id": lang.id, "name": lang.name} for lang in LANGUAGES],
	}


@router.get("/api/sandbox/health", response_model=SandboxHealthResponse)
async def sandbox_health(client: SandboxClient = Depends(get_sandbox_client)):
    reachable = await asyncio.to_thread(client.health_check)
    if not reachable:
        logger.warning("Execution sandbox is not reachable")
    return {"reachable": reachable}


__all__ = ["router"]
