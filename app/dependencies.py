"""FastAPI dependencies wiring settings into the grading collaborators.

Các client được tạo một lần (singleton) với cấu hình truyền vào tường minh;
store/manager được tạo theo từng request vì gắn với DB session.
"""

from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from domain.grading import GradingEngine, SubmissionLifecycleManager
from infra.repositories import SqlContentStore, SqlProgressStore, SqlSubmissionStore
from infra.services import ContentApiClient, SandboxClient

from .db import get_db
from .settings import (
    CONTENT_API_KEY,
    CONTENT_API_TIMEOUT_SECONDS,
    CONTENT_API_URL,
    GRADING_MAX_CONCURRENCY,
    GRADING_OVERALL_DEADLINE_SECONDS,
    SANDBOX_API_KEY,
    SANDBOX_API_URL,
    SANDBOX_POLL_INTERVAL_SECONDS,
    SANDBOX_TIMEOUT_SECONDS,
)

_sandbox_client: Optional[SandboxClient] = None
_content_client: Optional[ContentApiClient] = None


def get_sandbox_client() -> SandboxClient:
    global _sandbox_client
    if _sandbox_client is None:
        _sandbox_client = SandboxClient(
            SANDBOX_API_URL,
            api_key=SANDBOX_API_KEY,
            timeout=SANDBOX_TIMEOUT_SECONDS,
            poll_interval=SANDBOX_POLL_INTERVAL_SECONDS,
        )
    return _sandbox_client


def get_content_client() -> ContentApiClient:
    global _content_client
    if _content_client is None:
        _content_client = ContentApiClient(
            CONTENT_API_URL,
            api_key=CONTENT_API_KEY,
            timeout=CONTENT_API_TIMEOUT_SECONDS,
        )
    return _content_client


def get_content_source(db: Session = Depends(get_db)):
    # Ưu tiên content API riêng nếu được cấu hình, nếu không đọc DB local
    if CONTENT_API_URL:
        return get_content_client()
    return SqlContentStore(db)


def get_grading_engine(client: SandboxClient = Depends(get_sandbox_client)) -> GradingEngine:
    return GradingEngine(
        client,
        max_concurrency=GRADING_MAX_CONCURRENCY,
        # HTTP client đã có deadline riêng; thêm một chút để nó tự timeout trước
        call_timeout=SANDBOX_TIMEOUT_SECONDS + 5,
        overall_timeout=GRADING_OVERALL_DEADLINE_SECONDS,
    )


def get_lifecycle_manager(
    db: Session = Depends(get_db),
    content=Depends(get_content_source),
    engine: GradingEngine = Depends(get_grading_engine),
) -> SubmissionLifecycleManager:
    return SubmissionLifecycleManager(SqlSubmissionStore(db), content, engine, progress=SqlProgressStore(db))


__all__ = [
    "get_sandbox_client",
    "get_content_client",
    "get_content_source",
    "get_grading_engine",
    "get_lifecycle_manager",
]
