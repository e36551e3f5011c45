"""Progress Router - XP của học viên.

Endpoints:
- GET /progress/me - Tổng XP của học viên hiện tại
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.auth import get_current_user_id
from app.dependencies import get_lifecycle_manager
from api.errors import to_http_exception
from domain.grading import GradingError, SubmissionLifecycleManager

router = APIRouter(prefix="/progress", tags=["progress"])


class ProgressOut(BaseModel):
    user_id: str
    total_xp: int


@router.get("/me", response_model=ProgressOut)
def get_my_progress(
    user_id: str = Depends(get_current_user_id),
    manager: SubmissionLifecycleManager = Depends(get_lifecycle_manager),
):
    try:
        progress = manager.get_progress(user_id)
    except GradingError as e:
        raise to_http_exception(e)
    # Chưa nộp bài nào -> 0 XP
    return ProgressOut(user_id=user_id, total_xp=progress.total_xp if progress else 0)


__all__ = ["router"]
