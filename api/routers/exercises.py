"""Exercises Router - làm bài: xem đề, autosave draft, nộp bài để chấm.

Endpoints:
- GET  /exercises/{id} - Đề bài (không có solution, test ẩn không lộ input/output)
- GET  /exercises/{id}/workspace - Code hiển thị khi mở bài
- GET  /exercises/{id}/draft - Draft hiện tại
- PUT  /exercises/{id}/draft - Autosave draft (idempotent)
- POST /exercises/{id}/submit - Nộp bài để chấm trên toàn bộ test case
- GET  /exercises/{id}/submissions/latest - Bài nộp gần nhất
- GET  /exercises/{id}/stats - Số lượt nộp / số học viên đã giải
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from app.auth import get_current_user_id
from app.dependencies import get_lifecycle_manager
from api.errors import to_http_exception
from domain.grading import GradingError, PersistenceError, SubmissionLifecycleManager
from domain.grading.languages import DEFAULT_LANGUAGE_ID
from domain.models import Draft

from .submissions import SubmissionDetail, to_detail

router = APIRouter(prefix="/exercises", tags=["exercises"])

logger = logging.getLogger(__name__)


class TestCaseOut(BaseModel):
    position: int
    id: Optional[str] = None
    is_hidden: bool
    points: int
    input: Optional[str] = None
    expected_output: Optional[str] = None


class ExerciseOut(BaseModel):
    id: str
    title: str
    difficulty: str
    points: int
    time_limit_minutes: Optional[int] = None
    language_id: int
    description: Optional[str] = None
    content: Optional[str] = None
    starter_code: Optional[str] = None
    objectives: List[str] = []
    constraints: List[str] = []
    hints: List[str] = []
    test_cases: List[TestCaseOut] = []


class CodeRequest(BaseModel):
    source_code: str
    language_id: int = DEFAULT_LANGUAGE_ID


class DraftOut(BaseModel):
    exercise_id: str
    source_code: str
    language_id: int
    updated_at: Optional[str]


class WorkspaceOut(BaseModel):
    exercise_id: str
    source_code: str
    language_id: int
    origin: str
    saved_at: Optional[str] = None


class SubmitResponse(BaseModel):
    success: bool
    submission: SubmissionDetail


class ExerciseStatsOut(BaseModel):
    exercise_id: str
    total_submissions: int
    total_completions: int


def _draft_out(draft: Draft) -> DraftOut:
    return DraftOut(
        exercise_id=draft.exercise_id,
        source_code=draft.source_code,
        language_id=draft.language_id,
        updated_at=draft.updated_at.isoformat() if draft.updated_at else None,
    )


@router.get("/{exercise_id}", response_model=ExerciseOut)
async def get_exercise(
    exercise_id: str,
    user_id: str = Depends(get_current_user_id),
    manager: SubmissionLifecycleManager = Depends(get_lifecycle_manager),
):
    try:
        exercise = await manager.get_exercise(exercise_id)
    except GradingError as e:
        raise to_http_exception(e)

    test_cases = [
        TestCaseOut(
            position=position,
            id=str(tc.id) if tc.id is not None else None,
            is_hidden=tc.is_hidden,
            points=tc.points,
            input=None if tc.is_hidden else tc.input,
            expected_output=None if tc.is_hidden else tc.expected_output,
        )
        for position, tc in enumerate(exercise.test_cases)
    ]
    return ExerciseOut(
        id=exercise.id,
        title=exercise.title,
        difficulty=exercise.difficulty,
        points=exercise.points,
        time_limit_minutes=exercise.time_limit_minutes,
        language_id=exercise.language_id,
        description=exercise.description,
        content=exercise.content,
        starter_code=exercise.starter_code,
        objectives=exercise.objectives,
        constraints=exercise.constraints,
        hints=exercise.hints,
        test_cases=test_cases,
    )


@router.get("/{exercise_id}/workspace", response_model=WorkspaceOut)
async def get_workspace(
    exercise_id: str,
    user_id: str = Depends(get_current_user_id),
    manager: SubmissionLifecycleManager = Depends(get_lifecycle_manager),
):
    try:
        ws = await manager.load_workspace(user_id, exercise_id)
    except GradingError as e:
        raise to_http_exception(e)
    return WorkspaceOut(
        exercise_id=ws.exercise_id,
        source_code=ws.source_code,
        language_id=ws.language_id,
        origin=ws.origin,
        saved_at=ws.saved_at.isoformat() if ws.saved_at else None,
    )


@router.get("/{exercise_id}/draft", response_model=DraftOut)
def get_draft(
    exercise_id: str,
    user_id: str = Depends(get_current_user_id),
    manager: SubmissionLifecycleManager = Depends(get_lifecycle_manager),
):
    try:
        draft = manager.get_draft(user_id, exercise_id)
    except GradingError as e:
        raise to_http_exception(e)
    if draft is None:
        raise HTTPException(status_code=404, detail="No draft found")
    return _draft_out(draft)


@router.put("/{exercise_id}/draft", response_model=DraftOut)
def save_draft(
    exercise_id: str,
    req: CodeRequest,
    user_id: str = Depends(get_current_user_id),
    manager: SubmissionLifecycleManager = Depends(get_lifecycle_manager),
):
    try:
        draft = manager.save_draft(user_id, exercise_id, req.source_code, req.language_id)
    except PersistenceError:
        # Không chặn việc soạn code: client hiển thị cảnh báo nhẹ và thử lại sau
        raise HTTPException(
            status_code=503,
            detail="Draft could not be saved, please retry later",
            headers={"Retry-After": "30"},
        )
    return _draft_out(draft)


@router.post("/{exercise_id}/submit", response_model=SubmitResponse, status_code=201)
async def submit_solution(
    exercise_id: str,
    req: CodeRequest,
    user_id: str = Depends(get_current_user_id),
    manager: SubmissionLifecycleManager = Depends(get_lifecycle_manager),
):
    try:
        submission = await manager.submit(user_id, exercise_id, req.source_code, req.language_id)
    except GradingError as e:
        logger.error(f"Failed to process submission for exercise {exercise_id}: {e}")
        raise to_http_exception(e)
    return SubmitResponse(success=True, submission=to_detail(submission))


@router.get("/{exercise_id}/submissions/latest", response_model=SubmissionDetail)
def get_latest_submission(
    exercise_id: str,
    user_id: str = Depends(get_current_user_id),
    manager: SubmissionLifecycleManager = Depends(get_lifecycle_manager),
):
    try:
        submission = manager.get_latest(user_id, exercise_id)
    except GradingError as e:
        raise to_http_exception(e)
    if submission is None:
        raise HTTPException(status_code=404, detail="No submission found")
    return to_detail(submission)


@router.get("/{exercise_id}/stats", response_model=ExerciseStatsOut)
def get_exercise_stats(
    exercise_id: str,
    user_id: str = Depends(get_current_user_id),
    manager: SubmissionLifecycleManager = Depends(get_lifecycle_manager),
):
    try:
        stats = manager.get_exercise_stats(exercise_id)
    except GradingError as e:
        raise to_http_exception(e)
    if stats is None:
        return ExerciseStatsOut(exercise_id=exercise_id, total_submissions=0, total_completions=0)
    return ExerciseStatsOut(
        exercise_id=exercise_id,
        total_submissions=stats.total_submissions,
        total_completions=stats.total_completions,
    )


__all__ = ["router"]
