"""
Submissions Router - Endpoint cho học viên xem danh sách bài nộp của mình.

Endpoints:
- GET /submissions - Lấy danh sách bài nộp (có phân trang, lọc)
- GET /submissions/{id} - Xem chi tiết bài nộp (code + kết quả)

Kết quả của test case ẩn (`hidden=true`) bị xoá input/output/lỗi trước khi trả về.
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from typing import Any, Dict, List, Optional

from app.auth import get_current_user_id
from app.dependencies import get_lifecycle_manager
from api.errors import to_http_exception
from domain.grading import GradingError, SubmissionLifecycleManager
from domain.models import Submission

router = APIRouter(prefix="/submissions", tags=["submissions"])

_HIDDEN_FIELDS = ("input", "expected_output", "stdout", "stderr", "compile_output", "error")


class CaseResultOut(BaseModel):
    position: int
    test_case_id: Optional[Any] = None
    verdict: str
    passed: bool
    hidden: bool
    status: Optional[str] = None
    description: Optional[str] = None
    time: Optional[float] = None
    memory: Optional[int] = None
    input: Optional[str] = None
    expected_output: Optional[str] = None
    stdout: Optional[str] = None
    stderr: Optional[str] = None
    compile_output: Optional[str] = None
    error: Optional[str] = None


class SubmissionItem(BaseModel):
    id: int
    exercise_id: str
    language_id: int
    status: str
    test_cases_passed: int
    test_cases_total: int
    test_cases_errored: int
    points_earned: int
    is_correct: bool
    created_at: Optional[str]


class SubmissionDetail(SubmissionItem):
    source_code: str
    results: List[CaseResultOut] = []


class MySubmissionsResponse(BaseModel):
    total: int
    skip: int
    limit: int
    items: List[SubmissionItem]


def redact_result(entry: Dict[str, Any]) -> Dict[str, Any]:
    """Ẩn chi tiết của test case hidden; test visible giữ nguyên."""
    if not entry.get("hidden"):
        return dict(entry)
    return {key: (None if key in _HIDDEN_FIELDS else value) for key, value in entry.items()}


def _summary_fields(sub: Submission) -> Dict[str, Any]:
    return {
        "id": sub.id,
        "exercise_id": sub.exercise_id,
        "language_id": sub.language_id,
        "status": sub.status,
        "test_cases_passed": sub.test_cases_passed,
        "test_cases_total": sub.test_cases_total,
        "test_cases_errored": sub.test_cases_errored or 0,
        "points_earned": sub.points_earned,
        "is_correct": bool(sub.is_correct),
        "created_at": sub.created_at.isoformat() if sub.created_at else None,
    }


def to_item(sub: Submission) -> SubmissionItem:
    return SubmissionItem(**_summary_fields(sub))


def to_detail(sub: Submission) -> SubmissionDetail:
    return SubmissionDetail(
        **_summary_fields(sub),
        source_code=sub.source_code,
        results=[CaseResultOut(**redact_result(r)) for r in (sub.results or [])],
    )


@router.get("/", response_model=MySubmissionsResponse)
def list_my_submissions(
    skip: int = 0,
    limit: int = 50,
    correct: Optional[bool] = None,
    exercise_id: Optional[str] = None,
    user_id: str = Depends(get_current_user_id),
    manager: SubmissionLifecycleManager = Depends(get_lifecycle_manager),
):
    skip = max(skip, 0)
    limit = max(min(limit, 200), 1)

    try:
        total, rows = manager.list_submissions(user_id, exercise_id=exercise_id, correct=correct, skip=skip, limit=limit)
    except GradingError as e:
        raise to_http_exception(e)

    return MySubmissionsResponse(total=total, skip=skip, limit=limit, items=[to_item(sub) for sub in rows])


@router.get("/{submission_id}", response_model=SubmissionDetail)
def get_my_submission(
    submission_id: int,
    user_id: str = Depends(get_current_user_id),
    manager: SubmissionLifecycleManager = Depends(get_lifecycle_manager),
):
    try:
        sub = manager.get_submission(user_id, submission_id)
    except GradingError as e:
        raise to_http_exception(e)
    if not sub:
        raise HTTPException(status_code=404, detail="Submission not found")
    return to_detail(sub)


__all__ = ["router", "redact_result", "to_detail", "SubmissionDetail"]
