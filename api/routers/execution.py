"""Execution Router - chạy thử code (không chấm điểm, không lưu).

Endpoints:
- POST /run - Chạy code với stdin tuỳ chọn và trả về output
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.auth import get_current_user_id
from app.dependencies import get_lifecycle_manager
from api.errors import to_http_exception
from domain.grading import GradingError, SubmissionLifecycleManager
from domain.grading.languages import DEFAULT_LANGUAGE_ID

router = APIRouter(tags=["execution"])


class RunRequest(BaseModel):
    source_code: str
    language_id: int = DEFAULT_LANGUAGE_ID
    stdin: Optional[str] = ""


class RunResponse(BaseModel):
    status: str
    description: str
    stdout: Optional[str] = None
    stderr: Optional[str] = None
    compile_output: Optional[str] = None
    message: Optional[str] = None
    time: Optional[float] = None
    memory: Optional[int] = None


@router.post("/run", response_model=RunResponse)
async def run_code(
    req: RunRequest,
    user_id: str = Depends(get_current_user_id),
    manager: SubmissionLifecycleManager = Depends(get_lifecycle_manager),
):
    try:
        result = await manager.run_code(req.source_code, req.language_id, req.stdin or "")
    except GradingError as e:
        raise to_http_exception(e)
    return RunResponse(**result.to_dict())


__all__ = ["router"]
