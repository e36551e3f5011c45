"""Map grading errors to HTTP responses.

"Code của bạn sai" là kết quả chấm bình thường (200, is_correct=false);
chỉ "không chấm được" mới trở thành lỗi HTTP.
"""

from fastapi import HTTPException

from domain.grading.errors import (
    ContentUnavailable,
    ExecutionUnavailable,
    ExerciseNotFound,
    GradingError,
    InvalidLanguage,
    NoTestCases,
    PersistenceError,
)

_STATUS_CODES = [
    (ExerciseNotFound, 404),
    (InvalidLanguage, 400),
    (NoTestCases, 422),
    (ExecutionUnavailable, 503),
    (ContentUnavailable, 503),
    (PersistenceError, 503),
]


def to_http_exception(exc: GradingError) -> HTTPException:
    for exc_type, status_code in _STATUS_CODES:
        if isinstance(exc, exc_type):
            headers = {"Retry-After": "30"} if status_code == 503 else None
            return HTTPException(status_code=status_code, detail=str(exc), headers=headers)
    return HTTPException(status_code=500, detail=str(exc))


__all__ = ["to_http_exception"]
