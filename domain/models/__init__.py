"""Models package - contains database models (SQLAlchemy ORM).

Note: các kiểu dữ liệu của quá trình chấm bài (ExecutionResult,
TestCaseResult, GradingOutcome) nằm ở domain/grading/types.py và không
được lưu trực tiếp vào database.
"""

# Database Models (SQLAlchemy ORM)
from .core import (
    Exercise,
    TestCase,
)
from .submission import Submission, Draft
from .progress import ExerciseStats, LearnerProgress

__all__ = [
    "Exercise",
    "TestCase",
    "Submission",
    "Draft",
    "ExerciseStats",
    "LearnerProgress",
]
