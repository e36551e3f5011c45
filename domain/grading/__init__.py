"""Grading protocol: comparator, engine và submission lifecycle."""

from .comparator import compare
from .engine import GradingEngine, calculate_points
from .errors import (
    ContentUnavailable,
    ExecutionTimeout,
    ExecutionUnavailable,
    ExerciseNotFound,
    GradingError,
    InvalidLanguage,
    NoTestCases,
    PersistenceError,
)
from .languages import LANGUAGES, ensure_supported, is_supported
from .lifecycle import SubmissionLifecycleManager
from .types import (
    CaseVerdict,
    ExecutionResult,
    ExecutionStatus,
    ExerciseData,
    GradingOutcome,
    SubmissionStatus,
    TestCaseData,
    TestCaseResult,
    Workspace,
)

__all__ = [
    'compare',
    'GradingEngine',
    'calculate_points',
    'SubmissionLifecycleManager',
    'GradingError',
    'ExecutionUnavailable',
    'ExecutionTimeout',
    'NoTestCases',
    'InvalidLanguage',
    'PersistenceError',
    'ExerciseNotFound',
    'ContentUnavailable',
    'LANGUAGES',
    'ensure_supported',
    'is_supported',
    'CaseVerdict',
    'ExecutionResult',
    'ExecutionStatus',
    'ExerciseData',
    'GradingOutcome',
    'SubmissionStatus',
    'TestCaseData',
    'TestCaseResult',
    'Workspace',
]
