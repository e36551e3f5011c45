"""Grading error hierarchy.

Precondition errors (`NoTestCases`, `InvalidLanguage`, `ExerciseNotFound`) are
raised before anything is executed. `ExecutionUnavailable` is raised by the
sandbox client for a single run; the grading engine absorbs it per test case.
"""

from typing import Optional


class GradingError(Exception):
    """Base class for every error raised by the grading core."""


class ExecutionUnavailable(GradingError):
    """The sandbox could not be reached or did not answer before the deadline."""


class ExecutionTimeout(GradingError):
    """The sandbox reported Time Limit Exceeded.

    The engine never raises this: a TLE is a normal terminal ExecutionResult.
    It exists for callers that want to turn such a result into an error.
    """


class NoTestCases(GradingError):
    def __init__(self, exercise_id: Optional[str] = None):
        self.exercise_id = exercise_id
        if exercise_id:
            super().__init__(f"Exercise {exercise_id} has no test cases")
        else:
            super().__init__("No test cases to grade against")


class InvalidLanguage(GradingError):
    def __init__(self, language_id):
        self.language_id = language_id
        super().__init__(f"Unsupported language id: {language_id}")


class PersistenceError(GradingError):
    """Draft or submission could not be written to / read from storage."""


class ExerciseNotFound(GradingError):
    def __init__(self, exercise_id: str):
        self.exercise_id = exercise_id
        super().__init__(f"Exercise {exercise_id} not found")


class ContentUnavailable(GradingError):
    """The content API could not be reached or returned an unusable payload."""


__all__ = [
    "GradingError",
    "ExecutionUnavailable",
    "ExecutionTimeout",
    "NoTestCases",
    "InvalidLanguage",
    "PersistenceError",
    "ExerciseNotFound",
    "ContentUnavailable",
]
