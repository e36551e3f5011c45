from __future__ import annotations

import os
import sys
import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Phải set trước khi import app.settings / app.db
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["CONTENT_API_URL"] = ""
os.environ["SECRET_KEY"] = "test-secret"

from app.db import Base, SessionLocal, engine, init_db  # noqa: E402
from domain.grading.errors import ExecutionUnavailable  # noqa: E402
from domain.grading.types import ExecutionResult, ExecutionStatus, ExerciseData, TestCaseData  # noqa: E402


def accepted(stdout: Optional[str]) -> ExecutionResult:
    return ExecutionResult(status=ExecutionStatus.ACCEPTED, description="Accepted", stdout=stdout)


class FakeSandbox:
    """Stand-in for SandboxClient: maps stdin -> ExecutionResult (or exception)."""

    def __init__(self, handler: Callable[[str], ExecutionResult]):
        self.handler = handler
        self.calls: List[str] = []
        self._lock = threading.Lock()

    @classmethod
    def echo(cls) -> "FakeSandbox":
        return cls(lambda stdin: accepted(stdin))

    @classmethod
    def table(cls, outputs: Dict[str, object]) -> "FakeSandbox":
        def handler(stdin: str) -> ExecutionResult:
            value = outputs[stdin]
            if isinstance(value, Exception):
                raise value
            if isinstance(value, ExecutionResult):
                return value
            return accepted(value)
        return cls(handler)

    @classmethod
    def unavailable(cls) -> "FakeSandbox":
        def handler(stdin: str) -> ExecutionResult:
            raise ExecutionUnavailable("Connection to sandbox failed: connection refused")
        return cls(handler)

    def execute(self, source_code: str, language_id: int, stdin: str = "") -> ExecutionResult:
        with self._lock:
            self.calls.append(stdin)
        return self.handler(stdin)

    def health_check(self) -> bool:
        return True


class FakeContent:
    def __init__(self, *exercises: ExerciseData):
        self.exercises = {e.id: e for e in exercises}

    def get_exercise(self, exercise_id: str) -> Optional[ExerciseData]:
        return self.exercises.get(exercise_id)


def make_exercise(exercise_id: str = "ex-1", points: int = 100, cases=None, language_id: int = 71) -> ExerciseData:
    if cases is None:
        cases = [("1", "1", False), ("2", "2", False)]
    return ExerciseData(
        id=exercise_id,
        title="Sum of Port List",
        language_id=language_id,
        points=points,
        starter_code="def calculate_sum(numbers):\n    pass\n",
        test_cases=[
            TestCaseData(id=i + 1, input=inp, expected_output=exp, is_hidden=hidden, sort_order=i)
            for i, (inp, exp, hidden) in enumerate(cases)
        ],
    )


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    init_db()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
