"""
Data types used while grading.

ExecutionResult, TestCaseResult và GradingOutcome chỉ tồn tại trong bộ nhớ;
database chỉ lưu Submission tổng hợp (kèm `results` dạng JSON).
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class ExecutionStatus(str, Enum):
    ACCEPTED = "accepted"
    WRONG_ANSWER = "wrong_answer"
    COMPILE_ERROR = "compile_error"
    RUNTIME_ERROR = "runtime_error"
    TIME_LIMIT_EXCEEDED = "time_limit_exceeded"
    INTERNAL_ERROR = "internal_error"


# Program ran to completion, stdout is meaningful for comparison
FINISHED_STATUSES = (ExecutionStatus.ACCEPTED, ExecutionStatus.WRONG_ANSWER)


class CaseVerdict(str, Enum):
    PASSED = "passed"
    FAILED = "failed"      # code chạy nhưng sai / lỗi / quá thời gian
    ERRORED = "errored"    # sandbox không chạy được (lỗi hạ tầng)


class SubmissionStatus(str, Enum):
    ACCEPTED = "accepted"
    WRONG_ANSWER = "wrong_answer"
    UNGRADABLE = "ungradable"


@dataclass
class ExecutionResult:
    """Outcome of one sandbox run"""
    status: ExecutionStatus
    description: str = ""
    stdout: Optional[str] = None
    stderr: Optional[str] = None
    compile_output: Optional[str] = None
    message: Optional[str] = None
    time: Optional[float] = None      # seconds
    memory: Optional[int] = None      # KB
    token: Optional[str] = None

    @property
    def timed_out(self) -> bool:
        return self.status == ExecutionStatus.TIME_LIMIT_EXCEEDED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "description": self.description,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "compile_output": self.compile_output,
            "message": self.message,
            "time": self.time,
            "memory": self.memory,
        }


@dataclass
class TestCaseData:
    """A test case as handed to the grading engine"""
    __test__ = False  # not a pytest class

    expected_output: str
    input: Optional[str] = None
    is_hidden: bool = False
    points: int = 0
    sort_order: int = 0
    id: Optional[Any] = None

    def order_key(self):
        # Id số (DB) so theo giá trị, id chuỗi (content API) so theo chữ
        if isinstance(self.id, int) and not isinstance(self.id, bool):
            return (self.sort_order, 0, self.id, "")
        return (self.sort_order, 1, 0, "" if self.id is None else str(self.id))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TestCaseData":
        return cls(
            id=data.get("id"),
            input=data.get("input"),
            expected_output=data.get("expected_output") or "",
            is_hidden=bool(data.get("is_hidden", False)),
            points=int(data.get("points") or 0),
            sort_order=int(data.get("sort_order") or 0),
        )


@dataclass
class ExerciseData:
    """An exercise plus its test cases, in author-defined order"""
    id: str
    title: str
    language_id: int
    points: int = 100
    difficulty: str = "beginner"
    time_limit_minutes: Optional[int] = None
    description: Optional[str] = None
    content: Optional[str] = None
    starter_code: Optional[str] = None
    solution_code: Optional[str] = None
    objectives: List[str] = field(default_factory=list)
    constraints: List[str] = field(default_factory=list)
    hints: List[str] = field(default_factory=list)
    test_cases: List[TestCaseData] = field(default_factory=list)

    def __post_init__(self):
        self.test_cases = sorted(self.test_cases, key=lambda tc: tc.order_key())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExerciseData":
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            language_id=int(data.get("language_id") or 0),
            points=int(data["points"]) if data.get("points") is not None else 100,
            difficulty=(data.get("difficulty") or "beginner").lower(),
            time_limit_minutes=data.get("time_limit_minutes"),
            description=data.get("description"),
            content=data.get("content"),
            starter_code=data.get("starter_code"),
            solution_code=data.get("solution_code"),
            objectives=list(data.get("objectives") or []),
            constraints=list(data.get("constraints") or []),
            hints=list(data.get("hints") or []),
            test_cases=[TestCaseData.from_dict(tc) for tc in (data.get("test_cases") or [])],
        )


@dataclass
class TestCaseResult:
    """Per-test outcome. `hidden` mirrors the source test case and must be
    used by the presentation layer to redact input/output/error detail."""
    __test__ = False  # not a pytest class

    position: int
    verdict: CaseVerdict
    hidden: bool
    expected_output: str
    input: Optional[str] = None
    test_case_id: Optional[Any] = None
    status: Optional[ExecutionStatus] = None
    description: Optional[str] = None
    stdout: Optional[str] = None
    stderr: Optional[str] = None
    compile_output: Optional[str] = None
    time: Optional[float] = None
    memory: Optional[int] = None
    error: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.verdict == CaseVerdict.PASSED

    @property
    def errored(self) -> bool:
        return self.verdict == CaseVerdict.ERRORED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": self.position,
            "test_case_id": self.test_case_id,
            "verdict": self.verdict.value,
            "passed": self.passed,
            "hidden": self.hidden,
            "input": self.input,
            "expected_output": self.expected_output,
            "status": self.status.value if self.status else None,
            "description": self.description,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "compile_output": self.compile_output,
            "time": self.time,
            "memory": self.memory,
            "error": self.error,
        }


@dataclass
class GradingOutcome:
    results: List[TestCaseResult]
    passed_count: int
    total_count: int
    errored_count: int
    points_earned: int

    @property
    def all_passed(self) -> bool:
        return self.total_count > 0 and self.passed_count == self.total_count

    @property
    def ungradable(self) -> bool:
        """Every test case failed for infrastructure reasons."""
        return self.total_count > 0 and self.errored_count == self.total_count

    @property
    def status(self) -> SubmissionStatus:
        if self.all_passed:
            return SubmissionStatus.ACCEPTED
        if self.ungradable:
            return SubmissionStatus.UNGRADABLE
        return SubmissionStatus.WRONG_ANSWER

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "passed_count": self.passed_count,
            "total_count": self.total_count,
            "errored_count": self.errored_count,
            "points_earned": self.points_earned,
            "all_passed": self.all_passed,
            "ungradable": self.ungradable,
        }


@dataclass
class Workspace:
    """Code to show in the editor when a learner opens an exercise"""
    exercise_id: str
    source_code: str
    language_id: int
    origin: str                       # "draft" / "submission" / "starter"
    saved_at: Optional[datetime] = None
