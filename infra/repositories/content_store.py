from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from domain.grading.errors import ContentUnavailable
from domain.grading.types import ExerciseData, TestCaseData
from domain.models import Exercise


class SqlContentStore:
    """Đọc exercise + test cases từ database local (khi không cấu hình CONTENT_API_URL)."""

    def __init__(self, db: Session):
        self.db = db

    def get_exercise(self, exercise_id: str) -> Optional[ExerciseData]:
        try:
            exercise = self.db.query(Exercise).filter(Exercise.id == exercise_id).first()
            if exercise is None:
                return None
            return to_exercise_data(exercise)
        except SQLAlchemyError as e:
            raise ContentUnavailable(f"Failed to load exercise {exercise_id}: {e}") from e


def to_exercise_data(exercise: Exercise) -> ExerciseData:
    return ExerciseData(
        id=exercise.id,
        title=exercise.title,
        language_id=exercise.language_id,
        points=exercise.points if exercise.points is not None else 100,
        difficulty=(exercise.difficulty or "beginner").lower(),
        time_limit_minutes=exercise.time_limit_minutes,
        description=exercise.description,
        content=exercise.content,
        starter_code=exercise.starter_code,
        solution_code=exercise.solution_code,
        objectives=list(exercise.objectives or []),
        constraints=list(exercise.constraints or []),
        hints=list(exercise.hints or []),
        test_cases=[
            TestCaseData(
                id=tc.id,
                input=tc.input,
                expected_output=tc.expected_output,
                is_hidden=bool(tc.is_hidden),
                points=tc.points or 0,
                sort_order=tc.sort_order or 0,
            )
            for tc in exercise.testcases
        ],
    )


__all__ = ["SqlContentStore", "to_exercise_data"]
