"""
Exercise stats / learner XP trên SQLAlchemy.

Được gọi sau khi Submission đã lưu thành công. Counter được tăng bằng
UPDATE ... SET x = x + n để các lượt nộp đồng thời không ghi đè lẫn nhau.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from domain.grading.errors import PersistenceError
from domain.models import ExerciseStats, LearnerProgress, Submission

logger = logging.getLogger(__name__)


class SqlProgressStore:

    def __init__(self, db: Session):
        self.db = db

    def record_submission(self, submission: Submission) -> int:
        """Cập nhật stats của exercise và XP của learner; trả về số XP được cộng.

        XP chỉ cộng phần điểm vượt quá điểm cao nhất trước đó của learner cho
        exercise này, nên nộp lại cùng một lời giải không cộng thêm XP.
        """
        try:
            return self._record(submission)
        except IntegrityError:
            # Một lượt nộp khác vừa tạo cùng row counter: thử lại bằng UPDATE
            self.db.rollback()
            try:
                return self._record(submission)
            except SQLAlchemyError as e:
                self.db.rollback()
                raise PersistenceError(f"Failed to update progress: {e}") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Failed to update progress: {e}") from e

    def _record(self, submission: Submission) -> int:
        earlier = self.db.query(Submission).filter(
            Submission.user_id == submission.user_id,
            Submission.exercise_id == submission.exercise_id,
            Submission.id != submission.id,
        )
        previous_best = earlier.with_entities(func.max(Submission.points_earned)).scalar() or 0
        already_solved = earlier.filter(Submission.is_correct.is_(True)).first() is not None

        xp = max(0, (submission.points_earned or 0) - previous_best)
        completions = 1 if submission.is_correct and not already_solved else 0
        now = datetime.utcnow()

        updated = (
            self.db.query(ExerciseStats)
            .filter(ExerciseStats.exercise_id == submission.exercise_id)
            .update(
                {
                    ExerciseStats.total_submissions: ExerciseStats.total_submissions + 1,
                    ExerciseStats.total_completions: ExerciseStats.total_completions + completions,
                    ExerciseStats.updated_at: now,
                },
                synchronize_session=False,
            )
        )
        if not updated:
            self.db.add(ExerciseStats(
                exercise_id=submission.exercise_id,
                total_submissions=1,
                total_completions=completions,
                updated_at=now,
            ))

        updated = (
            self.db.query(LearnerProgress)
            .filter(LearnerProgress.user_id == submission.user_id)
            .update(
                {LearnerProgress.total_xp: LearnerProgress.total_xp + xp, LearnerProgress.updated_at: now},
                synchronize_session=False,
            )
        )
        if not updated:
            self.db.add(LearnerProgress(user_id=submission.user_id, total_xp=xp, updated_at=now))

        self.db.commit()
        logger.debug(f"Progress updated for user={submission.user_id} exercise={submission.exercise_id}: +{xp} XP")
        return xp

    def get_exercise_stats(self, exercise_id: str) -> Optional[ExerciseStats]:
        try:
            return self.db.get(ExerciseStats, exercise_id)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to fetch exercise stats: {e}") from e

    def get_learner_progress(self, user_id: str) -> Optional[LearnerProgress]:
        try:
            return self.db.get(LearnerProgress, user_id)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to fetch learner progress: {e}") from e


__all__ = ["SqlProgressStore"]
