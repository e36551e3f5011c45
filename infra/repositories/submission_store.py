"""
Submission / Draft persistence trên SQLAlchemy.

Mọi lỗi SQLAlchemy được rollback và đổi thành PersistenceError để tầng trên
phân biệt được "không lưu được" với lỗi chấm bài.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from domain.grading.errors import PersistenceError
from domain.models import Draft, Submission

logger = logging.getLogger(__name__)


class SqlSubmissionStore:

    def __init__(self, db: Session):
        self.db = db

    # ----- Submission (append-only) -----

    def create_submission(self, submission: Submission) -> Submission:
        if submission.created_at is None:
            submission.created_at = datetime.utcnow()
        try:
            self.db.add(submission)
            self.db.commit()
            self.db.refresh(submission)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Failed to store submission: {e}") from e
        return submission

    def latest_submission(self, user_id: str, exercise_id: str) -> Optional[Submission]:
        try:
            return (
                self.db.query(Submission)
                .filter(Submission.user_id == user_id, Submission.exercise_id == exercise_id)
                .order_by(Submission.created_at.desc(), Submission.id.desc())
                .first()
            )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to fetch latest submission: {e}") from e

    def get_submission(self, submission_id: int, user_id: str) -> Optional[Submission]:
        try:
            return (
                self.db.query(Submission)
                .filter(Submission.id == submission_id, Submission.user_id == user_id)
                .first()
            )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to fetch submission: {e}") from e

    def list_submissions(
        self,
        user_id: str,
        exercise_id: Optional[str] = None,
        correct: Optional[bool] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> Tuple[int, List[Submission]]:
        skip = max(skip, 0)
        limit = max(min(limit, 200), 1)

        query = self.db.query(Submission).filter(Submission.user_id == user_id)
        if exercise_id is not None:
            query = query.filter(Submission.exercise_id == exercise_id)
        if correct is not None:
            query = query.filter(Submission.is_correct.is_(correct))

        try:
            total = query.count()
            rows = (
                query.order_by(Submission.created_at.desc(), Submission.id.desc())
                .offset(skip)
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to list submissions: {e}") from e
        return total, rows

    # ----- Draft (one row per user/exercise, last write wins) -----

    def get_draft(self, user_id: str, exercise_id: str) -> Optional[Draft]:
        try:
            return (
                self.db.query(Draft)
                .filter(Draft.user_id == user_id, Draft.exercise_id == exercise_id)
                .first()
            )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to fetch draft: {e}") from e

    def upsert_draft(self, user_id: str, exercise_id: str, source_code: str, language_id: int) -> Draft:
        try:
            return self._upsert_draft(user_id, exercise_id, source_code, language_id)
        except IntegrityError:
            # Một autosave khác vừa insert cùng (user, exercise): ghi đè bản đó
            self.db.rollback()
            logger.debug(f"Concurrent draft insert for user={user_id} exercise={exercise_id}, retrying as update")
            try:
                return self._upsert_draft(user_id, exercise_id, source_code, language_id)
            except SQLAlchemyError as e:
                self.db.rollback()
                raise PersistenceError(f"Failed to save draft: {e}") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Failed to save draft: {e}") from e

    def _upsert_draft(self, user_id: str, exercise_id: str, source_code: str, language_id: int) -> Draft:
        draft = (
            self.db.query(Draft)
            .filter(Draft.user_id == user_id, Draft.exercise_id == exercise_id)
            .first()
        )
        now = datetime.utcnow()
        if draft is None:
            draft = Draft(user_id=user_id, exercise_id=exercise_id)
            self.db.add(draft)
        draft.source_code = source_code
        draft.language_id = language_id
        draft.updated_at = now
        self.db.commit()
        self.db.refresh(draft)
        return draft


__all__ = ["SqlSubmissionStore"]
