"""
Submission Lifecycle Manager.

Trạng thái của một lượt làm bài: Editing -> Draft-Saved -> Submitted(Correct | Incorrect).
Không có trạng thái khoá: học viên có thể nộp lại bao nhiêu lần cũng được, mỗi
lần nộp tạo một Submission mới và không sửa các bản cũ.

Việc autosave định kỳ (vd. mỗi 30s khi đang gõ) do phía client lên lịch;
manager chỉ cung cấp `save_draft` idempotent.
"""

import asyncio
import logging
from typing import List, Optional, Tuple

from domain.models import Draft, ExerciseStats, LearnerProgress, Submission

from .engine import GradingEngine
from .errors import ExerciseNotFound, PersistenceError
from .languages import DEFAULT_LANGUAGE_ID
from .types import ExecutionResult, ExerciseData, GradingOutcome, Workspace

logger = logging.getLogger(__name__)


class SubmissionLifecycleManager:
    """
    Entry point for draft / run / submit.

    Collaborators:
    - store: submission + draft persistence (see infra/repositories/submission_store.py)
    - content: anything with `get_exercise(exercise_id) -> Optional[ExerciseData]`
    - engine: GradingEngine
    - progress: optional, `record_submission(submission) -> int` (exercise stats + XP)

    Các lời gọi store trong hàm async chạy qua asyncio.to_thread để không chặn event loop.
    """

    def __init__(self, store, content, engine: GradingEngine, progress=None):
        self.store = store
        self.content = content
        self.engine = engine
        self.progress = progress

    # ----- Draft -----

    def save_draft(self, learner_id: str, exercise_id: str, source_code: str, language_id: int) -> Draft:
        """Upsert draft cho (learner, exercise). Lỗi lưu trữ -> PersistenceError (không chặn việc soạn code)."""
        try:
            draft = self.store.upsert_draft(learner_id, exercise_id, source_code, language_id)
        except PersistenceError as e:
            logger.warning(f"Draft save failed for user={learner_id} exercise={exercise_id}: {e}")
            raise
        logger.debug(f"Draft saved for user={learner_id} exercise={exercise_id}")
        return draft

    def get_draft(self, learner_id: str, exercise_id: str) -> Optional[Draft]:
        return self.store.get_draft(learner_id, exercise_id)

    # ----- Run (không chấm điểm) -----

    async def run_code(self, source_code: str, language_id: int, stdin: str = "") -> ExecutionResult:
        return await self.engine.run_once(source_code, language_id, stdin)

    # ----- Submit -----

    async def get_exercise(self, exercise_id: str) -> ExerciseData:
        # Content API là HTTP đồng bộ, chạy trong thread để không chặn event loop
        exercise = await asyncio.to_thread(self.content.get_exercise, exercise_id)
        if exercise is None:
            raise ExerciseNotFound(exercise_id)
        return exercise

    async def grade(self, exercise: ExerciseData, source_code: str, language_id: int) -> GradingOutcome:
        return await self.engine.grade(source_code, language_id, exercise.test_cases, exercise.points)

    async def submit(self, learner_id: str, exercise_id: str, source_code: str, language_id: int) -> Submission:
        """Chấm bài trên toàn bộ test case (visible + hidden) và lưu Submission mới.

        NoTestCases / InvalidLanguage / ExerciseNotFound được raise nguyên vẹn.
        Lỗi hạ tầng của từng test case được hấp thụ vào kết quả.
        Lưu thất bại -> PersistenceError: học viên không được báo là đã nộp thành công.
        """
        exercise = await self.get_exercise(exercise_id)
        outcome = await self.grade(exercise, source_code, language_id)

        submission = Submission(
            user_id=learner_id,
            exercise_id=exercise.id,
            source_code=source_code,
            language_id=language_id,
            status=outcome.status.value,
            test_cases_passed=outcome.passed_count,
            test_cases_total=outcome.total_count,
            test_cases_errored=outcome.errored_count,
            points_earned=outcome.points_earned,
            is_correct=outcome.all_passed,
            results=[r.to_dict() for r in outcome.results],
        )
        try:
            submission = await asyncio.to_thread(self.store.create_submission, submission)
        except PersistenceError as e:
            logger.error(f"Graded submission could not be stored for user={learner_id} exercise={exercise_id}: {e}")
            raise

        logger.info(
            f"Submission {submission.id} stored: user={learner_id} exercise={exercise_id} "
            f"status={submission.status} points={submission.points_earned}/{exercise.points}"
        )
        await self._record_progress(submission)
        return submission

    async def _record_progress(self, submission: Submission) -> None:
        # Best-effort: submission đã lưu rồi, lỗi cập nhật stats/XP chỉ ghi log
        if self.progress is None:
            return
        try:
            xp = await asyncio.to_thread(self.progress.record_submission, submission)
        except PersistenceError as e:
            logger.warning(f"Progress update failed for submission {submission.id}: {e}")
            return
        if xp:
            logger.info(f"User {submission.user_id} earned {xp} XP on exercise {submission.exercise_id}")

    # ----- Queries -----

    def get_latest(self, learner_id: str, exercise_id: str) -> Optional[Submission]:
        return self.store.latest_submission(learner_id, exercise_id)

    def get_progress(self, learner_id: str) -> Optional[LearnerProgress]:
        if self.progress is None:
            return None
        return self.progress.get_learner_progress(learner_id)

    def get_exercise_stats(self, exercise_id: str) -> Optional[ExerciseStats]:
        if self.progress is None:
            return None
        return self.progress.get_exercise_stats(exercise_id)

    def get_submission(self, learner_id: str, submission_id: int) -> Optional[Submission]:
        """Chỉ trả về submission thuộc về learner này."""
        return self.store.get_submission(submission_id, learner_id)

    def list_submissions(
        self,
        learner_id: str,
        exercise_id: Optional[str] = None,
        correct: Optional[bool] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> Tuple[int, List[Submission]]:
        return self.store.list_submissions(learner_id, exercise_id=exercise_id, correct=correct, skip=skip, limit=limit)

    async def load_workspace(self, learner_id: str, exercise_id: str) -> Workspace:
        """Code hiển thị khi mở bài: bản nào ghi gần nhất (draft hoặc submission), nếu không có thì starter code."""
        exercise = await self.get_exercise(exercise_id)
        draft = await asyncio.to_thread(self.store.get_draft, learner_id, exercise_id)
        latest = await asyncio.to_thread(self.store.latest_submission, learner_id, exercise_id)

        if draft is not None and (latest is None or draft.updated_at >= latest.created_at):
            return Workspace(exercise.id, draft.source_code, draft.language_id, "draft", draft.updated_at)
        if latest is not None:
            return Workspace(exercise.id, latest.source_code, latest.language_id, "submission", latest.created_at)
        return Workspace(
            exercise.id,
            exercise.starter_code or "",
            exercise.language_id or DEFAULT_LANGUAGE_ID,
            "starter",
        )


__all__ = ["SubmissionLifecycleManager"]
