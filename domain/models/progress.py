"""
Progress database models.
Contains: ExerciseStats, LearnerProgress

Exercise có thể đến từ content API nên không có FK tới bảng exercises.
"""
from sqlalchemy import Column, Integer, String, DateTime
from datetime import datetime

from app.db import Base


class ExerciseStats(Base):
    """Submission counters per exercise"""
    __tablename__ = "exercise_stats"

    exercise_id = Column(String(64), primary_key=True)
    total_submissions = Column(Integer, nullable=False, default=0)
    total_completions = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class LearnerProgress(Base):
    """XP earned by a learner across all exercises"""
    __tablename__ = "learner_progress"

    user_id = Column(String(64), primary_key=True)
    total_xp = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
