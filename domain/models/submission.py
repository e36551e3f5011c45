"""
Submission database models.
Contains: Submission, Draft
"""
from sqlalchemy import Column, Integer, Boolean, String, Text, DateTime, JSON, UniqueConstraint
from datetime import datetime

from app.db import Base


class Submission(Base):
    """Database model for storing graded code submissions (append-only)"""
    __tablename__ = "submissions"

    id = Column(Integer, primary_key=True, index=True)
    # Learner id đến từ identity provider bên ngoài nên không có FK.
    user_id = Column(String(64), nullable=False, index=True)
    exercise_id = Column(String(64), nullable=False, index=True)

    # Code submitted
    source_code = Column(Text, nullable=False)
    language_id = Column(Integer, nullable=False)

    # Results
    status = Column(String(32), nullable=False)
    test_cases_passed = Column(Integer, nullable=False, default=0)
    test_cases_total = Column(Integer, nullable=False, default=0)
    test_cases_errored = Column(Integer, nullable=False, default=0)
    points_earned = Column(Integer, nullable=False, default=0)
    is_correct = Column(Boolean, nullable=False, default=False)
    results = Column(JSON, nullable=True)  # Per-test results, each tagged with `hidden`

    # Metadata
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)


class Draft(Base):
    """Autosaved in-progress code, one live row per (learner, exercise)"""
    __tablename__ = "drafts"
    __table_args__ = (UniqueConstraint("user_id", "exercise_id", name="uq_drafts_user_exercise"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False)
    exercise_id = Column(String(64), nullable=False)

    source_code = Column(Text, nullable=False)
    language_id = Column(Integer, nullable=False)

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
