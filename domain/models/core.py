"""
Core database models với PostgreSQL schema.
Contains: Exercise, TestCase
"""
from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, JSON
from sqlalchemy.orm import relationship

from app.db import Base


class Exercise(Base):
    """Exercise model - authored coding problems"""
    __tablename__ = "exercises"

    id = Column(String(64), primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    difficulty = Column(String(50), nullable=False, default="beginner")
    points = Column(Integer, nullable=False, default=100)
    time_limit_minutes = Column(Integer, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)
    language_id = Column(Integer, nullable=False, default=71)

    content = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    starter_code = Column(Text, nullable=True)
    solution_code = Column(Text, nullable=True)
    objectives = Column(JSON, nullable=True)
    constraints = Column(JSON, nullable=True)
    hints = Column(JSON, nullable=True)

    # Relationships
    testcases = relationship(
        "TestCase",
        back_populates="exercise",
        cascade="all, delete-orphan",
        order_by=lambda: [TestCase.sort_order, TestCase.id],
    )


class TestCase(Base):
    """Test case model for exercises"""
    __tablename__ = "test_cases"
    __test__ = False  # not a pytest class

    id = Column(Integer, primary_key=True, index=True)
    exercise_id = Column(String(64), ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False, index=True)
    input = Column(Text, nullable=True)
    expected_output = Column(Text, nullable=False)
    is_hidden = Column(Boolean, default=False, nullable=False)
    points = Column(Integer, default=0, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)

    # Relationships
    exercise = relationship("Exercise", back_populates="testcases")
