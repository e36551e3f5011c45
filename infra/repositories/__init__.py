"""Persistence adapters (SQLAlchemy)."""
from .submission_store import SqlSubmissionStore
from .content_store import SqlContentStore
from .progress_store import SqlProgressStore

__all__ = [
    'SqlSubmissionStore',
    'SqlContentStore',
    'SqlProgressStore',
]
