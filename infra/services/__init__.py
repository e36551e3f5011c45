"""Core services package

Bao gồm các service chính:
- SandboxClient: gọi execution sandbox (Judge0-compatible) để chạy code
- ContentApiClient: đọc exercise + test case từ content API
"""
from .sandbox_client import SandboxClient
from .content_client import ContentApiClient

__all__ = [
    'SandboxClient',
    'ContentApiClient',
]
