import httpx
from typing import Optional
import logging

from domain.grading.errors import ContentUnavailable
from domain.grading.types import ExerciseData

logger = logging.getLogger(__name__)


class ContentApiClient:
    """Đọc exercise + test cases từ content API (read-only)."""

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        logger.info(f"Using external content API at: {self.base_url}")

    def get_exercise(self, exercise_id: str) -> Optional[ExerciseData]:
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        try:
            with httpx.Client(
                base_url=self.base_url, headers=headers, timeout=self.timeout, transport=self._transport
            ) as client:
                resp = client.get(f"/api/v1/exercises/{exercise_id}")
        except httpx.HTTPError as e:
            raise ContentUnavailable(f"Connection to content API failed: {e}") from e

        if resp.status_code == 404:
            return None
        if resp.status_code != 200:
            raise ContentUnavailable(f"Content API HTTP Error: {resp.status_code}")

        try:
            data = resp.json()
            # API trả về {"exercise": {...}} hoặc object trực tiếp
            if isinstance(data, dict) and isinstance(data.get("exercise"), dict):
                data = data["exercise"]
            return ExerciseData.from_dict(data)
        except (ValueError, KeyError, TypeError) as e:
            raise ContentUnavailable(f"Content API returned an invalid exercise: {e}") from e


__all__ = ["ContentApiClient"]
