import time
import httpx
from typing import Any, Dict, List, Optional, Sequence
import logging

from domain.grading.errors import ExecutionUnavailable
from domain.grading.types import ExecutionResult, ExecutionStatus

logger = logging.getLogger(__name__)


# status.description là nguồn phân loại chính; id chỉ dùng khi description lạ
_PENDING_DESCRIPTIONS = {"in queue", "processing"}
_PENDING_IDS = {1, 2}

_STATUS_BY_DESCRIPTION = {
    "accepted": ExecutionStatus.ACCEPTED,
    "wrong answer": ExecutionStatus.WRONG_ANSWER,
    "time limit exceeded": ExecutionStatus.TIME_LIMIT_EXCEEDED,
    "compilation error": ExecutionStatus.COMPILE_ERROR,
    "internal error": ExecutionStatus.INTERNAL_ERROR,
    "exec format error": ExecutionStatus.RUNTIME_ERROR,
}

_STATUS_BY_ID = {
    3: ExecutionStatus.ACCEPTED,
    4: ExecutionStatus.WRONG_ANSWER,
    5: ExecutionStatus.TIME_LIMIT_EXCEEDED,
    6: ExecutionStatus.COMPILE_ERROR,
    7: ExecutionStatus.RUNTIME_ERROR,   # SIGSEGV
    8: ExecutionStatus.RUNTIME_ERROR,   # SIGXFSZ
    9: ExecutionStatus.RUNTIME_ERROR,   # SIGFPE
    10: ExecutionStatus.RUNTIME_ERROR,  # SIGABRT
    11: ExecutionStatus.RUNTIME_ERROR,  # NZEC
    12: ExecutionStatus.RUNTIME_ERROR,  # Other
    13: ExecutionStatus.INTERNAL_ERROR,
    14: ExecutionStatus.RUNTIME_ERROR,
}


def _status_of(data: Dict[str, Any]) -> Dict[str, Any]:
    status = data.get("status") or {}
    if not isinstance(status, dict):
        raise ExecutionUnavailable("Sandbox returned an unexpected payload")
    return status


def _is_pending(data: Dict[str, Any]) -> bool:
    status = _status_of(data)
    description = str(status.get("description") or "").strip().lower()
    if description:
        return description in _PENDING_DESCRIPTIONS
    return status.get("id") in _PENDING_IDS


def classify_status(status: Optional[Dict[str, Any]]) -> ExecutionStatus:
    status = status or {}
    description = str(status.get("description") or "").strip().lower()
    if description in _STATUS_BY_DESCRIPTION:
        return _STATUS_BY_DESCRIPTION[description]
    if description.startswith("runtime error"):
        return ExecutionStatus.RUNTIME_ERROR
    return _STATUS_BY_ID.get(status.get("id"), ExecutionStatus.INTERNAL_ERROR)


def _to_float(value) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_int(value) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_result(data: Dict[str, Any]) -> ExecutionResult:
    """Chuyển JSON của sandbox thành ExecutionResult"""
    status = _status_of(data)
    return ExecutionResult(
        status=classify_status(status),
        description=str(status.get("description") or ""),
        stdout=data.get("stdout"),
        stderr=data.get("stderr"),
        compile_output=data.get("compile_output"),
        message=data.get("message"),
        time=_to_float(data.get("time")),
        memory=_to_int(data.get("memory")),
        token=data.get("token"),
    )


class SandboxClient:
    """
    Client cho Judge0-compatible execution sandbox.

    Không giữ state giữa các lần gọi; cấu hình (URL, API key, timeout) được
    truyền vào lúc khởi tạo thay vì đọc biến môi trường.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 30.0,
        poll_interval: float = 0.5,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.poll_interval = poll_interval
        self._transport = transport
        logger.info(f"Using execution sandbox at: {self.base_url}")

    def _client(self, timeout: Optional[float] = None) -> httpx.Client:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["X-RapidAPI-Key"] = self.api_key
        return httpx.Client(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout if timeout is not None else self.timeout,
            transport=self._transport,
        )

    def _request(self, client: httpx.Client, method: str, path: str, **kwargs) -> Dict[str, Any]:
        resp = client.request(method, path, **kwargs)
        if resp.status_code not in (200, 201):
            raise ExecutionUnavailable(f"Sandbox HTTP Error: {resp.status_code}")
        try:
            data = resp.json()
        except ValueError as e:
            raise ExecutionUnavailable(f"Sandbox returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ExecutionUnavailable("Sandbox returned an unexpected payload")
        return data

    def execute(self, source_code: str, language_id: int, stdin: str = "") -> ExecutionResult:
        """
        Chạy code một lần và chờ đến khi có kết quả cuối cùng hoặc hết deadline.

        Raises ExecutionUnavailable khi sandbox không truy cập được / quá hạn.
        Time Limit Exceeded do sandbox báo là kết quả bình thường, không phải lỗi.
        """
        deadline = time.monotonic() + self.timeout
        payload = {"source_code": source_code, "language_id": language_id, "stdin": stdin or ""}

        try:
            with self._client() as client:
                data = self._request(
                    client,
                    "POST",
                    "/submissions",
                    params={"base64_encoded": "false", "wait": "true"},
                    json=payload,
                )
                # Sandbox có thể trả về trước khi chạy xong -> poll theo token
                while _is_pending(data):
                    token = data.get("token")
                    if not token:
                        raise ExecutionUnavailable("Sandbox returned a pending result without a token")
                    if time.monotonic() + self.poll_interval > deadline:
                        raise ExecutionUnavailable(f"Sandbox did not finish within {self.timeout:g}s")
                    time.sleep(self.poll_interval)
                    data = self._request(client, "GET", f"/submissions/{token}", params={"base64_encoded": "false"})
        except httpx.TimeoutException as e:
            raise ExecutionUnavailable(f"Sandbox request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise ExecutionUnavailable(f"Connection to sandbox failed: {e}") from e

        return parse_result(data)

    def execute_batch(self, source_code: str, language_id: int, stdins: Sequence[str]) -> List[ExecutionResult]:
        """Chạy tuần tự cho từng stdin; thứ tự kết quả khớp thứ tự đầu vào."""
        return [self.execute(source_code, language_id, stdin) for stdin in stdins]

    def health_check(self) -> bool:
        try:
            with self._client(timeout=5.0) as client:
                resp = client.get("/about")
            return resp.status_code == 200
        except httpx.HTTPError as e:
            logger.warning(f"Sandbox health check failed: {e}")
            return False


__all__ = ["SandboxClient", "parse_result", "classify_status"]
