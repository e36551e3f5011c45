import json

import httpx
import pytest

from domain.grading import ExecutionStatus, ExecutionUnavailable
from infra.services.sandbox_client import SandboxClient, classify_status


def _client(handler, **kwargs) -> SandboxClient:
    kwargs.setdefault("poll_interval", 0)
    return SandboxClient("http://judge.test/", transport=httpx.MockTransport(handler), **kwargs)


def _judge0_result(description: str, status_id: int, **fields) -> dict:
    body = {
        "stdout": None,
        "stderr": None,
        "compile_output": None,
        "message": None,
        "time": "0.012",
        "memory": 3456,
        "token": "tok-1",
        "status": {"id": status_id, "description": description},
    }
    body.update(fields)
    return body


def test_execute_posts_code_and_parses_result() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        seen["api_key"] = request.headers.get("X-RapidAPI-Key")
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json=_judge0_result("Accepted", 3, stdout="6\n"))

    result = _client(handler, api_key="secret").execute("print(6)", 71, "1 2 3")

    assert seen["method"] == "POST"
    assert seen["path"] == "/submissions"
    assert seen["params"] == {"base64_encoded": "false", "wait": "true"}
    assert seen["api_key"] == "secret"
    assert seen["body"] == {"source_code": "print(6)", "language_id": 71, "stdin": "1 2 3"}
    assert result.status == ExecutionStatus.ACCEPTED
    assert result.stdout == "6\n"
    assert result.time == pytest.approx(0.012)
    assert result.memory == 3456


def test_api_key_header_omitted_when_not_configured() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert "X-RapidAPI-Key" not in request.headers
        return httpx.Response(200, json=_judge0_result("Accepted", 3, stdout=""))

    _client(handler).execute("pass", 71)


def test_time_limit_exceeded_is_a_result_not_an_exception() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(201, json=_judge0_result("Time Limit Exceeded", 5))

    result = _client(handler).execute("while True: pass", 71)
    assert result.status == ExecutionStatus.TIME_LIMIT_EXCEEDED
    assert result.timed_out is True


def test_compile_error_keeps_compiler_output() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(201, json=_judge0_result("Compilation Error", 6, compile_output="main.c:1: error"))

    result = _client(handler).execute("int main(", 50)
    assert result.status == ExecutionStatus.COMPILE_ERROR
    assert result.compile_output == "main.c:1: error"


def test_polls_until_terminal_status() -> None:
    polls = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            return httpx.Response(201, json={"token": "abc", "status": {"id": 1, "description": "In Queue"}})
        polls.append(request.url.path)
        if len(polls) < 2:
            return httpx.Response(200, json=_judge0_result("Processing", 2, token="abc"))
        return httpx.Response(200, json=_judge0_result("Accepted", 3, stdout="done", token="abc"))

    result = _client(handler).execute("print('done')", 71)
    assert polls == ["/submissions/abc", "/submissions/abc"]
    assert result.stdout == "done"
    assert result.token == "abc"


def test_polling_past_deadline_is_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"token": "abc", "status": {"id": 2, "description": "Processing"}})

    client = _client(handler, timeout=0.05, poll_interval=0.02)
    with pytest.raises(ExecutionUnavailable, match="did not finish"):
        client.execute("x", 71)


def test_http_error_status_is_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="overloaded")

    with pytest.raises(ExecutionUnavailable, match="503"):
        _client(handler).execute("x", 71)


def test_connection_failure_is_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ExecutionUnavailable, match="connection refused"):
        _client(handler).execute("x", 71)


def test_transport_timeout_is_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("read timed out", request=request)

    with pytest.raises(ExecutionUnavailable, match="timed out"):
        _client(handler).execute("x", 71)


def test_invalid_json_is_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>gateway</html>")

    with pytest.raises(ExecutionUnavailable):
        _client(handler).execute("x", 71)


def test_execute_batch_preserves_order() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        stdin = json.loads(request.content)["stdin"]
        return httpx.Response(201, json=_judge0_result("Accepted", 3, stdout=stdin.upper()))

    results = _client(handler).execute_batch("print(input().upper())", 71, ["a", "b", "c"])
    assert [r.stdout for r in results] == ["A", "B", "C"]


def test_health_check() -> None:
    def ok(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/about"
        return httpx.Response(200, json={"version": "1.13.0"})

    def down(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    assert _client(ok).health_check() is True
    assert _client(down).health_check() is False


@pytest.mark.parametrize(
    "status,expected",
    [
        ({"id": 3, "description": "Accepted"}, ExecutionStatus.ACCEPTED),
        ({"id": 4, "description": "Wrong Answer"}, ExecutionStatus.WRONG_ANSWER),
        ({"id": 11, "description": "Runtime Error (NZEC)"}, ExecutionStatus.RUNTIME_ERROR),
        ({"id": 13, "description": "Internal Error"}, ExecutionStatus.INTERNAL_ERROR),
        # description wins over id
        ({"id": 3, "description": "Time Limit Exceeded"}, ExecutionStatus.TIME_LIMIT_EXCEEDED),
        # unknown description falls back to id
        ({"id": 6, "description": "Erreur de compilation"}, ExecutionStatus.COMPILE_ERROR),
        ({}, ExecutionStatus.INTERNAL_ERROR),
    ],
)
def test_classify_status(status, expected) -> None:
    assert classify_status(status) == expected


@pytest.mark.parametrize("status", ["Accepted", 3, ["Accepted"]])
def test_non_object_status_is_unavailable(status) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(201, json={"stdout": "6", "status": status})

    with pytest.raises(ExecutionUnavailable, match="unexpected payload"):
        _client(handler).execute("print(6)", 71)
