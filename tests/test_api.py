import pytest
from fastapi.testclient import TestClient

from conftest import FakeSandbox
from app.auth import create_access_token
from app.dependencies import get_sandbox_client
from app.main import app
from domain.models import Exercise, TestCase


@pytest.fixture
def sandbox():
    fake = FakeSandbox.echo()
    app.dependency_overrides[get_sandbox_client] = lambda: fake
    yield fake
    app.dependency_overrides.clear()


@pytest.fixture
def client(db, sandbox):
    exercise = Exercise(
        id="ex-1",
        title="Echo",
        difficulty="beginner",
        points=100,
        language_id=71,
        starter_code="# write your code here\n",
        solution_code="print(input())",
        hints=["read stdin"],
    )
    exercise.testcases = [
        TestCase(input="hello", expected_output="hello", sort_order=1),
        TestCase(input="secret", expected_output="SECRET", sort_order=2, is_hidden=True),
    ]
    db.add_all([exercise, Exercise(id="empty", title="No tests", points=10)])
    db.commit()
    return TestClient(app)


def _auth(user_id: str = "learner-1") -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}


def _submit(client, code="print(input())", exercise_id="ex-1", user_id="learner-1", language_id=71):
    return client.post(
        f"/exercises/{exercise_id}/submit",
        json={"source_code": code, "language_id": language_id},
        headers=_auth(user_id),
    )


def test_requests_without_token_are_rejected(client) -> None:
    assert client.get("/exercises/ex-1").status_code == 401
    assert client.post("/run", json={"source_code": "x"}).status_code == 401
    resp = client.get("/submissions/", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_exercise_view_hides_solution_and_hidden_cases(client) -> None:
    resp = client.get("/exercises/ex-1", headers=_auth())
    assert resp.status_code == 200
    body = resp.json()

    assert "solution_code" not in body
    visible, hidden = body["test_cases"]
    assert visible["input"] == "hello"
    assert hidden["is_hidden"] is True
    assert hidden["input"] is None
    assert hidden["expected_output"] is None


def test_unknown_exercise_is_404(client) -> None:
    assert client.get("/exercises/missing", headers=_auth()).status_code == 404
    assert _submit(client, exercise_id="missing").status_code == 404


def test_submit_grades_and_redacts_hidden_results(client, sandbox) -> None:
    resp = _submit(client)
    assert resp.status_code == 201
    submission = resp.json()["submission"]

    assert submission["test_cases_passed"] == 1
    assert submission["test_cases_total"] == 2
    assert submission["points_earned"] == 50
    assert submission["is_correct"] is False
    assert submission["status"] == "wrong_answer"
    assert sorted(sandbox.calls) == ["hello", "secret"]

    visible, hidden = submission["results"]
    assert visible["passed"] is True
    assert visible["stdout"] == "hello"
    assert hidden["hidden"] is True
    assert hidden["passed"] is False
    for field in ("input", "expected_output", "stdout", "stderr", "error"):
        assert hidden[field] is None


def test_invalid_language_is_400(client, sandbox) -> None:
    resp = _submit(client, language_id=424242)
    assert resp.status_code == 400
    assert sandbox.calls == []


def test_exercise_without_test_cases_is_422(client) -> None:
    assert _submit(client, exercise_id="empty").status_code == 422


def test_sandbox_down_still_records_submission(client) -> None:
    app.dependency_overrides[get_sandbox_client] = FakeSandbox.unavailable

    resp = _submit(client)
    assert resp.status_code == 201
    submission = resp.json()["submission"]
    assert submission["status"] == "ungradable"
    assert submission["is_correct"] is False
    assert submission["test_cases_errored"] == 2


def test_latest_list_and_detail(client) -> None:
    _submit(client, code="print('x')")
    second = _submit(client).json()["submission"]
    other = _submit(client, user_id="learner-2").json()["submission"]

    latest = client.get("/exercises/ex-1/submissions/latest", headers=_auth())
    assert latest.status_code == 200
    assert latest.json()["id"] == second["id"]
    assert latest.json()["source_code"] == "print(input())"

    listing = client.get("/submissions/", headers=_auth()).json()
    assert listing["total"] == 2
    assert [item["id"] for item in listing["items"]][0] == second["id"]

    detail = client.get(f"/submissions/{second['id']}", headers=_auth())
    assert detail.status_code == 200
    assert detail.json()["results"][1]["stdout"] is None

    # Bài nộp của người khác -> 404
    assert client.get(f"/submissions/{other['id']}", headers=_auth()).status_code == 404


def test_latest_without_submissions_is_404(client) -> None:
    resp = client.get("/exercises/ex-1/submissions/latest", headers=_auth())
    assert resp.status_code == 404


def test_draft_autosave_round(client) -> None:
    assert client.get("/exercises/ex-1/draft", headers=_auth()).status_code == 404

    for code in ("print(1)", "print(2)"):
        resp = client.put("/exercises/ex-1/draft", json={"source_code": code}, headers=_auth())
        assert resp.status_code == 200

    draft = client.get("/exercises/ex-1/draft", headers=_auth()).json()
    assert draft["source_code"] == "print(2)"
    assert draft["language_id"] == 71


def test_workspace_uses_starter_then_draft(client) -> None:
    ws = client.get("/exercises/ex-1/workspace", headers=_auth()).json()
    assert ws["origin"] == "starter"
    assert ws["source_code"] == "# write your code here\n"

    client.put("/exercises/ex-1/draft", json={"source_code": "print('wip')"}, headers=_auth())
    ws = client.get("/exercises/ex-1/workspace", headers=_auth()).json()
    assert ws["origin"] == "draft"
    assert ws["source_code"] == "print('wip')"


def test_run_returns_output_without_persisting(client, sandbox) -> None:
    resp = client.post("/run", json={"source_code": "print(input())", "stdin": "ping"}, headers=_auth())
    assert resp.status_code == 200
    assert resp.json()["stdout"] == "ping"
    assert resp.json()["status"] == "accepted"
    assert sandbox.calls == ["ping"]
    assert client.get("/submissions/", headers=_auth()).json()["total"] == 0


def test_run_when_sandbox_unreachable_is_503(client) -> None:
    app.dependency_overrides[get_sandbox_client] = FakeSandbox.unavailable

    resp = client.post("/run", json={"source_code": "x"}, headers=_auth())
    assert resp.status_code == 503
    assert resp.headers["Retry-After"] == "30"


def test_system_endpoints(client) -> None:
    assert client.get("/health").json()["status"] == "healthy"

    config = client.get("/api/config").json()
    assert 71 in [lang["id"] for lang in config["languages"]]
    assert config["max_parallel_test_cases"] >= 1

    assert client.get("/api/sandbox/health").json() == {"reachable": True}


def test_submit_awards_xp_and_counts_stats(client) -> None:
    assert client.get("/progress/me", headers=_auth()).json() == {"user_id": "learner-1", "total_xp": 0}

    _submit(client)
    _submit(client)

    assert client.get("/progress/me", headers=_auth()).json()["total_xp"] == 50
    stats = client.get("/exercises/ex-1/stats", headers=_auth()).json()
    assert stats == {"exercise_id": "ex-1", "total_submissions": 2, "total_completions": 0}
