from __future__ import annotations

import json
from pathlib import Path

import pytest

from peta.codec import encode_request
from peta.models import RequestDefinition, ResponseResult
from peta.session import (
    Intent,
    IntentKind,
    ViewMode,
    completion_for,
    handle_intent,
    id_at,
    open_session,
    run_intent,
    selected_request,
)


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "http-client" / "requests.json"


@pytest.fixture
def session(store_path: Path):
    return open_session(store_path)


def _saved(store_path: Path) -> list:
    return json.loads(store_path.read_text(encoding="utf-8"))


def _detail(session, index: int = 0):
    return handle_intent(session, Intent.select(id_at(session, index))).session


def test_open_session_seeds_store(session) -> None:
    assert len(session.requests) == 2
    assert session.mode is ViewMode.LIST
    assert session.selected_id is None


def test_new_appends_and_saves(session, store_path: Path) -> None:
    transition = handle_intent(session, Intent.new())

    assert len(transition.session.requests) == 3
    assert transition.session.requests[2].name == "Request 3"
    assert "3. [GET] Request 3" in transition.lines
    assert [item["name"] for item in _saved(store_path)][-1] == "Request 3"
    assert len(session.requests) == 2


def test_delete_by_id(session, store_path: Path) -> None:
    target = id_at(session, 0)

    transition = handle_intent(session, Intent.delete(target))

    assert [r.name for r in transition.session.requests] == ["POST Example"]
    assert [item["name"] for item in _saved(store_path)] == ["POST Example"]


def test_delete_unknown_id_is_noop(session, store_path: Path) -> None:
    transition = handle_intent(session, Intent.delete("missing"))

    assert transition.changed is False
    assert transition.session == session
    assert not store_path.exists()


def test_select_switches_to_detail_and_escape_returns(session) -> None:
    transition = handle_intent(session, Intent.select(id_at(session, 1)))

    assert transition.session.mode is ViewMode.DETAIL
    assert transition.lines[0] == "Request: POST Example"

    back = handle_intent(transition.session, Intent.escape())
    assert back.session.mode is ViewMode.LIST
    assert back.session.selected_id is None
    assert back.lines[0] == "HTTP Client - Saved Requests"


def test_select_unknown_id_stays_in_list(session) -> None:
    transition = handle_intent(session, Intent.select("missing"))

    assert transition.session.mode is ViewMode.LIST
    assert transition.changed is False


def test_list_mode_ignores_detail_intents(session) -> None:
    for intent in (Intent.execute(), Intent.save(), Intent.text_edited("Name: x")):
        transition = handle_intent(session, intent)
        assert transition.changed is False
        assert transition.pending is None


def test_detail_mode_ignores_list_intents(session) -> None:
    detail = _detail(session)

    assert handle_intent(detail, Intent.new()).changed is False
    assert handle_intent(detail, Intent.delete(detail.selected_id)).session.requests == detail.requests


def test_execute_then_complete(session, store_path: Path) -> None:
    detail = _detail(session)

    started = handle_intent(detail, Intent.execute())

    assert started.pending is not None
    assert started.pending.id == detail.selected_id
    assert detail.selected_id in started.session.in_flight
    assert started.notices[0].message == "Executing request: GET Example"

    response = ResponseResult(headers="HTTP/1.1 200 OK", body="ok", full="HTTP/1.1 200 OK\r\n\r\nok")
    done = handle_intent(started.session, Intent.completed(started.pending.id, response))

    assert done.session.in_flight == frozenset()
    assert selected_request(done.session).response == response
    assert done.notices[-1].message == "Request completed"
    assert _saved(store_path)[0]["response"]["body"] == "ok"


def test_second_execute_refused_while_in_flight(session) -> None:
    started = handle_intent(_detail(session), Intent.execute())

    again = handle_intent(started.session, Intent.execute())

    assert again.pending is None
    assert again.notices[0].severity == "warning"


def test_completion_after_escape_still_lands(session) -> None:
    started = handle_intent(_detail(session), Intent.execute())
    in_list = handle_intent(started.session, Intent.escape()).session

    done = handle_intent(in_list, Intent.completed(started.pending.id, ResponseResult(full="x", body="x")))

    assert done.session.requests[0].response.body == "x"
    assert done.session.mode is ViewMode.LIST


def test_run_intent_executes_synchronously(session, fake_transport) -> None:
    transition = run_intent(_detail(session, 1), Intent.execute(), fake_transport)

    method, url, headers, body = fake_transport.calls[0]
    assert (method, url) == ("POST", "https://httpbin.org/post")
    assert headers == {"Content-Type": "application/json"}
    assert body == '{"key": "value"}'
    assert transition.session.requests[1].response.body == "hello"
    assert [n.message for n in transition.notices] == [
        "Executing request: POST Example",
        "Request completed",
    ]


def test_run_intent_reports_transport_failure(session, failing_transport) -> None:
    transition = run_intent(_detail(session), Intent.execute(), failing_transport)

    response = transition.session.requests[0].response
    assert response.error == "connection refused"
    assert transition.notices[-1].severity == "warning"
    assert transition.session.in_flight == frozenset()


def test_text_edited_replaces_selected_request(session, store_path: Path) -> None:
    detail = _detail(session)
    request = selected_request(detail)
    text = "ignored line\n" + encode_request(request).replace("GET Example", "Renamed")
    text = text.replace("User-Agent: peta", "Accept: application/json")

    transition = handle_intent(detail, Intent.text_edited(text))

    updated = selected_request(transition.session)
    assert updated.id == request.id
    assert updated.name == "Renamed"
    assert updated.headers == {"Accept": "application/json"}
    assert transition.lines[0] == "Request: Renamed"
    assert _saved(store_path)[0]["name"] == "Renamed"
    assert transition.notices[-1].message == "Request updated"


def test_text_edited_warns_on_unknown_method(session) -> None:
    transition = handle_intent(_detail(session), Intent.text_edited("Method: FETCH\n"))

    assert selected_request(transition.session).method == "FETCH"
    assert any(n.severity == "warning" for n in transition.notices)


def test_save_writes_store(session, store_path: Path) -> None:
    transition = handle_intent(_detail(session), Intent.save())

    assert len(_saved(store_path)) == 2
    assert transition.notices[0].message == "Requests saved"


def test_save_failure_becomes_error_notice(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    session = open_session(blocker / "requests.json")

    transition = handle_intent(session, Intent.new())

    assert len(transition.session.requests) == 3
    assert transition.notices[-1].severity == "error"


class ExplodingTransport:
    def send(self, method, url, headers, body) -> str:
        raise RuntimeError("socket went away")


def test_completion_for_always_reports_a_result() -> None:
    request = RequestDefinition(name="r", method="GET", url="https://example.com")

    intent = completion_for(request, ExplodingTransport())

    assert intent.kind is IntentKind.COMPLETED
    assert intent.request_id == request.id
    assert intent.response.error == "RuntimeError: socket went away"


def test_unexpected_transport_error_does_not_leave_request_in_flight(session) -> None:
    transition = run_intent(_detail(session), Intent.execute(), ExplodingTransport())

    assert transition.session.in_flight == frozenset()
    assert "socket went away" in transition.session.requests[0].response.error
    assert transition.notices[-1].severity == "warning"
