"""Session state and intent handling for the request manager views.

A :class:`Session` is an immutable snapshot. Each intent produces a
:class:`Transition` holding the next session, the lines to display and any
notices for the user. Executing a request happens in two steps: ``EXECUTE``
marks the request as in flight and hands it back in ``Transition.pending``;
the caller sends it and reports the result with ``COMPLETED``.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import FrozenSet, List, Optional, Tuple

from loguru import logger

from peta.codec import decode_request
from peta.errors import StorageWriteError
from peta.http_client import Transport, execute_request
from peta.models import RequestDefinition, ResponseResult, is_known_method
from peta.storage.requests import (
    delete_request,
    find_index,
    insert_request,
    load_requests,
    replace_request,
    save_requests,
)
from peta.views import render_detail, render_list


class ViewMode(str, Enum):
    LIST = "list"
    DETAIL = "detail"


class IntentKind(str, Enum):
    NEW = "new"
    DELETE = "delete"
    SELECT = "select"
    EXECUTE = "execute"
    SAVE = "save"
    ESCAPE = "escape"
    TEXT_EDITED = "text_edited"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Intent:
    kind: IntentKind
    request_id: Optional[str] = None
    text: Optional[str] = None
    response: Optional[ResponseResult] = None

    @classmethod
    def new(cls) -> "Intent":
        return cls(IntentKind.NEW)

    @classmethod
    def delete(cls, request_id: str) -> "Intent":
        return cls(IntentKind.DELETE, request_id=request_id)

    @classmethod
    def select(cls, request_id: str) -> "Intent":
        return cls(IntentKind.SELECT, request_id=request_id)

    @classmethod
    def execute(cls, request_id: Optional[str] = None) -> "Intent":
        return cls(IntentKind.EXECUTE, request_id=request_id)

    @classmethod
    def save(cls) -> "Intent":
        return cls(IntentKind.SAVE)

    @classmethod
    def escape(cls) -> "Intent":
        return cls(IntentKind.ESCAPE)

    @classmethod
    def text_edited(cls, text: str, request_id: Optional[str] = None) -> "Intent":
        return cls(IntentKind.TEXT_EDITED, request_id=request_id, text=text)

    @classmethod
    def completed(cls, request_id: str, response: ResponseResult) -> "Intent":
        return cls(IntentKind.COMPLETED, request_id=request_id, response=response)


@dataclass(frozen=True)
class Notice:
    message: str
    severity: str = "information"


@dataclass(frozen=True)
class Session:
    requests: Tuple[RequestDefinition, ...] = ()
    mode: ViewMode = ViewMode.LIST
    selected_id: Optional[str] = None
    in_flight: FrozenSet[str] = frozenset()
    store_path: Optional[Path] = None


@dataclass(frozen=True)
class Transition:
    session: Session
    lines: List[str]
    notices: Tuple[Notice, ...] = ()
    pending: Optional[RequestDefinition] = None
    changed: bool = True


@dataclass
class _Outcome:
    session: Session
    notices: List[Notice] = field(default_factory=list)
    pending: Optional[RequestDefinition] = None
    changed: bool = True


def open_session(store_path: Optional[Path] = None) -> Session:
    return Session(requests=tuple(load_requests(store_path)), store_path=store_path)


def find_request(session: Session, request_id: Optional[str]) -> Optional[RequestDefinition]:
    if request_id is None:
        return None
    index = find_index(list(session.requests), request_id)
    if index is None:
        return None
    return session.requests[index]


def selected_request(session: Session) -> Optional[RequestDefinition]:
    return find_request(session, session.selected_id)


def id_at(session: Session, index: int) -> Optional[str]:
    if not 0 <= index < len(session.requests):
        return None
    return session.requests[index].id


def view_lines(session: Session) -> List[str]:
    request = selected_request(session)
    if session.mode is ViewMode.DETAIL and request is not None:
        return render_detail(request)
    return render_list(session.requests)


def handle_intent(session: Session, intent: Intent) -> Transition:
    if intent.kind is IntentKind.COMPLETED:
        outcome = _on_completed(session, intent)
    elif session.mode is ViewMode.DETAIL:
        outcome = handle_detail_intent(session, intent)
    else:
        outcome = handle_list_intent(session, intent)
    logger.debug(
        "session.intent",
        kind=intent.kind.value,
        mode=outcome.session.mode.value,
        changed=outcome.changed,
    )
    return Transition(
        session=outcome.session,
        lines=view_lines(outcome.session),
        notices=tuple(outcome.notices),
        pending=outcome.pending,
        changed=outcome.changed,
    )


def run_intent(
    session: Session, intent: Intent, transport: Optional[Transport] = None
) -> Transition:
    """Handle ``intent`` and, if it asks for an execution, perform it now."""
    transition = handle_intent(session, intent)
    if transition.pending is None:
        return transition
    completed = handle_intent(
        transition.session, completion_for(transition.pending, transport)
    )
    return dataclasses.replace(
        completed, notices=transition.notices + completed.notices
    )


def completion_for(
    request: RequestDefinition, transport: Optional[Transport] = None
) -> Intent:
    """Execute ``request`` and return the COMPLETED intent reporting it.

    Always yields an intent, so the request never stays in flight.
    """
    try:
        response = execute_request(request, transport)
    except Exception as exc:
        logger.exception("request.crashed", id=request.id)
        message = f"{exc.__class__.__name__}: {exc}"
        response = ResponseResult(headers="", body=message, full=message, error=message)
    return Intent.completed(request.id, response)


def handle_list_intent(session: Session, intent: Intent) -> _Outcome:
    if intent.kind is IntentKind.NEW:
        requests = list(session.requests)
        index = insert_request(requests)
        outcome = _Outcome(dataclasses.replace(session, requests=tuple(requests)))
        outcome.notices.append(Notice(f"Created {requests[index].name}"))
        return _persist(outcome)

    if intent.kind is IntentKind.DELETE:
        requests = list(session.requests)
        if intent.request_id is None or not delete_request(requests, intent.request_id):
            return _Outcome(session, changed=False)
        outcome = _Outcome(dataclasses.replace(session, requests=tuple(requests)))
        return _persist(outcome)

    if intent.kind is IntentKind.SELECT:
        if find_request(session, intent.request_id) is None:
            return _Outcome(session, changed=False)
        return _Outcome(
            dataclasses.replace(
                session, mode=ViewMode.DETAIL, selected_id=intent.request_id
            )
        )

    return _Outcome(session, changed=False)


def handle_detail_intent(session: Session, intent: Intent) -> _Outcome:
    if intent.kind is IntentKind.ESCAPE:
        return _Outcome(
            dataclasses.replace(session, mode=ViewMode.LIST, selected_id=None)
        )

    if intent.kind is IntentKind.SAVE:
        outcome = _persist(_Outcome(session, changed=False))
        if not outcome.notices:
            outcome.notices.append(Notice("Requests saved"))
        return outcome

    if intent.kind is IntentKind.EXECUTE:
        return _on_execute(session, intent)

    if intent.kind is IntentKind.TEXT_EDITED:
        return _on_text_edited(session, intent)

    return _Outcome(session, changed=False)


def _on_execute(session: Session, intent: Intent) -> _Outcome:
    request = find_request(session, intent.request_id or session.selected_id)
    if request is None:
        return _Outcome(session, changed=False)
    if request.id in session.in_flight:
        return _Outcome(
            session,
            notices=[Notice(f"{request.name} is already running", "warning")],
            changed=False,
        )
    next_session = dataclasses.replace(
        session, in_flight=session.in_flight | {request.id}
    )
    return _Outcome(
        next_session,
        notices=[Notice(f"Executing request: {request.name}")],
        pending=request,
    )


def _on_completed(session: Session, intent: Intent) -> _Outcome:
    request_id = intent.request_id
    in_flight = session.in_flight - {request_id} if request_id else session.in_flight
    next_session = dataclasses.replace(session, in_flight=in_flight)
    request = find_request(session, request_id)
    if request is None or intent.response is None:
        return _Outcome(next_session)

    requests = list(session.requests)
    replace_request(
        requests, request.id, dataclasses.replace(request, response=intent.response)
    )
    outcome = _Outcome(dataclasses.replace(next_session, requests=tuple(requests)))
    if intent.response.error:
        outcome.notices.append(
            Notice(f"Request failed: {intent.response.error}", "warning")
        )
    else:
        outcome.notices.append(Notice("Request completed"))
    return _persist(outcome)


def _on_text_edited(session: Session, intent: Intent) -> _Outcome:
    request = find_request(session, intent.request_id or session.selected_id)
    if request is None or intent.text is None:
        return _Outcome(session, changed=False)

    updated = decode_request(intent.text, request)
    requests = list(session.requests)
    replace_request(requests, request.id, updated)
    outcome = _Outcome(dataclasses.replace(session, requests=tuple(requests)))
    if not is_known_method(updated.method):
        outcome.notices.append(
            Notice(f"Unknown HTTP method: {updated.method}", "warning")
        )
    outcome = _persist(outcome)
    outcome.notices.append(Notice("Request updated"))
    return outcome


def _persist(outcome: _Outcome) -> _Outcome:
    try:
        save_requests(list(outcome.session.requests), outcome.session.store_path)
    except StorageWriteError as exc:
        outcome.notices.append(Notice(str(exc), "error"))
    return outcome
