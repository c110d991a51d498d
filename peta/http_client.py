from __future__ import annotations

import time
from typing import Dict, Optional, Protocol

import requests
from loguru import logger

from peta.errors import ExecutionError
from peta.models import RequestDefinition, ResponseResult, is_known_method
from peta.response import parse_response

_HTTP_VERSIONS = {10: "HTTP/1.0", 11: "HTTP/1.1"}


class Transport(Protocol):
    def send(
        self, method: str, url: str, headers: Dict[str, str], body: str
    ) -> str:
        ...


class RequestsTransport:
    """Sends requests with a ``requests.Session`` and rebuilds the raw reply."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._session = session or requests.Session()
        self._timeout = timeout

    def send(
        self, method: str, url: str, headers: Dict[str, str], body: str
    ) -> str:
        try:
            resp = self._session.request(
                method=method,
                url=url,
                headers=dict(headers),
                data=body.encode("utf-8") if body else None,
                timeout=self._timeout,
                allow_redirects=False,
            )
        except (requests.RequestException, ValueError) as exc:
            # ValueError covers UnicodeEncodeError and invalid method tokens.
            raise ExecutionError(str(exc)) from exc
        return format_raw_response(resp)


def format_raw_response(resp: requests.Response) -> str:
    raw = getattr(resp, "raw", None)
    version = _HTTP_VERSIONS.get(getattr(raw, "version", None), "HTTP/1.1")
    status_line = f"{version} {resp.status_code} {resp.reason or ''}".rstrip()
    lines = [status_line]
    lines.extend(f"{key}: {value}" for key, value in resp.headers.items())
    return "\r\n".join(lines) + "\r\n\r\n" + resp.text


def execute_request(
    request: RequestDefinition, transport: Optional[Transport] = None
) -> ResponseResult:
    """Send ``request`` and return its raw response split into parts.

    Transport failures do not raise; they come back as a result whose body is
    the error message and whose ``error`` field is set.
    """
    transport = transport or RequestsTransport()
    if not is_known_method(request.method):
        logger.warning("request.unknown_method", method=request.method)

    logger.info(
        "request.execute", id=request.id, method=request.method, url=request.url
    )
    started = time.perf_counter()
    try:
        raw = transport.send(
            request.method, request.url, dict(request.headers), request.body
        )
    except ExecutionError as exc:
        message = str(exc) or exc.__class__.__name__
        logger.error("request.failed", id=request.id, error=message)
        return ResponseResult(headers="", body=message, full=message, error=message)

    parsed = parse_response(raw)
    logger.info(
        "request.completed",
        id=request.id,
        status=parsed.status_line,
        elapsed_ms=round((time.perf_counter() - started) * 1000),
    )
    return ResponseResult(headers=parsed.headers, body=parsed.body, full=raw)
