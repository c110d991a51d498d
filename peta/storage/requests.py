from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger

from peta.errors import StorageWriteError
from peta.models import RequestDefinition, ResponseResult, new_request_id
from peta.storage.paths import requests_path

DEFAULT_REQUEST = {
    "name": "New Request",
    "method": "GET",
    "url": "https://httpbin.org/get",
    "headers": {},
    "body": "",
}

SEED_REQUESTS = [
    {
        "name": "GET Example",
        "method": "GET",
        "url": "https://httpbin.org/get",
        "headers": {"User-Agent": "peta"},
        "body": "",
    },
    {
        "name": "POST Example",
        "method": "POST",
        "url": "https://httpbin.org/post",
        "headers": {"Content-Type": "application/json"},
        "body": '{"key": "value"}',
    },
]


def seed_requests() -> List[RequestDefinition]:
    return [_parse_request(data) for data in SEED_REQUESTS]


def load_requests(path: Optional[Path] = None) -> List[RequestDefinition]:
    path = path or requests_path()
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError:
        logger.info("store.seeded", path=str(path), reason="missing")
        return seed_requests()
    except (OSError, ValueError) as exc:
        logger.warning("store.seeded", path=str(path), reason=str(exc))
        return seed_requests()

    if not isinstance(data, list):
        logger.warning("store.seeded", path=str(path), reason="not a list")
        return seed_requests()

    requests: List[RequestDefinition] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        requests.append(_parse_request(item))
    logger.debug("store.loaded", path=str(path), count=len(requests))
    return requests


def save_requests(
    requests: List[RequestDefinition], path: Optional[Path] = None
) -> None:
    path = path or requests_path()
    content = json.dumps(
        [request.to_dict() for request in requests],
        indent=2,
        ensure_ascii=False,
    )
    tmp_name: Optional[str] = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp"
        )
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
            handle.write("\n")
        os.replace(tmp_name, path)
    except OSError as exc:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        logger.error("store.save_failed", path=str(path), error=str(exc))
        raise StorageWriteError(f"could not save requests to {path}: {exc}") from exc
    logger.debug("store.saved", path=str(path), count=len(requests))


def new_request() -> RequestDefinition:
    return _parse_request(DEFAULT_REQUEST)


def insert_request(
    requests: List[RequestDefinition],
    request: Optional[RequestDefinition] = None,
) -> int:
    request = request or new_request()
    request.name = f"Request {len(requests) + 1}"
    requests.append(request)
    return len(requests) - 1


def delete_at(requests: List[RequestDefinition], index: int) -> bool:
    if not 0 <= index < len(requests):
        return False
    del requests[index]
    return True


def replace_at(
    requests: List[RequestDefinition], index: int, updated: RequestDefinition
) -> bool:
    if not 0 <= index < len(requests):
        return False
    updated.id = requests[index].id
    requests[index] = updated
    return True


def find_index(requests: List[RequestDefinition], request_id: str) -> Optional[int]:
    for index, request in enumerate(requests):
        if request.id == request_id:
            return index
    return None


def delete_request(requests: List[RequestDefinition], request_id: str) -> bool:
    index = find_index(requests, request_id)
    if index is None:
        return False
    return delete_at(requests, index)


def replace_request(
    requests: List[RequestDefinition],
    request_id: str,
    updated: RequestDefinition,
) -> bool:
    index = find_index(requests, request_id)
    if index is None:
        return False
    return replace_at(requests, index, updated)


def _parse_request(data: Dict[str, Any]) -> RequestDefinition:
    headers = data.get("headers") if isinstance(data.get("headers"), dict) else {}
    body = data.get("body")
    if body is None:
        body = ""
    elif not isinstance(body, str):
        body = str(body)

    name = data.get("name", "Unnamed")
    request_id = data.get("id")
    return RequestDefinition(
        name=str(name) if name is not None else "Unnamed",
        method=str(data.get("method") or "GET").upper(),
        url=str(data.get("url") or ""),
        headers={str(key): str(value) for key, value in headers.items()},
        body=body,
        response=_parse_response(data.get("response")),
        id=str(request_id) if request_id else new_request_id(),
    )


def _parse_response(raw: Any) -> Optional[ResponseResult]:
    if not isinstance(raw, dict):
        return None
    error = raw.get("error")
    return ResponseResult(
        headers=str(raw.get("headers") or ""),
        body=str(raw.get("body") or ""),
        full=str(raw.get("full") or ""),
        error=str(error) if error else None,
    )
