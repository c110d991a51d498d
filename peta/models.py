from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

KNOWN_METHODS = (
    "GET",
    "POST",
    "PUT",
    "DELETE",
    "PATCH",
    "HEAD",
    "OPTIONS",
    "TRACE",
    "CONNECT",
)


def new_request_id() -> str:
    return uuid.uuid4().hex


def is_known_method(method: str) -> bool:
    return method.upper() in KNOWN_METHODS


@dataclass
class ResponseResult:
    headers: str = ""
    body: str = ""
    full: str = ""
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "headers": self.headers,
            "body": self.body,
            "full": self.full,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class RequestDefinition:
    name: str
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""
    response: Optional[ResponseResult] = None
    id: str = field(default_factory=new_request_id)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "method": self.method,
            "url": self.url,
            "headers": dict(self.headers),
            "body": self.body,
        }
        if self.response is not None:
            data["response"] = self.response.to_dict()
        return data
