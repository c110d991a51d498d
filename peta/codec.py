"""Plain-text representation of a request for editing in a text editor.

The decoder is deliberately forgiving: it picks out the lines it recognises
and ignores the rest, so a half-finished edit never raises.
"""
from __future__ import annotations

import copy
import re
from typing import Dict, List, Optional

from peta.models import RequestDefinition

HEADER_COMMENT = [
    "# HTTP Request Editor",
    "# Save and close this buffer to update the request",
]

_NAME_RE = re.compile(r"^Name:[ \t]*(.*)$")
_METHOD_RE = re.compile(r"^Method:[ \t]*(.*)$")
_URL_RE = re.compile(r"^URL:[ \t]*(.*)$")
_BODY_MARKER_RE = re.compile(r"^#\s*body\s*$", re.IGNORECASE)
_HEADER_RE = re.compile(r"^([^#:][^:]*):[ \t]*(.*)$")


def encode_lines(request: RequestDefinition) -> List[str]:
    lines = list(HEADER_COMMENT)
    lines.append("")
    lines.append(f"Name: {request.name}")
    lines.append(f"Method: {request.method}")
    lines.append(f"URL: {request.url}")
    lines.append("")
    lines.append("# Headers (key: value format)")
    for key, value in request.headers.items():
        lines.append(f"{key}: {value}")
    lines.append("")
    lines.append("# Body")
    if request.body:
        lines.extend(request.body.split("\n"))
    return lines


def encode_request(request: RequestDefinition) -> str:
    return "\n".join(encode_lines(request)) + "\n"


def decode_request(
    text: str, original: Optional[RequestDefinition] = None
) -> RequestDefinition:
    """Build a request from edited text.

    Fields that the text does not mention keep their value from ``original``.
    Headers and body always come from the text alone.
    """
    if original is not None:
        updated = copy.deepcopy(original)
    else:
        updated = RequestDefinition(name="", method="GET", url="")

    headers: Dict[str, str] = {}
    body_lines: List[str] = []
    in_body = False

    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()

    for line in lines:
        if in_body:
            if not line.startswith("#"):
                body_lines.append(line)
            continue

        line = line.rstrip("\r")

        match = _NAME_RE.match(line)
        if match:
            updated.name = match.group(1)
            continue
        match = _METHOD_RE.match(line)
        if match:
            updated.method = match.group(1).strip().upper()
            continue
        match = _URL_RE.match(line)
        if match:
            updated.url = match.group(1).strip()
            continue
        if _BODY_MARKER_RE.match(line):
            in_body = True
            continue
        match = _HEADER_RE.match(line)
        if match:
            headers[match.group(1)] = match.group(2)

    updated.headers = headers
    updated.body = "\n".join(body_lines)
    return updated
