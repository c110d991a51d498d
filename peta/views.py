from __future__ import annotations

from typing import List, Optional, Sequence

from peta.models import RequestDefinition, ResponseResult

LIST_TITLE = "HTTP Client - Saved Requests"

LIST_LEGEND = [
    "Commands:",
    "  <Enter>  - Open request",
    "  n        - New request",
    "  d        - Delete request",
    "  e        - Edit request",
    "  q        - Quit",
]

DETAIL_LEGEND = [
    "Commands:",
    "  <Enter>  - Execute request",
    "  e        - Edit request",
    "  s        - Save requests",
    "  <Esc>    - Back to list",
]


def render_list(requests: Sequence[RequestDefinition]) -> List[str]:
    lines = [LIST_TITLE, "=" * len(LIST_TITLE), ""]
    for number, request in enumerate(requests, start=1):
        lines.append(f"{number}. [{request.method}] {request.name}")
        lines.append(f"   {request.url}")
        lines.append("")
    lines.append("")
    lines.extend(LIST_LEGEND)
    return lines


def render_detail(request: RequestDefinition) -> List[str]:
    title = f"Request: {request.name}"
    lines = [title, "=" * len(title), ""]
    lines.append(f"Method: {request.method}")
    lines.append(f"URL: {request.url}")
    lines.append("")
    lines.append("Headers:")
    for key, value in request.headers.items():
        lines.append(f"{key}: {value}")
    lines.append("")
    lines.append("Body:")
    if request.body:
        lines.extend(request.body.split("\n"))
    lines.append("")
    lines.extend(DETAIL_LEGEND)
    return lines


def render_response(response: Optional[ResponseResult]) -> List[str]:
    if response is None:
        return ["(not run)"]
    if response.error:
        return [f"Error: {response.error}"]
    return [line.rstrip("\r") for line in response.full.split("\n")]
