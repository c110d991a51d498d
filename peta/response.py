from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ParsedResponse:
    headers: str
    body: str

    @property
    def status_line(self) -> str:
        if not self.headers:
            return ""
        return self.headers.split("\n", 1)[0].rstrip("\r")


def parse_response(raw: str) -> ParsedResponse:
    """Split a raw HTTP response at its first empty line.

    The status line stays part of the header block. Without an empty line the
    whole text is treated as body.
    """
    lines = raw.split("\n")
    for index, line in enumerate(lines):
        if line in ("", "\r"):
            headers = "\n".join(lines[:index])
            if headers.endswith("\r"):
                headers = headers[:-1]
            return ParsedResponse(headers=headers, body="\n".join(lines[index + 1:]))
    return ParsedResponse(headers="", body=raw)
