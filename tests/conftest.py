from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Tuple

import pytest

from peta.errors import ExecutionError


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("PETA_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("PETA_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.delenv("EDITOR", raising=False)
    return tmp_path


class FakeTransport:
    def __init__(self, raw: str = "HTTP/1.1 200 OK\r\nContent-Type: text/plain\r\n\r\nhello") -> None:
        self.raw = raw
        self.calls: List[Tuple[str, str, Dict[str, str], str]] = []

    def send(self, method: str, url: str, headers: Dict[str, str], body: str) -> str:
        self.calls.append((method, url, headers, body))
        return self.raw


class FailingTransport:
    def __init__(self, message: str = "connection refused") -> None:
        self.message = message

    def send(self, method: str, url: str, headers: Dict[str, str], body: str) -> str:
        raise ExecutionError(self.message)


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def failing_transport() -> FailingTransport:
    return FailingTransport()
