from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger

from peta.storage.paths import config_path

DEFAULT_CONFIG: Dict[str, Any] = {
    "editor": None,
    "http": {"timeout": None},
    "log": {"level": "INFO"},
}


@dataclass
class Config:
    editor: Optional[str] = None
    timeout: Optional[float] = None
    log_level: str = "INFO"


def ensure_config(path: Optional[Path] = None) -> Path:
    path = path or config_path()
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            yaml.safe_dump(DEFAULT_CONFIG, sort_keys=False),
            encoding="utf-8",
        )
    return path


def load_config(path: Optional[Path] = None) -> Config:
    path = ensure_config(path)
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("config.unreadable", path=str(path), error=str(exc))
        data = None
    if not isinstance(data, dict):
        data = {}
    return _parse_config(data)


def get_editor_command(config: Optional[Config] = None) -> str:
    config = config or load_config()
    return config.editor or os.environ.get("EDITOR") or "vim"


def _parse_config(data: Dict[str, Any]) -> Config:
    editor = data.get("editor")
    http = data.get("http") if isinstance(data.get("http"), dict) else {}
    log = data.get("log") if isinstance(data.get("log"), dict) else {}

    timeout = http.get("timeout")
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
        timeout = None
    elif timeout <= 0:
        timeout = None

    return Config(
        editor=str(editor) if editor else None,
        timeout=float(timeout) if timeout is not None else None,
        log_level=str(log.get("level") or "INFO").upper(),
    )
