from __future__ import annotations

import os
from pathlib import Path
from typing import Optional


def data_dir() -> Path:
    override = os.environ.get("PETA_DATA_DIR")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".local" / "share" / "peta"


def config_dir() -> Path:
    override = os.environ.get("PETA_CONFIG_DIR")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "peta"


def requests_path(base: Optional[Path] = None) -> Path:
    return (base or data_dir()) / "http-client" / "requests.json"


def config_path() -> Path:
    return config_dir() / "config.yaml"


def log_path(base: Optional[Path] = None) -> Path:
    return (base or data_dir()) / "peta.log"
