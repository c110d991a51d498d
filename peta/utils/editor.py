from __future__ import annotations

import shlex
import subprocess
import tempfile
from pathlib import Path
from typing import Optional

from loguru import logger

from peta.storage.config import get_editor_command


def open_in_editor(path: Path, editor: Optional[str] = None) -> bool:
    editor = editor or get_editor_command()
    command = shlex.split(editor) + [str(path)]
    try:
        subprocess.run(command, check=False)
    except FileNotFoundError:
        logger.error("editor.not_found", command=editor)
        return False
    return True


def edit_text(text: str, editor: Optional[str] = None) -> Optional[str]:
    """Let the user edit ``text`` in an external editor.

    Returns the edited text, or ``None`` when the editor could not be started
    or the text was left unchanged.
    """
    with tempfile.TemporaryDirectory(prefix="peta-") as tmp_dir:
        path = Path(tmp_dir) / "request.http"
        path.write_text(text, encoding="utf-8")
        if not open_in_editor(path, editor):
            return None
        edited = path.read_text(encoding="utf-8")
    if edited == text:
        return None
    return edited
