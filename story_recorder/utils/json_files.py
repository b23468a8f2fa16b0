"""Small helpers for the flat JSON documents that back the stores.

Writes go to a sibling ``.tmp`` file first and are swapped in with
``os.replace`` so a crash mid-write never leaves a truncated document.
These functions are blocking; the stores call them via ``asyncio.to_thread``.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from story_recorder.utils.errors import StorageError


def read_json(path: Path, component: str) -> Any:
    """Load a JSON document, converting every failure into ``StorageError``."""
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as exc:
        raise StorageError(
            message=f"{path.name} is not valid JSON (line {exc.lineno})",
            component=component,
        ) from exc
    except OSError as exc:
        raise StorageError(
            message=f"Could not read {path.name}: {exc.strerror or exc} (errno {exc.errno})",
            component=component,
        ) from exc


def write_json_atomic(path: Path, payload: Any, component: str) -> None:
    """Serialize ``payload`` to ``path`` atomically."""
    tmp_path = path.with_name(f"{path.name}.tmp")
    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise StorageError(
            message=f"Could not write {path.name}: {exc.strerror or exc} (errno {exc.errno})",
            component=component,
        ) from exc
