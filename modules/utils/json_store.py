"""Read and atomically rewrite the small JSON files behind the services."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from modules.utils.errors import ProcessingError


def read_json(path: Path, default: Any) -> Any:
    """Return the parsed file, or ``default`` when it does not exist yet.

    A file that exists but cannot be parsed, or whose top level is not the
    same type as ``default``, raises ProcessingError so callers never write
    over it with partial data.
    """
    if not path.exists():
        return default
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ProcessingError(f"Could not read {path.name}: {exc}") from exc
    if not isinstance(data, type(default)):
        raise ProcessingError(f"Could not read {path.name}: unexpected {type(data).__name__} at top level")
    return data


def write_json(path: Path, data: Any) -> None:
    """Write ``data`` next to ``path`` and swap it into place."""
    path.parent.mkdir(parents=True, exist_ok=True)
    handle, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(handle, "w", encoding="utf-8") as stream:
            json.dump(data, stream, indent=2)
            stream.flush()
            os.fsync(stream.fileno())
        os.replace(temp_name, path)
    except BaseException:
        Path(temp_name).unlink(missing_ok=True)
        raise
