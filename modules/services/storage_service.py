"""File storage helpers."""

from __future__ import annotations

import logging
import re
import time
import uuid
from pathlib import Path
from typing import Iterable, List

from modules.pipelines.pdf_tools import NamedFile

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^\w.\- ]+")


def safe_name(name: str) -> str:
    cleaned = _UNSAFE.sub("_", Path(name).name).strip(" .")
    return cleaned or "download"


class StorageService:
    """Write downloadable artifacts under the output directory."""

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir

    def _batch_dir(self) -> Path:
        # One folder per call so equal file names never overwrite each other.
        path = self.output_dir / f"{time.time_ns()}-{uuid.uuid4().hex[:8]}"
        path.mkdir(parents=True, exist_ok=True)
        return path

    def save_file(self, item: NamedFile) -> Path:
        return self.save_files([item])[0]

    def save_files(self, items: Iterable[NamedFile]) -> List[Path]:
        folder = self._batch_dir()
        paths = []
        for item in items:
            path = folder / safe_name(item.name)
            path.write_bytes(item.data)
            paths.append(path)
        logger.info("Saved %d file(s) to %s", len(paths), folder)
        return paths

    def cleanup(self, max_items: int = 100) -> None:
        """Keep only the newest ``max_items`` output folders."""
        if not self.output_dir.exists():
            return
        folders = sorted(
            (entry for entry in self.output_dir.iterdir() if entry.is_dir()),
            key=lambda entry: entry.stat().st_mtime,
            reverse=True,
        )
        for stale in folders[max_items:]:
            for child in stale.iterdir():
                child.unlink()
            stale.rmdir()
