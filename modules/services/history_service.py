"""Generation history tracking."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import List, Optional

from modules.utils.json_store import read_json, write_json

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class GenerationRecord:
    """Metadata describing a generation event."""

    user_id: str
    prompt: str
    result_url: str
    kind: str = "image"  # image or video
    seed: Optional[int] = None
    created_at: float = field(default_factory=time.time)


class GenerationHistoryService:
    """Simple JSON-backed history store. Records are append-only.

    An unreadable history file raises ProcessingError on both reads and
    writes; it is never replaced by a shorter list.
    """

    def __init__(self, history_path: Path) -> None:
        self.history_path = history_path
        self._lock = threading.Lock()

    def record(self, record: GenerationRecord) -> None:
        """Append a history record to disk."""
        with self._lock:
            entries = read_json(self.history_path, [])
            entries.append(asdict(record))
            write_json(self.history_path, entries)
        logger.info("Recorded %s generation for %s", record.kind, record.user_id)

    def list(self, user_id: str, kind: Optional[str] = None, limit: Optional[int] = None) -> List[GenerationRecord]:
        """Return a user's records, newest first."""
        with self._lock:
            entries = read_json(self.history_path, [])

        records = []
        for entry in entries:
            record = _parse_entry(entry)
            if record is None:
                logger.warning("Skipping malformed history entry: %r", entry)
                continue
            if record.user_id != user_id or (kind and record.kind != kind):
                continue
            records.append(record)

        records.sort(key=lambda item: item.created_at, reverse=True)
        return records[:limit] if limit is not None else records


def _parse_entry(entry: object) -> Optional[GenerationRecord]:
    if not isinstance(entry, dict):
        return None
    try:
        record = GenerationRecord(**entry)
    except TypeError:
        return None
    created = record.created_at
    if isinstance(created, bool) or not isinstance(created, (int, float)):
        return None
    return record
