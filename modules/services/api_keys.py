"""Per-user API key storage."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Dict, Optional

from modules.utils.json_store import read_json, write_json

logger = logging.getLogger(__name__)

SERVICES = ("runware", "huggingface", "removebg")


class ApiKeyStore:
    """JSON file mapping ``apiKeys_<uid>`` to ``{service: key}``."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = threading.Lock()

    @staticmethod
    def _slot(uid: str) -> str:
        return f"apiKeys_{uid}"

    def get_all(self, uid: str) -> Dict[str, str]:
        with self._lock:
            keys = read_json(self.path, {}).get(self._slot(uid), {})
        if not isinstance(keys, dict):
            logger.warning("Ignoring malformed key entry for %s", uid)
            return {}
        return {service: key for service, key in keys.items() if key}

    def get(self, uid: str, service: str) -> Optional[str]:
        return self.get_all(uid).get(service)

    def save_many(self, uid: str, keys: Dict[str, str]) -> None:
        """Store non-blank keys and drop the ones left blank, in one write."""
        unknown = [service for service in keys if service not in SERVICES]
        if unknown:
            raise KeyError(f"Unknown service '{unknown[0]}'")
        with self._lock:
            data = read_json(self.path, {})
            stored = data.get(self._slot(uid))
            stored = dict(stored) if isinstance(stored, dict) else {}
            for service, key in keys.items():
                cleaned = (key or "").strip()
                if cleaned:
                    stored[service] = cleaned
                else:
                    stored.pop(service, None)
            data[self._slot(uid)] = stored
            write_json(self.path, data)
        logger.info("Saved %d API key(s) for %s", len(stored), uid)
