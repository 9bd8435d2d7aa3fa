"""JSON file implementation of the local blob store."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from lazy_lifts.domain.errors import PersistenceError
from lazy_lifts.services.local_store import LocalStore

_logger = logging.getLogger(__name__)


@dataclass
class JsonFileLocalStore(LocalStore):
    """Keeps all blobs in a single JSON object on disk."""

    path: Path

    def get(self, key: str) -> str | None:
        """Return the stored blob, if present."""
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        """Store a blob and flush the file."""
        entries = self._read()
        entries[key] = value
        self._write(entries)

    def remove(self, key: str) -> None:
        """Remove a blob if present."""
        entries = self._read()
        if entries.pop(key, None) is not None:
            self._write(entries)

    def _read(self) -> dict[str, object]:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise PersistenceError(f"Unreadable local store: {self.path}") from exc
        if not isinstance(payload, dict):
            _logger.warning(
                "Ignoring non-object local store", extra={"path": str(self.path)}
            )
            return {}
        return payload

    def _write(self, entries: dict[str, object]) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(entries), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as exc:
            raise PersistenceError(f"Failed to write local store: {self.path}") from exc
