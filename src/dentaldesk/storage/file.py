"""
JSON file key-value store.
"""

import json
import logging
from collections.abc import Mapping
from pathlib import Path

from dentaldesk.exceptions import StorageError
from dentaldesk.storage.abc import DEFAULT_QUOTA_BYTES, KeyValueStore

_LOGGER = logging.getLogger(__name__)


class JsonFileKeyValueStore(KeyValueStore):
    """Keeps the whole store as one JSON object in a file.

    The file is re-read on every access and rewritten on every mutation,
    so two processes pointed at the same path see each other's writes but
    race without any conflict detection. A missing file is an empty store.

    Example:
        >>> store = JsonFileKeyValueStore(Path("~/.dentaldesk/storage.json"))
        >>> store.set_item("dental_patients", "[]")
    """

    def __init__(
        self,
        path: Path | str,
        *,
        quota_bytes: int = DEFAULT_QUOTA_BYTES,
        logger: logging.Logger | None = None,
    ):
        self.path = Path(path).expanduser()
        self.quota_bytes = quota_bytes
        self._logger = logger or _LOGGER

    def _items(self) -> Mapping[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise StorageError(f"Cannot read {self.path}: {e}") from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Storage file {self.path} is not valid JSON") from e
        if not isinstance(data, dict) or not all(
            isinstance(v, str) for v in data.values()
        ):
            raise StorageError(f"Storage file {self.path} is not a string mapping")
        return data

    def _write(self, items: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp.write_text(json.dumps(items), encoding="utf-8")
            tmp.replace(self.path)
        except OSError as e:
            raise StorageError(f"Cannot write {self.path}: {e}") from e
        self._logger.debug("Wrote %d keys to %s", len(items), self.path)
