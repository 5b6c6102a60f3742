from collections.abc import Mapping

from dentaldesk.storage.abc import DEFAULT_QUOTA_BYTES, KeyValueStore


class MemoryKeyValueStore(KeyValueStore):
    """Dict-backed store. Contents live as long as the instance."""

    def __init__(
        self,
        initial: Mapping[str, str] | None = None,
        *,
        quota_bytes: int = DEFAULT_QUOTA_BYTES,
    ):
        self.quota_bytes = quota_bytes
        self._data: dict[str, str] = dict(initial or {})

    def _items(self) -> Mapping[str, str]:
        return self._data

    def _write(self, items: dict[str, str]) -> None:
        self._data = items

    def clear(self) -> None:
        self._data = {}
