from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping

from dentaldesk.exceptions import StorageQuotaExceededError

PATIENTS_KEY = "dental_patients"
INCIDENTS_KEY = "dental_incidents"
USER_KEY = "dental_user"

DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024


class KeyValueStore(ABC):
    """Abstract base class for string-to-string stores.

    Mirrors the browser local storage contract the dashboard was written
    against: string keys, string values, absence signalled by ``None``,
    and a size quota enforced on writes.

    Subclasses must implement:
        - _items: Current key/value mapping
        - _write: Persist a complete replacement mapping

    Attributes:
        quota_bytes: Maximum size accepted by ``set_item``
    """

    quota_bytes: int

    @abstractmethod
    def _items(self) -> Mapping[str, str]:
        """Return the current contents."""
        ...

    @abstractmethod
    def _write(self, items: dict[str, str]) -> None:
        """Replace the contents with ``items``."""
        ...

    def get_item(self, key: str) -> str | None:
        return self._items().get(key)

    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``.

        Raises:
            StorageQuotaExceededError: If the write would exceed the quota.
                The store is left unchanged.
        """
        items = dict(self._items())
        items[key] = value
        required = _usage(items)
        if required > self.quota_bytes:
            raise StorageQuotaExceededError(key, required, self.quota_bytes)
        self._write(items)

    def remove_item(self, key: str) -> None:
        items = dict(self._items())
        if items.pop(key, None) is not None:
            self._write(items)

    def keys(self) -> list[str]:
        return list(self._items())

    def usage_bytes(self) -> int:
        """Approximate size as key length plus value length per entry."""
        return _usage(self._items())

    def __contains__(self, key: object) -> bool:
        return key in self._items()

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self._items())


def _usage(items: Mapping[str, str]) -> int:
    return sum(len(key) + len(value) for key, value in items.items())
