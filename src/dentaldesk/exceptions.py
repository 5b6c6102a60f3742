"""dentaldesk exception hierarchy."""

from __future__ import annotations


class DentalDeskError(Exception):
    """Base exception for all dentaldesk errors."""

    pass


class ConfigurationError(DentalDeskError):
    """Raised when there is a configuration error.

    Examples:
        - Failure rate outside the 0..1 range
        - Negative time scale
        - Unwritable storage path
    """

    pass


class StorageError(DentalDeskError):
    """Raised when the key-value store cannot be read or written.

    Examples:
        - Storage file is not valid JSON
        - Storage file cannot be written
    """

    pass


class StorageQuotaExceededError(StorageError):
    """Raised when a write would push the store past its quota.

    Attributes:
        key: The key being written
        required: Bytes the store would hold after the write
        quota: The configured quota in bytes
    """

    def __init__(self, key: str, required: int, quota: int):
        self.key = key
        self.required = required
        self.quota = quota
        super().__init__(
            f"Quota exceeded writing '{key}': {required} bytes > {quota} bytes"
        )


class SerializationError(DentalDeskError):
    """Raised when stored data cannot be parsed into records.

    Examples:
        - Invalid JSON under a collection key
        - Record missing a required field
    """

    pass


class RecordNotFoundError(DentalDeskError):
    """Raised when a patient or incident id does not exist.

    Attributes:
        kind: Record kind ("patient" or "incident")
        record_id: The missing id
    """

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"Unknown {kind} '{record_id}'")


class InvalidRecordError(DentalDeskError):
    """Raised when field values do not make a valid patient or incident.

    Examples:
        - A misspelled field name passed to an update
        - An appointment date that is not a date

    Attributes:
        kind: Record kind ("patient" or "incident")
    """

    def __init__(self, kind: str, message: str):
        self.kind = kind
        super().__init__(f"Invalid {kind}: {message}")


class AuthorizationError(DentalDeskError):
    """Raised when a user lacks the role required for an action."""

    pass
