"""
Mock persistence store over a key-value backend.
"""

import logging
from collections.abc import Sequence
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from dentaldesk.exceptions import SerializationError, StorageError
from dentaldesk.faults import FaultPolicy, RandomFaultPolicy
from dentaldesk.storage import INCIDENTS_KEY, PATIENTS_KEY, KeyValueStore
from dentaldesk.types import (
    DatabaseOperation,
    Incident,
    OperationType,
    Patient,
    Role,
    Table,
    User,
)

_LOGGER = logging.getLogger(__name__)

READ_LATENCY_MS = (100, 500)
AUTH_LATENCY_MS = (200, 800)

_RecordT = TypeVar("_RecordT", bound=BaseModel)


class Credential(User):
    password: str


CREDENTIALS: tuple[Credential, ...] = (
    Credential(id="1", role=Role.ADMIN, email="admin@entnt.in", password="admin123"),
    Credential(
        id="2",
        role=Role.PATIENT,
        email="john@entnt.in",
        password="patient123",
        patient_id="p1",
    ),
    Credential(
        id="3",
        role=Role.PATIENT,
        email="jane@entnt.in",
        password="patient123",
        patient_id="p2",
    ),
    Credential(
        id="4",
        role=Role.PATIENT,
        email="mike@entnt.in",
        password="patient123",
        patient_id="p3",
    ),
)


class OperationLog:
    """Append-only, in-memory audit history of persistence calls."""

    def __init__(self) -> None:
        self._operations: list[DatabaseOperation] = []

    def append(self, operation: DatabaseOperation) -> None:
        self._operations.append(operation)

    def history(self) -> list[DatabaseOperation]:
        return list(self._operations)

    def clear(self) -> None:
        self._operations = []

    def __len__(self) -> int:
        return len(self._operations)


class MockDatabase:
    """Reads and writes the patient and incident collections.

    Every call is padded with a latency drawn from the fault policy and
    recorded in the operation log. Writes are full overwrites of a
    collection. Write failures are reported as ``False``, never raised;
    absent collections read as empty lists.

    Example:
        >>> db = MockDatabase(MemoryKeyValueStore(), fault_policy=NoFaultPolicy())
        >>> await db.save_patients([patient])
        True
        >>> await db.get_patients()
        [Patient(id='p1', ...)]
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        fault_policy: FaultPolicy | None = None,
        operation_log: OperationLog | None = None,
        logger: logging.Logger | None = None,
    ):
        self.store = store
        self.fault_policy = fault_policy or RandomFaultPolicy()
        self.operation_log = (
            operation_log if operation_log is not None else OperationLog()
        )
        self._logger = logger or _LOGGER

    async def _simulate_latency(
        self, minimum: float = READ_LATENCY_MS[0], maximum: float = READ_LATENCY_MS[1]
    ) -> None:
        await self.fault_policy.pause(self.fault_policy.latency_ms(minimum, maximum))

    def _log_operation(
        self,
        op_type: OperationType,
        table: Table,
        success: bool,
        data: dict[str, Any] | None = None,
    ) -> None:
        operation = DatabaseOperation(
            type=op_type, table=table, success=success, data=data
        )
        self.operation_log.append(operation)
        self._logger.debug(
            "[MockDB] %s on %s: success=%s %s",
            op_type.value,
            table.value,
            success,
            data,
        )

    async def _read(
        self, key: str, table: Table, record_type: type[_RecordT]
    ) -> list[_RecordT]:
        await self._simulate_latency()

        raw = self.store.get_item(key)
        records: list[_RecordT] = []
        if raw:
            try:
                records = TypeAdapter(list[record_type]).validate_json(raw)
            except ValidationError as e:
                self._log_operation(
                    OperationType.READ, table, False, {"error": str(e)}
                )
                raise SerializationError(f"Stored {table.value} are invalid: {e}") from e

        self._log_operation(
            OperationType.READ, table, True, {"count": len(records)}
        )
        return records

    async def _save(
        self,
        key: str,
        table: Table,
        record_type: type[_RecordT],
        records: Sequence[_RecordT],
    ) -> bool:
        await self._simulate_latency()

        try:
            payload = TypeAdapter(list[record_type]).dump_json(
                list(records), by_alias=True
            )
            self.store.set_item(key, payload.decode("utf-8"))
        except (StorageError, ValueError, OSError) as e:
            self._log_operation(OperationType.UPDATE, table, False, {"error": str(e)})
            self._logger.warning("Failed to save %s: %s", table.value, e)
            return False

        self._log_operation(
            OperationType.UPDATE, table, True, {"count": len(records)}
        )
        return True

    async def get_patients(self) -> list[Patient]:
        return await self._read(PATIENTS_KEY, Table.PATIENTS, Patient)

    async def save_patients(self, patients: Sequence[Patient]) -> bool:
        return await self._save(PATIENTS_KEY, Table.PATIENTS, Patient, patients)

    async def get_incidents(self) -> list[Incident]:
        return await self._read(INCIDENTS_KEY, Table.INCIDENTS, Incident)

    async def save_incidents(self, incidents: Sequence[Incident]) -> bool:
        return await self._save(INCIDENTS_KEY, Table.INCIDENTS, Incident, incidents)

    async def authenticate_user(self, email: str, password: str) -> User | None:
        """Look up a user by exact email and password.

        Returns:
            The user without its password, or None. Unknown email and wrong
            password are not distinguished.
        """
        await self._simulate_latency(*AUTH_LATENCY_MS)

        credential = next(
            (c for c in CREDENTIALS if c.email == email and c.password == password),
            None,
        )
        self._log_operation(
            OperationType.READ,
            Table.USERS,
            credential is not None,
            {"email": email, "authenticated": credential is not None},
        )
        if credential is None:
            return None
        return User.model_validate(credential.model_dump(exclude={"password"}))

    def get_operation_history(self) -> list[DatabaseOperation]:
        return self.operation_log.history()

    def clear_operation_history(self) -> None:
        self.operation_log.clear()
