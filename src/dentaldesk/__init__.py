"""dentaldesk - the data layer of a dental practice dashboard.

Patients, appointments (incidents) and their file attachments live in a
key-value store behind a mock database that pads every call with latency
and keeps an audit log. Saves that a user triggers are paced by simulated
multi-step workflows which can fail at random, the way a flaky backend
would look from the front desk.

Components:
    - WorkflowSimulator: Timed pseudo-steps with injected failure
    - MockDatabase: Collections, authentication and the operation log
    - PracticeRecords: Workflow-then-write record operations
    - Session: Login state and role checks
    - FaultPolicy: Pluggable delays and failures (random, none, scripted)

Example:
    >>> from dentaldesk import (
    ...     MemoryKeyValueStore, MockDatabase, NoFaultPolicy,
    ...     PracticeRecords, WorkflowSimulator,
    ... )
    >>> policy = NoFaultPolicy()
    >>> db = MockDatabase(MemoryKeyValueStore(), fault_policy=policy)
    >>> records = PracticeRecords(db, WorkflowSimulator(fault_policy=policy))
    >>> await records.load()
    >>> await records.add_patient(
    ...     name="Ann Lee", date_of_birth="1991-02-03",
    ...     contact="5550001111", health_info="None",
    ... )
"""

from dentaldesk.auth import Session, can_access_patient, require_role
from dentaldesk.database import MockDatabase, OperationLog
from dentaldesk.exceptions import (
    AuthorizationError,
    ConfigurationError,
    DentalDeskError,
    InvalidRecordError,
    RecordNotFoundError,
    SerializationError,
    StorageError,
    StorageQuotaExceededError,
)
from dentaldesk.faults import (
    FaultPolicy,
    NoFaultPolicy,
    RandomFaultPolicy,
    ScriptedFaultPolicy,
)
from dentaldesk.records import PracticeRecords
from dentaldesk.storage import (
    JsonFileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
)
from dentaldesk.types import (
    DatabaseOperation,
    DataBackup,
    FileAttachment,
    Incident,
    IncidentStatus,
    OperationType,
    Patient,
    Role,
    StepStatus,
    Table,
    User,
    Workflow,
    WorkflowStatus,
    WorkflowStep,
    WorkflowType,
)
from dentaldesk.workflow import WorkflowRegistry, WorkflowSimulator

__version__ = "0.1.0"

__all__ = [
    # Workflows
    "WorkflowSimulator",
    "WorkflowRegistry",
    "Workflow",
    "WorkflowStep",
    "WorkflowStatus",
    "WorkflowType",
    "StepStatus",
    # Fault injection
    "FaultPolicy",
    "RandomFaultPolicy",
    "NoFaultPolicy",
    "ScriptedFaultPolicy",
    # Persistence
    "KeyValueStore",
    "MemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "MockDatabase",
    "OperationLog",
    "DatabaseOperation",
    "OperationType",
    "Table",
    # Records
    "PracticeRecords",
    "Patient",
    "Incident",
    "IncidentStatus",
    "FileAttachment",
    "DataBackup",
    # Auth
    "Session",
    "User",
    "Role",
    "can_access_patient",
    "require_role",
    # Exceptions
    "DentalDeskError",
    "ConfigurationError",
    "StorageError",
    "StorageQuotaExceededError",
    "SerializationError",
    "RecordNotFoundError",
    "InvalidRecordError",
    "AuthorizationError",
]
