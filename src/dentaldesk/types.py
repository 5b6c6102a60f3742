"""dentaldesk record and workflow type definitions."""

import base64
import binascii
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def naive_local(value: datetime) -> datetime:
    """Convert an aware datetime to naive local time; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


class Model(BaseModel):
    """Base model for all dentaldesk types."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class StepStatus(Enum):
    """Status of a single workflow step."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    FAILED = "failed"


class WorkflowStatus(Enum):
    """Overall status of a workflow."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    FAILED = "failed"


class WorkflowType(Enum):
    """Kind of operation a workflow paces."""

    PATIENT_REGISTRATION = "patient-registration"
    APPOINTMENT_BOOKING = "appointment-booking"
    TREATMENT_COMPLETION = "treatment-completion"
    FILE_UPLOAD = "file-upload"


class WorkflowStep(Model):
    id: str
    """ Identifier of the step within its workflow.
    """
    name: str
    """ Human-readable step name.
    """
    description: str
    """ What the step pretends to do.
    """
    planned_duration_ms: int = Field(alias="duration")
    """ How long execution suspends on this step.
    """
    status: StepStatus = StepStatus.PENDING
    timestamp: datetime | None = None
    """ When the step started executing.
    """


class Workflow(Model):
    id: str
    name: str
    type: WorkflowType
    steps: list[WorkflowStep]
    current_step: int = 0
    """ Index of the step currently (or last) executed.
    """
    status: WorkflowStatus = WorkflowStatus.PENDING
    start_time: datetime | None = None
    end_time: datetime | None = None

    @property
    def is_finished(self) -> bool:
        """Check if the workflow reached a terminal state."""
        return self.status in (WorkflowStatus.COMPLETED, WorkflowStatus.FAILED)

    @property
    def completed_steps(self) -> list[WorkflowStep]:
        return [step for step in self.steps if step.status == StepStatus.COMPLETED]

    @property
    def progress(self) -> float:
        """Fraction of steps completed, between 0 and 1."""
        if not self.steps:
            return 0.0
        return len(self.completed_steps) / len(self.steps)

    @property
    def duration(self) -> float | None:
        """Calculate workflow duration in seconds."""
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None


class OperationType(Enum):
    CREATE = "CREATE"
    READ = "READ"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class Table(Enum):
    PATIENTS = "patients"
    INCIDENTS = "incidents"
    USERS = "users"


class DatabaseOperation(Model):
    """Audit record of one persistence call."""

    type: OperationType
    table: Table
    timestamp: datetime = Field(default_factory=datetime.now)
    success: bool
    data: dict[str, Any] | None = None
    """ Payload summary, e.g. {"count": 5} or {"error": "..."}.
    """


class Patient(Model):
    id: str
    name: str
    date_of_birth: str = Field(alias="dob")
    contact: str
    email: str | None = None
    health_info: str


class IncidentStatus(Enum):
    SCHEDULED = "Scheduled"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class FileAttachment(Model):
    """A file stored inline on its incident as a base64 data-URI."""

    name: str
    url: str
    """ data:<mime>;base64,<payload>
    """
    mime_type: str | None = Field(default=None, alias="type")
    size: int | None = None
    upload_date: datetime | None = None

    @classmethod
    def from_bytes(
        cls,
        name: str,
        data: bytes,
        mime_type: str = "application/octet-stream",
        *,
        upload_date: datetime | None = None,
    ) -> "FileAttachment":
        """Encode raw bytes as an inline attachment."""
        encoded = base64.b64encode(data).decode("ascii")
        return cls(
            name=name,
            url=f"data:{mime_type};base64,{encoded}",
            mime_type=mime_type,
            size=len(data),
            upload_date=upload_date or datetime.now(),
        )

    def content(self) -> bytes:
        """Decode the data-URI payload.

        Raises:
            ValueError: If the url is not a base64 data-URI.
        """
        header, sep, payload = self.url.partition(",")
        if not sep or not header.startswith("data:") or not header.endswith(
            ";base64"
        ):
            raise ValueError(f"Attachment '{self.name}' is not a base64 data-URI")
        try:
            return base64.b64decode(payload, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Attachment '{self.name}' has a corrupt payload") from e

    @field_validator("upload_date")
    @classmethod
    def upload_date_as_local(cls, value: datetime | None) -> datetime | None:
        return None if value is None else naive_local(value)


class Incident(Model):
    """An appointment or treatment record tied to a patient."""

    id: str
    patient_id: str
    title: str
    description: str
    comments: str = ""
    appointment_date: datetime
    cost: float | None = None
    treatment: str | None = None
    status: IncidentStatus = IncidentStatus.SCHEDULED
    next_date: datetime | None = None
    files: list[FileAttachment] = Field(default_factory=list)

    @field_validator("cost", "treatment", "next_date", mode="before")
    @classmethod
    def blank_as_none(cls, value: Any) -> Any:
        # Dashboard forms store untouched optional inputs as "".
        return None if value == "" else value

    @field_validator("appointment_date", "next_date")
    @classmethod
    def dates_as_local(cls, value: datetime | None) -> datetime | None:
        # The dashboard writes toISOString() values (UTC, "Z"); seed dates are naive.
        return None if value is None else naive_local(value)


class Role(Enum):
    ADMIN = "Admin"
    PATIENT = "Patient"


class User(Model):
    id: str
    role: Role
    email: str
    patient_id: str | None = None


class DataBackup(Model):
    """Downloadable snapshot of both collections."""

    patients: list[Patient]
    incidents: list[Incident]
    export_date: str
    version: str = "1.0"
