"""
Patient and incident operations that the dashboard's actions call.
"""

import logging
import time
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any, TypeVar

from pydantic import ValidationError

from dentaldesk.database import MockDatabase
from dentaldesk.exceptions import InvalidRecordError, RecordNotFoundError
from dentaldesk.seed import seed_incidents, seed_patients
from dentaldesk.types import (
    FileAttachment,
    Incident,
    IncidentStatus,
    Patient,
    Workflow,
)
from dentaldesk.workflow import StepCallback, WorkflowSimulator

_LOGGER = logging.getLogger(__name__)

_RecordT = TypeVar("_RecordT", Patient, Incident)


def _new_id(prefix: str, taken: Iterable[str]) -> str:
    taken = set(taken)
    base = f"{prefix}{int(time.time() * 1000)}"
    record_id = base
    suffix = 1
    while record_id in taken:
        record_id = f"{base}-{suffix}"
        suffix += 1
    return record_id


def _validated(
    record_type: type[_RecordT], kind: str, data: dict[str, Any]
) -> _RecordT:
    unknown = sorted(set(data) - set(record_type.model_fields))
    if unknown:
        raise InvalidRecordError(kind, f"unknown fields {', '.join(unknown)}")
    try:
        return record_type.model_validate(data)
    except ValidationError as e:
        raise InvalidRecordError(kind, str(e)) from e


def _with_changes(record: _RecordT, kind: str, changes: dict[str, Any]) -> _RecordT:
    """Apply ``changes`` to a copy of ``record``, validating the result.

    The id never changes.
    """
    changes = {k: v for k, v in changes.items() if k != "id"}
    return _validated(type(record), kind, {**record.model_dump(), **changes})


class PracticeRecords:
    """In-memory patients and incidents, written through a MockDatabase.

    Creating records and other user-facing saves first run a simulated
    workflow; only when it succeeds is the collection written. The
    in-memory lists change only after the store accepted the write, so
    they always reflect what was last persisted.

    Deleting a patient also deletes their incidents, which is what keeps
    every incident pointing at an existing patient.
    """

    def __init__(
        self,
        database: MockDatabase,
        simulator: WorkflowSimulator,
        *,
        logger: logging.Logger | None = None,
    ):
        self.database = database
        self.simulator = simulator
        self.patients: list[Patient] = []
        self.incidents: list[Incident] = []
        self._logger = logger or _LOGGER

    async def load(self, *, seed: bool = True) -> None:
        """Read both collections, seeding any that is empty.

        Args:
            seed: Write the demo records when a collection is empty.
        """
        self.patients = await self.database.get_patients()
        self.incidents = await self.database.get_incidents()

        if not self.patients and seed:
            self.patients = seed_patients()
            await self.database.save_patients(self.patients)
        if not self.incidents and seed:
            self.incidents = seed_incidents()
            await self.database.save_incidents(self.incidents)

        self._logger.debug(
            "Loaded %d patients and %d incidents",
            len(self.patients),
            len(self.incidents),
        )

    async def _run(
        self, workflow: Workflow, on_step_complete: StepCallback | None
    ) -> bool:
        try:
            return await self.simulator.execute_workflow(workflow.id, on_step_complete)
        finally:
            self.simulator.cleanup_completed_workflows()

    async def _commit_patients(self, patients: list[Patient]) -> bool:
        if not await self.database.save_patients(patients):
            return False
        self.patients = patients
        return True

    async def _commit_incidents(self, incidents: list[Incident]) -> bool:
        if not await self.database.save_incidents(incidents):
            return False
        self.incidents = incidents
        return True

    def get_patient(self, patient_id: str) -> Patient | None:
        return next((p for p in self.patients if p.id == patient_id), None)

    def get_incident(self, incident_id: str) -> Incident | None:
        return next((i for i in self.incidents if i.id == incident_id), None)

    def get_patient_incidents(self, patient_id: str) -> list[Incident]:
        return [i for i in self.incidents if i.patient_id == patient_id]

    async def add_patient(
        self, *, on_step_complete: StepCallback | None = None, **fields: Any
    ) -> Patient | None:
        """Register a new patient.

        Args:
            on_step_complete: Progress callback for the registration workflow.
            **fields: Patient fields other than ``id``.

        Returns:
            The stored patient, or None if the workflow or the write failed.

        Raises:
            InvalidRecordError: If the fields do not make a valid patient.
                Raised before any workflow runs.
        """
        fields.pop("id", None)
        draft = _validated(Patient, "patient", {"id": "", **fields})

        workflow = self.simulator.create_patient_registration_workflow()
        if not await self._run(workflow, on_step_complete):
            return None

        patient = draft.model_copy(
            update={"id": _new_id("p", (p.id for p in self.patients))}
        )
        if not await self._commit_patients([*self.patients, patient]):
            return None
        self._logger.info("Registered patient %s", patient.id)
        return patient

    async def update_patient(self, patient_id: str, **changes: Any) -> bool:
        patient = self.get_patient(patient_id)
        if patient is None:
            return False
        updated = _with_changes(patient, "patient", changes)
        return await self._commit_patients(
            [updated if p.id == patient_id else p for p in self.patients]
        )

    async def delete_patient(self, patient_id: str) -> bool:
        """Delete a patient together with all of their incidents.

        Incidents are written first so a failed patient write never leaves
        orphans. If that second write fails, the incidents stay deleted in
        memory and in the store, the patient is kept, and False is returned.
        """
        if self.get_patient(patient_id) is None:
            return False
        patients = [p for p in self.patients if p.id != patient_id]
        incidents = [i for i in self.incidents if i.patient_id != patient_id]

        if not await self._commit_incidents(incidents):
            return False
        if not await self._commit_patients(patients):
            self._logger.warning(
                "Deleted incidents of %s but could not delete the patient",
                patient_id,
            )
            return False
        self._logger.info("Deleted patient %s", patient_id)
        return True

    async def add_incident(
        self, *, on_step_complete: StepCallback | None = None, **fields: Any
    ) -> Incident | None:
        """Book an appointment.

        Raises:
            RecordNotFoundError: If ``patient_id`` names no known patient.
            InvalidRecordError: If the fields do not make a valid incident.
                Both are raised before any workflow runs.
        """
        patient_id = fields.get("patient_id")
        if patient_id is None or self.get_patient(patient_id) is None:
            raise RecordNotFoundError("patient", str(patient_id))
        fields.pop("id", None)
        draft = _validated(Incident, "incident", {"id": "", **fields})

        workflow = self.simulator.create_appointment_booking_workflow()
        if not await self._run(workflow, on_step_complete):
            return None

        incident = draft.model_copy(
            update={"id": _new_id("i", (i.id for i in self.incidents))}
        )
        if not await self._commit_incidents([*self.incidents, incident]):
            return None
        self._logger.info("Booked incident %s for %s", incident.id, patient_id)
        return incident

    def _checked_incident(self, incident_id: str, changes: dict[str, Any]) -> Incident:
        incident = self.get_incident(incident_id)
        if incident is None:
            raise RecordNotFoundError("incident", incident_id)
        patient_id = changes.get("patient_id")
        if patient_id is not None and self.get_patient(patient_id) is None:
            raise RecordNotFoundError("patient", patient_id)
        return _with_changes(incident, "incident", changes)

    async def update_incident(self, incident_id: str, **changes: Any) -> bool:
        """Change fields of an incident, coercing values like ``"Cancelled"``.

        Raises:
            RecordNotFoundError: If ``patient_id`` is changed to an unknown patient.
            InvalidRecordError: If the changed incident would be invalid.
        """
        if self.get_incident(incident_id) is None:
            return False
        updated = self._checked_incident(incident_id, changes)
        return await self._commit_incidents(
            [updated if i.id == incident_id else i for i in self.incidents]
        )

    async def delete_incident(self, incident_id: str) -> bool:
        if self.get_incident(incident_id) is None:
            return False
        return await self._commit_incidents(
            [i for i in self.incidents if i.id != incident_id]
        )

    async def attach_files(
        self,
        incident_id: str,
        attachments: Sequence[FileAttachment],
        *,
        on_step_complete: StepCallback | None = None,
    ) -> bool:
        """Upload files onto an incident through the file-upload workflow."""
        incident = self.get_incident(incident_id)
        if incident is None:
            raise RecordNotFoundError("incident", incident_id)
        if not attachments:
            return True
        files = [*incident.files, *attachments]
        self._checked_incident(incident_id, {"files": files})

        workflow = self.simulator.create_file_upload_workflow(len(attachments))
        if not await self._run(workflow, on_step_complete):
            return False
        # Re-read: the incident may have changed while the workflow ran.
        incident = self.get_incident(incident_id)
        if incident is None:
            return False
        return await self.update_incident(
            incident_id, files=[*incident.files, *attachments]
        )

    async def complete_treatment(
        self,
        incident_id: str,
        *,
        cost: float,
        treatment: str,
        next_date: datetime | None = None,
        on_step_complete: StepCallback | None = None,
    ) -> bool:
        """Mark an incident completed with its cost and treatment notes.

        Raises:
            RecordNotFoundError: If the incident does not exist.
            InvalidRecordError: If cost, treatment or next_date are invalid.
        """
        changes = {
            "status": IncidentStatus.COMPLETED,
            "cost": cost,
            "treatment": treatment,
            "next_date": next_date,
        }
        self._checked_incident(incident_id, changes)

        workflow = self.simulator.create_treatment_completion_workflow()
        if not await self._run(workflow, on_step_complete):
            return False
        return await self.update_incident(incident_id, **changes)
