"""Tests for PracticeRecords: workflow-gated writes and cascading deletes."""

from datetime import datetime
from unittest.mock import AsyncMock, Mock

import pytest
import pytest_asyncio

from dentaldesk.database import MockDatabase
from dentaldesk.exceptions import InvalidRecordError, RecordNotFoundError
from dentaldesk.faults import NoFaultPolicy, ScriptedFaultPolicy
from dentaldesk.records import PracticeRecords
from dentaldesk.reports import dashboard_summary
from dentaldesk.storage import MemoryKeyValueStore
from dentaldesk.types import FileAttachment, IncidentStatus
from dentaldesk.workflow import WorkflowSimulator

NEW_PATIENT = {
    "name": "Ann Lee",
    "date_of_birth": "1991-02-03",
    "contact": "5550001111",
    "health_info": "None",
}


@pytest.fixture
def db() -> MockDatabase:
    return MockDatabase(MemoryKeyValueStore(), fault_policy=NoFaultPolicy())


@pytest.fixture
def simulator() -> WorkflowSimulator:
    return WorkflowSimulator(fault_policy=ScriptedFaultPolicy())


@pytest_asyncio.fixture
async def records(db: MockDatabase, simulator: WorkflowSimulator) -> PracticeRecords:
    records = PracticeRecords(db, simulator)
    await records.load()
    return records


def booking(patient_id: str = "p2") -> dict:
    return {
        "patient_id": patient_id,
        "title": "Crown fitting",
        "description": "Fit porcelain crown",
        "appointment_date": datetime(2030, 6, 1, 9, 0),
    }


class TestLoad:
    @pytest.mark.asyncio
    async def test_empty_store_is_seeded(self, db: MockDatabase, simulator):
        records = PracticeRecords(db, simulator)
        await records.load()

        assert len(records.patients) == 5
        assert len(records.incidents) == 5
        assert len(await db.get_patients()) == 5
        assert len(await db.get_incidents()) == 5

    @pytest.mark.asyncio
    async def test_load_without_seed(self, db: MockDatabase, simulator):
        records = PracticeRecords(db, simulator)
        await records.load(seed=False)
        assert records.patients == []
        assert records.incidents == []

    @pytest.mark.asyncio
    async def test_existing_data_is_not_reseeded(self, records, db, simulator):
        await records.delete_incident("i5")

        reloaded = PracticeRecords(db, simulator)
        await reloaded.load()

        assert [i.id for i in reloaded.incidents] == ["i1", "i2", "i3", "i4"]


class TestPatients:
    @pytest.mark.asyncio
    async def test_add_patient_runs_registration_then_saves(self, records, db):
        callback = Mock()

        patient = await records.add_patient(on_step_complete=callback, **NEW_PATIENT)

        assert patient is not None
        assert patient.id.startswith("p")
        assert records.get_patient(patient.id) == patient
        assert patient in await db.get_patients()
        assert callback.call_count == 5
        assert callback.call_args_list[0].args[1].name == "Patient Registration"

    @pytest.mark.asyncio
    async def test_failed_workflow_writes_nothing(self, records, db):
        records.simulator.fault_policy = ScriptedFaultPolicy([False, True])
        db.clear_operation_history()

        assert await records.add_patient(**NEW_PATIENT) is None

        assert len(records.patients) == 5
        assert db.get_operation_history() == []

    @pytest.mark.asyncio
    async def test_finished_workflows_are_cleaned_up(self, records):
        await records.add_patient(**NEW_PATIENT)
        assert records.simulator.get_active_workflows() == []

    @pytest.mark.asyncio
    async def test_update_patient(self, records, db):
        assert await records.update_patient("p2", contact="5550009999") is True

        assert records.get_patient("p2").contact == "5550009999"
        stored = {p.id: p for p in await db.get_patients()}
        assert stored["p2"].contact == "5550009999"
        assert stored["p2"].name == "Jane Smith"

    @pytest.mark.asyncio
    async def test_update_cannot_change_id(self, records):
        await records.update_patient("p2", id="p99", name="Janet")
        assert records.get_patient("p2").name == "Janet"
        assert records.get_patient("p99") is None

    @pytest.mark.asyncio
    async def test_update_unknown_patient(self, records, db):
        db.clear_operation_history()
        assert await records.update_patient("nope", name="X") is False
        assert db.get_operation_history() == []

    @pytest.mark.asyncio
    async def test_delete_patient_cascades_to_incidents(self, records, db):
        assert await records.delete_patient("p1") is True

        assert records.get_patient("p1") is None
        assert records.get_patient_incidents("p1") == []
        assert {i.patient_id for i in await db.get_incidents()} == {"p2", "p3"}
        patient_ids = {p.id for p in await db.get_patients()}
        assert all(i.patient_id in patient_ids for i in records.incidents)

    @pytest.mark.asyncio
    async def test_delete_unknown_patient(self, records):
        assert await records.delete_patient("nope") is False
        assert len(records.patients) == 5

    @pytest.mark.asyncio
    async def test_failed_write_keeps_memory_in_sync(self, records, db):
        """Test in-memory state only changes when the store accepted it."""
        db.store.quota_bytes = db.store.usage_bytes()

        assert await records.update_patient("p1", health_info="x" * 500) is False
        assert records.get_patient("p1").health_info == "No allergies"

    @pytest.mark.asyncio
    async def test_invalid_patient_fails_before_workflow(self, records, db):
        db.clear_operation_history()

        with pytest.raises(InvalidRecordError, match="Invalid patient"):
            await records.add_patient(name="Ann Lee")

        assert records.simulator.fault_policy.draws == 0
        assert records.simulator.get_active_workflows() == []
        assert db.get_operation_history() == []

    @pytest.mark.asyncio
    async def test_update_patient_rejects_unknown_field(self, records):
        with pytest.raises(InvalidRecordError, match="phone"):
            await records.update_patient("p2", phone="5550009999")
        assert records.get_patient("p2").contact == "0987654321"

    @pytest.mark.asyncio
    async def test_delete_patient_when_patient_write_fails(self, records, db):
        """Test the incidents stay deleted when only the patient write fails."""
        db.save_patients = AsyncMock(return_value=False)

        assert await records.delete_patient("p1") is False

        assert records.get_patient("p1") is not None
        assert records.get_patient_incidents("p1") == []
        assert "p1" not in {i.patient_id for i in await db.get_incidents()}


class TestIncidents:
    @pytest.mark.asyncio
    async def test_add_incident(self, records, db):
        incident = await records.add_incident(**booking())

        assert incident is not None
        assert incident.status == IncidentStatus.SCHEDULED
        assert incident.files == []
        assert incident in records.get_patient_incidents("p2")
        assert incident in await db.get_incidents()

    @pytest.mark.asyncio
    async def test_add_incident_for_unknown_patient(self, records):
        with pytest.raises(RecordNotFoundError, match="Unknown patient 'ghost'"):
            await records.add_incident(**booking("ghost"))
        assert records.simulator.get_active_workflows() == []

    @pytest.mark.asyncio
    async def test_failed_booking(self, records):
        records.simulator.fault_policy = ScriptedFaultPolicy([True])
        assert await records.add_incident(**booking()) is None
        assert len(records.incidents) == 5

    @pytest.mark.asyncio
    async def test_update_and_delete_incident(self, records):
        assert await records.update_incident("i3", status=IncidentStatus.CANCELLED)
        assert records.get_incident("i3").status == IncidentStatus.CANCELLED

        assert await records.delete_incident("i3") is True
        assert records.get_incident("i3") is None
        assert await records.delete_incident("i3") is False

    @pytest.mark.asyncio
    async def test_update_incident_to_unknown_patient(self, records):
        with pytest.raises(RecordNotFoundError):
            await records.update_incident("i3", patient_id="ghost")

    @pytest.mark.asyncio
    async def test_attach_files(self, records, db):
        files = [
            FileAttachment.from_bytes("a.png", b"\x89PNG", "image/png"),
            FileAttachment.from_bytes("b.pdf", b"%PDF-1.4", "application/pdf"),
        ]
        callback = Mock()

        assert await records.attach_files("i3", files, on_step_complete=callback)

        stored = {i.id: i for i in await db.get_incidents()}
        assert [f.name for f in stored["i3"].files] == ["a.png", "b.pdf"]
        assert stored["i3"].files[1].content() == b"%PDF-1.4"
        workflow = callback.call_args.args[1]
        assert workflow.steps[0].planned_duration_ms == 1000

    @pytest.mark.asyncio
    async def test_attach_files_keeps_existing(self, records):
        new = FileAttachment.from_bytes("c.txt", b"c", "text/plain")
        assert await records.attach_files("i1", [new])
        assert [f.name for f in records.get_incident("i1").files] == [
            "invoice.pdf",
            "xray.png",
            "c.txt",
        ]

    @pytest.mark.asyncio
    async def test_failed_upload_attaches_nothing(self, records):
        records.simulator.fault_policy = ScriptedFaultPolicy([False, False, True])
        new = FileAttachment.from_bytes("c.txt", b"c", "text/plain")

        assert await records.attach_files("i3", [new]) is False
        assert records.get_incident("i3").files == []

    @pytest.mark.asyncio
    async def test_attach_to_unknown_incident(self, records):
        with pytest.raises(RecordNotFoundError):
            await records.attach_files("nope", [])

    @pytest.mark.asyncio
    async def test_complete_treatment(self, records):
        follow_up = datetime(2030, 7, 1, 9, 0)

        assert await records.complete_treatment(
            "i4", cost=450.0, treatment="Root canal done", next_date=follow_up
        )

        incident = records.get_incident("i4")
        assert incident.status == IncidentStatus.COMPLETED
        assert incident.cost == 450.0
        assert incident.treatment == "Root canal done"
        assert incident.next_date == follow_up

    @pytest.mark.asyncio
    async def test_update_incident_coerces_values(self, records, db):
        assert await records.update_incident(
            "i3",
            status="Cancelled",
            appointment_date="2031-01-01T10:00",
            cost="",
        )

        incident = records.get_incident("i3")
        assert incident.status == IncidentStatus.CANCELLED
        assert incident.appointment_date == datetime(2031, 1, 1, 10, 0)
        assert incident.cost is None
        assert {i.id: i for i in await db.get_incidents()}["i3"] == incident

        summary = dashboard_summary(records.patients, records.incidents)
        assert "i3" not in [i.id for i in summary.upcoming]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "changes",
        [
            {"status": "Postponed"},
            {"appointment_date": "next week"},
            {"notes": "misspelled field"},
        ],
    )
    async def test_update_incident_rejects_invalid_changes(self, records, changes):
        before = records.get_incident("i3")

        with pytest.raises(InvalidRecordError, match="Invalid incident"):
            await records.update_incident("i3", **changes)

        assert records.get_incident("i3") == before

    @pytest.mark.asyncio
    async def test_invalid_booking_fails_before_workflow(self, records):
        with pytest.raises(InvalidRecordError):
            await records.add_incident(**{**booking(), "appointment_date": "soon"})

        assert records.simulator.fault_policy.draws == 0
        assert len(records.incidents) == 5

    @pytest.mark.asyncio
    async def test_invalid_treatment_fails_before_workflow(self, records):
        with pytest.raises(InvalidRecordError):
            await records.complete_treatment("i4", cost="lots", treatment="Filling")

        assert records.simulator.fault_policy.draws == 0
        assert records.get_incident("i4").status == IncidentStatus.SCHEDULED
