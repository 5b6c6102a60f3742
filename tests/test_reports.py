"""Tests for the dashboard summary and calendar views."""

import json
from datetime import date, datetime, timezone

import pytest

from dentaldesk.database import MockDatabase
from dentaldesk.faults import NoFaultPolicy
from dentaldesk.reports import appointments_on, dashboard_summary
from dentaldesk.seed import seed_incidents, seed_patients
from dentaldesk.storage import INCIDENTS_KEY, MemoryKeyValueStore
from dentaldesk.types import Incident, IncidentStatus


def _incident(incident_id: str, when: datetime, **fields) -> Incident:
    return Incident(
        id=incident_id,
        patient_id=fields.pop("patient_id", "p1"),
        title=f"Visit {incident_id}",
        description="Check",
        appointment_date=when,
        **fields,
    )


class TestDashboardSummary:
    def test_seed_data_summary(self):
        summary = dashboard_summary(
            seed_patients(), seed_incidents(), now=datetime(2025, 1, 18)
        )

        assert summary.completed_count == 2
        assert summary.pending_count == 3
        assert summary.total_revenue == 200
        assert [i.id for i in summary.upcoming] == ["i4", "i5", "i3"]

        top = summary.top_patients[0]
        assert top.patient.id == "p1"
        assert top.appointment_count == 3
        assert top.total_spent == 200

    def test_past_and_cancelled_are_not_upcoming(self):
        now = datetime(2030, 1, 1)
        incidents = [
            _incident("a", datetime(2029, 12, 31)),
            _incident("b", datetime(2030, 2, 1), status=IncidentStatus.CANCELLED),
            _incident("c", datetime(2030, 3, 1)),
        ]

        summary = dashboard_summary([], incidents, now=now)

        assert [i.id for i in summary.upcoming] == ["c"]

    def test_revenue_counts_only_completed(self):
        incidents = [
            _incident("a", datetime(2030, 1, 1), cost=100, status=IncidentStatus.COMPLETED),
            _incident("b", datetime(2030, 1, 2), cost=999),
        ]
        assert dashboard_summary([], incidents).total_revenue == 100

    def test_limits(self):
        incidents = [
            _incident(str(n), datetime(2031, 1, 1 + n)) for n in range(15)
        ]
        summary = dashboard_summary(
            seed_patients() * 2, incidents, now=datetime(2030, 1, 1)
        )
        assert len(summary.upcoming) == 10
        assert len(summary.top_patients) == 5

    def test_empty(self):
        summary = dashboard_summary([], [])
        assert summary.upcoming == []
        assert summary.total_revenue == 0
        assert summary.top_patients == []


class TestAppointmentsOn:
    def test_filters_by_day_and_sorts_by_time(self):
        incidents = [
            _incident("late", datetime(2030, 5, 4, 16, 0)),
            _incident("other-day", datetime(2030, 5, 5, 9, 0)),
            _incident("early", datetime(2030, 5, 4, 8, 30)),
        ]
        assert [i.id for i in appointments_on(incidents, date(2030, 5, 4))] == [
            "early",
            "late",
        ]

    def test_no_appointments(self):
        assert appointments_on(seed_incidents(), date(1999, 1, 1)) == []


def _local(value: datetime) -> datetime:
    return value.astimezone().replace(tzinfo=None)


class TestStoredDateFormats:
    """Incidents written by the dashboard carry UTC dates; seed data does not."""

    @pytest.fixture
    def db(self) -> MockDatabase:
        stored = [
            {
                "id": "utc",
                "patientId": "p1",
                "title": "Booked in the dashboard",
                "description": "Check",
                "appointmentDate": "2030-07-01T10:00:00.000Z",
                "nextDate": "2030-08-01T10:00:00.000Z",
                "status": "Scheduled",
                "files": [],
            },
            {
                "id": "naive",
                "patientId": "p1",
                "title": "Seeded",
                "description": "Check",
                "appointmentDate": "2030-07-02T10:00:00",
                "status": "Scheduled",
                "files": [],
            },
        ]
        store = MemoryKeyValueStore({INCIDENTS_KEY: json.dumps(stored)})
        return MockDatabase(store, fault_policy=NoFaultPolicy())

    @pytest.mark.asyncio
    async def test_dates_are_read_as_naive_local_time(self, db: MockDatabase):
        utc, naive = await db.get_incidents()

        assert utc.appointment_date == _local(
            datetime(2030, 7, 1, 10, 0, tzinfo=timezone.utc)
        )
        assert utc.next_date.tzinfo is None
        assert naive.appointment_date == datetime(2030, 7, 2, 10, 0)

    @pytest.mark.asyncio
    async def test_dashboard_summary_mixes_both_forms(self, db: MockDatabase):
        incidents = await db.get_incidents()

        summary = dashboard_summary([], incidents, now=datetime(2030, 1, 1))

        assert [i.id for i in summary.upcoming] == ["utc", "naive"]
        assert summary.pending_count == 2

    @pytest.mark.asyncio
    async def test_aware_now_is_accepted(self, db: MockDatabase):
        incidents = await db.get_incidents()
        now = datetime(2030, 7, 1, 12, 0, tzinfo=timezone.utc)

        summary = dashboard_summary([], incidents, now=now)

        assert [i.id for i in summary.upcoming] == ["naive"]

    @pytest.mark.asyncio
    async def test_calendar_day_mixes_both_forms(self, db: MockDatabase):
        utc, naive = await db.get_incidents()

        assert naive in appointments_on([utc, naive], date(2030, 7, 2))
        assert utc in appointments_on([naive, utc], utc.appointment_date.date())
