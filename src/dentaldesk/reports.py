"""Dashboard and calendar views over the in-memory collections."""

from collections.abc import Sequence
from datetime import date, datetime

from pydantic import Field

from dentaldesk.types import Incident, IncidentStatus, Model, Patient, naive_local

UPCOMING_LIMIT = 10
TOP_PATIENTS_LIMIT = 5


class PatientSpending(Model):
    patient: Patient
    appointment_count: int
    total_spent: float


class DashboardSummary(Model):
    upcoming: list[Incident] = Field(default_factory=list)
    """ Next scheduled appointments, soonest first.
    """
    completed_count: int = 0
    pending_count: int = 0
    total_revenue: float = 0.0
    top_patients: list[PatientSpending] = Field(default_factory=list)


def dashboard_summary(
    patients: Sequence[Patient],
    incidents: Sequence[Incident],
    now: datetime | None = None,
) -> DashboardSummary:
    now = naive_local(now) if now else datetime.now()

    upcoming = sorted(
        (
            i
            for i in incidents
            if i.status == IncidentStatus.SCHEDULED and i.appointment_date > now
        ),
        key=lambda i: i.appointment_date,
    )
    completed = [i for i in incidents if i.status == IncidentStatus.COMPLETED]
    pending = [i for i in incidents if i.status == IncidentStatus.SCHEDULED]

    spending = [
        PatientSpending(
            patient=patient,
            appointment_count=sum(1 for i in incidents if i.patient_id == patient.id),
            total_spent=sum(
                i.cost or 0 for i in incidents if i.patient_id == patient.id
            ),
        )
        for patient in patients
    ]
    spending.sort(key=lambda s: s.total_spent, reverse=True)

    return DashboardSummary(
        upcoming=upcoming[:UPCOMING_LIMIT],
        completed_count=len(completed),
        pending_count=len(pending),
        total_revenue=sum(i.cost or 0 for i in completed),
        top_patients=spending[:TOP_PATIENTS_LIMIT],
    )


def appointments_on(incidents: Sequence[Incident], day: date) -> list[Incident]:
    """Incidents whose appointment falls on ``day``, in time order."""
    return sorted(
        (i for i in incidents if i.appointment_date.date() == day),
        key=lambda i: i.appointment_date,
    )
