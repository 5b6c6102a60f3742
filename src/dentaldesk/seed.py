"""Demo records written on first load when the store is empty."""

from datetime import datetime

from dentaldesk.types import FileAttachment, Incident, IncidentStatus, Patient

# 1x1 transparent PNG
_XRAY_PNG = (
    "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42"
    "mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)
_INVOICE_PDF = (
    "data:application/pdf;base64,JVBERi0xLjQKMSAwIG9iago8PC9UaXRsZSAoRGVudGFsIEludm9p"
    "Y2UpPj4KZW5kb2JqCnRyYWlsZXIKPDwvUm9vdCAxIDAgUj4+CiUlRU9G"
)


def seed_patients() -> list[Patient]:
    return [
        Patient(
            id="p1",
            name="John Doe",
            date_of_birth="1990-05-10",
            contact="1234567890",
            email="john@entnt.in",
            health_info="No allergies",
        ),
        Patient(
            id="p2",
            name="Jane Smith",
            date_of_birth="1985-08-15",
            contact="0987654321",
            email="jane@entnt.in",
            health_info="Diabetic, allergic to penicillin",
        ),
        Patient(
            id="p3",
            name="Mike Johnson",
            date_of_birth="1992-03-22",
            contact="5551234567",
            email="mike@entnt.in",
            health_info="High blood pressure",
        ),
        Patient(
            id="p4",
            name="Sarah Wilson",
            date_of_birth="1988-11-08",
            contact="5559876543",
            email="sarah@entnt.in",
            health_info="No known allergies",
        ),
        Patient(
            id="p5",
            name="David Brown",
            date_of_birth="1995-07-14",
            contact="5555551234",
            email="david@entnt.in",
            health_info="Asthmatic",
        ),
    ]


def seed_incidents() -> list[Incident]:
    return [
        Incident(
            id="i1",
            patient_id="p1",
            title="Toothache",
            description="Upper molar pain",
            comments="Sensitive to cold",
            appointment_date=datetime(2025, 1, 15, 10, 0),
            cost=80,
            status=IncidentStatus.COMPLETED,
            treatment="Pain relief medication prescribed, follow-up scheduled",
            files=[
                FileAttachment(
                    name="invoice.pdf",
                    url=_INVOICE_PDF,
                    mime_type="application/pdf",
                    size=1024,
                    upload_date=datetime(2025, 1, 15, 10, 30),
                ),
                FileAttachment(
                    name="xray.png",
                    url=_XRAY_PNG,
                    mime_type="image/png",
                    size=2048,
                    upload_date=datetime(2025, 1, 15, 10, 35),
                ),
            ],
        ),
        Incident(
            id="i2",
            patient_id="p1",
            title="Routine Checkup",
            description="Regular dental examination and cleaning",
            comments="Good oral hygiene maintained",
            appointment_date=datetime(2024, 12, 15, 14, 0),
            cost=120,
            status=IncidentStatus.COMPLETED,
            treatment="Professional cleaning, fluoride treatment applied",
        ),
        Incident(
            id="i3",
            patient_id="p1",
            title="Tooth Filling",
            description="Cavity treatment on upper molar",
            comments="Patient reported sensitivity to sweet foods",
            appointment_date=datetime(2025, 2, 10, 9, 30),
        ),
        Incident(
            id="i4",
            patient_id="p2",
            title="Root Canal Treatment",
            description="Root canal therapy for lower molar",
            comments="Severe pain reported, emergency appointment",
            appointment_date=datetime(2025, 1, 20, 15, 0),
        ),
        Incident(
            id="i5",
            patient_id="p3",
            title="Teeth Cleaning",
            description="Professional dental cleaning and polishing",
            comments="Regular maintenance appointment",
            appointment_date=datetime(2025, 1, 25, 13, 30),
        ),
    ]
