"""Hardcoded step lists for each workflow type."""

from dentaldesk.types import WorkflowStep, WorkflowType

WORKFLOW_NAMES: dict[WorkflowType, str] = {
    WorkflowType.PATIENT_REGISTRATION: "Patient Registration",
    WorkflowType.APPOINTMENT_BOOKING: "Appointment Booking",
    WorkflowType.TREATMENT_COMPLETION: "Treatment Completion",
    WorkflowType.FILE_UPLOAD: "File Upload",
}

ID_PREFIXES: dict[WorkflowType, str] = {
    WorkflowType.PATIENT_REGISTRATION: "patient-reg",
    WorkflowType.APPOINTMENT_BOOKING: "appointment",
    WorkflowType.TREATMENT_COMPLETION: "treatment",
    WorkflowType.FILE_UPLOAD: "file-upload",
}


def _step(step_id: str, name: str, description: str, duration: int) -> WorkflowStep:
    return WorkflowStep(
        id=step_id,
        name=name,
        description=description,
        planned_duration_ms=duration,
    )


def patient_registration_steps() -> list[WorkflowStep]:
    return [
        _step(
            "validate-data",
            "Validate Patient Data",
            "Checking patient information for completeness and accuracy",
            800,
        ),
        _step(
            "check-duplicates",
            "Check for Duplicates",
            "Searching existing records for duplicate patients",
            1200,
        ),
        _step(
            "generate-id",
            "Generate Patient ID",
            "Creating unique patient identifier",
            300,
        ),
        _step(
            "save-record",
            "Save Patient Record",
            "Storing patient information in database",
            600,
        ),
        _step(
            "send-confirmation",
            "Send Confirmation",
            "Sending welcome message to patient",
            400,
        ),
    ]


def appointment_booking_steps() -> list[WorkflowStep]:
    return [
        _step(
            "validate-appointment",
            "Validate Appointment Data",
            "Checking appointment details and patient information",
            600,
        ),
        _step(
            "check-availability",
            "Check Schedule Availability",
            "Verifying time slot availability",
            900,
        ),
        _step(
            "reserve-slot",
            "Reserve Time Slot",
            "Blocking the selected time slot",
            400,
        ),
        _step(
            "save-appointment",
            "Save Appointment",
            "Storing appointment in database",
            700,
        ),
        _step(
            "send-reminder",
            "Schedule Reminder",
            "Setting up appointment reminder notifications",
            300,
        ),
    ]


def treatment_completion_steps() -> list[WorkflowStep]:
    return [
        _step(
            "record-treatment",
            "Record Treatment",
            "Saving treatment notes to the appointment",
            500,
        ),
        _step(
            "calculate-cost",
            "Calculate Cost",
            "Totalling treatment charges",
            400,
        ),
        _step(
            "generate-invoice",
            "Generate Invoice",
            "Preparing the patient invoice",
            700,
        ),
        _step(
            "update-record",
            "Update Record",
            "Marking the appointment as completed",
            500,
        ),
        _step(
            "schedule-follow-up",
            "Schedule Follow-up",
            "Booking the next visit if one is required",
            300,
        ),
    ]


def file_upload_steps(file_count: int) -> list[WorkflowStep]:
    """Steps for uploading ``file_count`` files; most durations scale with it."""
    if file_count < 1:
        raise ValueError("file_count must be at least 1")
    return [
        _step(
            "validate-files",
            "Validate Files",
            f"Checking {file_count} file(s) for size and format compliance",
            500 * file_count,
        ),
        _step(
            "scan-security",
            "Security Scan",
            "Scanning files for security threats",
            800 * file_count,
        ),
        _step(
            "convert-format",
            "Convert to Base64",
            "Converting files to base64 format for storage",
            1000 * file_count,
        ),
        _step(
            "save-files",
            "Save Files",
            "Storing files in local database",
            600 * file_count,
        ),
        _step(
            "update-record",
            "Update Record",
            "Linking files to appointment record",
            300,
        ),
    ]


def steps_for(workflow_type: WorkflowType, *, file_count: int = 1) -> list[WorkflowStep]:
    match workflow_type:
        case WorkflowType.PATIENT_REGISTRATION:
            return patient_registration_steps()
        case WorkflowType.APPOINTMENT_BOOKING:
            return appointment_booking_steps()
        case WorkflowType.TREATMENT_COMPLETION:
            return treatment_completion_steps()
        case WorkflowType.FILE_UPLOAD:
            return file_upload_steps(file_count)
    raise ValueError(f"Unsupported workflow type: {workflow_type}")
