from campusbook.models.documents import (
    TERMINAL_APPOINTMENT_STATUSES,
    Appointment,
    AppointmentStatus,
    Credential,
    DocumentModel,
    Message,
    RegistrationRequest,
    Role,
    UserProfile,
    UserStatus,
    utc_now,
)

__all__ = [
    "TERMINAL_APPOINTMENT_STATUSES",
    "Appointment",
    "AppointmentStatus",
    "Credential",
    "DocumentModel",
    "Message",
    "RegistrationRequest",
    "Role",
    "UserProfile",
    "UserStatus",
    "utc_now",
]
