"""Pydantic models for CampusBook documents.

These models define the structure of the documents stored in the document
store and are used for validation and serialization. Python attributes are
snake_case; stored documents use camelCase field names (``createdAt``,
``teacherId``) so records written by either side stay readable.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

Role = Literal["admin", "teacher", "student"]
UserStatus = Literal["pending", "approved", "rejected"]
AppointmentStatus = Literal["pending", "confirmed", "rejected", "cancelled"]

TERMINAL_APPOINTMENT_STATUSES: frozenset[str] = frozenset({"confirmed", "rejected", "cancelled"})


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DocumentModel(BaseModel):
    """Base for models that round-trip through the document store."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_document(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible mapping with stored field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_document(cls, data: dict[str, Any]):
        return cls.model_validate(data)


class UserProfile(DocumentModel):
    """Represents a user's profile in the ``users`` collection."""
    uid: str = Field(..., min_length=1, description="The user's unique id, shared with the credential record.")
    name: str = Field(..., min_length=1, max_length=100, description="The user's full name.")
    email: EmailStr = Field(..., description="The user's email address.")
    role: Role = Field(..., description="admin, teacher or student. Never changes after creation.")
    status: UserStatus = Field("approved", description="Teachers start pending; others start approved.")
    created_at: datetime = Field(default_factory=utc_now, description="Timestamp of profile creation.")
    approved_at: datetime | None = Field(None, description="When an admin approved a teacher account.")

    # Student fields
    student_id: str | None = Field(None, description="Institution-issued student number.")
    year_of_study: str | None = Field(None, description="Current year of study.")

    # Teacher fields
    department: str | None = Field(None, description="Teaching department.")
    subject: str | None = Field(None, description="Main subject taught.")
    office_hours: str | None = Field(None, description="Free-text office hours, e.g. 'Mon, Wed 2-4 PM'.")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return str(v).strip().lower()


class Appointment(DocumentModel):
    """Represents a booking between a student and a teacher."""
    id: str | None = Field(None, description="Document id; assigned by the store on creation.")
    student_id: str = Field(..., description="uid of the booking student.")
    student_email: str = Field(..., description="Email of the booking student.")
    student_name: str | None = None
    teacher_id: str = Field(..., description="uid of the teacher.")
    teacher_email: str = Field(..., description="Email of the teacher.")
    teacher_name: str | None = None
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$", description="Appointment date, YYYY-MM-DD.")
    time: str = Field(..., pattern=r"^\d{2}:\d{2}$", description="Appointment time, HH:MM.")
    purpose: str = Field(
        ...,
        min_length=1,
        max_length=200,
        validation_alias=AliasChoices("purpose", "reason"),
        description="Reason for the appointment. Older records store it as ``reason``.",
    )
    message: str = Field("", max_length=2000)
    status: AppointmentStatus = "pending"
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancelled_by: Literal["student", "teacher", "admin"] | None = None

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        # Older records use "approved" for a confirmed booking.
        return "confirmed" if v == "approved" else v

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_APPOINTMENT_STATUSES


class Message(DocumentModel):
    """Represents a direct message between two users."""
    id: str | None = None
    sender_id: str
    sender_name: str | None = None
    sender_email: str | None = None
    receiver_id: str
    receiver_name: str | None = None
    subject: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, max_length=5000)
    created_at: datetime = Field(default_factory=utc_now)
    read: bool = False
    reply_to: str | None = Field(None, description="Id of the message this one answers.")


class Credential(BaseModel):
    """A login record in the credential list. ``password`` holds a salted hash."""
    uid: str
    email: str
    password: str


class RegistrationRequest(BaseModel):
    """Input for registering a new account."""
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, description="Minimum 6 characters.")
    role: Role

    student_id: str | None = None
    year_of_study: str | None = None
    department: str | None = None
    subject: str | None = None
    office_hours: str | None = None

    @field_validator("name")
    @classmethod
    def name_must_not_be_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name must not be empty")
        return v.strip()

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return str(v).strip().lower()

    @model_validator(mode="after")
    def validate_role_fields(self):
        """Students need a student id; teachers need a department and subject."""
        if self.role == "student" and not self.student_id:
            raise ValueError("Student ID is required for student registration")
        if self.role == "teacher" and not (self.department and self.subject):
            raise ValueError("Department and subject are required for teacher registration")
        return self
