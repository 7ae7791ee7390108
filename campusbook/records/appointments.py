"""Functions for booking appointments and moving them through their statuses.

An appointment starts ``pending`` and moves once to ``confirmed``,
``rejected`` or ``cancelled``. Nothing moves out of those.
"""

from typing import Literal

import structlog

from campusbook.common.exceptions import (
    InvalidStatusTransitionError,
    NotFoundError,
    PermissionDeniedError,
)
from campusbook.docstore.protocol import DocumentStore
from campusbook.docstore.query import DESCENDING
from campusbook.models.documents import Appointment, AppointmentStatus, UserProfile, utc_now
from campusbook.records.users import get_user_profile

logger = structlog.get_logger(__name__)

APPOINTMENTS = "appointments"

CancelledBy = Literal["student", "teacher", "admin"]


async def book_appointment(
    store: DocumentStore,
    student: UserProfile,
    teacher_id: str,
    date: str,
    time: str,
    purpose: str,
    message: str = "",
) -> Appointment:
    """Books a pending appointment with an approved teacher.

    Args:
        store: The document store.
        student: Profile of the booking student.
        teacher_id: uid of the teacher.
        date: Appointment date, YYYY-MM-DD.
        time: Appointment time, HH:MM.
        purpose: Reason for the appointment.
        message: Optional note to the teacher.

    Returns:
        The stored Appointment, with its id.

    Raises:
        PermissionDeniedError: The booking user is not a student.
        NotFoundError: The teacher does not exist or is not an approved teacher.
        pydantic.ValidationError: Malformed date, time or purpose.
    """
    if student.role != "student":
        raise PermissionDeniedError("Only students can book appointments", {"uid": student.uid})

    teacher = await get_user_profile(store, teacher_id)
    if teacher is None or teacher.role != "teacher" or teacher.status != "approved":
        raise NotFoundError(f"users/{teacher_id}", f"No approved teacher with id {teacher_id}")

    appointment = Appointment(
        student_id=student.uid,
        student_email=student.email,
        student_name=student.name,
        teacher_id=teacher.uid,
        teacher_email=teacher.email,
        teacher_name=teacher.name,
        date=date,
        time=time,
        purpose=purpose,
        message=message,
    )
    ref = await store.collection(APPOINTMENTS).add(appointment.to_document())
    logger.info("Appointment booked", appointment_id=ref.id, student_id=student.uid, teacher_id=teacher.uid)
    return appointment.model_copy(update={"id": ref.id})


async def get_appointment(store: DocumentStore, appointment_id: str) -> Appointment | None:
    snapshot = await store.collection(APPOINTMENTS).doc(appointment_id).get()
    if not snapshot.exists():
        return None
    return Appointment.from_document(snapshot.data())


async def _list_by(store: DocumentStore, field: str, uid: str, status: AppointmentStatus | None) -> list[Appointment]:
    query = store.collection(APPOINTMENTS).where(field, "==", uid)
    if status is not None:
        query = query.where("status", "==", status)
    snapshot = await query.order_by("createdAt", DESCENDING).get()
    return [Appointment.from_document(doc.data()) for doc in snapshot]


async def list_student_appointments(
    store: DocumentStore, student_id: str, status: AppointmentStatus | None = None
) -> list[Appointment]:
    """A student's appointments, newest first."""
    return await _list_by(store, "studentId", student_id, status)


async def list_teacher_appointments(
    store: DocumentStore, teacher_id: str, status: AppointmentStatus | None = None
) -> list[Appointment]:
    """A teacher's appointments, newest first."""
    return await _list_by(store, "teacherId", teacher_id, status)


async def _transition(
    store: DocumentStore,
    appointment_id: str,
    target: AppointmentStatus,
    **extra,
) -> Appointment:
    ref = store.collection(APPOINTMENTS).doc(appointment_id)
    snapshot = await ref.get()
    if not snapshot.exists():
        raise NotFoundError(ref.path, f"Appointment not found: {appointment_id}")

    appointment = Appointment.from_document(snapshot.data())
    if appointment.status != "pending":
        raise InvalidStatusTransitionError("appointment", appointment_id, appointment.status, target)

    now = utc_now()
    changes = {"status": target, "updated_at": now, **extra}
    updated = appointment.model_copy(update=changes)
    await ref.update(
        updated.model_dump(mode="json", by_alias=True, include=set(changes), exclude_none=True)
    )
    logger.info("Appointment status changed", appointment_id=appointment_id, status=target)
    return updated


async def confirm_appointment(store: DocumentStore, appointment_id: str) -> Appointment:
    """Teacher accepts a pending appointment."""
    return await _transition(store, appointment_id, "confirmed")


async def reject_appointment(store: DocumentStore, appointment_id: str) -> Appointment:
    """Teacher declines a pending appointment."""
    return await _transition(store, appointment_id, "rejected")


async def cancel_appointment(
    store: DocumentStore, appointment_id: str, cancelled_by: CancelledBy = "student"
) -> Appointment:
    """Cancels a pending appointment, recording who cancelled and when."""
    return await _transition(
        store, appointment_id, "cancelled", cancelled_at=utc_now(), cancelled_by=cancelled_by
    )


async def summarize_appointments(store: DocumentStore, teacher_id: str | None = None) -> dict[str, int]:
    """Counts per status, for one teacher or for everyone."""
    query = store.collection(APPOINTMENTS)
    if teacher_id is not None:
        query = query.where("teacherId", "==", teacher_id)
    snapshot = await query.get()

    counts = {"pending": 0, "confirmed": 0, "rejected": 0, "cancelled": 0}
    for doc in snapshot:
        status = Appointment.from_document(doc.data()).status
        counts[status] += 1
    counts["total"] = len(snapshot)
    return counts
