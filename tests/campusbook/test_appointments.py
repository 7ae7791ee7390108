"""Tests for booking appointments and their status transitions."""

import pytest
from pydantic import ValidationError

from campusbook.common.exceptions import (
    InvalidStatusTransitionError,
    NotFoundError,
    PermissionDeniedError,
)
from campusbook.models import UserProfile
from campusbook.records.appointments import (
    book_appointment,
    cancel_appointment,
    confirm_appointment,
    get_appointment,
    list_student_appointments,
    list_teacher_appointments,
    reject_appointment,
    summarize_appointments,
)
from campusbook.records.users import create_user_profile


async def book(store, student, teacher, date="2026-11-02", purpose="Project help"):
    return await book_appointment(store, student, teacher.uid, date, "14:30", purpose, message="Chapter 3")


@pytest.mark.asyncio
async def test_book_appointment_with_approved_teacher(store, student, teacher):
    appointment = await book(store, student, teacher)

    assert appointment.id
    assert appointment.status == "pending"
    assert appointment.teacher_name == "Dr. Tina Teacher"
    assert appointment.student_email == "sam@example.com"

    raw = (await store.collection("appointments").doc(appointment.id).get()).data()
    assert raw["studentId"] == "student-1"
    assert raw["teacherId"] == "teacher-1"
    assert raw["status"] == "pending"
    assert raw["id"] == appointment.id


@pytest.mark.asyncio
async def test_cannot_book_pending_teacher(store, student):
    pending = await create_user_profile(
        store,
        UserProfile(
            uid="teacher-2",
            name="New Teacher",
            email="new@example.com",
            role="teacher",
            status="pending",
            department="Art",
            subject="Drawing",
        ),
    )

    with pytest.raises(NotFoundError):
        await book(store, student, pending)
    assert (await store.collection("appointments").get()).empty


@pytest.mark.asyncio
async def test_cannot_book_unknown_teacher(store, student):
    with pytest.raises(NotFoundError):
        await book_appointment(store, student, "ghost", "2026-11-02", "14:30", "Help")


@pytest.mark.asyncio
async def test_only_students_can_book(store, teacher):
    with pytest.raises(PermissionDeniedError):
        await book(store, teacher, teacher)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "date, time, purpose",
    [
        ("02/11/2026", "14:30", "Help"),
        ("2026-11-02", "2pm", "Help"),
        ("2026-11-02", "14:30", ""),
    ],
)
async def test_malformed_booking_is_rejected(store, student, teacher, date, time, purpose):
    with pytest.raises(ValidationError):
        await book_appointment(store, student, teacher.uid, date, time, purpose)


@pytest.mark.asyncio
async def test_confirm_is_final(store, student, teacher):
    appointment = await book(store, student, teacher)

    confirmed = await confirm_appointment(store, appointment.id)

    assert confirmed.status == "confirmed"
    assert confirmed.updated_at is not None
    for transition in (confirm_appointment, reject_appointment, cancel_appointment):
        with pytest.raises(InvalidStatusTransitionError):
            await transition(store, appointment.id)
    assert (await get_appointment(store, appointment.id)).status == "confirmed"


@pytest.mark.asyncio
async def test_reject_appointment(store, student, teacher):
    appointment = await book(store, student, teacher)

    await reject_appointment(store, appointment.id)

    stored = await get_appointment(store, appointment.id)
    assert stored.status == "rejected"
    assert stored.is_terminal


@pytest.mark.asyncio
async def test_cancel_records_who_and_when(store, student, teacher):
    appointment = await book(store, student, teacher)

    await cancel_appointment(store, appointment.id, cancelled_by="teacher")

    raw = (await store.collection("appointments").doc(appointment.id).get()).data()
    assert raw["status"] == "cancelled"
    assert raw["cancelledBy"] == "teacher"
    assert "cancelledAt" in raw
    assert "updatedAt" in raw
    assert raw["purpose"] == "Project help"


@pytest.mark.asyncio
async def test_transition_on_missing_appointment(store):
    with pytest.raises(NotFoundError):
        await confirm_appointment(store, "ghost")


@pytest.mark.asyncio
async def test_lists_are_newest_first(store, student, teacher):
    first = await book(store, student, teacher, purpose="First")
    second = await book(store, student, teacher, purpose="Second")
    collection = store.collection("appointments")
    await collection.doc(first.id).update({"createdAt": "2026-10-01T09:00:00Z"})
    await collection.doc(second.id).update({"createdAt": "2026-10-02T09:00:00Z"})
    await confirm_appointment(store, first.id)

    for_student = await list_student_appointments(store, student.uid)
    for_teacher = await list_teacher_appointments(store, teacher.uid)
    pending = await list_teacher_appointments(store, teacher.uid, status="pending")

    assert [a.purpose for a in for_student] == ["Second", "First"]
    assert [a.purpose for a in for_teacher] == ["Second", "First"]
    assert [a.id for a in pending] == [second.id]
    assert await list_student_appointments(store, "someone-else") == []


@pytest.mark.asyncio
async def test_legacy_approved_status_reads_as_confirmed(store, student, teacher):
    appointment = await book(store, student, teacher)
    await store.collection("appointments").doc(appointment.id).update({"status": "approved"})

    stored = await get_appointment(store, appointment.id)

    assert stored.status == "confirmed"
    with pytest.raises(InvalidStatusTransitionError):
        await cancel_appointment(store, appointment.id)


@pytest.mark.asyncio
async def test_summarize_appointments(store, student, teacher):
    ids = [(await book(store, student, teacher)).id for _ in range(4)]
    await confirm_appointment(store, ids[0])
    await reject_appointment(store, ids[1])
    await cancel_appointment(store, ids[2])

    summary = await summarize_appointments(store, teacher_id=teacher.uid)

    assert summary == {"pending": 1, "confirmed": 1, "rejected": 1, "cancelled": 1, "total": 4}
    assert (await summarize_appointments(store, teacher_id="nobody"))["total"] == 0
    assert (await summarize_appointments(store))["total"] == 4


@pytest.mark.asyncio
async def test_legacy_reason_field_reads_as_purpose(store, student, teacher):
    await store.collection("appointments").doc("legacy-1").set({
        "studentId": student.uid,
        "studentEmail": student.email,
        "teacherId": teacher.uid,
        "teacherEmail": teacher.email,
        "date": "2026-11-02",
        "time": "10:00",
        "reason": "Exam review",
        "status": "pending",
        "createdAt": "2026-10-01T09:00:00Z",
    })

    listed = await list_student_appointments(store, student.uid)

    assert [a.purpose for a in listed] == ["Exam review"]
    confirmed = await confirm_appointment(store, "legacy-1")
    assert confirmed.purpose == "Exam review"
