"""Demo data: sample teachers and admin accounts for development scopes."""

import structlog

from campusbook.auth.service import AuthService
from campusbook.docstore.local import LocalDocumentStore
from campusbook.models.documents import UserProfile
from campusbook.records.users import create_user_profile, get_user_profile

logger = structlog.get_logger(__name__)

SAMPLE_TEACHERS = [
    UserProfile(
        uid="teacher-1",
        email="john.smith@school.edu",
        name="Dr. John Smith",
        role="teacher",
        status="approved",
        department="Computer Science",
        subject="Data Structures and Algorithms",
        office_hours="Mon, Wed 2-4 PM",
    ),
    UserProfile(
        uid="teacher-2",
        email="mary.johnson@school.edu",
        name="Prof. Mary Johnson",
        role="teacher",
        status="approved",
        department="Mathematics",
        subject="Calculus and Linear Algebra",
        office_hours="Tue, Thu 10-12 PM",
    ),
    UserProfile(
        uid="teacher-3",
        email="david.wilson@school.edu",
        name="Dr. David Wilson",
        role="teacher",
        status="approved",
        department="Physics",
        subject="Quantum Mechanics",
        office_hours="Mon, Fri 1-3 PM",
    ),
]

ADMIN_ACCOUNTS = [
    ("admin-001", "admin@school.edu", "System Administrator"),
    ("admin-002", "admin@university.edu", "University Administrator"),
    ("admin-003", "admin@demo.com", "Demo Administrator"),
]


async def seed_sample_teachers(store: LocalDocumentStore, marker_key: str = "sampleTeachersAdded") -> bool:
    """Adds the sample teachers once per storage scope.

    Returns:
        True if the teachers were written, False if the marker was already set.
    """
    if store.storage.get_item(marker_key) == "true":
        return False

    for teacher in SAMPLE_TEACHERS:
        await create_user_profile(store, teacher)
    store.storage.set_item(marker_key, "true")
    logger.info("Sample teachers added", count=len(SAMPLE_TEACHERS))
    return True


async def seed_admin_accounts(store: LocalDocumentStore, auth: AuthService, password: str) -> list[str]:
    """Creates admin profiles and credentials that do not exist yet.

    Existing profiles and credentials are left untouched, so re-running never
    resets a changed password.

    Returns:
        Emails of admins whose credentials were added.
    """
    added = []
    for uid, email, name in ADMIN_ACCOUNTS:
        if await get_user_profile(store, uid) is None:
            await create_user_profile(store, UserProfile(uid=uid, email=email, name=name, role="admin"))
        if await auth.ensure_credentials(uid, email, password):
            added.append(email)
    logger.info("Admin accounts ensured", added=len(added), total=len(ADMIN_ACCOUNTS))
    return added
