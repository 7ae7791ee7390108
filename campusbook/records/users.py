"""Functions for managing user profiles in the document store."""

import structlog

from campusbook.common.exceptions import InvalidStatusTransitionError, NotFoundError
from campusbook.docstore.protocol import DocumentStore
from campusbook.auth.service import AuthService
from campusbook.models.documents import Role, UserProfile, UserStatus, utc_now

logger = structlog.get_logger(__name__)

USERS = "users"


async def get_user_profile(store: DocumentStore, uid: str) -> UserProfile | None:
    """Retrieves a user profile document.

    Args:
        store: The document store.
        uid: The user's unique identifier.

    Returns:
        A UserProfile if the profile exists, otherwise None.
    """
    snapshot = await store.collection(USERS).doc(uid).get()

    if not snapshot.exists():
        return None

    return UserProfile.from_document(snapshot.data())


async def create_user_profile(store: DocumentStore, user_data: UserProfile) -> UserProfile:
    """Creates (or replaces) a user profile document keyed by uid.

    Args:
        store: The document store.
        user_data: The UserProfile containing the profile data.

    Returns:
        The created UserProfile.
    """
    await store.collection(USERS).doc(user_data.uid).set(user_data.to_document())
    logger.info("User profile saved", uid=user_data.uid, role=user_data.role, status=user_data.status)
    return user_data


async def list_users(
    store: DocumentStore,
    role: Role | None = None,
    status: UserStatus | None = None,
) -> list[UserProfile]:
    """Lists user profiles, optionally filtered by role and status."""
    query = store.collection(USERS)
    if role is not None:
        query = query.where("role", "==", role)
    if status is not None:
        query = query.where("status", "==", status)
    snapshot = await query.get()
    return [UserProfile.from_document(doc.data()) for doc in snapshot]


async def list_approved_teachers(store: DocumentStore) -> list[UserProfile]:
    """Teachers students may book, ordered by name."""
    snapshot = await (
        store.collection(USERS)
        .where("role", "==", "teacher")
        .where("status", "==", "approved")
        .order_by("name")
        .get()
    )
    return [UserProfile.from_document(doc.data()) for doc in snapshot]


async def _set_teacher_status(store: DocumentStore, uid: str, target: UserStatus) -> UserProfile:
    ref = store.collection(USERS).doc(uid)
    snapshot = await ref.get()
    if not snapshot.exists():
        raise NotFoundError(f"{USERS}/{uid}", f"User not found: {uid}")

    profile = UserProfile.from_document(snapshot.data())
    if profile.role != "teacher" or profile.status != "pending":
        raise InvalidStatusTransitionError(f"{profile.role} account", uid, profile.status, target)

    changes = {"status": target}
    if target == "approved":
        changes["approved_at"] = utc_now()
    updated = profile.model_copy(update=changes)
    await ref.update(updated.model_dump(mode="json", by_alias=True, include=set(changes)))
    logger.info("Teacher status changed", uid=uid, status=target)
    return updated


async def approve_teacher(store: DocumentStore, uid: str) -> UserProfile:
    """Approves a pending teacher registration.

    Raises:
        NotFoundError: No such user.
        InvalidStatusTransitionError: The user is not a pending teacher.
    """
    return await _set_teacher_status(store, uid, "approved")


async def reject_teacher(store: DocumentStore, uid: str) -> UserProfile:
    """Rejects a pending teacher registration. Same errors as approve_teacher."""
    return await _set_teacher_status(store, uid, "rejected")


async def summarize_users(store: DocumentStore) -> dict[str, int]:
    """Counts used by the admin dashboard."""
    users = await list_users(store)
    return {
        "pending_teachers": sum(1 for u in users if u.role == "teacher" and u.status == "pending"),
        "approved_teachers": sum(1 for u in users if u.role == "teacher" and u.status == "approved"),
        "students": sum(1 for u in users if u.role == "student"),
        "admins": sum(1 for u in users if u.role == "admin"),
        "total": len(users),
    }


async def search_teachers(
    store: DocumentStore,
    department: str | None = None,
    text: str | None = None,
) -> list[UserProfile]:
    """Approved teachers matching a department and a free-text term.

    ``department`` must match exactly; ``text`` is a case-insensitive
    substring of the subject or the name. Empty values do not filter.
    """
    teachers = await list_approved_teachers(store)
    if department:
        teachers = [t for t in teachers if t.department == department]
    if text:
        needle = text.strip().lower()
        teachers = [
            t for t in teachers
            if needle in (t.subject or "").lower() or needle in t.name.lower()
        ]
    return teachers


async def delete_user_profile(store: DocumentStore, uid: str, auth: AuthService | None = None) -> bool:
    """Deletes a user profile, and its credentials when ``auth`` is given.

    Without the credentials removed the account can still sign in but
    fails with ProfileNotFoundError, and its email stays taken.

    Returns:
        True if a profile existed.
    """
    ref = store.collection(USERS).doc(uid)
    existed = (await ref.get()).exists()
    await ref.delete()
    credentials_removed = await auth.delete_user(uid) if auth is not None else False
    logger.info("User deleted", uid=uid, profile_existed=existed, credentials_removed=credentials_removed)
    return existed
