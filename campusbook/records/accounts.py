"""Registration and login flows.

Registration creates credentials and the matching profile together, rolling
the credentials back if the profile write fails. Login checks the selected
role against the stored profile and blocks teachers awaiting approval.
"""

import structlog

from campusbook.auth.service import AuthService
from campusbook.common.exceptions import (
    AccountPendingApprovalError,
    ProfileNotFoundError,
    RoleMismatchError,
)
from campusbook.docstore.protocol import DocumentStore
from campusbook.models.documents import RegistrationRequest, Role, UserProfile
from campusbook.records.users import create_user_profile, get_user_profile

logger = structlog.get_logger(__name__)


async def register_user(
    store: DocumentStore,
    auth: AuthService,
    registration: RegistrationRequest,
) -> UserProfile:
    """Create credentials and a profile for a new account.

    Teachers start ``pending`` until an admin approves them; students and
    admins start ``approved``. The new user is signed out afterwards so they
    log in explicitly.

    Args:
        store: The document store.
        auth: The auth service.
        registration: Validated registration input.

    Returns:
        The created UserProfile.

    Raises:
        EmailAlreadyInUseError: If the email is already registered.
        Exception: If the profile write fails (credentials are rolled back).
    """
    logger.info("Registration attempt", email=registration.email, role=registration.role)
    auth_user = await auth.create_user_with_email_and_password(registration.email, registration.password)

    try:
        profile = UserProfile(
            uid=auth_user.uid,
            name=registration.name,
            email=registration.email,
            role=registration.role,
            status="pending" if registration.role == "teacher" else "approved",
            **registration.model_dump(
                include={"student_id", "year_of_study", "department", "subject", "office_hours"},
                exclude_none=True,
            ),
        )
        await create_user_profile(store, profile)
    except Exception as e:
        logger.warning("Rolling back credentials after profile failure", uid=auth_user.uid, error=str(e))
        try:
            await auth.delete_user(auth_user.uid)
        except Exception as rollback_error:
            logger.error(
                "Failed to roll back credentials",
                uid=auth_user.uid,
                rollback_error=str(rollback_error),
                original_error=str(e),
            )
        raise

    await auth.sign_out()
    logger.info("Registration completed", uid=profile.uid, role=profile.role, status=profile.status)
    return profile


async def login(
    store: DocumentStore,
    auth: AuthService,
    email: str,
    password: str,
    role: Role,
) -> UserProfile:
    """Sign in and return the profile, enforcing the selected role.

    Raises:
        UserNotFoundError, WrongPasswordError: Bad credentials.
        ProfileNotFoundError: Credentials exist without a profile.
        RoleMismatchError: The profile role differs from ``role``.
        AccountPendingApprovalError: A teacher that is not approved yet.
    """
    auth_user = await auth.sign_in_with_email_and_password(email, password)
    profile = await get_user_profile(store, auth_user.uid)

    if profile is None:
        await auth.sign_out()
        logger.error("User document not found after login", uid=auth_user.uid)
        raise ProfileNotFoundError(auth_user.uid)

    if profile.role != role:
        await auth.sign_out()
        logger.warning("Role mismatch during login", uid=auth_user.uid, expected_role=role, actual_role=profile.role)
        raise RoleMismatchError(auth_user.uid, role, profile.role)

    if profile.role == "teacher" and profile.status != "approved":
        await auth.sign_out()
        logger.info("Teacher login attempted before approval", uid=auth_user.uid, status=profile.status)
        raise AccountPendingApprovalError(auth_user.uid, profile.status)

    logger.info("Login successful", uid=auth_user.uid, role=profile.role)
    return profile
