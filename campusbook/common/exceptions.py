"""Exception hierarchy for CampusBook.

Store-level errors describe what happened to a document; auth and domain
errors describe rule violations in the booking flows. Callers translate
them into user-facing messages.
"""

from typing import Any


class CampusBookError(Exception):
    """Base exception for all CampusBook errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. path, uid).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


# --- Document store ---------------------------------------------------------


class DocumentStoreError(CampusBookError):
    """Base class for document store failures."""


class AlreadyExistsError(DocumentStoreError):
    """Raised when creating something that must be unique and already exists."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, "ALREADY_EXISTS", details)


class NotFoundError(DocumentStoreError):
    """Raised when an update or lookup targets an absent document."""

    def __init__(self, path: str, message: str | None = None) -> None:
        super().__init__(message or f"Document does not exist: {path}", "NOT_FOUND", {"path": path})
        self.path = path


class CorruptDataError(DocumentStoreError):
    """Raised while decoding a stored blob that is not valid.

    Never escapes the store: the blob is logged and reset to empty.
    """

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Corrupt data at storage key {key!r}: {reason}", "CORRUPT", {"key": key})
        self.key = key


class InvalidQueryError(DocumentStoreError):
    """Raised for unsupported operators and malformed paths."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "INVALID_QUERY")


# --- Authentication ---------------------------------------------------------


class AuthError(CampusBookError):
    """Base class for authentication failures."""


class EmailAlreadyInUseError(AlreadyExistsError):
    """Raised when registering an email that already has credentials."""

    def __init__(self, email: str) -> None:
        super().__init__("auth/email-already-in-use", {"email": email})
        self.error_code = "auth/email-already-in-use"


class UserNotFoundError(AuthError):
    def __init__(self, email: str) -> None:
        super().__init__("auth/user-not-found", "auth/user-not-found", {"email": email})


class WrongPasswordError(AuthError):
    def __init__(self, email: str) -> None:
        super().__init__("auth/wrong-password", "auth/wrong-password", {"email": email})


class ProfileNotFoundError(AuthError):
    """Raised when credentials exist but the user profile document does not."""

    def __init__(self, uid: str) -> None:
        super().__init__("User data not found", "PROFILE_NOT_FOUND", {"uid": uid})


class RoleMismatchError(AuthError):
    def __init__(self, uid: str, expected: str, actual: str) -> None:
        super().__init__(
            "Invalid role selected",
            "ROLE_MISMATCH",
            {"uid": uid, "expected_role": expected, "actual_role": actual},
        )


class AccountPendingApprovalError(AuthError):
    def __init__(self, uid: str, status: str) -> None:
        super().__init__(
            "Your teacher account is pending approval",
            "PENDING_APPROVAL",
            {"uid": uid, "status": status},
        )


# --- Domain rules -----------------------------------------------------------


class InvalidStatusTransitionError(CampusBookError):
    """Raised when a status change would leave a terminal state."""

    def __init__(self, resource: str, resource_id: str, current: str, target: str) -> None:
        super().__init__(
            f"Cannot move {resource} {resource_id} from {current!r} to {target!r}",
            "INVALID_STATUS_TRANSITION",
            {"resource_id": resource_id, "current": current, "target": target},
        )


class PermissionDeniedError(CampusBookError):
    def __init__(self, message: str = "Permission denied", details: dict[str, Any] | None = None) -> None:
        super().__init__(message, "PERMISSION_DENIED", details)
