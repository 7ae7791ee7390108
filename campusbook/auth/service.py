"""Credential and session service.

Emulates an email/password authentication service over a storage medium:
credentials live in one flat JSON list, the signed-in user in a second key
so a new service instance on the same scope restores the session.
"""

from __future__ import annotations

import json
import uuid
from collections.abc import Callable
from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel, ConfigDict, ValidationError

from campusbook.auth.passwords import hash_password, verify_password
from campusbook.common.exceptions import (
    EmailAlreadyInUseError,
    UserNotFoundError,
    WrongPasswordError,
)
from campusbook.models.documents import Credential
from campusbook.storage.protocol import StorageMedium

if TYPE_CHECKING:
    from campusbook.common.settings import Settings

logger = structlog.get_logger(__name__)

AuthStateListener = Callable[["AuthUser | None"], None]


class AuthUser(BaseModel):
    """The signed-in identity. Carries no profile data."""

    model_config = ConfigDict(frozen=True)

    uid: str
    email: str
    email_verified: bool = False


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    """
    Email/password authentication backed by a storage medium.

    Usage:
        auth = AuthService(storage)
        user = await auth.create_user_with_email_and_password("a@b.edu", "secret1")
        unsubscribe = auth.on_auth_state_changed(lambda user: ...)
        await auth.sign_out()
    """

    def __init__(
        self,
        storage: StorageMedium,
        credentials_key: str = "mockUsers",
        current_user_key: str = "mockCurrentUser",
    ) -> None:
        self.storage = storage
        self.credentials_key = credentials_key
        self.current_user_key = current_user_key
        self._listeners: list[AuthStateListener] = []
        self._current_user = self._restore_current_user()

    @property
    def current_user(self) -> AuthUser | None:
        return self._current_user

    # --- persistence ------------------------------------------------------

    def _restore_current_user(self) -> AuthUser | None:
        raw = self.storage.get_item(self.current_user_key)
        if raw is None:
            return None
        try:
            return AuthUser.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Stored session is unreadable, signing out", key=self.current_user_key, error=str(e))
            self.storage.remove_item(self.current_user_key)
            return None

    def load_credentials(self) -> list[Credential]:
        """Return the credential list, resetting it if the stored text is unusable."""
        raw = self.storage.get_item(self.credentials_key)
        if raw is None:
            return []
        try:
            entries = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Credential list is not valid JSON, resetting", key=self.credentials_key, error=e.msg)
            self.storage.set_item(self.credentials_key, "[]")
            return []
        if not isinstance(entries, list):
            logger.warning("Credential list is not a list, resetting", key=self.credentials_key)
            self.storage.set_item(self.credentials_key, "[]")
            return []

        credentials = []
        for entry in entries:
            try:
                credentials.append(Credential.model_validate(entry))
            except ValidationError:
                logger.warning("Skipping malformed credential entry", key=self.credentials_key)
        return credentials

    def _save_credentials(self, credentials: list[Credential]) -> None:
        self.storage.set_item(
            self.credentials_key,
            json.dumps([credential.model_dump() for credential in credentials]),
        )

    def _find(self, credentials: list[Credential], email: str) -> Credential | None:
        return next((c for c in credentials if c.email == email), None)

    def _set_current_user(self, user: AuthUser | None) -> None:
        self._current_user = user
        if user is None:
            self.storage.remove_item(self.current_user_key)
        else:
            self.storage.set_item(self.current_user_key, user.model_dump_json())
        self._notify(user)

    # --- public API -------------------------------------------------------

    async def create_user_with_email_and_password(self, email: str, password: str) -> AuthUser:
        """Register credentials and sign the new user in.

        Raises:
            EmailAlreadyInUseError: If the email already has credentials.
        """
        email = _normalize_email(email)
        credentials = self.load_credentials()
        if self._find(credentials, email):
            logger.info("Registration rejected, email in use", email=email)
            raise EmailAlreadyInUseError(email)

        uid = str(uuid.uuid4())
        credentials.append(Credential(uid=uid, email=email, password=hash_password(password)))
        self._save_credentials(credentials)
        logger.info("Credentials created", uid=uid, email=email)

        user = AuthUser(uid=uid, email=email)
        self._set_current_user(user)
        return user

    async def sign_in_with_email_and_password(self, email: str, password: str) -> AuthUser:
        """Sign in with stored credentials.

        Raises:
            UserNotFoundError: No credentials for the email.
            WrongPasswordError: The password does not match.
        """
        email = _normalize_email(email)
        credential = self._find(self.load_credentials(), email)
        if credential is None:
            logger.info("Sign-in failed, unknown email", email=email)
            raise UserNotFoundError(email)
        if not verify_password(password, credential.password):
            logger.warning("Sign-in failed, wrong password", uid=credential.uid)
            raise WrongPasswordError(email)

        user = AuthUser(uid=credential.uid, email=credential.email)
        self._set_current_user(user)
        logger.info("Signed in", uid=user.uid)
        return user

    async def sign_out(self) -> None:
        if self._current_user is not None:
            logger.info("Signed out", uid=self._current_user.uid)
        self._set_current_user(None)

    async def delete_user(self, uid: str) -> bool:
        """Remove the credentials for uid. Returns False if none existed."""
        credentials = self.load_credentials()
        remaining = [c for c in credentials if c.uid != uid]
        if len(remaining) == len(credentials):
            return False
        self._save_credentials(remaining)
        if self._current_user is not None and self._current_user.uid == uid:
            self._set_current_user(None)
        logger.info("Credentials deleted", uid=uid)
        return True

    async def ensure_credentials(self, uid: str, email: str, password: str) -> bool:
        """Add credentials under a fixed uid unless the email already has some.

        Used for seeded accounts. Returns True if credentials were added.
        """
        email = _normalize_email(email)
        credentials = self.load_credentials()
        if self._find(credentials, email):
            return False
        credentials.append(Credential(uid=uid, email=email, password=hash_password(password)))
        self._save_credentials(credentials)
        logger.info("Seed credentials added", uid=uid, email=email)
        return True

    def on_auth_state_changed(self, callback: AuthStateListener) -> Callable[[], None]:
        """Register a listener, call it with the current state, return an unsubscribe function."""
        self._listeners.append(callback)
        callback(self._current_user)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _notify(self, user: AuthUser | None) -> None:
        for callback in list(self._listeners):
            try:
                callback(user)
            except Exception:
                logger.exception("Auth state listener failed", listener=getattr(callback, "__name__", repr(callback)))


def create_auth_service(storage: StorageMedium, settings: Settings | None = None) -> AuthService:
    """Build an AuthService on ``storage`` using the configured key names."""
    from campusbook.common.settings import get_settings

    settings = settings or get_settings()
    return AuthService(
        storage,
        credentials_key=settings.credentials_key,
        current_user_key=settings.current_user_key,
    )
