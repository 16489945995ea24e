"""Local account directory and the current session.

Registration and sign-in happen entirely on this side: identities live in a
single persisted mapping keyed by lower-cased email.

SECURITY: passwords are stored and compared in cleartext. This mirrors the
storefront's observable behaviour and is a known insecurity; do not reuse this
store for anything holding real credentials.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError

from delora.shared.core.errors import DuplicateAccountError, InvalidCredentialsError, ValidationError
from delora.shared.domain.notifications.channel import StatusMessage
from delora.shared.infrastructure.persistence.kv_store import KeyValueStore

logger = logging.getLogger(__name__)


class Identity(BaseModel):
    """A registered account."""
    model_config = ConfigDict(frozen=True, extra='ignore')

    name: str
    email: str
    password: str


class Session(BaseModel):
    """The signed-in identity. Replaced or cleared wholesale, never edited."""
    model_config = ConfigDict(frozen=True, extra='ignore')

    name: str = ""
    email: str


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def get_initials(name: str) -> str:
    """Up to two upper-cased initials, e.g. ``"ada king lovelace"`` -> ``"AK"``."""
    return "".join(part[0] for part in name.split(" ") if part)[:2].upper()


class AccountStore:
    """Account directory plus session pointer, each persisted under its own key."""

    def __init__(
        self,
        store: KeyValueStore,
        accounts_key: str = "deloraAccounts",
        current_user_key: str = "deloraCurrentUser",
        brand_name: str = "Delora",
        min_password_length: int = 6,
    ) -> None:
        self._store = store
        self._accounts_key = accounts_key
        self._current_user_key = current_user_key
        self.brand_name = brand_name
        self.min_password_length = min_password_length
        self._directory: Dict[str, Identity] = {}
        self._session: Optional[Session] = None

    @classmethod
    def load(cls, store: KeyValueStore, **kwargs: Any) -> "AccountStore":
        """Restore the directory and session from persistence."""
        accounts = cls(store, **kwargs)

        records = store.get(accounts._accounts_key, {})
        if not isinstance(records, dict):
            logger.warning(f"Account record '{accounts._accounts_key}' is not a mapping; starting empty")
            records = {}
        for key, record in records.items():
            try:
                identity = Identity.model_validate(record)
            except PydanticValidationError:
                logger.warning(f"Dropping malformed account record for '{key}'")
                continue
            email = normalize_email(identity.email or key)
            if not email:
                continue
            accounts._directory[email] = identity.model_copy(update={"email": email})

        current = store.get(accounts._current_user_key, None)
        if current is not None:
            try:
                session = Session.model_validate(current)
            except PydanticValidationError:
                session = None
            if session is None or not normalize_email(session.email):
                logger.warning("Discarding unreadable session record")
                store.remove(accounts._current_user_key)
            else:
                accounts._session = session.model_copy(update={"email": normalize_email(session.email)})

        logger.debug(
            f"Accounts restored: {len(accounts._directory)} identities, "
            f"signed_in={accounts.is_signed_in}"
        )
        return accounts

    # --- Persistence ---

    def _persist_accounts(self) -> None:
        self._store.set(
            self._accounts_key,
            {email: identity.model_dump() for email, identity in self._directory.items()},
        )

    def _persist_current_user(self) -> None:
        if self._session is not None:
            self._store.set(self._current_user_key, self._session.model_dump())
        else:
            self._store.remove(self._current_user_key)

    # --- Operations ---

    def register(self, name: str, email: str, password: str) -> StatusMessage:
        """Create an identity and sign it in.

        Raises:
            ValidationError: a field is empty or the password is too short
            DuplicateAccountError: the email is already registered
        """
        name = (name or "").strip()
        email = normalize_email(email)
        password = password or ""

        if not name or not email or not password:
            raise ValidationError("Please complete every field.")
        if len(password) < self.min_password_length:
            raise ValidationError(
                f"Choose a password with at least {self.min_password_length} characters."
            )
        if email in self._directory:
            raise DuplicateAccountError("An account with that email already exists. Try signing in.")

        self._directory[email] = Identity(name=name, email=email, password=password)
        self._persist_accounts()

        self._session = Session(name=name, email=email)
        self._persist_current_user()
        logger.info(f"Registered account {email}")
        return StatusMessage.success(f"Welcome to {self.brand_name}, {name}!")

    def sign_in(self, email: str, password: str) -> StatusMessage:
        """Start a session for an existing identity.

        Raises:
            ValidationError: email or password is empty
            InvalidCredentialsError: unknown email or wrong password
        """
        email = normalize_email(email)
        password = password or ""

        if not email or not password:
            raise ValidationError("Enter both email and password to continue.")

        identity = self._directory.get(email)
        if identity is None or identity.password != password:
            raise InvalidCredentialsError("Incorrect email or password. Please try again.")

        self._session = Session(name=identity.name, email=email)
        self._persist_current_user()
        logger.info(f"Signed in {email}")
        return StatusMessage.success(f"Signed in as {identity.name}.")

    def sign_out(self) -> StatusMessage:
        """End the session; the persisted record is removed, not blanked."""
        if self._session is not None:
            logger.info(f"Signed out {self._session.email}")
        self._session = None
        self._persist_current_user()
        return StatusMessage.success("You have been signed out.")

    # --- Reads ---

    @property
    def current_user(self) -> Optional[Session]:
        return self._session

    @property
    def is_signed_in(self) -> bool:
        return self._session is not None

    def get_identity(self, email: str) -> Optional[Identity]:
        return self._directory.get(normalize_email(email))

    def directory(self) -> Dict[str, Identity]:
        return dict(self._directory)

    def initials(self) -> str:
        if self._session is None:
            return ""
        return get_initials(self._session.name or self._session.email)
