"""
Identity provider access: email/password sign-in, sign-up and ID token
verification, plus the admin allowlist policy.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Optional, Protocol

import requests

logger = logging.getLogger(__name__)

SIGN_IN_URL = "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"
REQUEST_TIMEOUT_SECONDS = 10

_FRIENDLY_SIGN_IN_ERRORS = {
    "EMAIL_NOT_FOUND": "Invalid email or password",
    "INVALID_PASSWORD": "Invalid email or password",
    "INVALID_LOGIN_CREDENTIALS": "Invalid email or password",
    "USER_DISABLED": "Your account has been disabled. Please contact support.",
}


class IdentityError(Exception):
    """Base class for identity provider failures."""


class InvalidCredentialsError(IdentityError):
    pass


class EmailAlreadyExistsError(IdentityError):
    pass


class IdentityUnavailableError(IdentityError):
    pass


class InvalidTokenError(IdentityError):
    pass


@dataclass(frozen=True)
class Identity:
    uid: str
    email: Optional[str]
    display_name: str = ""


@dataclass(frozen=True)
class Session:
    identity: Identity
    id_token: str


class IdentityProvider(Protocol):
    def sign_in_with_password(self, email: str, password: str) -> Session:
        ...

    def sign_up(self, email: str, password: str, display_name: str = "") -> Session:
        ...

    def verify_token(self, id_token: str) -> Identity:
        ...

    def get_user(self, uid: str) -> Optional[Identity]:
        ...


class AdminPolicy:
    """Decides admin status from a configured email allowlist."""

    def __init__(self, admin_emails: Iterable[str] = ()):
        self.admin_emails: FrozenSet[str] = frozenset(
            e.strip().lower() for e in admin_emails if e and e.strip()
        )

    def is_admin_email(self, email: Optional[str]) -> bool:
        return bool(email) and email.strip().lower() in self.admin_emails


def initialize_firebase(project_id: Optional[str] = None, credentials_path: Optional[str] = None):
    """Initializes the default firebase-admin app once per process."""
    import firebase_admin
    from firebase_admin import credentials

    if firebase_admin._apps:
        return firebase_admin.get_app()
    cred = credentials.Certificate(credentials_path) if credentials_path else None
    options = {"projectId": project_id} if project_id else None
    return firebase_admin.initialize_app(cred, options)


class FirebaseIdentityProvider:
    """
    Firebase Authentication through firebase-admin, with password sign-in
    through the Identity Toolkit REST API (the admin SDK cannot check
    passwords).
    """

    def __init__(self, web_api_key: Optional[str]):
        self.web_api_key = web_api_key

    def sign_in_with_password(self, email: str, password: str) -> Session:
        if not self.web_api_key:
            raise IdentityUnavailableError("FIREBASE_WEB_API_KEY is not configured")
        try:
            response = requests.post(
                SIGN_IN_URL,
                params={"key": self.web_api_key},
                json={"email": email, "password": password, "returnSecureToken": True},
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
        except requests.exceptions.RequestException as exc:
            logger.warning("Identity Toolkit unreachable: %s", exc)
            raise IdentityUnavailableError(
                "Authentication service is unreachable. Please try again shortly."
            ) from exc

        try:
            data = response.json()
        except ValueError as exc:
            logger.warning(
                "Identity Toolkit returned a non-JSON body (status %s)", response.status_code
            )
            raise IdentityUnavailableError(
                "Authentication service returned an unexpected response."
            ) from exc
        if response.status_code >= 500:
            raise IdentityUnavailableError(
                "Authentication service is unavailable. Please try again shortly."
            )
        if response.status_code != 200:
            error_code = (data.get("error") or {}).get("message", "")
            raise InvalidCredentialsError(
                _FRIENDLY_SIGN_IN_ERRORS.get(error_code, "Unable to sign in")
            )
        return Session(
            identity=Identity(
                uid=data["localId"],
                email=data.get("email", email),
                display_name=data.get("displayName") or "",
            ),
            id_token=data["idToken"],
        )

    def sign_up(self, email: str, password: str, display_name: str = "") -> Session:
        from firebase_admin import auth, exceptions

        try:
            auth.create_user(
                email=email, password=password, display_name=display_name or None
            )
        except auth.EmailAlreadyExistsError as exc:
            raise EmailAlreadyExistsError("Email already registered") from exc
        except (ValueError, exceptions.InvalidArgumentError) as exc:
            raise InvalidCredentialsError(f"Invalid sign-up details: {exc}") from exc
        except exceptions.FirebaseError as exc:
            logger.warning("Firebase create_user failed: %s", exc)
            raise IdentityUnavailableError("Unable to create account right now") from exc
        return self.sign_in_with_password(email, password)

    def verify_token(self, id_token: str) -> Identity:
        from firebase_admin import auth

        try:
            claims = auth.verify_id_token(id_token)
        except (auth.InvalidIdTokenError, auth.ExpiredIdTokenError, auth.RevokedIdTokenError, ValueError) as exc:
            raise InvalidTokenError("Invalid or expired token") from exc
        return Identity(
            uid=claims["uid"],
            email=claims.get("email"),
            display_name=claims.get("name") or "",
        )

    def get_user(self, uid: str) -> Optional[Identity]:
        from firebase_admin import auth

        try:
            record = auth.get_user(uid)
        except auth.UserNotFoundError:
            return None
        return Identity(uid=record.uid, email=record.email, display_name=record.display_name or "")


@dataclass
class _Account:
    identity: Identity
    password: str


class InMemoryIdentityProvider:
    """Process-local accounts with opaque tokens, for development and tests."""

    def __init__(self):
        self._accounts: Dict[str, _Account] = {}
        self._tokens: Dict[str, str] = {}

    def _issue(self, identity: Identity) -> Session:
        token = uuid.uuid4().hex
        self._tokens[token] = identity.uid
        return Session(identity=identity, id_token=token)

    def _find(self, email: str) -> Optional[_Account]:
        key = email.strip().lower()
        for account in self._accounts.values():
            if (account.identity.email or "").lower() == key:
                return account
        return None

    def sign_in_with_password(self, email: str, password: str) -> Session:
        account = self._find(email)
        if account is None or account.password != password:
            raise InvalidCredentialsError("Invalid email or password")
        return self._issue(account.identity)

    def sign_up(self, email: str, password: str, display_name: str = "") -> Session:
        if self._find(email) is not None:
            raise EmailAlreadyExistsError("Email already registered")
        identity = Identity(uid=uuid.uuid4().hex, email=email, display_name=display_name)
        self._accounts[identity.uid] = _Account(identity=identity, password=password)
        return self._issue(identity)

    def verify_token(self, id_token: str) -> Identity:
        uid = self._tokens.get(id_token)
        if uid is None or uid not in self._accounts:
            raise InvalidTokenError("Invalid or expired token")
        return self._accounts[uid].identity

    def get_user(self, uid: str) -> Optional[Identity]:
        account = self._accounts.get(uid)
        return account.identity if account else None

    def revoke(self, id_token: str) -> None:
        self._tokens.pop(id_token, None)
