"""
In-process identity service: sign-up, sign-in, sign-out and role lookup.

Also carries the privileged e-mail change that only administrators may
perform on other accounts.
"""

import hashlib
import logging
import re
import secrets
import uuid
from datetime import datetime

from .config import MAX_EMAIL_LENGTH, PASSWORD_HASH_ITERATIONS
from .models import Role, Session, User

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class AuthError(Exception):
    """Base class for identity failures."""


class InvalidCredentialsError(AuthError):
    pass


class PermissionDeniedError(AuthError):
    pass


class UserExistsError(AuthError):
    pass


def _hash_password(password: str, salt: bytes | None = None) -> str:
    salt = salt or secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt, PASSWORD_HASH_ITERATIONS)
    return f"{salt.hex()}${digest.hex()}"


def _check_password(password: str, stored: str) -> bool:
    salt_hex, _, _ = stored.partition("$")
    candidate = _hash_password(password, bytes.fromhex(salt_hex))
    return secrets.compare_digest(candidate, stored)


def _normalise_email(email: str) -> str:
    email = (email or "").strip().lower()
    if not _EMAIL_RE.match(email):
        raise AuthError(f"Invalid email format: '{email}'")
    if len(email) > MAX_EMAIL_LENGTH:
        raise AuthError("Email too long")
    return email


class IdentityService:
    def __init__(self):
        self._users: dict[str, User] = {}
        self._roles: dict[str, Role] = {}
        self._sessions: dict[str, Session] = {}

    def sign_up(
        self,
        email: str,
        password: str,
        full_name: str | None = None,
        role: Role = Role.CLIENT,
    ) -> User:
        email = _normalise_email(email)
        if self._find_by_email(email) is not None:
            raise UserExistsError(f"User '{email}' already exists")
        if not password:
            raise AuthError("Password is required")

        user = User(
            id=str(uuid.uuid4()),
            email=email,
            full_name=full_name,
            password_hash=_hash_password(password),
        )
        self._users[user.id] = user
        self._roles[user.id] = Role(role)
        logger.info("Signed up %s as %s", email, Role(role).value)
        return user

    def sign_in(self, email: str, password: str) -> Session:
        user = self._find_by_email((email or "").strip().lower())
        if user is None or not _check_password(password, user.password_hash):
            logger.warning("Failed sign-in for %s", email)
            raise InvalidCredentialsError("Invalid email or password")

        session = Session(
            token=secrets.token_urlsafe(32),
            user_id=user.id,
            created_at=datetime.now(),
        )
        self._sessions[session.token] = session
        return session

    def sign_out(self, token: str) -> None:
        self._sessions.pop(token, None)

    def get_user(self, token: str) -> User:
        session = self._sessions.get(token)
        if session is None:
            raise InvalidCredentialsError("Invalid or expired token")
        return self._users[session.user_id]

    def get_role(self, user_id: str) -> Role | None:
        return self._roles.get(user_id)

    def assign_role(self, user_id: str, role: Role) -> None:
        if user_id not in self._users:
            raise AuthError(f"Unknown user '{user_id}'")
        self._roles[user_id] = Role(role)

    def check_email_update(self, token: str, user_id: str, new_email: str) -> str:
        """Run every check update_user_email makes and return the normalised e-mail.

        Nothing is changed.
        """
        caller = self.get_user(token)
        if self.get_role(caller.id) is not Role.ADMIN:
            logger.warning("Unauthorized email update attempt by user %s", caller.id)
            raise PermissionDeniedError("Admin access required")

        if user_id not in self._users:
            raise AuthError(f"Unknown user '{user_id}'")

        new_email = _normalise_email(new_email)
        existing = self._find_by_email(new_email)
        if existing is not None and existing.id != user_id:
            raise UserExistsError(f"User '{new_email}' already exists")
        return new_email

    def update_user_email(self, token: str, user_id: str, new_email: str) -> User:
        """Change another user's e-mail. The caller must be an administrator."""
        new_email = self.check_email_update(token, user_id, new_email)

        user = self._users[user_id]
        user.email = new_email
        logger.info("Email updated for user %s by admin %s", user_id, self.get_user(token).id)
        return user

    def _find_by_email(self, email: str) -> User | None:
        for user in self._users.values():
            if user.email == email:
                return user
        return None
