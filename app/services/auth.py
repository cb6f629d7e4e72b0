"""Username/password accounts with cookie-token sessions."""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..config import Settings
from ..db_models import SessionRecord, UserRecord
from ..errors import AuthenticationError, ValidationError
from ..models import Credentials, Registration, User

logger = logging.getLogger(__name__)

_HASH_ALGORITHM = "pbkdf2_sha256"


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64decode(value: str) -> bytes:
    padding = "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(value + padding)


def hash_password(password: str, *, iterations: int) -> str:
    """Return an encoded PBKDF2-SHA256 hash with a random salt."""

    salt = secrets.token_bytes(16)
    derived = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return f"{_HASH_ALGORITHM}${iterations}${_b64encode(salt)}${_b64encode(derived)}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        algorithm, raw_iterations, raw_salt, raw_hash = encoded.split("$")
        iterations = int(raw_iterations)
        salt = _b64decode(raw_salt)
        expected = _b64decode(raw_hash)
    except ValueError:
        return False
    if algorithm != _HASH_ALGORITHM:
        return False
    derived = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return hmac.compare_digest(derived, expected)


@dataclass(slots=True)
class Session:
    """A freshly started login session."""

    token: str
    user: User
    expires_at: datetime


class AuthService:
    """Registers accounts and manages their sessions."""

    def __init__(
        self, settings: Settings, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        self._settings = settings
        self._session_factory = session_factory

    async def register(self, registration: Registration) -> Session:
        username = registration.username.strip()
        if not username:
            raise ValidationError("Username is required", field="username")
        if not registration.password:
            raise ValidationError("Password is required", field="password")
        if (
            registration.confirm_password is not None
            and registration.password != registration.confirm_password
        ):
            raise ValidationError("Passwords don't match", field="confirmPassword")

        password_hash = hash_password(
            registration.password, iterations=self._settings.password_hash_iterations
        )
        async with self._session_factory() as session:
            existing = await session.scalar(
                select(UserRecord.id).where(UserRecord.username == username)
            )
            if existing is not None:
                raise ValidationError("Username already exists", field="username")
            record = UserRecord(username=username, password_hash=password_hash)
            session.add(record)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise ValidationError("Username already exists", field="username") from exc
            user = User.model_validate(record)

        logger.info("Registered user %s", user.username)
        return await self._start_session(user)

    async def login(self, credentials: Credentials) -> Session:
        async with self._session_factory() as session:
            record = await session.scalar(
                select(UserRecord).where(UserRecord.username == credentials.username.strip())
            )
        if record is None or not verify_password(credentials.password, record.password_hash):
            raise AuthenticationError("Invalid username or password")
        return await self._start_session(User.model_validate(record))

    async def logout(self, token: str | None) -> None:
        if not token:
            return
        async with self._session_factory() as session:
            await session.execute(delete(SessionRecord).where(SessionRecord.token == token))
            await session.commit()

    async def current_user(self, token: str | None) -> User | None:
        if not token:
            return None
        async with self._session_factory() as session:
            record = await session.scalar(
                select(UserRecord)
                .join(SessionRecord, SessionRecord.user_id == UserRecord.id)
                .where(
                    SessionRecord.token == token,
                    SessionRecord.expires_at > datetime.utcnow(),
                )
            )
        if record is None:
            return None
        return User.model_validate(record)

    async def _start_session(self, user: User) -> Session:
        token = secrets.token_urlsafe(32)
        expires_at = datetime.utcnow() + timedelta(seconds=self._settings.session_ttl_seconds)
        async with self._session_factory() as session:
            session.add(SessionRecord(token=token, user_id=user.id, expires_at=expires_at))
            await session.commit()
        return Session(token=token, user=user, expires_at=expires_at)
