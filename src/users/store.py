"""User persistence contract and an in-memory implementation."""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

import bcrypt

from .models import MAX_PASSWORD_BYTES, UserIdentity, UserRecord

logger = logging.getLogger('accounts.users.store')


class UserStore(ABC):
    """The user collaborator the session layer resolves identities against."""

    @abstractmethod
    async def load(self, user_id: int) -> Optional[UserIdentity]:
        """Return the user with this id, or None if there is none."""

    @abstractmethod
    async def create(self, email: str, first_name: str, last_name: str, password: str) -> Optional[UserIdentity]:
        """Create a user. Returns None if the email is already registered."""

    @abstractmethod
    async def delete(self, user_id: int) -> Optional[UserIdentity]:
        """Delete a user. Returns the deleted user, or None if there was none."""

    @abstractmethod
    async def authenticate(self, email: str, password: str) -> Optional[UserIdentity]:
        """Return the user if the credentials match, otherwise None."""


class PasswordHasher:
    """bcrypt hashing, run off the event loop."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        self._dummy_hash: Optional[str] = None

    async def hash(self, password: str) -> str:
        """
        Raises:
            ValueError: if the password is longer than bcrypt accepts
        """
        if len(password.encode('utf-8')) > MAX_PASSWORD_BYTES:
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return await asyncio.to_thread(self._hash, password)

    async def verify(self, password: str, password_hash: str) -> bool:
        if len(password.encode('utf-8')) > MAX_PASSWORD_BYTES:
            return False
        return await asyncio.to_thread(self._verify, password, password_hash)

    async def verify_dummy(self, password: str) -> bool:
        """Spend the same bcrypt work as a real check when there is no user to check against."""
        if self._dummy_hash is None:
            self._dummy_hash = await self.hash("dummy-password")
        await self.verify(password, self._dummy_hash)
        return False

    def _hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')

    def _verify(self, password: str, password_hash: str) -> bool:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))


class InMemoryUserStore(UserStore):
    def __init__(self, hasher: Optional[PasswordHasher] = None):
        self.hasher = hasher or PasswordHasher()
        self._users: Dict[int, UserRecord] = {}
        self._next_id = 1
        self._lock = asyncio.Lock()

    async def load(self, user_id: int) -> Optional[UserIdentity]:
        record = self._users.get(user_id)
        return record.to_identity() if record else None

    async def create(self, email: str, first_name: str, last_name: str, password: str) -> Optional[UserIdentity]:
        email = email.lower()
        password_hash = await self.hasher.hash(password)
        # the email check and the insert must not interleave with another signup
        async with self._lock:
            if self._find_by_email(email) is not None:
                logger.debug(f"User with email {email} already exists")
                return None
            record = UserRecord(
                id=self._next_id,
                email=email,
                first_name=first_name,
                last_name=last_name,
                password_hash=password_hash,
            )
            self._users[record.id] = record
            self._next_id += 1
        logger.info(f"Created user {email} (uid={record.id})")
        return record.to_identity()

    async def delete(self, user_id: int) -> Optional[UserIdentity]:
        record = self._users.pop(user_id, None)
        if record is None:
            return None
        logger.info(f"Deleted user {record.email} (uid={user_id})")
        return record.to_identity()

    async def authenticate(self, email: str, password: str) -> Optional[UserIdentity]:
        record = self._find_by_email(email.lower())
        if record is None:
            # unknown emails cost the same bcrypt work as a wrong password
            await self.hasher.verify_dummy(password)
            return None
        if not await self.hasher.verify(password, record.password_hash):
            return None
        return record.to_identity()

    def _find_by_email(self, email: str) -> Optional[UserRecord]:
        return next((user for user in self._users.values() if user.email == email), None)
