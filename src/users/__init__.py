"""User records and the store the session layer resolves identities against."""

from .models import LoginRequest, SignupRequest, UserIdentity, UserRecord, parse_user_id
from .store import InMemoryUserStore, PasswordHasher, UserStore

__all__ = [
    "UserIdentity",
    "UserRecord",
    "SignupRequest",
    "LoginRequest",
    "parse_user_id",
    "UserStore",
    "InMemoryUserStore",
    "PasswordHasher",
]
