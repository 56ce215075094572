"""
Identity & Session Module

Validates login credentials, mints opaque session tokens and resolves bearer
tokens back to a user identity on every protected request.
"""

from datetime import datetime, timezone, timedelta
from dataclasses import dataclass
from typing import Optional, Tuple

from .storage import StorageInterface, StorageRecord
from .generators import TokenGenerator
from .errors import InvalidCredentialsError, InvalidInputError, UnauthenticatedError


@dataclass(frozen=True)
class Identity:
    """Resolved caller identity, passed explicitly to every protected operation"""
    user_id: str


@dataclass
class User(StorageRecord):
    """App user; id is the login identity string"""
    password: str
    full_name: str
    email: str
    token: Optional[str] = None
    expiry_date: Optional[datetime] = None
    requires_pin: bool = False
    requires_otp: bool = False

    datetime_fields = ("expiry_date",)


@dataclass
class SessionToken(StorageRecord):
    """Token to user mapping; id is the token string itself"""
    user_id: str
    issued_at: datetime
    expires_at: datetime

    datetime_fields = ("issued_at", "expires_at")


class IdentityManager:
    """
    Authenticates users and resolves session tokens.

    Each login overwrites the user's current token. Older token records are
    left in storage but no longer resolve. Token expiry is recorded on login
    and not checked on resolve.
    """

    def __init__(
        self,
        storage: StorageInterface,
        token_generator: Optional[TokenGenerator] = None,
        token_expiry_hours: int = 24
    ):
        self.storage = storage
        self.token_generator = token_generator or TokenGenerator()
        self.token_expiry_hours = token_expiry_hours
        self.users_table = "users"
        self.tokens_table = "tokens"

    def register_user(
        self,
        user_id: str,
        password: str,
        full_name: str,
        email: str,
        requires_pin: bool = False,
        requires_otp: bool = False
    ) -> User:
        """Create a new user"""
        if self.storage.exists(self.users_table, user_id):
            raise InvalidInputError(f"User {user_id} already exists")

        user = User(
            id=user_id,
            password=password,
            full_name=full_name,
            email=email,
            requires_pin=requires_pin,
            requires_otp=requires_otp
        )
        self.storage.save(self.users_table, user.id, user.to_dict())
        return user

    def get_user(self, user_id: str) -> Optional[User]:
        """Get user by ID"""
        data = self.storage.load(self.users_table, user_id)
        if data is None:
            return None
        return User.from_dict(data)

    def login(self, user_id: str, password: str) -> Tuple[SessionToken, User]:
        """
        Authenticate a user and issue a fresh session token.

        Args:
            user_id: Login identity
            password: Plain-text secret, compared by equality

        Returns:
            The new session token and a snapshot of the user carrying it

        Raises:
            InvalidCredentialsError: unknown user or password mismatch
        """
        user = self.get_user(user_id)
        if user is None or user.password != password:
            raise InvalidCredentialsError("Invalid credentials")

        now = datetime.now(timezone.utc)
        session = SessionToken(
            id=self.token_generator.new_token(),
            user_id=user.id,
            issued_at=now,
            expires_at=now + timedelta(hours=self.token_expiry_hours)
        )

        user.token = session.id
        user.expiry_date = session.expires_at

        self.storage.save(self.tokens_table, session.id, session.to_dict())
        self.storage.save(self.users_table, user.id, user.to_dict())

        return session, user

    def resolve(self, token: str) -> Identity:
        """Resolve a bearer token to the identity of its user"""
        data = self.storage.load(self.tokens_table, token)
        if data is None:
            raise UnauthenticatedError("Invalid or expired token")

        session = SessionToken.from_dict(data)
        user = self.get_user(session.user_id)

        # A later login replaced this token
        if user is None or user.token != token:
            raise UnauthenticatedError("Invalid or expired token")

        return Identity(user_id=user.id)
