"""Registration, login and bearer-token lookup."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from ea_client.domain.errors import ConflictError, UnauthorizedError, ValidationError
from ea_client.domain.models import AuthUserRecord
from ea_client.services.store import Record, RecordStore
from ea_client.services.tokens import SessionTokenIssuer, TokenParseError

logger = logging.getLogger(__name__)

_BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class AuthResult:
    """A freshly issued token and the account it belongs to."""

    token: str
    user: AuthUserRecord


@dataclass
class AuthService:
    """Application service for the toy authentication flow.

    Passwords are stored and compared as plain strings. This is a known
    weakness of the flow, not something to fix here.
    """

    store: RecordStore
    token_issuer: SessionTokenIssuer

    def register(self, payload: Mapping[str, object]) -> AuthResult:
        """Create an account and issue a token for it."""
        username = payload.get("username")
        email = payload.get("email")
        if not username or not payload.get("password") or not email:
            raise ValidationError("Username, password and email are required")
        if (
            self.store.find_one({"username": username}) is not None
            or self.store.find_one({"email": email}) is not None
        ):
            raise ConflictError("Username or email is already registered")
        row = self.store.create(payload)
        user = _parse_auth_user(row)
        logger.info("Registered user %s (%s)", user.username, user.email)
        return AuthResult(token=self.token_issuer.issue(user.id), user=user)

    def login(self, payload: Mapping[str, object]) -> AuthResult:
        """Check credentials and issue a token."""
        username = payload.get("username")
        password = payload.get("password")
        if not username or not password:
            raise ValidationError("Username and password are required")
        row = self.store.find_one({"username": username})
        if row is None or row["password"] != password:
            raise UnauthorizedError("Invalid username or password")
        user = _parse_auth_user(row)
        logger.info("User logged in: %s", user.username)
        return AuthResult(token=self.token_issuer.issue(user.id), user=user)

    def current_user(self, authorization: str | None) -> AuthUserRecord:
        """Resolve the account behind an ``Authorization`` header value."""
        if not authorization or not authorization.startswith(_BEARER_PREFIX):
            raise UnauthorizedError("Unauthorized, please log in first")
        token = authorization[len(_BEARER_PREFIX) :]
        try:
            user_id = self.token_issuer.resolve(token)
        except TokenParseError as exc:
            raise UnauthorizedError("Invalid session token") from exc
        row = self.store.find_one({"id": user_id})
        if row is None:
            raise UnauthorizedError("User does not exist")
        return _parse_auth_user(row)


def _parse_auth_user(row: Record) -> AuthUserRecord:
    return AuthUserRecord(
        id=int(row["id"]),
        username=str(row["username"]),
        email=str(row["email"]),
        password=str(row["password"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
