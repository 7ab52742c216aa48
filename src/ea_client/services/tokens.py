"""Session token issuing and parsing.

Tokens have the form ``token_<issued-at-millis>_<user id>``. They carry no
signature and never expire; a token is valid as long as the user id it
embeds still exists.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass, field

from ea_client.domain.collections import MAX_RECORD_ID

_PREFIX = "token"


class TokenParseError(ValueError):
    """Raised when a token does not embed a user id."""


@dataclass
class SessionTokenIssuer:
    """Issue and resolve opaque bearer tokens."""

    clock: Callable[[], float] = field(default=time.time)

    def issue(self, user_id: int) -> str:
        """Return a token correlated to ``user_id``."""
        issued_at = int(self.clock() * 1000)
        return f"{_PREFIX}_{issued_at}_{user_id}"

    def resolve(self, token: str) -> int:
        """Return the user id embedded in ``token``."""
        parts = token.split("_")
        if len(parts) != 3 or parts[0] != _PREFIX:  # noqa: PLR2004
            raise TokenParseError("Malformed session token")
        _, issued_at, raw_id = parts
        if not _is_number(issued_at) or not _is_number(raw_id):
            raise TokenParseError("Malformed session token")
        user_id = int(raw_id)
        if user_id > MAX_RECORD_ID:
            raise TokenParseError("Session token user id out of range")
        return user_id


def _is_number(part: str) -> bool:
    return part.isascii() and part.isdigit()
