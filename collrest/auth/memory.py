"""Authentication service backed by a static user table.

Tokens are opaque random strings kept in memory; there is no signing or
expiry. At most ``max_tokens`` are kept; the oldest is dropped first. Meant
for tests and the demo server only.
"""

import secrets
from collections.abc import Mapping
from typing import Any


class InvalidCredentialsError(Exception):
    name = "InvalidCredentials"


class InvalidTokenError(Exception):
    name = "InvalidToken"


class InMemoryAuthentication:
    """Checks usernames and passwords against a dict and hands out tokens."""

    def __init__(
        self, users: Mapping[str, str], enabled: bool = True, max_tokens: int = 1024
    ) -> None:
        self._users = dict(users)
        self._max_tokens = max_tokens
        self._tokens: dict[str, dict[str, Any]] = {}
        self.is_enabled = enabled

    async def validate_credentials(self, username: str, password: str) -> dict[str, Any]:
        expected = self._users.get(username)
        if expected is None or not secrets.compare_digest(expected, password):
            raise InvalidCredentialsError("Invalid username or password")
        return {"username": username}

    async def verify_token(self, token: str) -> dict[str, Any]:
        user = self._tokens.get(token)
        if user is None:
            raise InvalidTokenError("Invalid token")
        return dict(user)

    async def create_token(self, user: Mapping[str, Any]) -> str:
        token = secrets.token_urlsafe(32)
        self._tokens[token] = dict(user)
        while len(self._tokens) > self._max_tokens:
            del self._tokens[next(iter(self._tokens))]
        return token
