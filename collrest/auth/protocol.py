"""Protocol for the authentication service provided by the host."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class AuthenticationService(Protocol):
    """Validates credentials and issues/verifies tokens."""

    @property
    def is_enabled(self) -> bool:
        """Whether requests must be authenticated."""
        ...

    async def validate_credentials(self, username: str, password: str) -> Any:
        """Return the user for valid credentials; raise otherwise."""
        ...

    async def verify_token(self, token: str) -> Any:
        """Return the user a token was issued to; raise if it is invalid."""
        ...

    async def create_token(self, user: Any) -> str:
        """Issue a token for ``user``."""
        ...
