"""Authentication gate and reference authentication service."""

from .gate import authorize, decode_basic_credentials, parse_authorization_header
from .memory import InMemoryAuthentication
from .protocol import AuthenticationService


__all__ = [
    "AuthenticationService",
    "InMemoryAuthentication",
    "authorize",
    "decode_basic_credentials",
    "parse_authorization_header",
]
