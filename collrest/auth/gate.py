"""Authorization header handling for the optional authentication gate."""

import base64
import binascii
import re
from typing import Any

from collrest.core.errors import BadRequestError, DelegateError, UnauthorizedError
from collrest.core.logging import get_logger

from .protocol import AuthenticationService


logger = get_logger(__name__)

_AUTH_HEADER = re.compile(r"^(Basic|Bearer)\s+(\S.*)$")


def parse_authorization_header(value: str | None) -> tuple[str, str]:
    """Split an ``Authorization`` header into scheme and credentials.

    Raises:
        BadRequestError: If the header is missing or uses another scheme
    """
    match = _AUTH_HEADER.match(value.strip()) if value else None
    if not match:
        raise BadRequestError()
    return match.group(1), match.group(2).strip()


def decode_basic_credentials(value: str) -> tuple[str, str]:
    """Decode ``base64(user:pass)``; the password may itself contain ``:``.

    Raises:
        UnauthorizedError: If the value is not valid base64
    """
    try:
        decoded = base64.b64decode(value, validate=True).decode("utf-8", "replace")
    except (binascii.Error, ValueError) as e:
        raise UnauthorizedError() from e
    username, _, password = decoded.partition(":")
    return username, password


async def authorize(
    authentication: AuthenticationService, header: str | None
) -> Any:
    """Resolve the user behind an ``Authorization`` header.

    Basic credentials that fail validation produce a generic 401; a bearer
    token rejected by the service produces a 401 carrying the service's own
    error.
    """
    scheme, credentials = parse_authorization_header(header)

    if scheme == "Basic":
        username, password = decode_basic_credentials(credentials)
        try:
            return await authentication.validate_credentials(username, password)
        except Exception as e:
            logger.debug("basic_auth_rejected", username=username, error=str(e))
            raise UnauthorizedError() from e

    try:
        return await authentication.verify_token(credentials)
    except Exception as e:
        logger.debug("bearer_token_rejected", error=str(e))
        raise DelegateError(e, status_code=401) from e
