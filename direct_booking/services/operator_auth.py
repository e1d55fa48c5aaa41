"""Operator authentication: password login and session-token verification."""

import hmac
import secrets
from typing import Optional

from structlog import get_logger

from direct_booking.config import settings
from direct_booking.services.errors import Unauthorized

logger = get_logger(__name__)


class OperatorAuthService:
    """Issues and verifies the operator bearer token.

    A single operator account: the password and the session token both come
    from configuration. When no session token is configured, a random one is
    generated for the lifetime of the process.
    """

    def __init__(self, password: Optional[str] = None, session_token: Optional[str] = None):
        self._password = password if password is not None else settings.admin.password.get_secret_value()
        configured = session_token if session_token is not None else settings.admin.session_token.get_secret_value()
        self._session_token = configured or secrets.token_hex(32)

    def login(self, password: str) -> str:
        """Exchange the operator password for the session token.

        Raises:
            Unauthorized: If no password is configured or it does not match
        """
        if not self._password:
            logger.error("Operator login attempted without a configured password")
            raise Unauthorized("Operator password is not configured")
        if not hmac.compare_digest(password.encode(), self._password.encode()):
            logger.warning("Operator login failed")
            raise Unauthorized("Incorrect password")
        logger.info("Operator logged in")
        return self._session_token

    def verify(self, token: Optional[str]) -> bool:
        """Check a bearer token against the current session token."""
        if not token:
            return False
        return hmac.compare_digest(token.encode(), self._session_token.encode())
