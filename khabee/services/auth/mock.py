"""
Mock Authentication Provider

Development sign-in without SMS: every requested phone accepts the
configured development code. Tokens live in memory and die with the
process; user ids are derived from the phone number so they survive
restarts.
"""

import logging
import secrets
import uuid
from typing import Optional

from khabee.core.config import get_settings
from khabee.services.auth.base import AuthSession, AuthUser, BaseAuthProvider, OtpResult

logger = logging.getLogger(__name__)
settings = get_settings()


def user_id_for_phone(phone: str) -> str:
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"khabee:user:{phone}"))


class MockAuthProvider(BaseAuthProvider):
    """In-memory OTP and session store."""

    def __init__(self, otp_code: Optional[str] = None):
        self.otp_code = otp_code or settings.mock_otp_code
        self._pending: set[str] = set()
        self._sessions: dict[str, AuthUser] = {}
        logger.info("MockAuthProvider initialized")

    @property
    def provider_name(self) -> str:
        return "mock"

    async def request_otp(self, phone: str) -> OtpResult:
        self._pending.add(phone)
        logger.info(f"Mock OTP for {phone}: {self.otp_code}")
        return OtpResult(success=True)

    async def verify_otp(self, phone: str, code: str) -> Optional[AuthSession]:
        if phone not in self._pending or code != self.otp_code:
            logger.warning(f"Mock OTP verification failed for {phone}")
            return None

        self._pending.discard(phone)
        return self.issue_session(phone)

    def issue_session(self, phone: str) -> AuthSession:
        """Create a session directly (seeding, tests)."""
        user = AuthUser(id=user_id_for_phone(phone), phone=phone)
        token = f"mock_{secrets.token_urlsafe(24)}"
        self._sessions[token] = user
        logger.debug(f"Mock session issued for {phone}")
        return AuthSession(access_token=token, user=user, expires_in=3600)

    async def get_user(self, token: str) -> Optional[AuthUser]:
        return self._sessions.get(token)

    def revoke(self, token: str) -> None:
        self._sessions.pop(token, None)

    async def health_check(self) -> bool:
        return True
