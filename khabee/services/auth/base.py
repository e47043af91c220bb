"""
Authentication Provider Abstract Base Class

Phone-number sign-in with one-time codes. The provider owns identities
and session tokens; this application only asks it who a token belongs to.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class AuthUser:
    """Identity behind a valid session token."""
    id: str
    phone: str
    email: Optional[str] = None


@dataclass
class AuthSession:
    """Result of a successful OTP verification."""
    access_token: str
    user: AuthUser
    expires_in: Optional[int] = None


@dataclass
class OtpResult:
    """Result from requesting a one-time code."""
    success: bool
    error_message: Optional[str] = None


class BaseAuthProvider(ABC):
    """Abstract base class for authentication providers."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    async def request_otp(self, phone: str) -> OtpResult:
        """Send a one-time code to ``phone``."""
        pass

    @abstractmethod
    async def verify_otp(self, phone: str, code: str) -> Optional[AuthSession]:
        """Exchange a one-time code for a session, or None if it is wrong."""
        pass

    @abstractmethod
    async def get_user(self, token: str) -> Optional[AuthUser]:
        """Resolve a session token, or None if it is missing/invalid/expired."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check provider connectivity."""
        pass
