"""
Supabase Authentication Provider

Talks to the Supabase Auth (GoTrue) REST API with ``httpx``:
    - POST /auth/v1/otp      send an SMS code
    - POST /auth/v1/verify   exchange the code for a session
    - GET  /auth/v1/user     resolve an access token
"""

import logging
from typing import Any, Optional

import httpx

from khabee.core.config import get_settings
from khabee.services.auth.base import AuthSession, AuthUser, BaseAuthProvider, OtpResult

logger = logging.getLogger(__name__)
settings = get_settings()


class SupabaseAuthProvider(BaseAuthProvider):
    """Production auth provider backed by Supabase."""

    def __init__(
        self,
        supabase_url: Optional[str] = None,
        anon_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        url = supabase_url or settings.supabase_url
        key = anon_key or settings.supabase_anon_key
        if not url or not key:
            logger.warning("Supabase credentials not configured")

        self.client = httpx.AsyncClient(
            base_url=f"{(url or '').rstrip('/')}/auth/v1",
            headers={"apikey": key or ""},
            timeout=settings.auth_timeout_seconds,
            transport=transport,
        )
        logger.info("SupabaseAuthProvider initialized")

    @property
    def provider_name(self) -> str:
        return "supabase"

    @staticmethod
    def _to_user(data: dict[str, Any]) -> AuthUser:
        return AuthUser(
            id=data["id"],
            phone=data.get("phone") or "",
            email=data.get("email") or None,
        )

    async def request_otp(self, phone: str) -> OtpResult:
        try:
            response = await self.client.post("/otp", json={"phone": phone})
        except httpx.HTTPError as e:
            logger.error(f"Supabase OTP request failed: {e}")
            return OtpResult(success=False, error_message="Could not send code")

        if response.status_code >= 400:
            logger.warning(f"Supabase OTP rejected for {phone}: {response.text[:200]}")
            return OtpResult(success=False, error_message="Could not send code")

        return OtpResult(success=True)

    async def verify_otp(self, phone: str, code: str) -> Optional[AuthSession]:
        try:
            response = await self.client.post(
                "/verify",
                json={"type": "sms", "phone": phone, "token": code},
            )
        except httpx.HTTPError as e:
            logger.error(f"Supabase OTP verification failed: {e}")
            return None

        if response.status_code != 200:
            logger.warning(f"Supabase rejected OTP for {phone} ({response.status_code})")
            return None

        data = response.json()
        return AuthSession(
            access_token=data["access_token"],
            user=self._to_user(data["user"]),
            expires_in=data.get("expires_in"),
        )

    async def get_user(self, token: str) -> Optional[AuthUser]:
        try:
            response = await self.client.get(
                "/user",
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as e:
            logger.error(f"Supabase user lookup failed: {e}")
            return None

        if response.status_code != 200:
            return None

        return self._to_user(response.json())

    async def health_check(self) -> bool:
        try:
            response = await self.client.get("/health")
            return response.status_code == 200
        except httpx.HTTPError:
            return False
