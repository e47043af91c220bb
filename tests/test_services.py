"""Auth providers, view cache and SMS notifications."""

import json

import httpx
import pytest

from khabee.services.auth import MockAuthProvider, SupabaseAuthProvider
from khabee.services.auth.mock import user_id_for_phone
from khabee.services.cache import MemoryPageCache
from khabee.services.notifications import MockNotificationService, build_status_message
from khabee.tasks import notify_order_status


class TestMockAuthProvider:

    async def test_otp_flow(self):
        auth = MockAuthProvider(otp_code="123456")

        assert (await auth.request_otp("+8801711111111")).success
        session = await auth.verify_otp("+8801711111111", "123456")

        assert session.access_token.startswith("mock_")
        assert session.user.id == user_id_for_phone("+8801711111111")
        assert await auth.get_user(session.access_token) == session.user

    async def test_wrong_code(self):
        auth = MockAuthProvider(otp_code="123456")
        await auth.request_otp("+8801711111111")

        assert await auth.verify_otp("+8801711111111", "000000") is None

    async def test_code_needs_a_request_first(self):
        auth = MockAuthProvider(otp_code="123456")
        assert await auth.verify_otp("+8801711111111", "123456") is None

    async def test_code_is_single_use(self):
        auth = MockAuthProvider(otp_code="123456")
        await auth.request_otp("+8801711111111")
        await auth.verify_otp("+8801711111111", "123456")

        assert await auth.verify_otp("+8801711111111", "123456") is None

    async def test_revoked_and_unknown_tokens(self):
        auth = MockAuthProvider()
        session = auth.issue_session("+8801711111111")
        auth.revoke(session.access_token)

        assert await auth.get_user(session.access_token) is None
        assert await auth.get_user("mock_unknown") is None

    def test_user_id_is_stable(self):
        assert user_id_for_phone("+880171") == user_id_for_phone("+880171")
        assert user_id_for_phone("+880171") != user_id_for_phone("+880172")


class TestSupabaseAuthProvider:

    @staticmethod
    def provider(handler) -> SupabaseAuthProvider:
        return SupabaseAuthProvider(
            supabase_url="https://project.supabase.co",
            anon_key="anon-key",
            transport=httpx.MockTransport(handler),
        )

    async def test_verify_exchanges_code_for_session(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["apikey"] = request.headers["apikey"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={
                "access_token": "jwt-token",
                "expires_in": 3600,
                "user": {"id": "user-1", "phone": "8801711111111", "email": ""},
            })

        session = await self.provider(handler).verify_otp("+8801711111111", "123456")

        assert seen["url"] == "https://project.supabase.co/auth/v1/verify"
        assert seen["apikey"] == "anon-key"
        assert seen["body"] == {"type": "sms", "phone": "+8801711111111", "token": "123456"}
        assert session.access_token == "jwt-token"
        assert session.user.id == "user-1"
        assert session.user.email is None

    async def test_rejected_code(self):
        def handler(request):
            return httpx.Response(403, json={"msg": "Token has expired or is invalid"})

        assert await self.provider(handler).verify_otp("+8801711111111", "000000") is None

    async def test_get_user_sends_bearer_token(self):
        def handler(request):
            if request.headers.get("authorization") != "Bearer good":
                return httpx.Response(401, json={"msg": "invalid JWT"})
            return httpx.Response(200, json={"id": "user-1", "phone": "8801711111111"})

        provider = self.provider(handler)

        assert (await provider.get_user("good")).id == "user-1"
        assert await provider.get_user("bad") is None

    async def test_transport_errors_are_not_raised(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        provider = self.provider(handler)

        assert not (await provider.request_otp("+8801711111111")).success
        assert await provider.get_user("token") is None
        assert await provider.health_check() is False


class TestMemoryPageCache:

    async def test_get_set(self):
        cache = MemoryPageCache()
        await cache.set("/", "kitchens", [1, 2], ttl=60)
        assert await cache.get("/", "kitchens") == [1, 2]
        assert await cache.get("/", "other") is None

    async def test_expired_entries_miss(self):
        cache = MemoryPageCache()
        await cache.set("/", "kitchens", [1], ttl=-1)
        assert await cache.get("/", "kitchens") is None

    async def test_revalidate_paths(self):
        cache = MemoryPageCache()
        await cache.set("/", "a", 1, ttl=60)
        await cache.set("/orders", "b", 2, ttl=60)
        await cache.set("/kitchen/k1", "c", 3, ttl=60)

        await cache.revalidate_paths("/", "/orders")

        assert await cache.get("/", "a") is None
        assert await cache.get("/orders", "b") is None
        assert await cache.get("/kitchen/k1", "c") == 3


class TestNotifications:

    def test_known_status_message(self):
        message = build_status_message("0123456789", "Ammi's Kitchen", "COOKING", 260.0)
        assert message == "Khabee: your order #01234567 is being cooked at Ammi's Kitchen (total ৳260.00)"

    def test_unknown_status_message(self):
        message = build_status_message("0123456789", "Ammi's Kitchen", "WAITING_FOR_RIDER", 260.0)
        assert "is now waiting for rider at Ammi's Kitchen" in message

    def test_task_sends_through_configured_service(self, sms):
        result = notify_order_status.apply(args=[{
            "order_id": "order-1",
            "customer_phone": "+8801711111111",
            "kitchen_name": "Ammi's Kitchen",
            "status": "READY",
            "total_price": 260.0,
        }]).get()

        assert result["success"]
        assert sms.sent[0][0] == "+8801711111111"

    def test_task_without_phone(self, sms):
        result = notify_order_status.apply(args=[{"order_id": "order-1", "status": "READY"}]).get()

        assert result["success"] is False
        assert sms.sent == []

    def test_simulated_failures(self):
        service = MockNotificationService(failure_rate=1.0)
        result = service.send_sms("+8801711111111", "hello")
        assert not result.success
        assert service.sent == []


@pytest.mark.parametrize("status", ["PENDING", "DELIVERED", "CANCELLED"])
def test_every_known_status_names_the_kitchen(status):
    assert "Ammi's Kitchen" in build_status_message("order-1", "Ammi's Kitchen", status, 10.0)
