"""
Rush Hour Simulation Script

Signs in a crowd of customers, fills their carts from one kitchen's menu
and checks them all out at once, then has the kitchen owner move every
order along. Targets a development server (mock sign-in codes).
Run from project root: python scripts/simulate.py
"""

import argparse
import asyncio
import os
import random
import sys
import time
from datetime import datetime
from typing import Any

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from khabee.client import CartStore, KhabeeClient, MemoryStorage

# Configuration
API_BASE_URL = "http://localhost:8001"
TOTAL_ORDERS = 50
OTP_CODE = "123456"
OWNER_PHONE = "+8801234567890"

STREETS = ["Gulshan Avenue", "Dhanmondi Road", "Banani Street", "Mirpur Road", "Uttara Sector 7"]
INSTRUCTIONS = [None, "Extra spicy", "No onions", "Ring the bell", "Call on arrival"]
STATUS_FLOW = ["CONFIRMED", "COOKING", "READY", "OUT_FOR_DELIVERY", "DELIVERED"]


def random_phone() -> str:
    return f"+88017{random.randint(10000000, 99999999)}"


def fill_cart(menu: list[dict[str, Any]]) -> CartStore:
    """A cart with 1-4 random lines."""
    cart = CartStore(MemoryStorage())
    for item in random.sample(menu, k=min(len(menu), random.randint(1, 4))):
        for _ in range(random.randint(1, 3)):
            cart.add_item(item)
    return cart


async def sign_in(api: KhabeeClient, phone: str) -> bool:
    await api.request_otp(phone)
    result = await api.verify_otp(phone, OTP_CODE)
    return bool(result.get("success"))


async def customer_checkout(order_num: int, menu: list[dict[str, Any]]) -> dict[str, Any]:
    """One customer: sign in, fill a cart, check out."""
    start_time = time.time()

    try:
        async with KhabeeClient(API_BASE_URL) as api:
            if not await sign_in(api, random_phone()):
                raise RuntimeError("sign-in failed")

            cart = fill_cart(menu)
            expected = cart.get_total()
            result = await api.checkout(
                cart,
                delivery_address=f"{random.randint(1, 99)} {random.choice(STREETS)}, Dhaka",
                special_instructions=random.choice(INSTRUCTIONS),
            )

        elapsed = round(time.time() - start_time, 3)
        if result.get("success"):
            # order details are omitted if the server could not reload them
            order = result.get("order") or {"subtotal": expected, "totalPrice": 0.0}
            return {
                "order_num": order_num,
                "success": True,
                "order_id": result.get("orderId"),
                "subtotal_ok": abs(order["subtotal"] - expected) < 0.01,
                "total": order["totalPrice"],
                "time": elapsed,
            }
        return {
            "order_num": order_num,
            "success": False,
            "error": result.get("error", "Unknown error")[:100],
            "time": elapsed,
        }
    except Exception as e:
        elapsed = round(time.time() - start_time, 3)
        return {
            "order_num": order_num,
            "success": False,
            "error": str(e)[:100],
            "time": elapsed,
        }


async def advance_orders(order_ids: list[str]) -> int:
    """Kitchen owner pushes every order to a random later status."""
    async with KhabeeClient(API_BASE_URL) as owner:
        if not await sign_in(owner, OWNER_PHONE):
            print("   ❌ Owner sign-in failed (did you run scripts/seed.py?)")
            return 0

        results = await asyncio.gather(*[
            owner.update_order_status(order_id, random.choice(STATUS_FLOW))
            for order_id in order_ids
        ])
    return sum(1 for r in results if r.get("success"))


async def run_simulation(num_orders: int = TOTAL_ORDERS, kitchen_name: str = "") -> dict[str, Any]:
    """Fire ``num_orders`` concurrent checkouts at one kitchen."""
    print("=" * 70)
    print("🔥 RUSH HOUR SIMULATION")
    print("=" * 70)
    print(f"📋 Total Orders: {num_orders}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    async with KhabeeClient(API_BASE_URL) as api:
        kitchens = await api.list_kitchens()
        if not kitchens:
            print("\n❌ No kitchens found. Run scripts/seed.py first.")
            return {"total": num_orders, "successful": 0, "failed": num_orders}

        kitchen = next((k for k in kitchens if k["name"] == kitchen_name), kitchens[0])
        detail = await api.get_kitchen(kitchen["id"])

    menu = [
        {"id": m["id"], "name": m["name"], "price": m["price"], "image": m.get("image")}
        for m in detail["menuItems"]
    ]
    print(f"\n🍛 Kitchen: {kitchen['name']} ({len(menu)} menu items)")
    print("\n🚀 Firing checkouts...\n")

    start_time = time.time()
    results = await asyncio.gather(*[customer_checkout(i + 1, menu) for i in range(num_orders)])
    total_time = round(time.time() - start_time, 2)

    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)
    print(f"\n✅ Successful Orders: {len(successful)}/{num_orders}")
    print(f"❌ Failed Orders: {len(failed)}/{num_orders}")
    print(f"⏱️  Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        mismatched = [r for r in successful if not r["subtotal_ok"]]
        revenue = sum(r["total"] for r in successful)

        print("\n📈 Performance Metrics:")
        print(f"   Average Response: {avg_time}s")
        print(f"   Fastest: {min(r['time'] for r in successful)}s")
        print(f"   Slowest: {max(r['time'] for r in successful)}s")
        print(f"   💰 Total Revenue: ৳{revenue:.2f}")
        print(f"   🧮 Subtotal mismatches: {len(mismatched)}")

        print("\n👩‍🍳 Kitchen owner updating statuses...")
        updated = await advance_orders([r["order_id"] for r in successful])
        print(f"   ✅ {updated}/{len(successful)} orders updated")

    if failed:
        print("\n⚠️  Failed Order Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Order #{f['order_num']}: {f.get('error', 'Unknown error')}")

    print("\n" + "=" * 70)
    print(f"🔍 Visit {API_BASE_URL}/dashboard as {OWNER_PHONE} to watch the board")
    print("=" * 70)

    return {
        "total": num_orders,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
        "results": results,
    }


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Rush Hour Simulation Script")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--kitchen", default="", help="Kitchen name (defaults to the first)")
    args = parser.parse_args()

    summary = asyncio.run(run_simulation(args.orders, args.kitchen))
    sys.exit(0 if summary["failed"] == 0 else 1)
