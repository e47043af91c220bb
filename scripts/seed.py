"""
Seed Script

Creates a sample kitchen owner with three kitchens and four menu items
each. Safe to re-run: the owner is reused and existing kitchens are kept.
Run from project root: python scripts/seed.py
"""

import asyncio
import os
import sys

from sqlalchemy import select

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from khabee.database import async_session_maker, init_db
from khabee.models import Kitchen, MenuItem, User, UserRole
from khabee.services.auth.mock import user_id_for_phone

OWNER_PHONE = "+8801234567890"

KITCHENS = [
    {
        "name": "Ammi's Kitchen",
        "description": "Authentic home-cooked Bangladeshi meals",
        "logo": "🏠",
        "address": "123 Gulshan Avenue, Dhaka",
    },
    {
        "name": "Burger Haven",
        "description": "Juicy burgers and crispy fries",
        "logo": "🍔",
        "address": "456 Dhanmondi Road, Dhaka",
    },
    {
        "name": "Pasta Paradise",
        "description": "Italian pasta dishes made with love",
        "logo": "🍝",
        "address": "789 Banani Street, Dhaka",
    },
]

MENU_ITEMS = [
    {
        "name": "Chicken Biryani",
        "price": 250.00,
        "description": "Fragrant basmati rice with tender chicken and spices",
        "image": "https://via.placeholder.com/300x200?text=Chicken+Biryani",
    },
    {
        "name": "Beef Burger",
        "price": 180.00,
        "description": "Juicy beef patty with lettuce, tomato, and special sauce",
        "image": "https://via.placeholder.com/300x200?text=Beef+Burger",
    },
    {
        "name": "Carbonara Pasta",
        "price": 220.00,
        "description": "Creamy pasta with bacon, eggs, and parmesan cheese",
        "image": "https://via.placeholder.com/300x200?text=Carbonara+Pasta",
    },
    {
        "name": "Chocolate Cake",
        "price": 120.00,
        "description": "Rich chocolate cake with vanilla frosting",
        "image": "https://via.placeholder.com/300x200?text=Chocolate+Cake",
    },
]


async def seed() -> None:
    await init_db()

    async with async_session_maker() as db:
        result = await db.execute(select(User).where(User.phone == OWNER_PHONE))
        owner = result.scalar_one_or_none()
        if owner is None:
            # Same id the development sign-in derives for this phone
            owner = User(
                id=user_id_for_phone(OWNER_PHONE),
                phone=OWNER_PHONE,
                name="Sample Owner",
                email="owner@khabee.com",
                role=UserRole.KITCHEN_OWNER,
            )
            db.add(owner)
            await db.flush()
            print(f"✅ Created owner {owner.phone} ({owner.id})")
        else:
            print(f"ℹ️  Owner {owner.phone} already exists")

        existing = await db.execute(select(Kitchen.name).where(Kitchen.owner_id == owner.id))
        existing_names = set(existing.scalars().all())

        for data in KITCHENS:
            if data["name"] in existing_names:
                print(f"ℹ️  Kitchen '{data['name']}' already exists")
                continue

            kitchen = Kitchen(owner_id=owner.id, **data)
            kitchen.menu_items = [MenuItem(**item) for item in MENU_ITEMS]
            db.add(kitchen)
            print(f"✅ Created kitchen '{kitchen.name}' with {len(MENU_ITEMS)} menu items")

        await db.commit()

    print("🌱 Seeding complete")


if __name__ == "__main__":
    try:
        asyncio.run(seed())
    except Exception as e:
        print(f"❌ Seeding failed: {e}")
        sys.exit(1)
