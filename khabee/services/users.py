"""
User Profiles

A profile row is created the first time someone signs in; its id is the
auth provider's user id so orders can reference it.
"""

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from khabee.models import Order, User, UserRole
from khabee.schemas import OwnedKitchen, UserProfileOut

logger = logging.getLogger(__name__)


async def ensure_user_profile(db: AsyncSession, user_id: str, phone: str) -> User:
    """Return the user's profile, creating a CUSTOMER profile if missing."""
    user = await db.get(User, user_id)
    if user is not None:
        return user

    user = User(id=user_id, phone=phone, name="", email="", role=UserRole.CUSTOMER)
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # Created concurrently by another request
        await db.rollback()
        user = await db.get(User, user_id)
        if user is None:
            raise
    else:
        logger.info(f"Created profile for user {user_id}")

    return user


async def get_user_profile(db: AsyncSession, user_id: str) -> Optional[UserProfileOut]:
    """Profile with owned kitchens and order count, or None."""
    try:
        result = await db.execute(
            select(User)
            .where(User.id == user_id)
            .options(selectinload(User.kitchens))
        )
        user = result.scalar_one_or_none()
        if user is None:
            return None

        count = await db.execute(select(func.count(Order.id)).where(Order.user_id == user_id))
    except Exception as e:
        logger.error(f"Error fetching user profile {user_id}: {e}")
        return None

    return UserProfileOut(
        id=user.id,
        phone=user.phone,
        name=user.name,
        email=user.email,
        role=user.role,
        kitchens=[OwnedKitchen.model_validate(k) for k in user.kitchens],
        order_count=count.scalar() or 0,
    )
