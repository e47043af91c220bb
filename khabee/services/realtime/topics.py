"""Change-feed topic names for order changes."""

ALL_ORDERS = "orders"


def kitchen_orders(kitchen_id: str) -> str:
    return f"orders:kitchen:{kitchen_id}"


def user_orders(user_id: str) -> str:
    return f"orders:user:{user_id}"


def single_order(order_id: str) -> str:
    return f"orders:order:{order_id}"


def topics_for_order(order_id: str, kitchen_id: str, user_id: str) -> list[str]:
    """Every topic a change to one order is announced on."""
    return [
        ALL_ORDERS,
        kitchen_orders(kitchen_id),
        user_orders(user_id),
        single_order(order_id),
    ]
