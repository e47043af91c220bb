"""
Order Services

Placement (cart → order), queries (per user / per kitchen / single
order) and kitchen-owner status updates.
"""

from khabee.services.orders.pricing import calculate_order_totals
from khabee.services.orders.placement import (
    OrderPlacementResult,
    create_order,
    place_order,
    publish_placed_order,
)
from khabee.services.orders.query import (
    OrderListResult,
    OrderResult,
    fetch_kitchen_orders,
    fetch_user_orders,
    get_kitchen_orders,
    get_order,
    get_user_orders,
    load_order,
    require_kitchen_owner,
)
from khabee.services.orders.status import (
    DEFAULT_STATUS_STYLE,
    change_order_status,
    status_badge,
    status_label,
    update_order_status,
)

__all__ = [
    "calculate_order_totals",
    "OrderPlacementResult",
    "create_order",
    "place_order",
    "publish_placed_order",
    "OrderListResult",
    "OrderResult",
    "fetch_kitchen_orders",
    "fetch_user_orders",
    "get_kitchen_orders",
    "get_order",
    "get_user_orders",
    "load_order",
    "require_kitchen_owner",
    "DEFAULT_STATUS_STYLE",
    "change_order_status",
    "status_badge",
    "status_label",
    "update_order_status",
]
