"""
Pydantic Schemas for Request/Response Validation

JSON bodies use camelCase field names (``menuItemId``, ``totalPrice``,
``orderId``); snake_case names are accepted on input as well.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import datetime

from khabee.models import UserRole


class ApiModel(BaseModel):
    """Base for every API schema: camelCase aliases, ORM attribute access."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class OrderItemIn(ApiModel):
    """Single line of a checkout request."""
    menu_item_id: str = Field(..., min_length=1, examples=["3f0c1d5e-..."])
    quantity: int = Field(..., ge=1, examples=[2])
    price: float = Field(..., ge=0, examples=[250.0])


class PlaceOrderRequest(ApiModel):
    """
    Checkout payload.

    ``items`` may be empty here so that an empty cart is reported through
    the regular ``{success: false, error}`` shape instead of a 422.
    """
    items: List[OrderItemIn] = Field(default_factory=list)
    delivery_address: Optional[str] = Field(None, max_length=255)
    special_instructions: Optional[str] = Field(None, max_length=500)


class OrderStatusUpdate(ApiModel):
    """Kitchen-owner status change."""
    status: str = Field(..., max_length=32, examples=["COOKING"])


class OtpRequest(ApiModel):
    phone: str = Field(..., min_length=6, max_length=20, examples=["+8801234567890"])


class OtpVerifyRequest(ApiModel):
    phone: str = Field(..., min_length=6, max_length=20)
    code: str = Field(..., min_length=4, max_length=10)


class MenuItemCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=100)
    price: float = Field(..., ge=0)
    description: Optional[str] = None
    image: Optional[str] = Field(None, max_length=500)


class MenuItemUpdate(ApiModel):
    """Partial update: omitted fields are kept, ``name`` and ``price`` cannot be cleared."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None
    image: Optional[str] = Field(None, max_length=500)

    @field_validator('name', 'price')
    @classmethod
    def validate_not_null(cls, v):
        if v is None:
            raise ValueError('Field may be omitted but not set to null')
        return v


class KitchenUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    logo: Optional[str] = Field(None, max_length=500)
    address: Optional[str] = Field(None, max_length=255)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError('Kitchen name may be omitted but not set to null')
        return v


# =============================================================================
# ENTITY SCHEMAS
# =============================================================================

class UserOut(ApiModel):
    id: str
    phone: str
    name: str
    email: str
    role: UserRole


class UserSummary(ApiModel):
    id: str
    name: str
    phone: str


class KitchenSummary(ApiModel):
    id: str
    name: str
    logo: Optional[str] = None


class KitchenOut(ApiModel):
    id: str
    owner_id: str
    name: str
    description: Optional[str] = None
    logo: Optional[str] = None
    address: Optional[str] = None


class MenuItemOut(ApiModel):
    id: str
    kitchen_id: str
    name: str
    price: float
    description: Optional[str] = None
    image: Optional[str] = None


class OrderItemOut(ApiModel):
    id: str
    menu_item_id: str
    quantity: int
    price: float
    menu_item: Optional[MenuItemOut] = None


class OrderBase(ApiModel):
    id: str
    user_id: str
    kitchen_id: str
    subtotal: float
    delivery_fee: float
    tax: float
    total_price: float
    status: str
    delivery_address: Optional[str] = None
    special_instructions: Optional[str] = None
    created_at: datetime
    items: List[OrderItemOut] = []


class UserOrderOut(OrderBase):
    """An order as its customer sees it."""
    kitchen: KitchenSummary


class KitchenOrderOut(OrderBase):
    """An order as the kitchen sees it."""
    user: UserSummary


class OrderDetailOut(OrderBase):
    """An order with everything attached."""
    kitchen: KitchenOut
    user: UserOut


class KitchenListItem(ApiModel):
    id: str
    name: str
    description: Optional[str] = None
    logo: Optional[str] = None
    address: Optional[str] = None
    menu_item_count: int = 0
    order_count: int = 0


class KitchenDetail(KitchenOut):
    menu_items: List[MenuItemOut] = []
    order_count: int = 0


class OwnedKitchen(ApiModel):
    id: str
    name: str
    description: Optional[str] = None
    logo: Optional[str] = None


class UserProfileOut(UserOut):
    kitchens: List[OwnedKitchen] = []
    order_count: int = 0


class MenuStats(ApiModel):
    total_items: int
    average_price: float


class KitchenDashboardOut(ApiModel):
    kitchen: KitchenDetail
    recent_orders: List[KitchenOrderOut]
    menu_stats: MenuStats


# =============================================================================
# RESULT SCHEMAS
# =============================================================================

class PlaceOrderResponse(ApiModel):
    """``{success, orderId, order}`` or ``{success: false, error}``."""
    success: bool
    order_id: Optional[str] = None
    order: Optional[OrderDetailOut] = None
    error: Optional[str] = None


class UserOrderListResponse(ApiModel):
    success: bool
    orders: List[UserOrderOut] = []
    error: Optional[str] = None


class KitchenOrderListResponse(ApiModel):
    success: bool
    orders: List[KitchenOrderOut] = []
    error: Optional[str] = None


class OrderResponse(ApiModel):
    """Status update and single-order lookups."""
    success: bool
    order: Optional[OrderDetailOut] = None
    error: Optional[str] = None


class MenuItemResponse(ApiModel):
    success: bool
    menu_item: Optional[MenuItemOut] = None
    error: Optional[str] = None


class KitchenResponse(ApiModel):
    success: bool
    kitchen: Optional[KitchenOut] = None
    error: Optional[str] = None


class SuccessResponse(ApiModel):
    success: bool
    error: Optional[str] = None


class AuthSessionResponse(ApiModel):
    success: bool
    access_token: Optional[str] = None
    user: Optional[UserOut] = None
    error: Optional[str] = None


class ErrorResponse(ApiModel):
    """Standard error response."""
    success: bool = False
    error: str


class HealthResponse(ApiModel):
    """Health check response."""
    status: str
    database: str
    auth_service: str
    realtime: str
    cache: str
    notification_service: str
    timestamp: datetime
