"""
FastAPI Application Entry Point

Khabee - cloud-kitchen food ordering.

Endpoints:
    - POST /auth/otp, /auth/verify, /auth/logout: Phone sign-in
    - GET /api/me: Current user profile
    - GET /api/kitchens[/{id}]: Kitchen list and kitchen menu
    - PATCH /api/kitchens/{id}, POST /api/kitchens/{id}/menu,
      PATCH|DELETE /api/menu-items/{id}: Owner menu management
    - GET /api/kitchens/{id}/dashboard, /api/kitchens/{id}/orders: Owner views
    - POST /api/orders: Checkout
    - GET /api/orders[/{id}]: Customer orders
    - PATCH /api/orders/{id}/status: Kitchen status updates
    - WS /ws/kitchens/{id}/orders, /ws/orders/{id}: Live order views
    - GET /login, /cart, /orders, /dashboard, /kitchen/{id}: Pages
    - GET /health: System health check
"""

import asyncio
import sys
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlencode
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, Request, Response, WebSocket, WebSocketDisconnect
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy import text
from starlette.concurrency import run_in_threadpool

# Windows-specific event loop policy
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Internal imports
from khabee.core.config import get_settings, setup_logging
from khabee.core.errors import AppError, AuthError, NotFoundError
from khabee.database import get_db, get_session_factory, init_db, engine
from khabee.schemas import (
    ApiModel,
    AuthSessionResponse,
    ErrorResponse,
    HealthResponse,
    KitchenDashboardOut,
    KitchenDetail,
    KitchenListItem,
    KitchenOrderListResponse,
    KitchenResponse,
    KitchenUpdate,
    MenuItemCreate,
    MenuItemResponse,
    MenuItemUpdate,
    OrderResponse,
    OrderStatusUpdate,
    OtpRequest,
    OtpVerifyRequest,
    PlaceOrderRequest,
    PlaceOrderResponse,
    SuccessResponse,
    UserOrderListResponse,
    UserOut,
    UserProfileOut,
)
from khabee.services import kitchens as kitchen_service
from khabee.services.auth import AuthUser, BaseAuthProvider, get_auth_provider
from khabee.services.cache import BasePageCache, get_page_cache
from khabee.services.notifications import get_notification_service
from khabee.services.orders import (
    get_kitchen_orders,
    get_order,
    get_user_orders,
    place_order,
    status_badge,
    status_label,
    update_order_status,
)
from khabee.services.realtime import BaseChangeFeed, LiveOrderView, get_change_feed, topics
from khabee.services.users import ensure_user_profile, get_user_profile

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)

# Template configuration
BASE_DIR = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))
templates.env.filters["status_badge"] = status_badge
templates.env.filters["status_label"] = status_label
templates.env.globals["currency"] = settings.currency_symbol
templates.env.globals["cart_storage_key"] = settings.cart_storage_key

# Paths that need a signed-in user before the page is served
PROTECTED_ROUTES = {"/cart", "/orders", "/dashboard"}
PROTECTED_PREFIXES = ("/orders/", "/kitchen/")


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    # Startup
    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    await init_db()
    logger.info("✅ Database initialized")

    logger.info(f"✅ Auth Provider: {get_auth_provider().provider_name}")
    logger.info(f"✅ Change-Feed: {get_change_feed().provider_name}")
    logger.info(f"✅ View Cache: {get_page_cache().provider_name}")
    logger.info(f"✅ Notifications: {get_notification_service().provider_name}")

    if settings.use_real_services:
        missing = settings.validate_production_config()
        if missing:
            logger.warning(f"⚠️ Missing production config: {missing}")

    logger.info("=" * 60)
    logger.info("✅ Application ready!")
    logger.info("=" * 60)

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    await get_change_feed().close()
    await engine.dispose()
    logger.info("✅ Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Cloud-kitchen food ordering: menus, checkout, "
        "and live order tracking for customers and kitchens."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def get_session_token(request: Request) -> Optional[str]:
    """Session token from the bearer header, else the session cookie."""
    authorization = request.headers.get("authorization", "")
    if authorization.lower().startswith("bearer "):
        return authorization[7:].strip() or None
    return request.cookies.get(settings.session_cookie_name)


async def get_current_user(
    request: Request,
    auth: BaseAuthProvider = Depends(get_auth_provider),
) -> Optional[AuthUser]:
    """The signed-in user, or None. Endpoints decide whether that is an error."""
    token = get_session_token(request)
    if not token:
        return None
    return await auth.get_user(token)


def respond(result: Any, schema: type[ApiModel]) -> JSONResponse:
    """Serialize a service result with its HTTP status."""
    body = schema.model_validate(result).model_dump(mode="json", by_alias=True)
    return JSONResponse(status_code=result.status_code, content=body)


def error_response(error: AppError, **extra: Any) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content={"success": False, "error": error.message, **extra},
    )


def is_protected_path(path: str) -> bool:
    return path in PROTECTED_ROUTES or path.startswith(PROTECTED_PREFIXES)


def login_redirect(path: Optional[str] = None) -> RedirectResponse:
    url = "/login"
    if path:
        url += "?" + urlencode({"redirect": path})
    return RedirectResponse(url=url, status_code=307)


# =============================================================================
# PROTECTED-ROUTE GATE
# =============================================================================

@app.middleware("http")
async def protected_route_gate(request: Request, call_next):
    """Send anonymous visitors of protected pages to the login page."""
    path = request.url.path
    if not is_protected_path(path):
        return await call_next(request)

    try:
        token = get_session_token(request)
        if not token:
            return login_redirect(path)

        user = await get_auth_provider().get_user(token)
        if user is None:
            return login_redirect(path)
    except Exception as e:
        logger.exception(f"Route gate authentication error: {e}")
        return login_redirect()

    request.state.user = user
    return await call_next(request)


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """API root with navigation links."""
    return {
        "message": f"🍛 Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "documentation": "/docs",
        "kitchens": "/api/kitchens",
        "health": "/health",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(
    db: AsyncSession = Depends(get_db),
    auth: BaseAuthProvider = Depends(get_auth_provider),
    feed: BaseChangeFeed = Depends(get_change_feed),
    cache: BasePageCache = Depends(get_page_cache),
) -> HealthResponse:
    """Verify all system components are operational."""

    db_status = "healthy"
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        db_status = f"unhealthy: {str(e)}"
        logger.error(f"Database health check failed: {e}")

    def component(ok: bool) -> str:
        return "healthy" if ok else "unhealthy"

    auth_status = component(await auth.health_check())
    realtime_status = component(await feed.health_check())
    cache_status = component(await cache.health_check())
    notification_status = component(
        await run_in_threadpool(get_notification_service().health_check)
    )

    overall = "operational" if all(
        s == "healthy"
        for s in [db_status, auth_status, realtime_status, cache_status, notification_status]
    ) else "degraded"

    return HealthResponse(
        status=overall,
        database=db_status,
        auth_service=auth_status,
        realtime=realtime_status,
        cache=cache_status,
        notification_service=notification_status,
        timestamp=datetime.now(),
    )


# =============================================================================
# AUTH ENDPOINTS
# =============================================================================

@app.post(
    "/auth/otp",
    response_model=SuccessResponse,
    tags=["Auth"],
    summary="Send a sign-in code",
)
async def request_otp(
    payload: OtpRequest,
    auth: BaseAuthProvider = Depends(get_auth_provider),
) -> JSONResponse:
    result = await auth.request_otp(payload.phone)
    if not result.success:
        return JSONResponse(
            status_code=502,
            content={"success": False, "error": result.error_message or "Could not send code"},
        )
    return JSONResponse(content={"success": True})


@app.post(
    "/auth/verify",
    response_model=AuthSessionResponse,
    responses={401: {"model": ErrorResponse}},
    tags=["Auth"],
    summary="Exchange a sign-in code for a session",
)
async def verify_otp(
    payload: OtpVerifyRequest,
    db: AsyncSession = Depends(get_db),
    auth: BaseAuthProvider = Depends(get_auth_provider),
) -> JSONResponse:
    session = await auth.verify_otp(payload.phone, payload.code)
    if session is None:
        return error_response(AuthError("Invalid or expired code"))

    user = await ensure_user_profile(db, session.user.id, session.user.phone or payload.phone)
    logger.info(f"User {user.id} signed in")

    body = AuthSessionResponse(
        success=True,
        access_token=session.access_token,
        user=UserOut.model_validate(user),
    ).model_dump(mode="json", by_alias=True)
    response = JSONResponse(content=body)
    response.set_cookie(
        settings.session_cookie_name,
        session.access_token,
        max_age=session.expires_in,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
    return response


@app.post("/auth/logout", response_model=SuccessResponse, tags=["Auth"])
async def logout() -> JSONResponse:
    response = JSONResponse(content={"success": True})
    response.delete_cookie(settings.session_cookie_name)
    return response


@app.get(
    "/api/me",
    response_model=UserProfileOut,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    tags=["Users"],
)
async def current_profile(
    db: AsyncSession = Depends(get_db),
    user: Optional[AuthUser] = Depends(get_current_user),
) -> Any:
    if user is None:
        return error_response(AuthError())

    profile = await get_user_profile(db, user.id)
    if profile is None:
        return error_response(NotFoundError("Profile not found"))
    return JSONResponse(content=profile.model_dump(mode="json", by_alias=True))


# =============================================================================
# KITCHEN ENDPOINTS
# =============================================================================

@app.get(
    "/api/kitchens",
    response_model=list[KitchenListItem],
    tags=["Kitchens"],
)
async def list_kitchens(
    db: AsyncSession = Depends(get_db),
    cache: BasePageCache = Depends(get_page_cache),
) -> JSONResponse:
    kitchens = await kitchen_service.list_kitchens(db, cache=cache)
    return JSONResponse(content=[k.model_dump(mode="json", by_alias=True) for k in kitchens])


@app.get(
    "/api/kitchens/{kitchen_id}",
    response_model=KitchenDetail,
    responses={404: {"model": ErrorResponse}},
    tags=["Kitchens"],
)
async def get_kitchen(
    kitchen_id: str,
    db: AsyncSession = Depends(get_db),
    cache: BasePageCache = Depends(get_page_cache),
) -> JSONResponse:
    kitchen = await kitchen_service.get_kitchen_with_menu(db, kitchen_id, cache=cache)
    if kitchen is None:
        return error_response(NotFoundError("Kitchen not found"))
    return JSONResponse(content=kitchen.model_dump(mode="json", by_alias=True))


@app.patch(
    "/api/kitchens/{kitchen_id}",
    response_model=KitchenResponse,
    tags=["Kitchens"],
)
async def update_kitchen(
    kitchen_id: str,
    payload: KitchenUpdate,
    db: AsyncSession = Depends(get_db),
    cache: BasePageCache = Depends(get_page_cache),
    user: Optional[AuthUser] = Depends(get_current_user),
) -> JSONResponse:
    result = await kitchen_service.update_kitchen_profile(db, kitchen_id, payload, user, cache=cache)
    return respond(result, KitchenResponse)


@app.post(
    "/api/kitchens/{kitchen_id}/menu",
    response_model=MenuItemResponse,
    status_code=201,
    tags=["Kitchens"],
)
async def add_menu_item(
    kitchen_id: str,
    payload: MenuItemCreate,
    db: AsyncSession = Depends(get_db),
    cache: BasePageCache = Depends(get_page_cache),
    user: Optional[AuthUser] = Depends(get_current_user),
) -> JSONResponse:
    result = await kitchen_service.add_menu_item(db, kitchen_id, payload, user, cache=cache)
    return respond(result, MenuItemResponse)


@app.patch(
    "/api/menu-items/{menu_item_id}",
    response_model=MenuItemResponse,
    tags=["Kitchens"],
)
async def update_menu_item(
    menu_item_id: str,
    payload: MenuItemUpdate,
    db: AsyncSession = Depends(get_db),
    cache: BasePageCache = Depends(get_page_cache),
    user: Optional[AuthUser] = Depends(get_current_user),
) -> JSONResponse:
    result = await kitchen_service.update_menu_item(db, menu_item_id, payload, user, cache=cache)
    return respond(result, MenuItemResponse)


@app.delete(
    "/api/menu-items/{menu_item_id}",
    response_model=SuccessResponse,
    tags=["Kitchens"],
)
async def delete_menu_item(
    menu_item_id: str,
    db: AsyncSession = Depends(get_db),
    cache: BasePageCache = Depends(get_page_cache),
    user: Optional[AuthUser] = Depends(get_current_user),
) -> JSONResponse:
    result = await kitchen_service.delete_menu_item(db, menu_item_id, user, cache=cache)
    return respond(result, SuccessResponse)


@app.get(
    "/api/kitchens/{kitchen_id}/dashboard",
    response_model=KitchenDashboardOut,
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
    tags=["Kitchens"],
)
async def kitchen_dashboard(
    kitchen_id: str,
    db: AsyncSession = Depends(get_db),
    user: Optional[AuthUser] = Depends(get_current_user),
) -> JSONResponse:
    try:
        dashboard = await kitchen_service.get_kitchen_dashboard(db, kitchen_id, user)
    except AppError as e:
        return error_response(e)
    return JSONResponse(content=dashboard.model_dump(mode="json", by_alias=True))


@app.get(
    "/api/kitchens/{kitchen_id}/orders",
    response_model=KitchenOrderListResponse,
    tags=["Orders"],
)
async def list_kitchen_orders(
    kitchen_id: str,
    db: AsyncSession = Depends(get_db),
    user: Optional[AuthUser] = Depends(get_current_user),
) -> JSONResponse:
    if user is None:
        return error_response(AuthError(), orders=[])
    result = await get_kitchen_orders(db, kitchen_id, actor=user)
    return respond(result, KitchenOrderListResponse)


# =============================================================================
# ORDER ENDPOINTS
# =============================================================================

@app.post(
    "/api/orders",
    response_model=PlaceOrderResponse,
    tags=["Orders"],
    summary="Place Order (Checkout)",
)
async def create_order(
    payload: PlaceOrderRequest,
    db: AsyncSession = Depends(get_db),
    cache: BasePageCache = Depends(get_page_cache),
    feed: BaseChangeFeed = Depends(get_change_feed),
    user: Optional[AuthUser] = Depends(get_current_user),
) -> JSONResponse:
    """
    Turn a cart into an order.

    Prices are taken from the submitted items; the order total is
    subtotal + delivery fee + tax on the subtotal.
    """
    result = await place_order(db, user, payload, cache=cache, feed=feed)
    return respond(result, PlaceOrderResponse)


@app.get(
    "/api/orders",
    response_model=UserOrderListResponse,
    tags=["Orders"],
    summary="List My Orders",
)
async def list_my_orders(
    db: AsyncSession = Depends(get_db),
    user: Optional[AuthUser] = Depends(get_current_user),
) -> JSONResponse:
    if user is None:
        return error_response(AuthError(), orders=[])
    result = await get_user_orders(db, user.id)
    return respond(result, UserOrderListResponse)


@app.get(
    "/api/orders/{order_id}",
    response_model=OrderResponse,
    tags=["Orders"],
)
async def get_single_order(
    order_id: str,
    db: AsyncSession = Depends(get_db),
    user: Optional[AuthUser] = Depends(get_current_user),
) -> JSONResponse:
    result = await get_order(db, order_id, user)
    return respond(result, OrderResponse)


@app.patch(
    "/api/orders/{order_id}/status",
    response_model=OrderResponse,
    tags=["Orders"],
    summary="Update Order Status (Kitchen Owner)",
)
async def change_status(
    order_id: str,
    payload: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
    cache: BasePageCache = Depends(get_page_cache),
    feed: BaseChangeFeed = Depends(get_change_feed),
    user: Optional[AuthUser] = Depends(get_current_user),
) -> JSONResponse:
    result = await update_order_status(db, order_id, payload.status, user, cache=cache, feed=feed)
    return respond(result, OrderResponse)


# =============================================================================
# LIVE ORDER FEEDS
# =============================================================================

async def websocket_user(
    websocket: WebSocket,
    auth: BaseAuthProvider,
) -> Optional[AuthUser]:
    """Browsers cannot set headers on WebSockets: accept ?token= or the cookie."""
    token = websocket.query_params.get("token") or websocket.cookies.get(settings.session_cookie_name)
    if not token:
        return None
    return await auth.get_user(token)


async def serve_live_view(websocket: WebSocket, view: LiveOrderView) -> None:
    """Keep a live view mounted for as long as the socket stays open."""
    await view.mount()
    await websocket.send_json({"type": "status", "connected": view.is_connected})
    try:
        while True:
            # Clients only ping; anything they send is ignored
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug(f"Live view client left {view.topic}")
    finally:
        await view.unmount()


@app.websocket("/ws/kitchens/{kitchen_id}/orders")
async def kitchen_orders_feed(
    websocket: WebSocket,
    kitchen_id: str,
    auth: BaseAuthProvider = Depends(get_auth_provider),
    feed: BaseChangeFeed = Depends(get_change_feed),
    session_factory: async_sessionmaker = Depends(get_session_factory),
) -> None:
    """Push the kitchen's order list whenever one of its orders changes."""
    user = await websocket_user(websocket, auth)
    await websocket.accept()

    async with session_factory() as db:
        check = await get_kitchen_orders(db, kitchen_id, actor=user) if user else None
    if check is None or not check.success:
        await websocket.send_json({
            "type": "error",
            "error": check.error if check else AuthError.default_message,
        })
        await websocket.close(code=1008)
        return

    async def fetch() -> dict:
        async with session_factory() as db:
            result = await get_kitchen_orders(db, kitchen_id)
        return KitchenOrderListResponse.model_validate(result).model_dump(mode="json", by_alias=True)

    async def push(snapshot: dict) -> None:
        await websocket.send_json({"type": "snapshot", "data": snapshot})

    view = LiveOrderView(feed, topics.kitchen_orders(kitchen_id), fetch, on_update=push)
    await serve_live_view(websocket, view)


@app.websocket("/ws/orders/{order_id}")
async def single_order_feed(
    websocket: WebSocket,
    order_id: str,
    auth: BaseAuthProvider = Depends(get_auth_provider),
    feed: BaseChangeFeed = Depends(get_change_feed),
    session_factory: async_sessionmaker = Depends(get_session_factory),
) -> None:
    """Push one order every time it changes."""
    user = await websocket_user(websocket, auth)
    await websocket.accept()

    async def fetch() -> dict:
        async with session_factory() as db:
            result = await get_order(db, order_id, user)
        return OrderResponse.model_validate(result).model_dump(mode="json", by_alias=True)

    first = await fetch()
    if not first["success"]:
        await websocket.send_json({"type": "error", "error": first["error"]})
        await websocket.close(code=1008)
        return

    async def push(snapshot: dict) -> None:
        await websocket.send_json({"type": "snapshot", "data": snapshot})

    view = LiveOrderView(feed, topics.single_order(order_id), fetch, on_update=push)
    await serve_live_view(websocket, view)


# =============================================================================
# PAGES
# =============================================================================

@app.get("/login", response_class=HTMLResponse, tags=["Pages"])
async def login_page(request: Request, redirect: str = "/") -> HTMLResponse:
    # Only same-site paths are followed after sign-in
    target = redirect if redirect.startswith("/") and not redirect.startswith("//") else "/"
    return templates.TemplateResponse(request, "login.html", {"redirect": target})


@app.get("/cart", response_class=HTMLResponse, tags=["Pages"])
async def cart_page(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(request, "cart.html", {})


@app.get("/orders", response_class=HTMLResponse, tags=["Pages"])
async def orders_page(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> HTMLResponse:
    result = await get_user_orders(db, request.state.user.id)
    return templates.TemplateResponse(
        request,
        "orders.html",
        {"title": "My orders", "result": result},
    )


@app.get("/orders/{order_id}", response_class=HTMLResponse, tags=["Pages"])
async def order_page(
    request: Request,
    order_id: str,
    db: AsyncSession = Depends(get_db),
) -> HTMLResponse:
    result = await get_order(db, order_id, request.state.user)
    return templates.TemplateResponse(
        request,
        "order.html",
        {"result": result},
        status_code=result.status_code,
    )


@app.get("/dashboard", response_class=HTMLResponse, tags=["Pages"])
async def dashboard_page(
    request: Request,
    kitchen: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
) -> HTMLResponse:
    """Kitchen owner's live order board."""
    user = request.state.user
    profile = await get_user_profile(db, user.id)
    owned = profile.kitchens if profile else []

    selected = next((k for k in owned if k.id == kitchen), owned[0] if owned else None)
    result = await get_kitchen_orders(db, selected.id, actor=user) if selected else None

    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {"kitchens": owned, "selected": selected, "result": result},
    )


@app.get("/kitchen/{kitchen_id}", response_class=HTMLResponse, tags=["Pages"])
async def kitchen_page(
    request: Request,
    kitchen_id: str,
    db: AsyncSession = Depends(get_db),
    cache: BasePageCache = Depends(get_page_cache),
) -> Response:
    kitchen = await kitchen_service.get_kitchen_with_menu(db, kitchen_id, cache=cache)
    if kitchen is None:
        return HTMLResponse("<h1>Kitchen not found</h1>", status_code=404)
    return templates.TemplateResponse(request, "kitchen.html", {"kitchen": kitchen})


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies use the same ``{success, error}`` shape as every other failure."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=422,
        content={"success": False, "error": f"{field}: {message}" if field else message},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": str(exc) if settings.debug else "An unexpected error occurred",
        },
    )


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "khabee.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
