"""
Storefront Application

Backend for the members-only drop storefront: keeps each device's cart,
hands checkout off to Shopify and serves drop display data.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from .core.config import Settings, settings as default_settings
from .core.session import CartSessionManager, file_storage_factory, memory_storage_factory
from .routes import cart_router, checkout_router, drops_router, thank_you
from .routes.deps import DEVICE_COOKIE, resolve_device_id
from .services.checkout_return import CheckoutReturnReconciler
from .services.shopify import StorefrontClient
from .services.supabase import SupabaseClient

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(
    settings: Optional[Settings] = None,
    storefront_client: Optional[StorefrontClient] = None,
    supabase_client: Optional[SupabaseClient] = None,
    session_manager: Optional[CartSessionManager] = None,
) -> FastAPI:
    """Build the application; tests pass their own clients and registry"""
    settings = settings or default_settings

    if storefront_client is None:
        storefront_client = StorefrontClient(
            storefront_url=settings.shopify_storefront_url,
            storefront_token=settings.shopify_storefront_token,
            channel=settings.checkout_channel,
            timeout=settings.http_timeout,
        )

    if supabase_client is None and settings.supabase_configured:
        supabase_client = SupabaseClient(
            supabase_url=settings.supabase_url,
            anon_key=settings.supabase_anon_key,
            timeout=settings.http_timeout,
        )

    if session_manager is None:
        storage_dir = settings.get_storage_dir()
        session_manager = CartSessionManager(
            checkout_client=storefront_client,
            storage_factory=file_storage_factory(storage_dir) if storage_dir else memory_storage_factory(),
            max_stores=settings.max_active_carts,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events"""
        logger.info(f"{settings.app_name} starting up...")
        logger.info(f"Storefront API: {settings.shopify_storefront_url}")
        logger.info(f"Supabase configured: {supabase_client is not None}")
        yield
        logger.info(f"{settings.app_name} shutting down...")
        await storefront_client.close()
        if supabase_client:
            await supabase_client.close()

    app = FastAPI(
        title=settings.app_name,
        description="Members-only drop storefront: cart, checkout handoff and drops",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.sessions = session_manager
    app.state.supabase = supabase_client

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, restrict this
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def detect_checkout_return(request: Request, call_next):
        """Watch page navigations for a shopper coming back from checkout"""
        if request.method == "GET" and not request.url.path.startswith("/api"):
            device_id = resolve_device_id(
                request.cookies.get(DEVICE_COOKIE),
                request.headers.get("x-device-id"),
            )
            # Only devices with a cart already in memory; navigation never creates one
            if device_id and session_manager.has_store(device_id):
                store = session_manager.get_store(device_id)
                CheckoutReturnReconciler(store, settings.confirmation_path).on_navigate(request.url.path)
        return await call_next(request)

    app.include_router(cart_router)
    app.include_router(checkout_router)
    app.include_router(drops_router)
    app.add_api_route(settings.confirmation_path, thank_you, methods=["GET"], tags=["Checkout"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "storefront",
            "supabase_configured": supabase_client is not None,
            "active_carts": len(session_manager.stores),
        }

    return app


configure_logging(default_settings)
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug,
    )
