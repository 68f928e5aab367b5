"""Storefront Configuration"""

from typing import Optional
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    # Application
    app_name: str = "TRGC Storefront"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # Shopify Storefront API
    shopify_store_domain: str = "lovable-project-hxhh1.myshopify.com"
    shopify_api_version: str = "2025-07"
    shopify_storefront_token: str = ""
    checkout_channel: str = "online_store"

    # Supabase (auth, profiles, drops)
    supabase_url: str = "http://localhost:54321"
    supabase_anon_key: str = ""

    # Cart persistence: "file" keeps one directory per device, "memory" is process-local
    cart_storage: str = "file"
    storage_dir: str = ".trgc-storage"
    # Carts kept in memory before the least recently used are evicted
    max_active_carts: int = 1000

    # Where the shopper lands after the external checkout
    confirmation_path: str = "/thank-you"

    http_timeout: float = 30.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    @property
    def shopify_storefront_url(self) -> str:
        """GraphQL endpoint of the Storefront API"""
        return f"https://{self.shopify_store_domain}/api/{self.shopify_api_version}/graphql.json"

    @property
    def supabase_configured(self) -> bool:
        """Check if Supabase credentials are configured"""
        return bool(self.supabase_url and self.supabase_anon_key)

    def get_storage_dir(self) -> Optional[str]:
        """Directory for file-backed cart storage, None for in-memory storage"""
        if self.cart_storage == "memory":
            return None
        return self.storage_dir


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
