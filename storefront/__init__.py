"""Members-only drop storefront: cart, checkout handoff and drop display."""

__version__ = "1.0.0"
