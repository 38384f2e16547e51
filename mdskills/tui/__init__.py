"""Interactive marketplace browser."""

from .app import MarketplaceBrowser

__all__ = ["MarketplaceBrowser"]
