"""TUI widgets for the marketplace browser."""

from .detail_view import DetailView
from .listing_list import ListingList
from .search_bar import SearchBar

__all__ = ["DetailView", "ListingList", "SearchBar"]
