"""Listing List Widget - table of marketplace results"""

from typing import Any, Dict, List, Optional

from textual.message import Message
from textual.widgets import DataTable

from ...format import format_type


class ListingList(DataTable):
    """A DataTable showing one page of marketplace listings"""

    class ListingSelected(Message):
        """Sent when a listing row is chosen"""

        def __init__(self, listing: Dict[str, Any]) -> None:
            self.listing = listing
            super().__init__()

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.listings: List[Dict[str, Any]] = []

    def on_mount(self) -> None:
        """Set up the table columns"""
        self.add_columns("Name", "Owner", "Type", "Stars")
        self.cursor_type = "row"
        self.zebra_stripes = True

    def load_listings(self, listings: List[Dict[str, Any]]) -> None:
        self.listings = [item for item in listings if item.get("slug")]
        self.clear()
        for listing in self.listings:
            stars = listing.get("github_stars")
            self.add_row(
                listing.get("name") or listing["slug"],
                listing.get("owner") or "",
                format_type(listing.get("artifact_type")),
                str(stars) if stars else "-",
                key=listing["slug"],
            )

    def get_listing(self, slug: str) -> Optional[Dict[str, Any]]:
        for listing in self.listings:
            if listing.get("slug") == slug:
                return listing
        return None

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        """Handle row selection"""
        if event.row_key:
            listing = self.get_listing(str(event.row_key.value))
            if listing is not None:
                self.post_message(self.ListingSelected(listing))
