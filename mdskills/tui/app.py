"""Textual browser for the mdskills.ai marketplace"""

from typing import Any, Dict, List, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Footer, Header, Static

from ..api_client import MarketplaceClient, MarketplaceError
from ..format import format_type
from .widgets import DetailView, ListingList, SearchBar


class StatsPanel(Static):
    """One-line summary of the current result set."""

    DEFAULT_CSS = """
    StatsPanel {
        height: auto;
        padding: 0 1;
        color: $text-muted;
    }
    """

    def update_stats(self, listings: List[Dict[str, Any]], query: Optional[str] = None) -> None:
        by_type: Dict[str, int] = {}
        for listing in listings:
            label = format_type(listing.get("artifact_type"))
            by_type[label] = by_type.get(label, 0) + 1

        scope = f'"{query}"' if query else "popular"
        lines = [f"[#DA7756]◉[/#DA7756] {len(listings)} results for {scope}"]
        if by_type:
            lines.append("  │  ".join(f"{name}: {count}" for name, count in sorted(by_type.items())))
        self.update("\n".join(lines))


class MarketplaceBrowser(App):
    """Search, browse and inspect marketplace listings."""

    TITLE = "◉ mdskills"
    SUB_TITLE = "AI Skills Marketplace"

    CSS = """
    #sidebar {
        width: 45%;
        min-width: 40;
    }
    #detail-panel {
        width: 1fr;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("escape", "focus_list", "Focus List"),
        Binding("/", "focus_search", "Search"),
        Binding("r", "refresh", "Refresh"),
    ]

    def __init__(self, *args, **kwargs):
        self.client: MarketplaceClient = kwargs.pop("client", None) or MarketplaceClient()
        super().__init__(*args, **kwargs)
        self.query_text: Optional[str] = None
        self.listings: List[Dict[str, Any]] = []

    def compose(self) -> ComposeResult:
        yield Header()

        with Horizontal(id="main-container"):
            with Vertical(id="sidebar"):
                yield SearchBar(id="search")
                yield ListingList(id="listing-list")
                yield StatsPanel(id="stats")

            with Vertical(id="detail-panel"):
                yield DetailView(id="detail-view")

        yield Footer()

    def on_mount(self) -> None:
        self.notify("Loading skills...")
        self._load_listings()

    def on_unmount(self) -> None:
        self.client.close()

    def _load_listings(self) -> None:
        """Fetch the current result page and refresh every panel."""
        try:
            self.listings = self.client.fetch_skills(query=self.query_text, sort=None if self.query_text else "popular")
        except MarketplaceError as e:
            self.notify(str(e), severity="error")
            return

        listing_list = self.query_one("#listing-list", ListingList)
        listing_list.load_listings(self.listings)

        stats = self.query_one("#stats", StatsPanel)
        stats.update_stats(self.listings, self.query_text)

        detail_view = self.query_one("#detail-view", DetailView)
        if self.listings:
            detail_view.clear()
        else:
            detail_view.clear(message="No skills match this search.")

        self.notify(f"Loaded {len(self.listings)} skills")

    def on_search_bar_search_submitted(self, event: SearchBar.SearchSubmitted) -> None:
        self.query_text = event.query or None
        self._load_listings()

    def on_listing_list_listing_selected(self, event: ListingList.ListingSelected) -> None:
        """Show the full listing, falling back to the summary row."""
        listing = event.listing
        try:
            detail = self.client.fetch_skill_detail(listing["slug"])
        except MarketplaceError as e:
            self.notify(str(e), severity="warning")
            detail = None

        detail_view = self.query_one("#detail-view", DetailView)
        detail_view.show_listing(detail or listing)

    def action_quit(self) -> None:
        self.exit()

    def action_focus_search(self) -> None:
        self.query_one("#search", SearchBar).focus()

    def action_focus_list(self) -> None:
        self.query_one("#listing-list", ListingList).focus()

    def action_refresh(self) -> None:
        self.notify("Refreshing...")
        self._load_listings()
