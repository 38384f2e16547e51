"""Detail view widget - shows one marketplace listing."""

from typing import Any, Dict, Optional

from rich.panel import Panel
from rich.text import Text
from textual.containers import VerticalScroll
from textual.widgets import Static

from ...format import ACCENT, listing_detail


class DetailView(VerticalScroll):
    """Panel showing the full details of the selected listing."""

    DEFAULT_CSS = """
    DetailView {
        width: 100%;
        height: 100%;
        padding: 1;
    }
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.current_listing: Optional[Dict[str, Any]] = None

    def compose(self):
        yield Static(id="detail-content")

    def show_listing(self, listing: Dict[str, Any]) -> None:
        self.current_listing = listing
        self.query_one("#detail-content", Static).update(self._build_content(listing))

    def clear(self, message: Optional[str] = None) -> None:
        """Clear the detail view."""
        self.current_listing = None
        welcome = Text()
        welcome.append("◉ ", style=ACCENT)
        welcome.append(message or "Select a skill to view details", style="dim italic")
        self.query_one("#detail-content", Static).update(welcome)

    def _build_content(self, listing: Dict[str, Any]) -> Panel:
        return Panel(
            listing_detail(listing),
            title=listing.get("slug", ""),
            border_style=ACCENT,
            padding=(1, 2),
        )
