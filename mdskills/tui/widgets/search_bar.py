"""Search Bar Widget - marketplace query input"""

from textual.message import Message
from textual.widgets import Input


class SearchBar(Input):
    """Search input that queries the marketplace on Enter"""

    DEFAULT_CSS = """
    SearchBar {
        dock: top;
        width: 100%;
        margin-bottom: 1;
    }
    """

    class SearchSubmitted(Message):
        """Sent when a search is submitted"""

        def __init__(self, query: str) -> None:
            self.query = query
            super().__init__()

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("placeholder", "Search skills, press Enter...")
        super().__init__(*args, **kwargs)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.post_message(self.SearchSubmitted(event.value.strip()))

    def clear_search(self) -> None:
        """Clear the search input"""
        self.value = ""
