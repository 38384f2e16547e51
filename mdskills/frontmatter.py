"""Split a leading `---` metadata block from a markdown body.

This is deliberately not a YAML parser. Only flat `key: value` lines are
read, plus dash-list syntax for `tags` and `compatibility`. Multi-line
scalars, nested maps and anchors degrade to missing fields.
"""

import re
from typing import Dict, List

from .models import Frontmatter

_BLOCK = re.compile(r"^---\n([\s\S]*?)\n---\n?([\s\S]*)$")
_KEY_VALUE = re.compile(r"^(\w[\w-]*):\s*(.+)$")
_LIST_ITEM = re.compile(r"- (.+)")
_QUOTES = re.compile(r"^[\"']|[\"']$")


def _list_field(block: str, raw: Dict[str, str], key: str) -> List[str]:
    listing = re.search(rf"^{key}:\s*\n((?:\s+-\s+.+\n?)*)", block, re.MULTILINE)
    if listing and listing.group(1):
        return [_QUOTES.sub("", item.strip()) for item in _LIST_ITEM.findall(listing.group(1))]
    value = raw.get(key, "")
    if value.startswith("[") and value.endswith("]"):
        value = value[1:-1]
    return [_QUOTES.sub("", part.strip()) for part in value.split(",") if part.strip()]


def parse_frontmatter(text: str) -> Frontmatter:
    """Parse `text`; input without a leading block comes back as the body."""
    if not text:
        return Frontmatter(body=text or "")

    normalized = text.replace("\r\n", "\n")
    match = _BLOCK.match(normalized)
    if not match:
        return Frontmatter(body=text)

    block, body = match.group(1), match.group(2)

    raw: Dict[str, str] = {}
    for line in block.split("\n"):
        kv = _KEY_VALUE.match(line)
        if kv:
            raw[kv.group(1)] = _QUOTES.sub("", kv.group(2).strip())

    return Frontmatter(
        raw=raw,
        tags=_list_field(block, raw, "tags"),
        compatibility=_list_field(block, raw, "compatibility"),
        body=body,
    )


def render_frontmatter(raw: Dict[str, str], body: str = "") -> str:
    """Serialize flat key/value pairs back into a `---` block."""
    lines = ["---"]
    lines.extend(f"{key}: {value}" for key, value in raw.items())
    lines.append("---")
    rendered = "\n".join(lines) + "\n"
    if body:
        rendered += body
    return rendered
