"""Description extraction and length capping."""

import re
from typing import Optional

MAX_DESCRIPTION_LENGTH = 500
README_EXCERPT_LENGTH = 400

_SENTENCE_END = re.compile(r"[.!?](?=\s|$)")


def truncate_text(text: str, limit: int = MAX_DESCRIPTION_LENGTH) -> str:
    """Cap `text` at `limit` characters on a natural boundary.

    The last sentence end past the halfway mark wins; otherwise the cut
    falls on the last word boundary, and only a single unbroken word is
    hard-cut.
    """
    text = (text or "").strip()
    if len(text) <= limit:
        return text

    window = text[:limit]
    sentence_ends = [m.end() for m in _SENTENCE_END.finditer(window)]
    if sentence_ends and sentence_ends[-1] > limit * 0.5:
        return window[: sentence_ends[-1]].strip()

    # Boundary at `limit` itself counts when the next char is whitespace.
    if text[limit].isspace():
        return window.rstrip()
    space = window.rfind(" ")
    if space > 0:
        return window[:space].rstrip()
    return window


def clean_readme(readme: str) -> str:
    """Strip markup that never belongs in a one-paragraph description."""
    text = re.sub(r"```[\s\S]*?(?:```|$)", " ", readme)
    text = re.sub(r"<[^>]+>", " ", text)
    text = re.sub(r"^#\s+.+?\n+", "", text, count=1, flags=re.MULTILINE)
    text = re.sub(r"^>\s*.*$", "", text, flags=re.MULTILINE)
    text = re.sub(r"^\s*\|.*\|\s*$", "", text, flags=re.MULTILINE)
    text = re.sub(r"\[!\[[^\]]*\]\([^)]*\)\]\([^)]*\)", "", text)
    text = re.sub(r"!\[[^\]]*\]\([^)]+\)", "", text)
    text = re.sub(r"\[([^\]]+)\]\([^)]+\)", r"\1", text)
    return text.strip()


def description_from_readme(readme: Optional[str], max_len: int = README_EXCERPT_LENGTH) -> str:
    """First paragraph-ish block of a README, flattened to one line."""
    if not readme:
        return ""
    text = clean_readme(readme.replace("\r\n", "\n"))
    blocks = re.split(r"\n##\s|\n\s*\n\s*\n", text)
    first_block = next((b for b in blocks if re.sub(r"[*_`#\s]", "", b)), "")
    first_block = re.sub(r"[*_`#]", "", first_block)
    if not first_block.strip():
        return ""
    flat = re.sub(r"\s{2,}", " ", re.sub(r"\n+", " ", first_block)).strip()
    return truncate_text(flat, max_len)


def infer_description(
    fm_description: str,
    readme: Optional[str],
    repo_description: str,
    display_name: str,
) -> str:
    description = (
        (fm_description or "").strip()
        or description_from_readme(readme)
        or (repo_description or "").strip()
        or f"{display_name} - AI agent skill"
    )
    return truncate_text(description, MAX_DESCRIPTION_LENGTH)
