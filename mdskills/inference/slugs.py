"""Slug generation."""

import re

# Directory names too generic to identify a skill on their own.
GENERIC_DIR_NAMES = {"skills", ".claude", "src", "lib", "root", "plugins"}

_ENTRY_FILES = {"skill.md", "readme.md", "agents.md", ".cursorrules"}


def slugify(text: str) -> str:
    """Lowercase, hyphen-separated and trimmed. slugify(slugify(x)) == slugify(x)."""
    slug = re.sub(r"[^a-z0-9-]", "-", (text or "").lower())
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def generate_slug(repo: str, skill_path: str) -> str:
    """Slug from the directory holding the skill file, else the repo name."""
    parts = [p for p in (skill_path or "").split("/") if p]
    if parts and parts[-1].lower() in _ENTRY_FILES:
        parts = parts[:-1]
    elif parts and parts[-1].lower().endswith(".mdc"):
        parts[-1] = parts[-1][: -len(".mdc")]

    dir_name = parts[-1] if parts else ""
    if not dir_name or dir_name.lower() in GENERIC_DIR_NAMES:
        dir_name = repo

    return slugify(dir_name) or slugify(repo)
