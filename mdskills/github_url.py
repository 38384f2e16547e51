"""Normalize GitHub URLs and owner/repo shorthand into a GitHubLocation."""

import re

from .models import GitHubLocation

_FULL_URL = re.compile(r"github\.com/([^/]+)/([^/]+?)(?:/tree/[^/]+(?:/(.+))?)?$")
_SHORTHAND = re.compile(r"^([^/\s]+)/([^/\s]+)$")
_MARKDOWN_FILE = re.compile(r"/[^/]+\.(?:md|mdc)$", re.IGNORECASE)
_RULES_FILE = re.compile(r"(?:^|/)(?:[^/]+\.mdc|\.cursorrules|AGENTS\.md)$", re.IGNORECASE)


class GitHubUrlError(ValueError):
    """Raised when a string is neither a GitHub URL nor owner/repo shorthand."""


def parse_github_url(url: str) -> GitHubLocation:
    """Parse `url` into owner, repo and optional subpath.

    Accepts:
      https://github.com/owner/repo
      https://github.com/owner/repo/tree/<branch>
      https://github.com/owner/repo/tree/<branch>/some/path
      https://github.com/owner/repo/blob/<branch>/some/path/SKILL.md
      github.com/owner/repo
      owner/repo

    A trailing `.git` or slash is ignored. `blob/` links are treated like
    `tree/` links, and a link to a markdown file resolves to its directory.
    Links to a rules file (`*.mdc`, `.cursorrules`, `AGENTS.md`) also keep
    the file itself in `file`.
    """
    cleaned = (url or "").strip()
    cleaned = re.sub(r"\.git$", "", cleaned)
    cleaned = cleaned.rstrip("/")
    cleaned = re.sub(r"\.git$", "", cleaned)
    cleaned = cleaned.replace("/blob/", "/tree/", 1)

    match = _FULL_URL.search(cleaned)
    if match:
        owner, repo, subpath = match.group(1), match.group(2), match.group(3)
        if subpath and _RULES_FILE.search(subpath):
            directory = subpath.rsplit("/", 1)[0] if "/" in subpath else None
            return GitHubLocation(owner=owner, repo=repo, subpath=directory, file=subpath)
        if subpath:
            subpath = _MARKDOWN_FILE.sub("", "/" + subpath).lstrip("/") or None
        return GitHubLocation(owner=owner, repo=repo, subpath=subpath)

    match = _SHORTHAND.match(cleaned)
    if match and "github.com" not in cleaned and ":" not in cleaned:
        return GitHubLocation(owner=match.group(1), repo=match.group(2))

    raise GitHubUrlError(f"Cannot parse GitHub URL: {url}")
