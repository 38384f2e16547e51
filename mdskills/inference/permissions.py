"""Keyword-based permission inference.

The flags are a display hint for readers of a listing. They are computed
from prose and have a high false-positive rate, so nothing may rely on
them for access control.
"""

import re

from ..models import Permissions

PERMISSION_PATTERNS = {
    "filesystem_read": re.compile(r"read|file|fs|path|directory|folder", re.IGNORECASE),
    "filesystem_write": re.compile(r"write|create|save|output|generate.*file", re.IGNORECASE),
    "shell_exec": re.compile(r"exec|command|shell|bash|terminal|npm|npx|pip", re.IGNORECASE),
    "network_access": re.compile(r"fetch|http|api|url|request|download|curl", re.IGNORECASE),
    "git_write": re.compile(r"git push|git commit|git add", re.IGNORECASE),
}


def detect_permissions(content: str) -> Permissions:
    text = content or ""
    return Permissions(**{name: bool(p.search(text)) for name, p in PERMISSION_PATTERNS.items()})
