"""Artifact-type and skill-type detection."""

import re
from typing import Dict, List, Optional, Tuple

# Frontmatter `type:` substrings, checked in order.
_FRONTMATTER_TYPES = [
    (("mcp",), "mcp_server"),
    (("rule",), "ruleset"),
    (("workflow",), "workflow_pack"),
    (("template", "starter"), "template_bundle"),
    (("extension", "tool"), "extension"),
]

_REPO_NAME_TYPES = [
    (re.compile(r"^mcp[-_]|[-_]mcp$|mcp[-_]server|mcp"), "mcp_server"),
    (re.compile(r"cursorrules|\.cursorrules"), "ruleset"),
    (re.compile(r"template|starter|scaffold"), "template_bundle"),
]

# Single-file rule formats, keyed by how the file name ends.
_RULES_FORMATS = [
    (".mdc", "mdc"),
    (".cursorrules", "cursorrules"),
    ("agents.md", "agents_md"),
]

_PLUGIN_TOPIC = re.compile(r"\bplugins?\b")
_CLAUDE_TOPIC = re.compile(r"\bclaude\b")
_PLUGIN_README = [
    re.compile(r"claude\s*code\s*plugin", re.IGNORECASE),
    re.compile(r"\.claude/.*plugin", re.IGNORECASE),
]


def detect_rules_format(path: Optional[str]) -> Optional[str]:
    """Format standard of a single rules file, or None for anything else."""
    name = (path or "").rsplit("/", 1)[-1].lower()
    for suffix, format_standard in _RULES_FORMATS:
        if name == suffix or (suffix.startswith(".") and name.endswith(suffix)):
            return format_standard
    return None


def detect_artifact_type(fm_raw: Dict[str, str], repo_name: str) -> str:
    """Classify from the frontmatter type field, then the repo name."""
    fm_type = (fm_raw.get("type") or fm_raw.get("artifact_type") or "").lower()
    if fm_type:
        for needles, artifact_type in _FRONTMATTER_TYPES:
            if any(needle in fm_type for needle in needles):
                return artifact_type

    lower = (repo_name or "").lower()
    for pattern, artifact_type in _REPO_NAME_TYPES:
        if pattern.search(lower):
            return artifact_type

    return "skill_pack"


def detect_skill_type(
    skill_path: str,
    topics: Optional[List[str]] = None,
    readme: Optional[str] = None,
) -> Tuple[str, bool]:
    """Return `(skill_type, has_plugin)`; plugin-shaped sources are `hybrid`."""
    if ".claude/" in skill_path or "plugin" in skill_path:
        return "hybrid", True

    topic_text = " ".join(topics or []).lower()
    if _PLUGIN_TOPIC.search(topic_text) and _CLAUDE_TOPIC.search(topic_text):
        return "hybrid", True

    if readme:
        head = readme[:2000]
        if any(pattern.search(head) for pattern in _PLUGIN_README):
            return "hybrid", True

    return "skill", False
