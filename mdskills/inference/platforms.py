"""Client (platform) detection for listings."""

import re
from typing import List, Optional

from ..models import Frontmatter

# Clients that consume plain markdown instructions (SKILL.md, AGENTS.md, ...).
MARKDOWN_CLIENTS = [
    "claude-code", "claude-desktop", "cursor", "vscode-copilot", "windsurf",
    "continue-dev", "codex", "gemini-cli", "amp", "roo-code", "goose",
    "opencode", "trae", "qodo", "command-code",
]

# Clients that speak the Model Context Protocol.
MCP_CLIENTS = [
    "claude-code", "claude-desktop", "cursor", "vscode-copilot", "windsurf",
    "continue-dev", "gemini-cli", "amp", "roo-code", "goose",
]

# Formats that only work with one family of clients.
FORMAT_SPECIFIC_CLIENTS = {
    "cursorrules": ["cursor"],
    "mdc": ["cursor"],
    "claude_md": ["claude-code", "claude-desktop"],
    "copilot_instructions": ["vscode-copilot", "github"],
    "gemini_md": ["gemini", "gemini-cli"],
    "windsurf_rules": ["windsurf"],
    "clinerules": ["roo-code"],
}

# Extra clients added when the content mentions them.
MENTIONED_CLIENTS = [
    (re.compile(r"chatgpt", re.IGNORECASE), "chatgpt"),
    (re.compile(r"grok", re.IGNORECASE), "grok"),
    (re.compile(r"replit", re.IGNORECASE), "replit"),
    (re.compile(r"firebender", re.IGNORECASE), "firebender"),
    (re.compile(r"spring.ai", re.IGNORECASE), "spring-ai"),
    (re.compile(r"databricks", re.IGNORECASE), "databricks"),
    (re.compile(r"letta", re.IGNORECASE), "letta"),
    (re.compile(r"factory", re.IGNORECASE), "factory"),
]

PRIMARY_CLIENT = "claude-code"


def normalize_client(name: str) -> str:
    return re.sub(r"\s+", "-", name.strip().lower())


def _dedupe(items: List[str]) -> List[str]:
    return list(dict.fromkeys(item for item in items if item))


def clients_for_listing(artifact_type: Optional[str], format_standard: Optional[str]) -> List[str]:
    """Default client list for a listing, ignoring what its content says."""
    if format_standard and format_standard in FORMAT_SPECIFIC_CLIENTS:
        return list(FORMAT_SPECIFIC_CLIENTS[format_standard])
    if artifact_type == "mcp_server":
        return list(MCP_CLIENTS)
    return list(MARKDOWN_CLIENTS)


def detect_platforms(
    fm: Frontmatter,
    content: str,
    readme: Optional[str] = None,
    artifact_type: Optional[str] = None,
    format_standard: Optional[str] = None,
) -> List[str]:
    if fm.compatibility:
        return _dedupe([normalize_client(c) for c in fm.compatibility])

    if (format_standard and format_standard in FORMAT_SPECIFIC_CLIENTS) or artifact_type == "mcp_server":
        return clients_for_listing(artifact_type, format_standard)

    platforms = list(MARKDOWN_CLIENTS)
    haystack = f"{content}\n{readme or ''}"
    for pattern, client in MENTIONED_CLIENTS:
        if pattern.search(haystack):
            platforms.append(client)
    return _dedupe(platforms)


def client_slugs_for(platforms: List[str]) -> List[str]:
    """Platforms to link, with the primary client always first."""
    slugs = _dedupe(platforms)
    if PRIMARY_CLIENT not in slugs:
        slugs.insert(0, PRIMARY_CLIENT)
    return slugs
