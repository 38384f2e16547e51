"""Rich renderables shared by the CLI and the interactive browser."""

from typing import Any, Dict, Iterable, List

from rich.table import Table
from rich.text import Text

SITE_URL = "https://www.mdskills.ai"
ACCENT = "#DA7756"

TYPE_LABELS = {
    "skill_pack": "Skill",
    "mcp_server": "MCP Server",
    "workflow_pack": "Workflow",
    "ruleset": "Rules",
    "openapi_action": "OpenAPI",
    "extension": "Extension",
    "template_bundle": "Starter Kit",
}


def format_type(artifact_type: str) -> str:
    return TYPE_LABELS.get(artifact_type or "", artifact_type or "Skill")


def active_permissions(skill: Dict[str, Any]) -> List[str]:
    """Permission names set on a listing, from either API or column layout."""
    perms = skill.get("permissions")
    if isinstance(perms, dict):
        return [key.replace("_", " ") for key, value in perms.items() if value]
    return [
        key[len("perm_"):].replace("_", " ")
        for key, value in skill.items()
        if key.startswith("perm_") and value
    ]


def listings_table(skills: Iterable[Dict[str, Any]]) -> Table:
    table = Table(box=None, pad_edge=False, padding=(0, 2), show_edge=False)
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Owner", style="dim")
    table.add_column("Type")
    table.add_column("Stars", justify="right")
    for skill in skills:
        stars = skill.get("github_stars")
        table.add_row(
            skill.get("name") or skill.get("slug", ""),
            skill.get("owner") or "",
            format_type(skill.get("artifact_type")),
            str(stars) if stars else Text("-", style="dim"),
        )
    return table


def listing_detail(skill: Dict[str, Any]) -> Text:
    """Multi-line description of one listing, ending with install hints."""
    text = Text()
    text.append(f"{skill.get('name', '')}\n", style=f"bold {ACCENT}")
    text.append(f"by @{skill.get('owner', '')} | {format_type(skill.get('artifact_type'))}\n\n", style="dim")

    if skill.get("description"):
        text.append(f"{skill['description']}\n\n")

    def field(label: str, value: Any) -> None:
        text.append(f"{label + ':':<13}", style="dim")
        text.append(f"{value}\n")

    category = skill.get("category")
    if isinstance(category, dict) and category.get("name"):
        field("Category", category["name"])
    if skill.get("platforms"):
        field("Platforms", ", ".join(skill["platforms"]))
    if skill.get("tags"):
        field("Tags", ", ".join(skill["tags"]))
    if skill.get("license"):
        field("License", skill["license"])
    if skill.get("github_url"):
        field("GitHub", skill["github_url"])
    if skill.get("github_stars"):
        field("Stars", skill["github_stars"])
    perms = active_permissions(skill)
    if perms:
        field("Permissions", ", ".join(perms))

    text.append("\n")
    text.append(f"{'Install:':<13}", style="dim")
    text.append(f"npx mdskills install {skill.get('owner', '')}/{skill.get('slug', '')}\n", style="green")
    field("View", f"{SITE_URL}/skills/{skill.get('slug', '')}")
    return text


def banner() -> Text:
    text = Text()
    text.append("mdskills", style="bold")
    text.append(".ai - AI Skills Marketplace", style="dim")
    return text
