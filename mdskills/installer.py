"""Write marketplace listings into a project, and scaffold new skills."""

from pathlib import Path
from typing import Optional

from .frontmatter import render_frontmatter

SKILL_TEMPLATE_BODY = """
# {name}

{description}

## Usage

Describe how an AI agent should use this skill.

## Examples

Provide example prompts and expected behavior.
"""

FORMAT_PATHS = {
    "agents_md": "AGENTS.md",
    "claude_md": "CLAUDE.md",
    "cursorrules": ".cursorrules",
    "copilot_instructions": ".github/copilot-instructions.md",
    "gemini_md": "GEMINI.md",
    "clinerules": ".clinerules",
    "windsurf_rules": ".windsurf/rules",
}


class InstallError(Exception):
    """A listing could not be written to disk."""


def target_path(slug: str, format_standard: Optional[str]) -> str:
    """Project-relative path a listing installs to."""
    if format_standard == "mdc":
        return f".cursor/rules/{slug}.mdc"
    return FORMAT_PATHS.get(format_standard or "", f".claude/skills/{slug}/SKILL.md")


def install_content(root: Path, relative_path: str, content: str, overwrite: bool = False) -> Path:
    """Write `content` below `root`, creating parent directories.

    Raises:
        FileExistsError: if the file exists and `overwrite` is False.
        InstallError: if the file cannot be written.
    """
    path = Path(root) / relative_path
    if path.exists() and not overwrite:
        raise FileExistsError(relative_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise InstallError(f"Could not write {relative_path}: {e}") from e
    return path


def skill_template(name: str, description: str) -> str:
    name, description = name.strip(), description.strip()
    return render_frontmatter(
        {"name": name, "description": description, "version": "1.0.0"},
        SKILL_TEMPLATE_BODY.format(name=name, description=description),
    )
