"""Assemble a catalog Listing from fetched content and inferred fields."""

import json
from typing import List, Optional, Tuple

from .inference import (
    detect_artifact_type,
    detect_category,
    detect_permissions,
    detect_platforms,
    detect_rules_format,
    detect_skill_type,
    generate_slug,
    infer_description,
    infer_display_name,
    merge_tags,
    slugify,
)
from .inference.categories import PLUGIN_CATEGORY
from .inference.description import truncate_text
from .inference.tags import MAX_TOPIC_TAGS
from .models import (
    DiscoveredFile,
    Frontmatter,
    GitHubLocation,
    ImportOptions,
    Listing,
    RepoMetadata,
)


def install_instructions(artifact_type: str, client_slug: str, slug: str, owner: str, repo: str) -> str:
    """Human-readable install step for one client.

    MCP servers assume the npm package is named after the repo.
    """
    if artifact_type == "mcp_server":
        if client_slug == "claude-code":
            return f"claude mcp add {slug} -- npx -y {repo}"
        if client_slug == "cursor":
            config = {"mcpServers": {slug: {"command": "npx", "args": ["-y", repo]}}}
            return "Add to .cursor/mcp.json:\n" + json.dumps(config, separators=(",", ":"))
        return f"npx -y {repo}"
    return f"npx mdskills install {owner}/{slug}"


def listing_skill_path(skill_path: str, skill_dir: Optional[str]) -> str:
    if skill_dir:
        return skill_dir
    return skill_path.replace("/SKILL.md", "").replace("/README.md", "")


def build_listing(
    options: ImportOptions,
    location: GitHubLocation,
    meta: RepoMetadata,
    skill: Optional[DiscoveredFile],
    readme: Optional[str],
    fm: Frontmatter,
    readme_path: str = "README.md",
) -> Listing:
    """Merge inferred fields with caller overrides into a Listing.

    `skill` is None for README-based imports, in which case `readme` must be
    set and becomes the listing content. `category_id` is left unset; the
    importer resolves it against the store.
    """
    owner, repo = location.owner, location.repo
    skill_path = skill.path if skill else readme_path
    skill_dir = skill.directory if skill else None
    rules_format = detect_rules_format(skill.path) if skill else None
    content = skill.content if skill else (readme or "")

    slug = slugify(options.slug) if options.slug else generate_slug(repo, skill_path)
    if rules_format:
        # A repo README describes the whole rules collection, not this file.
        name = options.name or infer_display_name(repo, fm.name, None, generate_slug(repo, skill_path))
    else:
        name = options.name or infer_display_name(repo, fm.name, readme, skill_dir)
    if options.description:
        description = truncate_text(options.description)
    else:
        description = infer_description(fm.description, readme, meta.description, name)

    if options.artifact_type:
        artifact_type = options.artifact_type
    elif rules_format:
        artifact_type = "ruleset"
    else:
        artifact_type = detect_artifact_type(fm.raw, repo)
    format_standard = options.format_standard or rules_format or ("skill_md" if skill else "generic")
    platforms = options.platforms or detect_platforms(fm, content, readme, artifact_type, format_standard)
    skill_type, has_plugin = detect_skill_type(skill_path, meta.topics, readme)
    if options.tags:
        tags = merge_tags(options.tags)
    else:
        tags = merge_tags(fm.tags, meta.topics[:MAX_TOPIC_TAGS])

    return Listing(
        slug=slug,
        name=name,
        description=description,
        owner=owner,
        repo=repo,
        skill_path=skill_path if rules_format else listing_skill_path(skill_path, skill_dir),
        github_url=location.github_url(meta.default_branch),
        content=content,
        readme=readme,
        artifact_type=artifact_type,
        format_standard=format_standard,
        platforms=list(platforms),
        tags=tags,
        permissions=detect_permissions(content),
        skill_type=skill_type,
        has_plugin=has_plugin,
        author_username=owner,
        github_stars=meta.stars,
        github_forks=meta.forks,
        license=meta.license or fm.license,
    )


def infer_category_slug(
    options: ImportOptions, listing: Listing, meta: RepoMetadata, readme: Optional[str]
) -> Tuple[Optional[str], Optional[str]]:
    """Return `(category_slug, reason)`; reason is None for explicit requests."""
    if options.category:
        return options.category, None
    if listing.has_plugin:
        return PLUGIN_CATEGORY, "plugin detected"
    detected = detect_category(meta.topics, meta.description, listing.repo, readme)
    return detected, ("keyword match" if detected else None)


def client_links(listing: Listing, client_slugs: List[str]) -> List[Tuple[str, str, bool]]:
    """`(client_slug, install_instructions, is_primary)` for each client."""
    return [
        (
            client_slug,
            install_instructions(listing.artifact_type, client_slug, listing.slug, listing.owner, listing.repo),
            client_slug == "claude-code",
        )
        for client_slug in client_slugs
    ]
