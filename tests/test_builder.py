from __future__ import annotations

import json

from mdskills.builder import build_listing, client_links, infer_category_slug, install_instructions
from mdskills.frontmatter import parse_frontmatter
from mdskills.models import DiscoveredFile, GitHubLocation, ImportOptions, RepoMetadata

SKILL = """---
name: pdf-tools
description: Extract text from PDF files
tags: [pdf]
license: Apache-2.0
---
Read the file and run a shell command.
"""


def _meta(**fields) -> RepoMetadata:
    values = {"description": "repo desc", "stars": 7, "forks": 1, "topics": ["pdf", "python"]}
    values.update(fields)
    return RepoMetadata(**values)


def test_build_listing_from_skill_md() -> None:
    skill = DiscoveredFile(path="skills/pdf-tools/SKILL.md", content=SKILL)
    listing = build_listing(
        ImportOptions(url="acme/tools"),
        GitHubLocation("acme", "tools", "skills/pdf-tools"),
        _meta(),
        skill,
        "# Readme",
        parse_frontmatter(SKILL),
    )

    assert listing.slug == "pdf-tools"
    assert listing.name == "PDF Tools"
    assert listing.description == "Extract text from PDF files"
    assert listing.skill_path == "skills/pdf-tools"
    assert listing.github_url == "https://github.com/acme/tools/tree/main/skills/pdf-tools"
    assert listing.content == SKILL
    assert listing.format_standard == "skill_md"
    assert listing.artifact_type == "skill_pack"
    assert listing.tags == ["pdf", "python"]
    assert listing.license == "Apache-2.0"
    assert listing.permissions.shell_exec
    assert listing.author_username == "acme"
    assert (listing.github_stars, listing.github_forks) == (7, 1)
    assert listing.status == "published"


def test_build_listing_readme_fallback_is_generic() -> None:
    readme = "# Rules Pack\n\nUseful rules for agents.\n"
    listing = build_listing(
        ImportOptions(url="acme/rules"),
        GitHubLocation("acme", "rules"),
        _meta(license="MIT", topics=[]),
        None,
        readme,
        parse_frontmatter(readme),
    )

    assert listing.content == readme
    assert listing.format_standard == "generic"
    assert listing.skill_path == "README.md"
    assert listing.slug == "rules"
    assert listing.name == "Rules Pack"
    assert listing.license == "MIT"


def test_explicit_options_override_inference() -> None:
    skill = DiscoveredFile(path="SKILL.md", content=SKILL)
    options = ImportOptions(
        url="acme/tools",
        slug="My Custom Slug",
        name="Custom",
        description="Custom description",
        artifact_type="ruleset",
        format_standard="cursorrules",
        platforms=["cursor"],
        tags=["a", "a", "b"],
    )
    listing = build_listing(options, GitHubLocation("acme", "tools"), _meta(), skill, None, parse_frontmatter(SKILL))

    assert listing.slug == "my-custom-slug"
    assert listing.name == "Custom"
    assert listing.description == "Custom description"
    assert listing.artifact_type == "ruleset"
    assert listing.format_standard == "cursorrules"
    assert listing.platforms == ["cursor"]
    assert listing.tags == ["a", "b"]


def test_install_instructions() -> None:
    assert install_instructions("skill_pack", "cursor", "pdf", "acme", "tools") == "npx mdskills install acme/pdf"
    assert install_instructions("mcp_server", "claude-code", "gh", "acme", "gh-mcp") == "claude mcp add gh -- npx -y gh-mcp"
    assert install_instructions("mcp_server", "goose", "gh", "acme", "gh-mcp") == "npx -y gh-mcp"

    cursor = install_instructions("mcp_server", "cursor", "gh", "acme", "gh-mcp")
    header, config = cursor.split("\n", 1)
    assert header == "Add to .cursor/mcp.json:"
    assert json.loads(config) == {"mcpServers": {"gh": {"command": "npx", "args": ["-y", "gh-mcp"]}}}


def test_category_inference_order() -> None:
    skill = DiscoveredFile(path="SKILL.md", content=SKILL)
    fm = parse_frontmatter(SKILL)
    listing = build_listing(ImportOptions(url="x/y"), GitHubLocation("x", "y"), _meta(), skill, None, fm)

    explicit = ImportOptions(url="x/y", category="testing")
    assert infer_category_slug(explicit, listing, _meta(), None) == ("testing", None)

    listing.has_plugin = True
    assert infer_category_slug(ImportOptions(url="x/y"), listing, _meta(), None) == (
        "claude-code-plugins",
        "plugin detected",
    )

    listing.has_plugin = False
    meta = _meta(topics=["docker", "kubernetes"])
    assert infer_category_slug(ImportOptions(url="x/y"), listing, meta, None) == ("devops-ci-cd", "keyword match")
    assert infer_category_slug(ImportOptions(url="x/y"), listing, _meta(topics=[], description=""), None) == (
        None,
        None,
    )


def test_client_links_mark_primary() -> None:
    skill = DiscoveredFile(path="SKILL.md", content=SKILL)
    listing = build_listing(
        ImportOptions(url="x/y"), GitHubLocation("x", "y"), _meta(), skill, None, parse_frontmatter(SKILL)
    )
    links = client_links(listing, ["claude-code", "cursor"])

    assert [(slug, primary) for slug, _, primary in links] == [("claude-code", True), ("cursor", False)]
    assert links[1][1] == "npx mdskills install x/y"
