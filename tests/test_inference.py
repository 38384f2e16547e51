from __future__ import annotations

import pytest

from mdskills.frontmatter import parse_frontmatter
from mdskills.inference import (
    client_slugs_for,
    clients_for_listing,
    detect_artifact_type,
    detect_category,
    detect_permissions,
    detect_platforms,
    detect_skill_type,
    extract_tags_from_content,
    generate_slug,
    infer_description,
    infer_display_name,
    merge_tags,
    slugify,
    truncate_text,
)
from mdskills.inference.categories import score_categories
from mdskills.inference.names import title_case


class TestDisplayName:
    def test_frontmatter_name_with_spaces_is_used_verbatim(self) -> None:
        assert infer_display_name("repo", "My Great skill", "# Other") == "My Great skill"

    def test_slug_style_frontmatter_name_is_title_cased(self) -> None:
        assert infer_display_name("repo", "pdf-api_tools") == "PDF API Tools"

    def test_readme_heading_beats_repo_name(self) -> None:
        readme = "```\n# not this\n```\n# Installation\n# Awesome **Toolkit**\n"
        assert infer_display_name("repo", "", readme) == "Awesome Toolkit"

    def test_html_heading_is_checked_first(self) -> None:
        readme = '<h1 align="center">Fancy Name</h1>\n\n# Markdown Name\n'
        assert infer_display_name("repo", "", readme) == "Fancy Name"

    def test_falls_back_to_directory_then_repo(self) -> None:
        assert infer_display_name("some-repo", "", None, "skills/github-actions") == "GitHub Actions"
        assert infer_display_name("nextjs-starter") == "Next.js Starter"

    def test_title_case_keeps_acronyms(self) -> None:
        assert title_case("mcp_server-for-openai") == "MCP Server For OpenAI"


class TestDescription:
    def test_short_text_is_unchanged(self) -> None:
        assert truncate_text("  hello world  ") == "hello world"

    def test_cuts_at_sentence_end_past_halfway(self) -> None:
        text = "First sentence is here. " + "word " * 30
        assert truncate_text(text, 40) == "First sentence is here."

    def test_cuts_at_word_boundary_without_sentence(self) -> None:
        result = truncate_text("alpha beta gamma delta", 13)
        assert result == "alpha beta"

    def test_single_long_word_is_hard_cut(self) -> None:
        assert truncate_text("x" * 20, 8) == "x" * 8

    def test_never_exceeds_limit(self) -> None:
        text = "lorem ipsum. " * 100
        assert len(truncate_text(text)) <= 500

    def test_priority_order(self) -> None:
        readme = "# Title\n\n![badge](x.svg)\nA [linked](http://x) *intro* paragraph.\n\n\n## Next"
        assert infer_description("From frontmatter", readme, "repo desc", "N") == "From frontmatter"
        assert infer_description("", readme, "repo desc", "N") == "A linked intro paragraph."
        assert infer_description("", None, "repo desc", "N") == "repo desc"
        assert infer_description("", None, "", "Name") == "Name - AI agent skill"


class TestClassification:
    @pytest.mark.parametrize(
        "fm_type, repo, expected",
        [
            ("MCP server", "anything", "mcp_server"),
            ("rules", "x", "ruleset"),
            ("workflow", "x", "workflow_pack"),
            ("starter kit", "x", "template_bundle"),
            ("tool", "x", "extension"),
            ("", "github-mcp", "mcp_server"),
            ("", "awesome-cursorrules", "ruleset"),
            ("", "nextjs-template", "template_bundle"),
            ("", "pdf-tools", "skill_pack"),
        ],
    )
    def test_detect_artifact_type(self, fm_type: str, repo: str, expected: str) -> None:
        raw = {"type": fm_type} if fm_type else {}
        assert detect_artifact_type(raw, repo) == expected

    def test_detect_skill_type(self) -> None:
        assert detect_skill_type("plugins/x/SKILL.md") == ("hybrid", True)
        assert detect_skill_type("SKILL.md", ["claude", "plugin"]) == ("hybrid", True)
        assert detect_skill_type("SKILL.md", ["claude"]) == ("skill", False)
        assert detect_skill_type("SKILL.md", [], "This is a Claude Code plugin.") == ("hybrid", True)


class TestPlatforms:
    def test_compatibility_wins(self) -> None:
        fm = parse_frontmatter("---\ncompatibility: [Claude Code, Cursor, cursor]\n---\n")
        assert detect_platforms(fm, "mentions chatgpt") == ["claude-code", "cursor"]

    def test_format_specific(self) -> None:
        assert clients_for_listing("skill_pack", "cursorrules") == ["cursor"]
        fm = parse_frontmatter("")
        assert detect_platforms(fm, "", format_standard="mdc") == ["cursor"]

    def test_mcp_clients(self) -> None:
        platforms = detect_platforms(parse_frontmatter(""), "uses chatgpt", artifact_type="mcp_server")
        assert "chatgpt" not in platforms
        assert "codex" not in platforms
        assert platforms[0] == "claude-code"

    def test_mentions_extend_markdown_clients(self) -> None:
        platforms = detect_platforms(parse_frontmatter(""), "Works in ChatGPT", "and Replit")
        assert platforms[-2:] == ["chatgpt", "replit"]
        assert "codex" in platforms

    def test_client_slugs_always_include_primary_first(self) -> None:
        assert client_slugs_for(["cursor", "cursor"]) == ["claude-code", "cursor"]
        assert client_slugs_for(["cursor", "claude-code"]) == ["cursor", "claude-code"]


class TestCategories:
    def test_single_weak_hit_is_below_threshold(self) -> None:
        assert detect_category([], "a tool for docker", "x") is None

    def test_two_hits_reach_threshold(self) -> None:
        assert detect_category([], "docker and kubernetes deployment", "x") == "devops-ci-cd"

    def test_topic_hits_weigh_three(self) -> None:
        match = score_categories(["pytest"], "", "")
        assert match.slug == "testing"
        assert match.score >= 3

    def test_min_score_is_configurable(self) -> None:
        assert detect_category([], "a tool for docker", "x", min_score=1) == "devops-ci-cd"

    def test_ties_go_to_the_earlier_category(self) -> None:
        # "security" and "graphql" score one each; security is listed first.
        assert detect_category([], "security graphql", "x", min_score=1) == "security"

    def test_name_separators_become_spaces(self) -> None:
        assert detect_category([], "", "code_review-linting") == "code-review"

    def test_readme_window(self) -> None:
        readme = "x" * 600 + " docker kubernetes"
        assert detect_category([], "", "", readme) is None
        assert detect_category([], "", "", readme, readme_window=800) == "devops-ci-cd"


class TestTagsAndSlugs:
    def test_extract_tags(self) -> None:
        tags = extract_tags_from_content("react-testing-skill", "Build with TypeScript", "Uses docker, not scalable")
        assert "react" in tags
        assert "typescript" in tags
        assert len(tags) == len(set(tags))

    def test_readme_match_needs_word_boundary(self) -> None:
        assert "scala" not in extract_tags_from_content("x", "", "a scalable system")

    def test_merge_tags_dedupes_and_caps(self) -> None:
        merged = merge_tags(["a", "b"], ["b", "", "c"], [str(i) for i in range(20)])
        assert merged[:3] == ["a", "b", "c"]
        assert len(merged) == 15

    @pytest.mark.parametrize(
        "repo, path, expected",
        [
            ("tools", "skills/pdf-helper/SKILL.md", "pdf-helper"),
            ("tools", "SKILL.md", "tools"),
            ("My_Tools", "skills/SKILL.md", "my-tools"),
            ("tools", ".claude/README.md", "tools"),
            ("tools", "plugins/Fancy Plugin", "fancy-plugin"),
        ],
    )
    def test_generate_slug(self, repo: str, path: str, expected: str) -> None:
        assert generate_slug(repo, path) == expected

    def test_slugify_is_idempotent(self) -> None:
        once = slugify("--Hello,  World!!--")
        assert once == "hello-world"
        assert slugify(once) == once


def test_detect_permissions() -> None:
    perms = detect_permissions("Run the bash command and git push the result")
    assert perms.shell_exec
    assert perms.git_write
    assert not perms.network_access

    assert detect_permissions("").active() == []
