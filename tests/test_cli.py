from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

import mdskills.cli as cli_module
from mdskills import __version__
from mdskills.api_client import MarketplaceError
from mdskills.cli import cli

PDF = {
    "slug": "pdf-tools",
    "name": "PDF Tools",
    "owner": "acme",
    "artifact_type": "skill_pack",
    "format_standard": "skill_md",
    "description": "Extract text from PDFs",
    "github_url": "https://github.com/acme/pdf-tools",
    "github_stars": 42,
    "content": "---\nname: pdf-tools\n---\nbody\n",
    "permissions": {"filesystem_read": True, "shell_exec": False},
    "category": {"slug": "documentation", "name": "Documentation"},
}

MCP = {
    "slug": "gh-mcp",
    "name": "GitHub MCP",
    "owner": "acme",
    "artifact_type": "mcp_server",
    "clients": [{"client_slug": "claude-code", "client_name": "Claude Code", "install_instructions": "claude mcp add gh-mcp -- npx -y gh-mcp"}],
}


class FakeMarketplace:
    def __init__(self, skills=None, categories=None, error: str = "") -> None:
        self.skills = {s["slug"]: s for s in (skills or [])}
        self.categories = categories or []
        self.error = error
        self.queries = []
        self.installs = []

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        return None

    def close(self) -> None:
        return None

    def fetch_skills(self, **kwargs):
        if self.error:
            raise MarketplaceError(self.error)
        self.queries.append(kwargs)
        return list(self.skills.values())

    def fetch_skill_detail(self, slug):
        if self.error:
            raise MarketplaceError(self.error)
        return self.skills.get(slug)

    def fetch_categories(self):
        return self.categories

    def track_install(self, slug) -> None:
        self.installs.append(slug)


@pytest.fixture
def market(monkeypatch) -> FakeMarketplace:
    fake = FakeMarketplace(skills=[PDF, MCP], categories=[{"slug": "testing", "name": "Testing", "skill_count": 3}])
    monkeypatch.setattr(cli_module, "make_client", lambda settings: fake)
    return fake


def test_version_and_help(market) -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert f"mdskills v{__version__}" in result.output

    result = runner.invoke(cli, ["version"])
    assert result.output.strip() == f"mdskills v{__version__}"

    result = runner.invoke(cli, ["help", "install"])
    assert result.exit_code == 0
    assert "--yes" in result.output

    result = runner.invoke(cli, ["help", "bogus"])
    assert "Unknown command: bogus" in result.output


def test_short_help_and_version_flags(market) -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["-v"])
    assert result.exit_code == 0
    assert result.output.strip() == f"mdskills v{__version__}"

    result = runner.invoke(cli, ["-h"])
    assert result.exit_code == 0
    assert "search" in result.output

    result = runner.invoke(cli, ["search", "-h"])
    assert result.exit_code == 0
    assert "--json" in result.output
    assert market.queries == []


def test_search_table_and_json(market) -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["search", "pdf", "tools"])
    assert result.exit_code == 0
    assert "PDF Tools" in result.output
    assert market.queries[0]["query"] == "pdf tools"

    result = runner.invoke(cli, ["s", "pdf", "--json"])
    payload = json.loads(result.output)
    assert payload["query"] == "pdf"
    assert payload["count"] == 2


def test_search_requires_query(market) -> None:
    result = CliRunner().invoke(cli, ["search"])
    assert result.exit_code == 1
    assert "Usage: mdskills search" in result.output


def test_search_error_as_json(monkeypatch) -> None:
    monkeypatch.setattr(cli_module, "make_client", lambda settings: FakeMarketplace(error="Request timed out"))
    result = CliRunner().invoke(cli, ["search", "pdf", "--json"])

    assert result.exit_code == 1
    assert json.loads(result.output) == {"error": "Request timed out"}


def test_list_passes_filters(market) -> None:
    result = CliRunner().invoke(cli, ["ls", "--category", "testing", "--sort", "recent", "--type", "mcp_server"])

    assert result.exit_code == 0
    assert 'Skills in "testing"' in result.output
    assert market.queries[0]["category"] == "testing"
    assert market.queries[0]["sort"] == "recent"
    assert market.queries[0]["artifact_type"] == "mcp_server"


def test_info(market) -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["info", "acme/pdf-tools"])
    assert result.exit_code == 0
    assert "PDF Tools" in result.output
    assert "Documentation" in result.output
    assert "npx mdskills install acme/pdf-tools" in result.output

    result = runner.invoke(cli, ["info", "missing"])
    assert 'Skill "missing" not found' in result.output

    result = runner.invoke(cli, ["info", "pdf-tools", "--json"])
    assert json.loads(result.output)["skill"]["slug"] == "pdf-tools"


def test_install_writes_file_and_tracks(market, tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["install", "acme/pdf-tools", "--dir", str(tmp_path)], input="y\n")
    assert result.exit_code == 0, result.output
    target = tmp_path / ".claude/skills/pdf-tools/SKILL.md"
    assert target.read_text() == PDF["content"]
    assert market.installs == ["pdf-tools"]

    result = runner.invoke(cli, ["install", "pdf-tools", "--dir", str(tmp_path)])
    assert "File already exists" in result.output
    assert market.installs == ["pdf-tools"]

    result = runner.invoke(cli, ["i", "pdf-tools", "--dir", str(tmp_path), "--yes"])
    assert "Installed PDF Tools" in result.output
    assert market.installs == ["pdf-tools", "pdf-tools"]


def test_install_cancelled(market, tmp_path: Path) -> None:
    result = CliRunner().invoke(cli, ["install", "pdf-tools", "--dir", str(tmp_path)], input="n\n")
    assert "Cancelled" in result.output
    assert not (tmp_path / ".claude").exists()


def test_install_mcp_prints_commands(market, tmp_path: Path) -> None:
    result = CliRunner().invoke(cli, ["install", "gh-mcp", "--dir", str(tmp_path)])

    assert result.exit_code == 0
    assert "claude mcp add gh-mcp -- npx -y gh-mcp" in result.output
    assert list(tmp_path.iterdir()) == []
    assert market.installs == []


def test_install_unknown_skill(market, tmp_path: Path) -> None:
    result = CliRunner().invoke(cli, ["install", "nope", "--dir", str(tmp_path)])
    assert result.exit_code == 1
    assert 'Skill "nope" not found' in result.output


def test_categories(market) -> None:
    result = CliRunner().invoke(cli, ["cats"])
    assert result.exit_code == 0
    assert "testing" in result.output
    assert "Testing (3)" in result.output


def test_init_creates_and_refuses_overwrite(market) -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(cli, ["init"], input="My Skill\nDoes things\n")
        assert result.exit_code == 0, result.output
        assert "name: My Skill" in Path("SKILL.md").read_text()

        result = runner.invoke(cli, ["init", "--name", "x", "--description", "y"])
        assert result.exit_code == 1
        assert "already exists" in result.output


def test_no_command_launches_browser(market, monkeypatch) -> None:
    import mdskills.tui as tui

    launched = []

    class FakeBrowser:
        def __init__(self, client) -> None:
            launched.append(client)

        def run(self) -> None:
            launched.append("ran")

    monkeypatch.setattr(tui, "MarketplaceBrowser", FakeBrowser)
    result = CliRunner().invoke(cli, [])

    assert result.exit_code == 0
    assert launched == [market, "ran"]
