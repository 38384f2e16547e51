from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace

import pytest
from click.testing import CliRunner

import mdskills.admin as admin_module
from mdskills.admin import admin
from mdskills.reviews import SkillReviewer
from mdskills.store import SQLiteStore


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "catalog.db"


@pytest.fixture
def use_fetcher(monkeypatch, fetcher):
    monkeypatch.setattr(admin_module, "make_fetcher", lambda ctx: fetcher)
    return fetcher


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path: Path) -> None:
    for name in ("NEXT_PUBLIC_SUPABASE_URL", "SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY", "MDSKILLS_DB_PATH", "ANTHROPIC_API_KEY", "REVIEW_DELAY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def _invoke(db_path: Path, *args: str, **kwargs):
    return CliRunner().invoke(admin, ["--local", str(db_path), *args], **kwargs)


def test_import_writes_listing_and_prints_summary(db_path, use_fetcher, pdf_repo) -> None:
    result = _invoke(db_path, "import", "https://github.com/acme/pdf-tools")

    assert result.exit_code == 0, result.output
    assert "📋 Import Summary:" in result.output
    assert "Slug:          pdf-tools" in result.output
    assert "Permissions:   filesystem_read" in result.output
    assert "Imported PDF Tools (pdf-tools)" in result.output
    with SQLiteStore(db_path) as store:
        assert store.get_listing("pdf-tools")["github_stars"] == 42


def test_import_dry_run_without_catalog(use_fetcher, pdf_repo) -> None:
    result = CliRunner().invoke(admin, ["import", "acme/pdf-tools", "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "No catalog configured" in result.output
    assert "Dry run - nothing was written" in result.output


def test_import_without_catalog_fails(use_fetcher, pdf_repo) -> None:
    result = CliRunner().invoke(admin, ["import", "acme/pdf-tools"])
    assert result.exit_code == 1
    assert "SUPABASE_SERVICE_ROLE_KEY" in result.output


def test_import_unknown_category_lists_choices(db_path, use_fetcher, pdf_repo) -> None:
    result = _invoke(db_path, "import", "acme/pdf-tools", "--category", "nope")

    assert result.exit_code == 1
    assert 'Category "nope" not found' in result.output
    assert "design-systems" in result.output
    with SQLiteStore(db_path) as store:
        assert store.get_listing("pdf-tools") is None


def test_import_failure_exits_nonzero(db_path, use_fetcher) -> None:
    result = _invoke(db_path, "import", "acme/ghost")
    assert result.exit_code == 1
    assert "Could not fetch repo metadata" in result.output


def test_import_overrides(db_path, use_fetcher, pdf_repo) -> None:
    result = _invoke(
        db_path, "import", "acme/pdf-tools", "--slug", "custom", "--platforms", "cursor, codex", "--tags", "a,b"
    )
    assert result.exit_code == 0, result.output
    with SQLiteStore(db_path) as store:
        row = store.get_listing("custom")
    assert row["platforms"] == ["cursor", "codex"]
    assert row["tags"] == ["a", "b"]


def test_import_list(use_fetcher, github) -> None:
    github.add_repo("acme/mono")
    github.add_dir("acme/mono", "skills", ["a"])
    github.add_file("acme/mono", "skills/a/SKILL.md", "x")

    result = CliRunner().invoke(admin, ["import", "acme/mono", "--list"])

    assert result.exit_code == 0, result.output
    assert "Found 1 skill(s)" in result.output
    assert "mdskills-admin import https://github.com/acme/mono/tree/main/skills/a" in result.output


def test_import_all(db_path, use_fetcher, github) -> None:
    github.add_repo("acme/mono")
    github.trees["acme/mono"] = ["skills/a/SKILL.md", "skills/b/SKILL.md"]
    github.add_file("acme/mono", "skills/a/SKILL.md", "---\nname: a-skill\n---\nbody")

    result = _invoke(db_path, "import", "acme/mono", "--all", "--delay", "0")

    assert result.exit_code == 0, result.output
    assert "Succeeded: 1" in result.output
    assert "Failed:    1" in result.output
    assert "skills/b/SKILL.md: Could not fetch skills/b/SKILL.md" in result.output


def test_import_batch_from_yaml(db_path, use_fetcher, pdf_repo, tmp_path: Path) -> None:
    batch = tmp_path / "plugins.yaml"
    batch.write_text("- url: acme/pdf-tools\n  name: PDF\n- url: acme/ghost\n")

    result = _invoke(db_path, "import-batch", str(batch), "--delay", "0")

    assert result.exit_code == 0, result.output
    assert "[1/2] PDF (acme/pdf-tools)" in result.output
    assert "Succeeded: 1" in result.output
    assert "acme/ghost: Could not fetch repo metadata" in result.output


def test_import_batch_splits_comma_separated_lists(db_path, use_fetcher, pdf_repo, tmp_path: Path) -> None:
    batch = tmp_path / "plugins.yaml"
    batch.write_text('- url: acme/pdf-tools\n  platforms: "cursor, codex"\n  tags: "pdf, docs"\n')

    result = _invoke(db_path, "import-batch", str(batch), "--delay", "0")

    assert result.exit_code == 0, result.output
    with SQLiteStore(db_path) as store:
        row = store.get_listing("pdf-tools")
        assert row["platforms"] == ["cursor", "codex"]
        assert row["tags"] == ["pdf", "docs"]
        linked = store.listing_client_ids(row["id"])
        assert store.get_client_id("codex") in linked


def test_import_batch_skip_existing(db_path, use_fetcher, pdf_repo, tmp_path: Path) -> None:
    assert _invoke(db_path, "import", "acme/pdf-tools").exit_code == 0
    batch = tmp_path / "plugins.yaml"
    batch.write_text("- url: https://github.com/Acme/pdf-tools\n- url: acme/ghost\n")

    result = _invoke(db_path, "import-batch", str(batch), "--skip-existing", "--delay", "0")

    assert result.exit_code == 0, result.output
    assert "Existing: 1" in result.output
    assert "Missing:  1" in result.output
    assert "[1/1]  (acme/ghost)" in result.output
    assert "Succeeded: 0" in result.output

    batch.write_text("- url: acme/pdf-tools\n")
    result = _invoke(db_path, "import-batch", str(batch), "--skip-existing")
    assert result.exit_code == 0, result.output
    assert "✅ All entries already imported!" in result.output


def test_import_batch_from_awesome_list(db_path, use_fetcher, github, tmp_path: Path) -> None:
    github.add_repo("acme/cursor-rules")
    github.add_file("acme/cursor-rules", ".cursor/rules/react.mdc", "---\ndescription: React rules\n---\nbody")
    github.add_file("acme/cursor-rules", ".cursor/rules/vue.mdc", "---\ndescription: Vue rules\n---\nbody")
    awesome = tmp_path / "awesome.md"
    awesome.write_text(
        "# Awesome Cursor Rules\n\n"
        "- **[React Rules](https://github.com/acme/cursor-rules/blob/main/.cursor/rules/react.mdc)** - Hooks first\n"
        "- **[Vue Rules](https://github.com/acme/cursor-rules/blob/main/.cursor/rules/vue.mdc)** - Composition API\n"
    )

    result = _invoke(db_path, "import-batch", str(awesome), "--limit", "1", "--delay", "0")

    assert result.exit_code == 0, result.output
    assert "🔌 Importing 2 item(s)" in result.output
    assert "[1/1] React Rules" in result.output
    assert "Succeeded: 1" in result.output
    with SQLiteStore(db_path) as store:
        row = store.get_listing("react")
        assert row["name"] == "React Rules"
        assert row["description"] == "Hooks first"
        assert row["format_standard"] == "mdc"
        assert store.get_listing("vue") is None


def test_import_batch_rejects_markdown_without_entries(db_path, tmp_path: Path) -> None:
    awesome = tmp_path / "awesome.md"
    awesome.write_text("# Nothing here\n")

    result = _invoke(db_path, "import-batch", str(awesome))
    assert result.exit_code == 1
    assert "No awesome-list entries found" in result.output


def test_import_batch_rejects_bad_file(db_path, tmp_path: Path) -> None:
    batch = tmp_path / "bad.yaml"
    batch.write_text("url: not-a-list\n")

    result = _invoke(db_path, "import-batch", str(batch))
    assert result.exit_code == 1
    assert "must be a list" in result.output


def _seed_listing(db_path: Path, slug: str, **fields) -> None:
    from mdskills.models import Listing

    values = dict(
        slug=slug, name=slug, description="", owner="acme", repo=slug,
        skill_path="", github_url=f"https://github.com/acme/{slug}", content="",
    )
    values.update(fields)
    with SQLiteStore(db_path) as store:
        store.upsert_listing(Listing(**values))


def test_backfill_commands(db_path) -> None:
    _seed_listing(db_path, "react-kit", description="docker and kubernetes deployment in TypeScript")

    result = _invoke(db_path, "backfill-tags")
    assert "👀 DRY RUN" in result.output
    assert "react-kit" in result.output
    assert "Would update: 1 skills" in result.output

    result = _invoke(db_path, "backfill-categories", "--apply")
    assert "react-kit" in result.output
    assert "devops-ci-cd" in result.output
    assert "Updated: 1 skills" in result.output

    result = _invoke(db_path, "backfill-clients", "--apply")
    assert result.exit_code == 0, result.output
    assert "Added:" in result.output

    with SQLiteStore(db_path) as store:
        row = store.get_listing("react-kit")
        assert row["category_id"] == store.get_category_id("devops-ci-cd")
        assert store.get_client_id("claude-code") in store.listing_client_ids(row["id"])


def test_generate_reviews_needs_api_key(db_path) -> None:
    result = _invoke(db_path, "generate-reviews")
    assert result.exit_code == 1
    assert "ANTHROPIC_API_KEY" in result.output


def test_generate_reviews(db_path, monkeypatch) -> None:
    _seed_listing(db_path, "pdf", content="x" * 100)
    reply = json.dumps(
        {"summary": "Extracts tables from PDFs with clear guidance", "strengths": ["Clear"], "weaknesses": ["Narrow"], "quality_score": 8}
    )

    class Messages:
        def create(self, **kwargs):
            return SimpleNamespace(content=[SimpleNamespace(type="text", text=reply)])

    reviewer = SkillReviewer(client=SimpleNamespace(messages=Messages()))
    monkeypatch.setattr(admin_module, "make_reviewer", lambda ctx: reviewer)
    monkeypatch.setenv("REVIEW_DELAY", "0")

    result = _invoke(db_path, "generate-reviews", "--apply")

    assert result.exit_code == 0, result.output
    assert "score=8/10" in result.output
    assert "+ Clear" in result.output
    with SQLiteStore(db_path) as store:
        assert store.get_listing("pdf")["review_quality_score"] == 8


def test_tags_and_seed(db_path) -> None:
    _seed_listing(db_path, "a", tags=["python", "pdf"])
    _seed_listing(db_path, "b", tags=["python"])

    result = _invoke(db_path, "tags")
    assert result.exit_code == 0
    lines = [line.split() for line in result.output.splitlines() if line.startswith("  ")]
    assert lines == [["python", "2"], ["pdf", "1"]]

    result = _invoke(db_path, "seed")
    assert result.exit_code == 0
    assert "Seeded 17 categories" in result.output
