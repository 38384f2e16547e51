"""Catalog maintenance CLI: imports, backfills, reviews and reference data"""

import logging
import sys
from pathlib import Path
from typing import List, Optional

import click
import yaml

from mdskills import __version__
from mdskills.backfill import Change, backfill_categories, backfill_clients, backfill_tags
from mdskills.config import ConfigError, Settings, get_settings
from mdskills.fetcher import GitHubFetcher
from mdskills.github_url import GitHubUrlError
from mdskills.importer import SkillImporter, is_imported, parse_awesome_list
from mdskills.inference.categories import DEFAULT_MIN_SCORE
from mdskills.models import ARTIFACT_TYPES, BatchSummary, ImportOptions, ImportResult, Listing
from mdskills.reviews import ReviewOutcome, SkillReviewer, generate_reviews
from mdskills.store import CatalogStore, StoreError, open_store

RULE = "─" * 60


def _settings(ctx) -> Settings:
    return ctx.obj["settings"]


def make_store(ctx) -> CatalogStore:
    """Open the configured catalog or abort with the remediation hint."""
    try:
        return open_store(_settings(ctx), ctx.obj.get("local"))
    except (ConfigError, StoreError) as e:
        click.echo(f"❌ Error: {e}", err=True)
        raise click.Abort()


def make_fetcher(ctx) -> GitHubFetcher:
    settings = _settings(ctx)
    return GitHubFetcher(token=settings.github_token, timeout=settings.request_timeout)


def make_reviewer(ctx) -> SkillReviewer:
    settings = _settings(ctx)
    try:
        api_key = settings.require_anthropic()
    except ConfigError as e:
        click.echo(f"❌ Error: {e}", err=True)
        raise click.Abort()
    return SkillReviewer(api_key=api_key, model=settings.review_model)


def _split(value: Optional[str]) -> Optional[List[str]]:
    if not value:
        return None
    return [part.strip() for part in value.split(",") if part.strip()]


def _as_list(value) -> Optional[List[str]]:
    """YAML list or comma-separated string, normalized to a list of strings."""
    if isinstance(value, str):
        return _split(value)
    if not value:
        return None
    return [str(item).strip() for item in value if str(item).strip()]


def _mode_banner(apply: bool) -> None:
    click.echo("🔧 APPLY MODE - will update database" if apply else "👀 DRY RUN - pass --apply to write changes")


def _apply_hint(report_applied: bool, command: str) -> None:
    if not report_applied:
        click.echo("\nRun with --apply to write changes:")
        click.echo(f"  mdskills-admin {command} --apply")


def _print_summary(listing: Listing, category: Optional[str]) -> None:
    perms = ", ".join(listing.permissions.active()) or "none"
    click.echo("\n" + RULE)
    click.echo("📋 Import Summary:")
    click.echo(RULE)
    click.echo(f"  Slug:          {listing.slug}")
    click.echo(f"  Name:          {listing.name}")
    click.echo(f"  Description:   {listing.description[:80]}...")
    click.echo(f"  Owner:         {listing.owner}")
    click.echo(f"  Repo:          {listing.repo}")
    click.echo(f"  Skill Path:    {listing.skill_path}")
    click.echo(f"  GitHub URL:    {listing.github_url}")
    click.echo(f"  Platforms:     {', '.join(listing.platforms)}")
    click.echo(f"  Tags:          {', '.join(listing.tags)}")
    click.echo(f"  License:       {listing.license or 'none'}")
    click.echo(f"  Type:          {listing.artifact_type}")
    click.echo(f"  Skill Type:    {listing.skill_type} (plugin: {str(listing.has_plugin).lower()})")
    click.echo(f"  Stars:         {listing.github_stars}")
    click.echo(f"  Category:      {category or '(none - assign later)'}")
    click.echo(f"  Permissions:   {perms}")
    click.echo(RULE)


def _print_batch_summary(summary: BatchSummary, dry_run: bool) -> None:
    click.echo("\n" + RULE)
    click.echo("✅ Import complete!")
    click.echo(f"  Succeeded: {summary.succeeded}")
    click.echo(f"  Failed:    {summary.failed}")
    if summary.skipped:
        click.echo(f"  Skipped:   {summary.skipped} (duplicate slug)")
    if summary.errors:
        click.echo("\nErrors:")
        for error in summary.errors:
            click.echo(f"  - {error}")
    if dry_run:
        click.echo("\n🏁 Dry run complete. Remove --dry-run to write to database.")


def _echo_result(index: int, result: ImportResult) -> None:
    if result.success:
        click.echo(f"  ✓ Imported: {result.name} ({result.slug})")
    else:
        click.echo(f"  ✗ Failed: {result.error}")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="mdskills-admin")
@click.option(
    "--local",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Use a local SQLite catalog instead of Supabase",
)
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def admin(ctx, local, verbose):
    """mdskills catalog maintenance"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["settings"] = get_settings()
    ctx.obj["local"] = local


@admin.command(name="import")
@click.argument("url")
@click.option("--slug", help="Custom slug (default: auto-generated)")
@click.option("--name", help="Custom display name")
@click.option("--category", help="Category slug (e.g. design-systems, code-generation)")
@click.option("--platforms", help="Comma-separated platforms (default: auto-detect)")
@click.option("--type", "artifact_type", type=click.Choice(ARTIFACT_TYPES), help="Artifact type")
@click.option("--format", "format_standard", help="Format standard (default: skill_md)")
@click.option("--tags", help="Comma-separated tags (default: auto-detect)")
@click.option("--dry-run", is_flag=True, help="Show what would be imported without writing")
@click.option("--list", "list_only", is_flag=True, help="List all SKILL.md files found in the repo")
@click.option("--all", "import_all", is_flag=True, help="Import every SKILL.md in the repo")
@click.option("--delay", type=float, help="Seconds between imports with --all")
@click.pass_context
def import_command(
    ctx, url, slug, name, category, platforms, artifact_type, format_standard, tags, dry_run, list_only, import_all, delay
):
    """Import a skill from a GitHub URL (owner/repo also accepted)"""
    fetcher = make_fetcher(ctx)
    store = None
    try:
        if list_only:
            _list_repo_skills(fetcher, url)
            return

        store = _store_for_import(ctx, dry_run)
        if category and store is not None and store.get_category_id(category) is None:
            click.echo(f'\n✗ Category "{category}" not found.', err=True)
            click.echo("  Available categories:", err=True)
            for cat in store.list_categories():
                click.echo(f"    {cat.slug:<24} {cat.name}", err=True)
            sys.exit(1)

        if import_all:
            importer = SkillImporter(fetcher, store)
            click.echo(f"\n📦 Importing every skill in: {url}")
            click.echo(RULE)
            summary, _ = importer.import_repo_all(
                url,
                dry_run=dry_run,
                category=category,
                delay=_settings(ctx).import_delay if delay is None else delay,
                on_result=_echo_result,
            )
            _print_batch_summary(summary, dry_run)
            if summary.failed and not summary.succeeded:
                sys.exit(1)
            return

        importer = SkillImporter(fetcher, store, on_log=lambda line: click.echo(f"  {line}"))
        options = ImportOptions(
            url=url,
            slug=slug,
            name=name,
            category=category,
            platforms=_split(platforms),
            artifact_type=artifact_type,
            format_standard=format_standard,
            tags=_split(tags),
            dry_run=dry_run,
        )
        result = importer.import_skill(options)
        if result.listing is not None:
            _print_summary(result.listing, category)
        if not result.success:
            click.echo(f"✗ {result.error}", err=True)
            sys.exit(1)
        if dry_run:
            click.echo("\n🏁 Dry run - nothing was written to the database.")
            click.echo("  Remove --dry-run to actually import.")
        else:
            click.echo(f"\n✅ Imported {result.name} ({result.slug})")
    except GitHubUrlError as e:
        click.echo(f"❌ Error: {e}", err=True)
        raise click.Abort()
    finally:
        fetcher.close()
        if store is not None:
            store.close()


def _store_for_import(ctx, dry_run: bool) -> Optional[CatalogStore]:
    """Dry runs work without a catalog; real imports require one."""
    if not dry_run:
        return make_store(ctx)
    try:
        return open_store(_settings(ctx), ctx.obj.get("local"))
    except ConfigError:
        click.echo("  ⚠ No catalog configured - categories will not be checked")
        return None


def _list_repo_skills(fetcher: GitHubFetcher, url: str) -> None:

    location, meta, paths = SkillImporter(fetcher).list_skills(url)
    click.echo(f"\n🔍 Importing from: {location.display()}")
    click.echo(RULE)
    if meta is None:
        click.echo("✗ Could not fetch repo metadata. Is the repo public?", err=True)
        sys.exit(1)
    click.echo(f"  ✓ {meta.stars} stars, {meta.forks} forks, license: {meta.license or 'none'}")
    click.echo("\n📋 Scanning for all SKILL.md files...")
    if not paths:
        click.echo("  No SKILL.md files found.")
        return
    click.echo(f"  Found {len(paths)} skill(s):\n")
    for path in paths:
        directory = path.rsplit("/", 1)[0] if "/" in path else ""
        target = f"https://github.com/{location.full_name}"
        if directory:
            target = f"{target}/tree/{meta.default_branch}/{directory}"
        click.echo(f"  {path}")
        click.echo(f"    → import with: mdskills-admin import {target}")
        click.echo("")


@admin.command(name="import-batch")
@click.argument("batch_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--dry-run", is_flag=True, help="Build listings without writing")
@click.option("--skip-existing", is_flag=True, help="Skip entries already in the catalog (owner/repo/path or URL)")
@click.option("--limit", type=int, help="Import at most this many entries")
@click.option("--delay", type=float, help="Seconds between imports")
@click.pass_context
def import_batch_command(ctx, batch_file, dry_run, skip_existing, limit, delay):
    """Import every entry of a YAML file or an awesome-list README.

    A YAML file holds a list of mappings with a required `url` and optional
    `name`, `slug`, `category`, `platforms`, `type`, `tags` and `skill_file`.
    A `.md` file is read as an awesome list of
    `- **[Name](https://github.com/...)** - description` lines.
    """
    entries = _read_batch_file(batch_file)
    store = _store_for_import(ctx, dry_run)
    fetcher = make_fetcher(ctx)
    importer = SkillImporter(fetcher, store)

    pairs = [
        (
            entry,
            (
                ImportOptions(
                    url=entry["url"],
                    slug=entry.get("slug"),
                    name=entry.get("name"),
                    category=entry.get("category"),
                    platforms=_as_list(entry.get("platforms")),
                    artifact_type=entry.get("type"),
                    description=entry.get("description"),
                    tags=_as_list(entry.get("tags")),
                    dry_run=dry_run,
                ),
                entry.get("skill_file"),
            ),
        )
        for entry in entries
    ]

    click.echo(f"\n🔌 Importing {len(pairs)} item(s)")
    click.echo(RULE)
    if dry_run:
        click.echo("🔍 DRY RUN - no database writes\n")

    if skip_existing:
        if store is None:
            click.echo("  ⚠ No catalog configured - cannot skip existing entries")
        else:
            keys = importer.existing_keys()
            before = len(pairs)
            pairs = [(entry, item) for entry, item in pairs if not is_imported(keys, *item)]
            click.echo(f"  Existing: {before - len(pairs)}")
            click.echo(f"  Missing:  {len(pairs)}")
    if limit is not None:
        pairs = pairs[:limit]

    if not pairs:
        fetcher.close()
        if store is not None:
            store.close()
        click.echo("\n✅ All entries already imported!")
        return

    def on_result(index: int, result: ImportResult) -> None:
        entry = pairs[index][0]
        click.echo(f"\n[{index + 1}/{len(pairs)}] {entry.get('name') or result.name or ''} ({entry['url']})")
        for line in result.logs:
            click.echo(f"  {line}")
        _echo_result(index, result)

    try:
        summary, _ = importer.import_batch(
            [item for _, item in pairs],
            delay=_settings(ctx).import_delay if delay is None else delay,
            on_result=on_result,
        )
    finally:
        fetcher.close()
        if store is not None:
            store.close()
    _print_batch_summary(summary, dry_run)


def _read_batch_file(batch_file: Path) -> List[dict]:
    text = batch_file.read_text(encoding="utf-8")
    if batch_file.suffix.lower() in (".md", ".markdown"):
        entries = parse_awesome_list(text)
        if not entries:
            click.echo(f"❌ Error: No awesome-list entries found in {batch_file}", err=True)
            raise click.Abort()
        return entries

    try:
        entries = yaml.safe_load(text) or []
    except yaml.YAMLError as e:
        click.echo(f"❌ Error: Could not parse {batch_file}: {e}", err=True)
        raise click.Abort()
    if not isinstance(entries, list) or not all(isinstance(e, dict) and e.get("url") for e in entries):
        click.echo("❌ Error: Batch file must be a list of entries with a 'url'", err=True)
        raise click.Abort()
    return entries


def _echo_added(change: Change, noun: str) -> None:
    suffix = f"  ✗ {change.error}" if change.error else ""
    click.echo(f"  ✓ {change.slug:<40} +{len(change.added)} {noun}: [{', '.join(change.added)}]{suffix}")


@admin.command(name="backfill-tags")
@click.option("--slug", help="Only process one listing")
@click.option("--apply", is_flag=True, help="Write changes to the catalog")
@click.pass_context
def backfill_tags_command(ctx, slug, apply):
    """Add content-derived tags to listings"""
    _mode_banner(apply)
    if slug:
        click.echo(f"🎯 SINGLE SKILL - slug: {slug}")
    click.echo("")

    with make_store(ctx) as store:
        report = backfill_tags(store, apply=apply, slug=slug, on_change=lambda c: _echo_added(c, "tags"))

    if not report.processed:
        click.echo("No skills found.")
        return
    click.echo(f"\n{'✅ Updated' if apply else '📋 Would update'}: {report.updated} skills")
    click.echo(f"⏭  Unchanged: {report.unchanged} skills (no new tags found)")
    _apply_hint(report.applied, "backfill-tags")


def _echo_category(change: Change) -> None:
    if change.status == "updated":
        suffix = f"  ✗ {change.error}" if change.error else ""
        click.echo(f"  ✓ {change.slug:<35} → {change.value}{suffix}")
    elif change.status == "missing":
        click.echo(f"  ⚠ {change.slug:<35} → {change.value} (category not in DB)")
    else:
        click.echo(f"  - {change.slug:<35} → (no match)")


@admin.command(name="backfill-categories")
@click.option("--reset-owner", help="Clear and re-detect categories for every listing by this owner")
@click.option("--min-score", default=DEFAULT_MIN_SCORE, show_default=True, help="Minimum keyword score")
@click.option("--apply", is_flag=True, help="Write changes to the catalog")
@click.pass_context
def backfill_categories_command(ctx, reset_owner, min_score, apply):
    """Assign categories to uncategorized listings"""
    _mode_banner(apply)
    if reset_owner:
        click.echo(f"🔄 RESET MODE - will clear and re-detect categories for owner {reset_owner}")
    click.echo("")

    with make_store(ctx) as store:
        report = backfill_categories(
            store, apply=apply, reset_owner=reset_owner, min_score=min_score, on_change=_echo_category
        )

    if report.cleared:
        click.echo(f"\n  Cleared {report.cleared} skills")
    for error in report.errors:
        click.echo(f"  ✗ Could not clear {error}", err=True)
    if not report.processed:
        click.echo("✅ All skills already have categories assigned!")
        return
    click.echo(f"\n{'✅ Updated' if apply else '📋 Would update'}: {report.updated} skills")
    if report.skipped:
        click.echo(f"⏭  Skipped: {report.skipped} skills (no confident match)")
    _apply_hint(report.applied, "backfill-categories")


@admin.command(name="backfill-clients")
@click.option("--apply", is_flag=True, help="Write changes to the catalog")
@click.pass_context
def backfill_clients_command(ctx, apply):
    """Link listings to every client their format supports"""
    _mode_banner(apply)
    click.echo("")

    with make_store(ctx) as store:
        report = backfill_clients(store, apply=apply, on_change=lambda c: _echo_added(c, "clients"))

    added = sum(len(c.added) for c in report.changes)
    click.echo(f"\n{'✅ Added' if apply else '📋 Would add'}: {added} client links across {report.processed} skills")
    _apply_hint(report.applied, "backfill-clients")


def _echo_review(outcome: ReviewOutcome) -> None:
    if outcome.skipped:
        click.echo(f"  - {outcome.slug:<40} (content too short, skipped)")
        return
    if outcome.review is None:
        click.echo(f"  x {outcome.slug:<40} (generation failed)")
        return
    review = outcome.review
    click.echo(f'  ✓ {outcome.slug:<40} score={review.quality_score}/10  "{review.summary[:60]}..."')
    for strength in review.strengths:
        click.echo(f"    + {strength}")
    for weakness in review.weaknesses:
        click.echo(f"    - {weakness}")
    if outcome.error:
        click.echo(f"    ✗ {outcome.error}")


@admin.command(name="generate-reviews")
@click.option("--slug", help="Only review one listing")
@click.option("--all", "regenerate_all", is_flag=True, help="Regenerate existing reviews")
@click.option("--apply", is_flag=True, help="Write reviews to the catalog")
@click.pass_context
def generate_reviews_command(ctx, slug, regenerate_all, apply):
    """Generate AI reviews for listings"""
    _mode_banner(apply)
    if regenerate_all:
        click.echo("🔄 REGENERATE ALL - will overwrite existing reviews")
    if slug:
        click.echo(f"🎯 SINGLE SKILL - slug: {slug}")
    click.echo("")

    reviewer = make_reviewer(ctx)
    with make_store(ctx) as store:
        report = generate_reviews(
            store,
            reviewer,
            apply=apply,
            regenerate_all=regenerate_all,
            slug=slug,
            delay=_settings(ctx).review_delay,
            on_outcome=_echo_review,
        )

    if not report.outcomes:
        click.echo("No skills need reviews.")
        return
    click.echo(f"\n{'✅ Updated' if apply else '📋 Would update'}: {report.succeeded} skills")
    if report.failed:
        click.echo(f"⚠️  Failed/skipped: {report.failed} skills")
    _apply_hint(report.applied, "generate-reviews")


@admin.command()
@click.option("--limit", type=int, help="Show only the most used tags")
@click.pass_context
def tags(ctx, limit):
    """List tags across published listings by usage"""
    with make_store(ctx) as store:
        counts = store.all_tags()
    if limit:
        counts = counts[:limit]
    if not counts:
        click.echo("No tags found.")
        return
    click.echo(f"\n🏷️  {len(counts)} tags\n")
    for entry in counts:
        click.echo(f"  {entry.tag:<32} {entry.count}")


@admin.command()
@click.pass_context
def seed(ctx):
    """Insert the default categories and clients"""
    with make_store(ctx) as store:
        try:
            store.seed_reference_data()
        except StoreError as e:
            click.echo(f"❌ Error: {e}", err=True)
            raise click.Abort()
        categories = store.list_categories()
        clients = store.list_clients()
    click.echo(f"✅ Seeded {len(categories)} categories and {len(clients)} clients")


def main():
    admin(obj={})


if __name__ == "__main__":
    main()
