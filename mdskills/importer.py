"""GitHub skill import pipeline.

URL -> repo metadata -> SKILL.md (or README) discovery -> frontmatter ->
field inference -> listing upsert -> client links.
"""

import logging
import re
import time
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from .builder import build_listing, client_links, infer_category_slug
from .fetcher import GitHubFetcher
from .frontmatter import parse_frontmatter
from .github_url import GitHubUrlError, parse_github_url
from .inference import client_slugs_for, detect_rules_format
from .models import (
    BatchSummary,
    DiscoveredFile,
    GitHubLocation,
    ImportOptions,
    ImportResult,
    Listing,
    ListingClient,
    RepoMetadata,
)
from .store import CatalogStore, StoreError

logger = logging.getLogger(__name__)

README_NAMES = ("README.md", "readme.md")

# `- **[Name](https://github.com/...)** - description` lines of an awesome list.
_AWESOME_ENTRY = re.compile(r"- \*\*\[([^\]]+)\]\((https://github\.com/[^)]+)\)\*\*\s*-\s*(.+)")


def dedup_key(owner: str, repo: str, skill_path: Optional[str] = None) -> str:
    """Case-insensitive owner/repo/path identity used to spot already-imported skills."""
    path = re.sub(r"/(SKILL|README)\.md$", "", skill_path or "", flags=re.IGNORECASE)
    if path.lower() in ("skill.md", "readme.md"):
        path = ""
    return f"{owner}/{repo}/{path.strip('/')}".lower().rstrip("/")


def is_imported(keys: Set[str], options: ImportOptions, skill_file: Optional[str] = None) -> bool:
    """Whether an import request matches a key from `SkillImporter.existing_keys`.

    Unparseable URLs never match, so the import itself reports them.
    """
    try:
        location = parse_github_url(options.url)
    except GitHubUrlError:
        return False
    path = skill_file or location.file or location.subpath
    return dedup_key(location.owner, location.repo, path) in keys or options.url.strip().lower() in keys


def parse_awesome_list(markdown: str) -> List[Dict[str, str]]:
    """Entries of an awesome-list README as `{name, url, description}` dicts."""
    return [
        {"name": m.group(1), "url": m.group(2), "description": m.group(3).strip()}
        for m in _AWESOME_ENTRY.finditer(markdown or "")
    ]


class SkillImporter:
    """Import listings from GitHub into a catalog store.

    Args:
        fetcher: GitHub client.
        store: Target catalog. May be None for dry runs, in which case
            categories are not resolved.
        on_log: Called with each progress line as it is produced.
        sleep: Delay function used between batch items.
    """

    def __init__(
        self,
        fetcher: GitHubFetcher,
        store: Optional[CatalogStore] = None,
        on_log: Optional[Callable[[str], None]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.fetcher = fetcher
        self.store = store
        self.on_log = on_log
        self.sleep = sleep

    def import_skill(self, options: ImportOptions, skill_file: Optional[str] = None) -> ImportResult:
        """Import one listing.

        `skill_file` pins the file to import (a SKILL.md, a plugin's
        README.md or a rules file) instead of running discovery. A URL that
        names a rules file pins it the same way.
        """
        result = ImportResult(success=False)

        def log(message: str) -> None:
            result.logs.append(message)
            logger.debug(message)
            if self.on_log:
                self.on_log(message)

        def fail(error: str) -> ImportResult:
            result.error = error
            logger.info("Import of %s failed: %s", options.url, error)
            return result

        try:
            location = parse_github_url(options.url)
        except GitHubUrlError:
            return fail(f"Invalid GitHub URL: {options.url}")
        skill_file = skill_file or location.file
        if skill_file:
            directory = skill_file.rsplit("/", 1)[0] if "/" in skill_file else None
            pinned = skill_file if detect_rules_format(skill_file) else None
            location = GitHubLocation(location.owner, location.repo, directory, pinned)

        log(f"Importing from: {location.display()}")

        log("Fetching repo metadata...")
        meta = self.fetcher.fetch_repo_metadata(location.owner, location.repo)
        if meta is None:
            return fail("Could not fetch repo metadata. Is the repo public?")
        log(f"{meta.stars} stars, {meta.forks} forks, license: {meta.license or 'none'}")
        log(f"Topics: {', '.join(meta.topics) if meta.topics else '(none)'}")

        skill, readme, fm_source, readme_path = self._discover(location, skill_file, log)
        if skill is None and readme is None:
            if skill_file:
                return fail(f"Could not fetch {skill_file}")
            return fail("No SKILL.md or README.md found. Cannot import.")

        fm = parse_frontmatter(fm_source)
        if skill:
            log(f'Frontmatter: name="{fm.name}", desc="{fm.description[:60]}..."')

        listing = build_listing(options, location, meta, skill, readme, fm, readme_path=readme_path)
        result.listing = listing
        result.slug = listing.slug
        result.name = listing.name

        category_slug, reason = infer_category_slug(options, listing, meta, readme)
        if category_slug and reason:
            log(f"Auto-detected category: {category_slug} ({reason})")
        if category_slug and self.store is not None:
            listing.category_id = self.store.get_category_id(category_slug)
            if listing.category_id is None:
                log(f'Warning: Category "{category_slug}" not found')

        log(f"Slug: {listing.slug}")
        log(f"Name: {listing.name}")
        log(f"Type: {listing.artifact_type}")
        log(f"Platforms: {', '.join(listing.platforms)}")
        log(f"Stars: {listing.github_stars}")

        if options.dry_run:
            log("Dry run - nothing written to database")
            result.success = True
            return result

        if self.store is None:
            return fail("No catalog store configured")

        log("Writing to database...")
        try:
            saved = self.store.upsert_listing(listing)
        except StoreError as e:
            return fail(f"Database error: {e}")
        result.id = saved["id"]
        log(f"Saved: {saved['name']} (id: {saved['id']})")

        log("Linking to clients...")
        self._link_clients(saved["id"], listing, log)

        log(f"Done! View at: /skills/{listing.slug}")
        result.success = True
        return result

    def _discover(
        self, location: GitHubLocation, skill_file: Optional[str], log: Callable[[str], None]
    ) -> Tuple[Optional[DiscoveredFile], Optional[str], str, str]:
        """Return `(skill, readme, frontmatter_source, readme_path)`."""
        owner, repo = location.owner, location.repo

        if skill_file:
            content = self.fetcher.fetch_raw(owner, repo, skill_file)
            if content is None:
                return None, None, "", skill_file
            found = DiscoveredFile(path=skill_file, content=content)
            if found.path.rsplit("/", 1)[-1] in README_NAMES:
                log(f"Using plugin README: {skill_file} ({len(content)} bytes)")
                return None, content, content, skill_file
            log(f"Found: {found.path} ({len(content)} bytes)")
            readme = self.fetcher.fetch_readme(owner, repo, found.directory)
            log(f"README: {len(readme)} bytes" if readme else "No README found")
            return found, readme, content, "README.md"

        log("Searching for SKILL.md...")
        skill = self.fetcher.discover_skill_md(owner, repo, location.subpath)
        if skill:
            log(f"Found: {skill.path} ({len(skill.content)} bytes)")
            log("Fetching README...")
            readme = self.fetcher.fetch_readme(owner, repo, skill.directory)
            log(f"README: {len(readme)} bytes" if readme else "No README found")
            return skill, readme, skill.content, "README.md"

        log("No SKILL.md found - falling back to README-based import")
        agents_md = self.fetcher.fetch_raw(owner, repo, "AGENTS.md")
        if agents_md:
            log("Found AGENTS.md - using its frontmatter")
        log("Fetching README...")
        readme = self.fetcher.fetch_readme(owner, repo, location.subpath)
        if not readme:
            return None, None, "", "README.md"
        log(f"README: {len(readme)} bytes")
        return None, readme, agents_md or readme, "README.md"

    def _link_clients(self, skill_id: str, listing: Listing, log: Callable[[str], None]) -> None:
        for client_slug, instructions, is_primary in client_links(listing, client_slugs_for(listing.platforms)):
            client_id = self.store.get_client_id(client_slug)
            if client_id is None:
                log(f"Client not found: {client_slug}")
                continue
            try:
                self.store.upsert_listing_client(
                    ListingClient(
                        skill_id=skill_id,
                        client_id=client_id,
                        install_instructions=instructions,
                        is_primary=is_primary,
                    )
                )
            except StoreError as e:
                logger.warning("Could not link %s to %s: %s", listing.slug, client_slug, e)
                log(f"Could not link: {client_slug}")
                continue
            log(f"Linked: {client_slug}")

    # ---- batch modes ---------------------------------------------------

    def list_skills(self, url: str) -> Tuple[GitHubLocation, Optional[RepoMetadata], List[str]]:
        """Every SKILL.md path in a repo's conventional layouts.

        Raises:
            GitHubUrlError: if the URL cannot be parsed.
        """
        location = parse_github_url(url)
        meta = self.fetcher.fetch_repo_metadata(location.owner, location.repo)
        if meta is None:
            return location, None, []
        return location, meta, self.fetcher.list_all_skills(location.owner, location.repo)

    def existing_keys(self) -> Set[str]:
        """Dedup keys and lowercased GitHub URLs of every listing in the store."""
        keys: Set[str] = set()
        if self.store is None:
            return keys
        for row in self.store.iter_listings(status=None):
            keys.add(dedup_key(row.get("owner") or "", row.get("repo") or "", row.get("skill_path")))
            if row.get("github_url"):
                keys.add(row["github_url"].lower())
        return keys

    def import_batch(
        self,
        items: Iterable[Tuple[ImportOptions, Optional[str]]],
        delay: float = 1.0,
        on_result: Optional[Callable[[int, ImportResult], None]] = None,
    ) -> Tuple[BatchSummary, List[ImportResult]]:
        """Import items one at a time; one failure never stops the batch.

        Each item is `(options, skill_file)`. Listings whose slug was already
        imported earlier in the batch are counted as skipped.
        """
        summary = BatchSummary()
        results: List[ImportResult] = []
        seen_slugs = set()

        for index, (options, skill_file) in enumerate(items):
            if index and delay:
                self.sleep(delay)
            try:
                result = self.import_skill(options, skill_file=skill_file)
            except Exception as e:
                logger.exception("Unexpected error importing %s", options.url)
                result = ImportResult(success=False, error=str(e))

            if result.success and result.slug in seen_slugs:
                summary.skipped += 1
            elif result.success:
                summary.succeeded += 1
                seen_slugs.add(result.slug)
            else:
                summary.failed += 1
                summary.errors.append(f"{skill_file or options.url}: {result.error}")
            results.append(result)
            if on_result:
                on_result(index, result)

        return summary, results

    def import_repo_all(
        self,
        url: str,
        dry_run: bool = False,
        category: Optional[str] = None,
        delay: float = 1.0,
        on_result: Optional[Callable[[int, ImportResult], None]] = None,
    ) -> Tuple[BatchSummary, List[ImportResult]]:
        """Import every SKILL.md (and plugin README) found in a repo's tree."""
        location = parse_github_url(url)
        meta = self.fetcher.fetch_repo_metadata(location.owner, location.repo)
        if meta is None:
            summary = BatchSummary(failed=1, errors=[f"{url}: Could not fetch repo metadata. Is the repo public?"])
            return summary, []

        paths = self.fetcher.discover_tree_skills(location.owner, location.repo, meta.default_branch)
        if location.subpath:
            prefix = location.subpath.rstrip("/") + "/"
            paths = [p for p in paths if p.startswith(prefix)]
        logger.info("Found %d skill file(s) in %s", len(paths), location.full_name)

        base_url = f"https://github.com/{location.full_name}"
        items = [
            (ImportOptions(url=base_url, category=category, dry_run=dry_run), path)
            for path in paths
        ]
        return self.import_batch(items, delay=delay, on_result=on_result)
