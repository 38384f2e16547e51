"""GitHub access: raw file fetches, repo metadata and SKILL.md discovery.

Every public method is total. Network failures and non-2xx responses never
raise; the `*_result` variants report which of the two happened, the
plain variants collapse both to None.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Set

import httpx

from .models import DiscoveredFile, RepoMetadata

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"
GITHUB_RAW = "https://raw.githubusercontent.com"
USER_AGENT = "mdskills-importer"
DEFAULT_TIMEOUT = 15.0

SKILL_DIRS = [".claude/skills", "skills"]
ROOT_CANDIDATES = ["SKILL.md", "skill.md", ".claude/skills/SKILL.md", "skills/SKILL.md"]
PLUGIN_MANIFEST_DIR = ".claude-plugin"


class FetchStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass
class FetchResult:
    status: FetchStatus
    value: Any = None
    error: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.status is FetchStatus.FOUND


class GitHubFetcher:
    """Thin synchronous GitHub client.

    Args:
        token: Optional personal access token, sent as a bearer token to the
            REST API only.
        client: Pre-built httpx client (tests pass one with a MockTransport).
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.token = token
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "GitHubFetcher":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def api_headers(self) -> dict:
        headers = {"Accept": "application/vnd.github.v3+json", "User-Agent": USER_AGENT}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    # ---- low level -----------------------------------------------------

    def _get(self, url: str, headers: dict, params: Optional[dict] = None) -> FetchResult:
        try:
            response = self.client.get(url, headers=headers, params=params)
        except httpx.HTTPError as e:
            logger.warning("GET %s failed: %s", url, e)
            return FetchResult(FetchStatus.ERROR, error=str(e))

        if response.status_code == 404:
            logger.debug("GET %s: not found", url)
            return FetchResult(FetchStatus.NOT_FOUND)
        if not response.is_success:
            message = f"GitHub {response.status_code}: {response.reason_phrase}"
            logger.warning("GET %s: %s", url, message)
            return FetchResult(FetchStatus.ERROR, error=message)
        return FetchResult(FetchStatus.FOUND, value=response)

    def fetch_raw_result(self, owner: str, repo: str, path: str) -> FetchResult:
        url = f"{GITHUB_RAW}/{owner}/{repo}/HEAD/{path.lstrip('/')}"
        result = self._get(url, headers={"User-Agent": USER_AGENT})
        if result.found:
            result.value = result.value.text
        return result

    def fetch_json_result(self, path: str, params: Optional[dict] = None) -> FetchResult:
        result = self._get(f"{GITHUB_API}/{path.lstrip('/')}", headers=self.api_headers, params=params)
        if result.found:
            try:
                result.value = result.value.json()
            except ValueError as e:
                logger.warning("Invalid JSON from %s: %s", path, e)
                return FetchResult(FetchStatus.ERROR, error=f"Invalid JSON: {e}")
        return result

    def fetch_raw(self, owner: str, repo: str, path: str) -> Optional[str]:
        """File text at the default branch head, or None."""
        result = self.fetch_raw_result(owner, repo, path)
        # An empty file counts as absent.
        return result.value if result.found and result.value else None

    # ---- repository ----------------------------------------------------

    def fetch_repo_metadata(self, owner: str, repo: str) -> Optional[RepoMetadata]:
        result = self.fetch_json_result(f"repos/{owner}/{repo}")
        if not result.found or not isinstance(result.value, dict):
            return None
        data = result.value
        license_info = data.get("license") or {}
        return RepoMetadata(
            description=data.get("description") or "",
            stars=data.get("stargazers_count") or 0,
            forks=data.get("forks_count") or 0,
            topics=list(data.get("topics") or []),
            license=license_info.get("spdx_id") or None,
            updated_at=data.get("updated_at"),
            default_branch=data.get("default_branch") or "main",
        )

    def list_directory(self, owner: str, repo: str, path: str) -> List[dict]:
        """Entries of a directory via the contents API; [] when unavailable."""
        result = self.fetch_json_result(f"repos/{owner}/{repo}/contents/{path}")
        if not result.found or not isinstance(result.value, list):
            return []
        return result.value

    def _subdirectories(self, owner: str, repo: str, path: str) -> List[str]:
        return [
            item["name"]
            for item in self.list_directory(owner, repo, path)
            if item.get("type") == "dir" and item.get("name")
        ]

    # ---- discovery -----------------------------------------------------

    def discover_skill_md(
        self, owner: str, repo: str, subpath: Optional[str] = None
    ) -> Optional[DiscoveredFile]:
        """Find the SKILL.md that best matches a URL; first hit wins."""
        candidates: List[str] = []
        if subpath:
            candidates += [f"{subpath}/SKILL.md", f"{subpath}/skill.md"]
        candidates += ROOT_CANDIDATES

        for path in candidates:
            content = self.fetch_raw(owner, repo, path)
            if content:
                return DiscoveredFile(path=path, content=content)

        for skills_dir in SKILL_DIRS:
            for name in self._subdirectories(owner, repo, skills_dir):
                path = f"{skills_dir}/{name}/SKILL.md"
                content = self.fetch_raw(owner, repo, path)
                if content:
                    return DiscoveredFile(path=path, content=content)
        return None

    def list_all_skills(self, owner: str, repo: str) -> List[str]:
        """Every SKILL.md path in the conventional layouts, root first."""
        found: List[str] = []
        for skills_dir in SKILL_DIRS:
            for name in self._subdirectories(owner, repo, skills_dir):
                path = f"{skills_dir}/{name}/SKILL.md"
                if self.fetch_raw(owner, repo, path):
                    found.append(path)
        if self.fetch_raw(owner, repo, "SKILL.md"):
            found.insert(0, "SKILL.md")
        return found

    def fetch_tree(self, owner: str, repo: str, ref: str = "HEAD") -> Optional[List[str]]:
        """All blob paths in the repo, or None if the tree is unavailable."""
        result = self.fetch_json_result(
            f"repos/{owner}/{repo}/git/trees/{ref}", params={"recursive": "1"}
        )
        if not result.found or not isinstance(result.value, dict):
            return None
        if result.value.get("truncated"):
            logger.warning("Tree listing for %s/%s was truncated", owner, repo)
        return [
            item["path"]
            for item in result.value.get("tree") or []
            if item.get("type") == "blob" and item.get("path")
        ]

    def discover_tree_skills(self, owner: str, repo: str, ref: str = "HEAD") -> List[str]:
        """Skill file paths for a whole-repo import.

        SKILL.md files come first in tree order. Plugin directories (those
        holding a `.claude-plugin/` manifest) without their own SKILL.md are
        added as their README.md.
        """
        blobs = self.fetch_tree(owner, repo, ref)
        if blobs is None:
            return []
        blob_set: Set[str] = set(blobs)

        skills = [p for p in blobs if p.rsplit("/", 1)[-1] in ("SKILL.md", "skill.md")]
        skill_dirs = {_parent(p) for p in skills}

        for path in blobs:
            parts = path.split("/")
            if PLUGIN_MANIFEST_DIR not in parts[:-1]:
                continue
            plugin_dir = "/".join(parts[: parts.index(PLUGIN_MANIFEST_DIR)])
            if plugin_dir in skill_dirs:
                continue
            readme = f"{plugin_dir}/README.md" if plugin_dir else "README.md"
            if readme in blob_set and readme not in skills:
                skills.append(readme)
                skill_dirs.add(plugin_dir)
        return skills

    def fetch_readme(self, owner: str, repo: str, skill_dir: Optional[str] = None) -> Optional[str]:
        """README.md beside the skill, falling back to the repo root."""
        if skill_dir:
            readme = self.fetch_raw(owner, repo, f"{skill_dir}/README.md")
            if readme:
                return readme
        return self.fetch_raw(owner, repo, "README.md")


def _parent(path: str) -> str:
    return path.rsplit("/", 1)[0] if "/" in path else ""
