"""Data models for catalog listings and the import pipeline
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

ARTIFACT_TYPES = [
    "skill_pack",
    "mcp_server",
    "workflow_pack",
    "ruleset",
    "openapi_action",
    "extension",
    "template_bundle",
    "plugin",
]

FORMAT_STANDARDS = [
    "skill_md",
    "agents_md",
    "claude_md",
    "cursorrules",
    "mdc",
    "copilot_instructions",
    "gemini_md",
    "windsurf_rules",
    "clinerules",
    "generic",
]


@dataclass
class GitHubLocation:
    """A parsed GitHub source: owner/repo plus an optional directory inside it"""

    owner: str
    repo: str
    subpath: Optional[str] = None
    # Set when the URL names a single rules file (.mdc, .cursorrules, AGENTS.md).
    file: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    def display(self) -> str:
        if self.file:
            return f"{self.full_name}/{self.file}"
        if self.subpath:
            return f"{self.full_name}/{self.subpath}"
        return self.full_name

    def github_url(self, default_branch: str = "main") -> str:
        base = f"https://github.com/{self.owner}/{self.repo}"
        if self.file:
            return f"{base}/blob/{default_branch}/{self.file}"
        if self.subpath:
            return f"{base}/tree/{default_branch}/{self.subpath}"
        return base


@dataclass
class RepoMetadata:
    """Repository facts returned by the GitHub REST API"""

    description: str = ""
    stars: int = 0
    forks: int = 0
    topics: List[str] = field(default_factory=list)
    license: Optional[str] = None
    updated_at: Optional[str] = None
    default_branch: str = "main"


@dataclass
class Frontmatter:
    """Result of splitting a leading `---` block from a markdown body"""

    raw: Dict[str, str] = field(default_factory=dict)
    tags: List[str] = field(default_factory=list)
    compatibility: List[str] = field(default_factory=list)
    body: str = ""

    @property
    def name(self) -> str:
        return self.raw.get("name", "")

    @property
    def description(self) -> str:
        return self.raw.get("description", "")

    @property
    def license(self) -> Optional[str]:
        return self.raw.get("license")


@dataclass
class DiscoveredFile:
    """A markdown file located in a repo, with its path relative to the root"""

    path: str
    content: str

    @property
    def directory(self) -> Optional[str]:
        if "/" not in self.path:
            return None
        return self.path.rsplit("/", 1)[0]


@dataclass
class Permissions:
    """Inferred capability flags shown to users next to a listing.

    These come from keyword matching and are a display hint only.
    """

    filesystem_read: bool = False
    filesystem_write: bool = False
    shell_exec: bool = False
    network_access: bool = False
    git_write: bool = False

    def to_columns(self) -> Dict[str, bool]:
        return {f"perm_{key}": value for key, value in asdict(self).items()}

    @classmethod
    def from_columns(cls, row: Dict[str, Any]) -> "Permissions":
        return cls(
            filesystem_read=bool(row.get("perm_filesystem_read")),
            filesystem_write=bool(row.get("perm_filesystem_write")),
            shell_exec=bool(row.get("perm_shell_exec")),
            network_access=bool(row.get("perm_network_access")),
            git_write=bool(row.get("perm_git_write")),
        )

    def active(self) -> List[str]:
        return [key for key, value in asdict(self).items() if value]


@dataclass
class Listing:
    """A catalog entry, one row of the `skills` table"""

    slug: str
    name: str
    description: str
    owner: str
    repo: str
    skill_path: str
    github_url: str
    content: str
    readme: Optional[str] = None
    artifact_type: str = "skill_pack"
    format_standard: str = "skill_md"
    platforms: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    permissions: Permissions = field(default_factory=Permissions)
    category_id: Optional[str] = None
    status: str = "published"
    featured: bool = False
    skill_type: str = "skill"
    has_plugin: bool = False
    has_examples: bool = False
    difficulty: str = "intermediate"
    author_username: Optional[str] = None
    github_stars: int = 0
    github_forks: int = 0
    license: Optional[str] = None
    weekly_installs: int = 0
    mdskills_upvotes: int = 0
    mdskills_forks: int = 0

    def to_record(self) -> Dict[str, Any]:
        """Flatten into the column layout used by both stores."""
        record = asdict(self)
        record.pop("permissions")
        record.update(self.permissions.to_columns())
        return record


@dataclass
class ListingClient:
    """Join row linking a listing to a client with install instructions"""

    skill_id: str
    client_id: str
    install_instructions: str
    is_primary: bool = False


@dataclass
class Category:
    slug: str
    name: str
    id: Optional[str] = None
    description: Optional[str] = None
    sort_order: int = 0


@dataclass
class Client:
    slug: str
    name: str
    id: Optional[str] = None
    website_url: Optional[str] = None
    sort_order: int = 0


@dataclass
class ImportOptions:
    """Caller-supplied import request; explicit values override inference"""

    url: str
    slug: Optional[str] = None
    name: Optional[str] = None
    category: Optional[str] = None
    platforms: Optional[List[str]] = None
    artifact_type: Optional[str] = None
    format_standard: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    dry_run: bool = False


@dataclass
class ImportResult:
    success: bool
    slug: Optional[str] = None
    name: Optional[str] = None
    id: Optional[str] = None
    error: Optional[str] = None
    logs: List[str] = field(default_factory=list)
    listing: Optional[Listing] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "slug": self.slug,
            "name": self.name,
            "id": self.id,
            "error": self.error,
            "logs": list(self.logs),
        }


@dataclass
class BatchSummary:
    """Running tally for a sequential batch of imports or updates"""

    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.succeeded + self.failed + self.skipped


@dataclass
class SkillReview:
    summary: str
    strengths: List[str] = field(default_factory=list)
    weaknesses: List[str] = field(default_factory=list)
    quality_score: int = 0


@dataclass
class TagCount:
    tag: str
    count: int
