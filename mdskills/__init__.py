"""mdskills - catalog tooling and CLI for the mdskills.ai skills marketplace"""

__version__ = "1.0.0"

from mdskills.frontmatter import parse_frontmatter
from mdskills.github_url import GitHubUrlError, parse_github_url
from mdskills.models import ImportOptions, ImportResult, Listing

__all__ = [
    "GitHubUrlError",
    "ImportOptions",
    "ImportResult",
    "Listing",
    "parse_frontmatter",
    "parse_github_url",
]
