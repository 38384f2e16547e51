"""Display-name inference."""

import re
from typing import Iterator, Optional

ACRONYMS = {
    "ai", "api", "aws", "ci", "cd", "cli", "cms", "cpu", "css", "csv",
    "db", "dns", "docx", "dom", "gcp", "gif", "gpu", "html", "http",
    "https", "ide", "io", "ip", "json", "jwt", "llm", "mcp", "ml",
    "npm", "os", "pdf", "pptx", "qa", "rag", "rest", "rpc", "sdk",
    "seo", "sql", "ssh", "ssl", "svg", "tls", "ui", "url", "ux",
    "vm", "xml", "xlsx", "yaml",
}

# Words whose canonical capitalization is not plain title case.
BRAND_NAMES = {
    "openai": "OpenAI",
    "github": "GitHub",
    "gitlab": "GitLab",
    "javascript": "JavaScript",
    "typescript": "TypeScript",
    "graphql": "GraphQL",
    "postgresql": "PostgreSQL",
    "mongodb": "MongoDB",
    "mysql": "MySQL",
    "sqlite": "SQLite",
    "nextjs": "Next.js",
    "nodejs": "Node.js",
    "vscode": "VS Code",
    "fastapi": "FastAPI",
    "devops": "DevOps",
    "macos": "macOS",
    "ios": "iOS",
    "youtube": "YouTube",
    "linkedin": "LinkedIn",
    "wordpress": "WordPress",
    "hubspot": "HubSpot",
    "chatgpt": "ChatGPT",
    "deepseek": "DeepSeek",
    "pytorch": "PyTorch",
    "tensorflow": "TensorFlow",
    "clickhouse": "ClickHouse",
    "dynamodb": "DynamoDB",
    "bigquery": "BigQuery",
}

MAX_HEADING_LENGTH = 80

_BOILERPLATE_HEADING = re.compile(
    r"^(?:installation|install|installing|license|licence|table of contents|contents|toc|"
    r"getting started|quick ?start|usage|overview|introduction|intro|readme|features|"
    r"requirements|prerequisites|contributing|changelog|documentation|docs|about|"
    r"setup|configuration|examples?|faq|support|credits|acknowledg(?:e)?ments)$",
    re.IGNORECASE,
)
_CODE_FENCE = re.compile(r"```[\s\S]*?(?:```|$)")
_HTML_H1 = re.compile(r"<h1[^>]*>([^<]+)</h1>", re.IGNORECASE)
_MD_H1 = re.compile(r"^#\s+(.+)$", re.MULTILINE)


def title_case(slug: str) -> str:
    """Turn `some-slug_name` into `Some Slug Name`, keeping acronyms and brands."""
    words = [w for w in re.sub(r"[-_]", " ", slug or "").split(" ") if w]
    out = []
    for word in words:
        lower = word.lower()
        if lower in BRAND_NAMES:
            out.append(BRAND_NAMES[lower])
        elif lower in ACRONYMS:
            out.append(word.upper())
        else:
            out.append(word[:1].upper() + word[1:].lower())
    return " ".join(out)


def _heading_candidates(readme: str) -> Iterator[str]:
    # HTML <h1> often sits above the markdown body, so it is checked first.
    text = _CODE_FENCE.sub("", readme)
    for match in _HTML_H1.finditer(text):
        yield match.group(1)
    for match in _MD_H1.finditer(text):
        yield match.group(1)


def clean_heading(heading: str) -> Optional[str]:
    """Return a usable display name from a README heading, or None."""
    heading = (heading or "").strip()
    if not heading or len(heading) >= MAX_HEADING_LENGTH:
        return None
    if "![" in heading or "`" in heading or "<img" in heading.lower():
        return None

    clean = re.sub(r"\[([^\]]*)\]\([^)]*\)", r"\1", heading)
    clean = re.sub(r"[*_`]", "", clean)
    clean = re.sub(r"^\W+", "", clean).strip()
    if not clean:
        return None
    if _BOILERPLATE_HEADING.match(clean.rstrip(":").strip()):
        return None
    return clean


def readme_heading(readme: Optional[str]) -> Optional[str]:
    if not readme:
        return None
    for candidate in _heading_candidates(readme):
        clean = clean_heading(candidate)
        if clean:
            return clean
    return None


def infer_display_name(
    repo_name: str,
    fm_name: str = "",
    readme: Optional[str] = None,
    skill_dir: Optional[str] = None,
) -> str:
    """Pick a human-readable name for a listing.

    Order: a frontmatter name with spaces as-is, a slug-style frontmatter
    name title-cased, the first usable README h1, then the title-cased
    frontmatter name, skill directory or repo name.
    """
    fm_name = (fm_name or "").strip()
    if fm_name and " " in fm_name:
        return fm_name
    if fm_name and ("-" in fm_name or "_" in fm_name):
        return title_case(fm_name)

    heading = readme_heading(readme)
    if heading:
        return heading

    dir_name = skill_dir.rstrip("/").split("/")[-1] if skill_dir else ""
    return title_case(fm_name or dir_name or repo_name)
