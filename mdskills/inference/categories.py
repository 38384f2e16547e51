"""Category classification by weighted keyword scoring.

`CATEGORY_KEYWORDS` is ordered: when two categories reach the same score
the one listed first wins.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

DEFAULT_MIN_SCORE = 2
TOPIC_WEIGHT = 3
TEXT_WEIGHT = 1
IMPORT_README_WINDOW = 500
BACKFILL_README_WINDOW = 800

CATEGORY_KEYWORDS: List[Tuple[str, List[str]]] = [
    ("claude-code-plugins", ["claude code plugin", "claude plugin", "claude-code plugin", "slash-commands", "claude code skills", "claude code hooks"]),
    ("code-review", ["code review", "lint", "linting", "eslint", "prettier", "code quality", "static analysis", "code style"]),
    ("documentation", ["documentation", "docs", "readme", "jsdoc", "typedoc", "api docs", "docstring"]),
    ("testing", ["testing", "test", "jest", "mocha", "pytest", "unit test", "e2e", "qa", "quality assurance", "playwright", "cypress", "vitest"]),
    ("security", ["security", "vulnerability", "audit", "cve", "owasp", "pentest", "encryption", "auth", "authentication"]),
    ("api-development", ["api", "rest", "graphql", "openapi", "swagger", "endpoint", "webhook", "grpc"]),
    ("data-analysis", ["data analysis", "data science", "analytics", "visualization", "pandas", "jupyter", "notebook", "csv", "dataset"]),
    ("productivity", ["productivity", "automation", "workflow", "task", "todo", "scheduling", "time tracking", "cli tool"]),
    ("creative", ["creative", "writing", "content", "copywriting", "blog", "storytelling", "image", "art"]),
    ("design-systems", ["design system", "ui", "component", "tailwind", "css", "react component", "figma", "storybook", "frontend"]),
    ("information-architecture", ["information architecture", "navigation", "sitemap", "taxonomy", "content structure"]),
    ("resume-writing", ["resume", "cv", "cover letter", "career", "job", "hiring", "interview"]),
    ("devops-ci-cd", ["devops", "ci/cd", "docker", "kubernetes", "terraform", "github actions", "deployment", "infrastructure", "pipeline", "aws", "gcp", "azure"]),
    ("database-design", ["database", "sql", "postgres", "mysql", "mongodb", "schema", "migration", "orm", "prisma", "supabase"]),
    ("content-creation", ["content creation", "blog post", "marketing", "seo", "social media", "newsletter", "copywriting"]),
    ("research-analysis", ["research", "analysis", "literature review", "synthesis", "survey", "paper", "academic"]),
    ("code-generation", ["code generation", "scaffolding", "boilerplate", "generator", "template", "starter", "cli"]),
]

CATEGORY_NAMES = {
    "claude-code-plugins": "Claude Code Plugins",
    "code-review": "Code Review",
    "documentation": "Documentation",
    "testing": "Testing",
    "security": "Security",
    "api-development": "API Development",
    "data-analysis": "Data Analysis",
    "productivity": "Productivity",
    "creative": "Creative",
    "design-systems": "Design Systems",
    "information-architecture": "Information Architecture",
    "resume-writing": "Resume Writing",
    "devops-ci-cd": "DevOps & CI/CD",
    "database-design": "Database Design",
    "content-creation": "Content Creation",
    "research-analysis": "Research & Analysis",
    "code-generation": "Code Generation",
}

PLUGIN_CATEGORY = "claude-code-plugins"


@dataclass(frozen=True)
class CategoryMatch:
    slug: Optional[str]
    score: int


def score_categories(
    topics: Iterable[str],
    description: str = "",
    name: str = "",
    readme: Optional[str] = None,
    readme_window: int = IMPORT_README_WINDOW,
) -> CategoryMatch:
    """Score every category and return the best one with its score.

    A keyword found anywhere in the combined text scores 1, or 3 when one
    of the author-chosen `topics` contains it.
    """
    topics = [t for t in topics if t]
    lowered_topics = [t.lower() for t in topics]
    text = " ".join(
        [
            *topics,
            description or "",
            (name or "").replace("-", " ").replace("_", " "),
            (readme or "")[:readme_window],
        ]
    ).lower()

    best: Optional[str] = None
    best_score = 0
    for slug, keywords in CATEGORY_KEYWORDS:
        score = 0
        for keyword in keywords:
            if keyword in text:
                if any(keyword in topic for topic in lowered_topics):
                    score += TOPIC_WEIGHT
                else:
                    score += TEXT_WEIGHT
        if score > best_score:
            best, best_score = slug, score
    return CategoryMatch(slug=best, score=best_score)


def detect_category(
    topics: Iterable[str],
    description: str = "",
    name: str = "",
    readme: Optional[str] = None,
    min_score: int = DEFAULT_MIN_SCORE,
    readme_window: int = IMPORT_README_WINDOW,
) -> Optional[str]:
    """Best category slug, or None when no category reaches `min_score`."""
    match = score_categories(topics, description, name, readme, readme_window)
    if match.score >= min_score:
        return match.slug
    return None
