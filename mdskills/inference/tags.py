"""Tag extraction from repo names, descriptions and README text."""

import re
from typing import Iterable, List, Optional

MAX_TAGS = 15
MAX_TOPIC_TAGS = 10

# Words that carry no meaning as a tag when split out of a repo name.
TAG_NOISE_WORDS = {
    "mcp", "ai", "agent", "skill", "claude", "code", "tool", "server",
    "plugin", "extension", "the", "for", "and", "with", "your", "app",
    "bot", "kit", "sdk", "api", "cli", "dev", "pro", "hub", "lab",
    "new", "open", "source", "free", "beta", "alpha", "v1", "v2",
    "use", "get", "run", "set", "add", "my", "its", "all", "any",
}

# Known technology/domain keywords mapped to a normalized tag.
TAG_KEYWORDS = {
    # Languages
    "python": "python", "typescript": "typescript", "javascript": "javascript",
    "rust": "rust", "golang": "golang", "ruby": "ruby", "java": "java",
    "swift": "swift", "kotlin": "kotlin", "php": "php", "csharp": "c-sharp",
    "c++": "cpp", "cpp": "cpp", "elixir": "elixir", "scala": "scala",
    "haskell": "haskell", "lua": "lua", "perl": "perl", "zig": "zig",
    # Frameworks and runtimes
    "react": "react", "vue": "vue", "angular": "angular", "nextjs": "nextjs",
    "svelte": "svelte", "django": "django", "flask": "flask", "express": "express",
    "fastapi": "fastapi", "rails": "rails", "laravel": "laravel", "spring": "spring",
    "nestjs": "nestjs", "nuxt": "nuxt", "remix": "remix", "astro": "astro",
    "gatsby": "gatsby", "electron": "electron", "tauri": "tauri",
    # Platforms and infrastructure
    "unity": "unity", "unreal": "unreal", "godot": "godot", "docker": "docker",
    "kubernetes": "kubernetes", "k8s": "kubernetes", "terraform": "terraform",
    "ansible": "ansible", "aws": "aws", "gcp": "gcp", "azure": "azure",
    "vercel": "vercel", "netlify": "netlify", "cloudflare": "cloudflare",
    "heroku": "heroku",
    # Databases and data
    "supabase": "supabase", "firebase": "firebase", "postgres": "postgresql",
    "postgresql": "postgresql", "mysql": "mysql", "mongodb": "mongodb",
    "redis": "redis", "sqlite": "sqlite", "prisma": "prisma", "drizzle": "drizzle",
    "elasticsearch": "elasticsearch", "dynamodb": "dynamodb",
    # Testing and quality
    "testing": "testing", "jest": "testing", "pytest": "testing", "vitest": "testing",
    "playwright": "testing", "cypress": "testing", "mocha": "testing",
    "lint": "linting", "eslint": "linting", "prettier": "formatting",
    # Security and auth
    "security": "security", "auth": "authentication", "oauth": "authentication",
    "jwt": "authentication",
    # DevOps
    "cicd": "ci-cd", "devops": "devops", "deployment": "deployment",
    "monitoring": "monitoring", "logging": "logging",
    # Version control
    "git": "git", "github": "github", "gitlab": "gitlab", "bitbucket": "bitbucket",
    # Domains
    "3d": "3d", "gamedev": "game-development", "game": "game-development",
    "blockchain": "blockchain", "crypto": "crypto", "web3": "web3",
    "ml": "machine-learning", "machine-learning": "machine-learning",
    # Editors and clients
    "vscode": "vscode", "vim": "vim", "neovim": "neovim", "cursor": "cursor",
    "windsurf": "windsurf", "emacs": "emacs",
    # Content and docs
    "markdown": "markdown", "documentation": "documentation",
    # Mobile
    "mobile": "mobile", "ios": "ios", "android": "android",
    # Data and AI
    "scraping": "web-scraping", "scraper": "web-scraping", "crawler": "web-scraping",
    "rag": "rag", "embeddings": "embeddings", "llm": "llm", "openai": "openai",
    "anthropic": "anthropic", "gemini": "gemini",
    # Integrations
    "slack": "slack", "discord": "discord", "notion": "notion", "jira": "jira",
    "figma": "figma", "linear": "linear", "trello": "trello", "asana": "asana",
    "stripe": "stripe", "shopify": "shopify", "wordpress": "wordpress",
    "twilio": "twilio", "sendgrid": "sendgrid", "sentry": "sentry",
    "datadog": "datadog", "grafana": "grafana", "prometheus": "prometheus",
    # Creative tools
    "blender": "blender", "photoshop": "photoshop", "illustrator": "illustrator",
    "maya": "maya", "cinema4d": "cinema4d", "davinci": "davinci-resolve",
    # Browsers
    "browser": "browser", "chrome": "chrome", "firefox": "firefox",
    "puppeteer": "puppeteer", "selenium": "selenium",
    # Finance
    "finance": "finance", "trading": "trading", "stocks": "finance",
    # Communication
    "email": "email", "whatsapp": "whatsapp", "telegram": "telegram",
    # Misc
    "graphql": "graphql", "grpc": "grpc", "rest-api": "rest-api",
    "restful": "rest-api", "websocket": "websocket", "regex": "regex",
    "cron": "cron", "queue": "queue", "cache": "caching", "pdf": "pdf",
    "csv": "csv", "json": "json", "yaml": "yaml", "xml": "xml",
}

_README_PATTERNS = [
    (re.compile(rf"\b{re.escape(keyword)}\b"), tag)
    for keyword, tag in TAG_KEYWORDS.items()
    if len(keyword) >= 3
]


def extract_tags_from_content(repo: str, description: str, readme: Optional[str]) -> List[str]:
    """Return deduplicated, normalized tags found in the three inputs."""
    tags: List[str] = []

    for part in re.split(r"[-_]+", (repo or "").lower()):
        if len(part) < 2 or part in TAG_NOISE_WORDS:
            continue
        if part in TAG_KEYWORDS:
            tags.append(TAG_KEYWORDS[part])

    for word in re.split(r"[\s,./;:()\[\]\"']+", (description or "").lower()):
        if len(word) >= 2 and word in TAG_KEYWORDS:
            tags.append(TAG_KEYWORDS[word])

    if readme:
        # Word boundaries keep "scala" from matching inside "scalable".
        snippet = readme[:500].lower()
        for pattern, tag in _README_PATTERNS:
            if pattern.search(snippet):
                tags.append(tag)

    return list(dict.fromkeys(tags))


def merge_tags(*groups: Iterable[str], limit: int = MAX_TAGS) -> List[str]:
    """Order-preserving union of tag lists, capped at `limit`."""
    merged: List[str] = []
    for group in groups:
        for tag in group or []:
            tag = (tag or "").strip()
            if tag and tag not in merged:
                merged.append(tag)
    return merged[:limit]
