"""Reference data seeded into a fresh local catalog."""

from typing import List

from ..inference.categories import CATEGORY_KEYWORDS, CATEGORY_NAMES
from ..models import Category, Client

CLIENT_NAMES = [
    ("claude-code", "Claude Code", "https://docs.anthropic.com/en/docs/claude-code"),
    ("claude-desktop", "Claude Desktop", "https://claude.ai/download"),
    ("cursor", "Cursor", "https://cursor.com"),
    ("vscode-copilot", "VS Code Copilot", "https://code.visualstudio.com"),
    ("windsurf", "Windsurf", "https://windsurf.com"),
    ("continue-dev", "Continue", "https://continue.dev"),
    ("codex", "Codex", "https://openai.com/codex"),
    ("gemini-cli", "Gemini CLI", "https://github.com/google-gemini/gemini-cli"),
    ("amp", "Amp", "https://ampcode.com"),
    ("roo-code", "Roo Code", "https://roocode.com"),
    ("goose", "Goose", "https://block.github.io/goose"),
    ("opencode", "OpenCode", "https://opencode.ai"),
    ("trae", "Trae", "https://trae.ai"),
    ("qodo", "Qodo", "https://qodo.ai"),
    ("command-code", "Command Code", "https://commandcode.ai"),
    ("chatgpt", "ChatGPT", "https://chatgpt.com"),
    ("gemini", "Gemini", "https://gemini.google.com"),
    ("github", "GitHub", "https://github.com"),
    ("vscode", "VS Code", "https://code.visualstudio.com"),
    ("grok", "Grok", "https://grok.com"),
    ("replit", "Replit", "https://replit.com"),
    ("firebender", "Firebender", "https://firebender.com"),
    ("spring-ai", "Spring AI", "https://spring.io/projects/spring-ai"),
    ("databricks", "Databricks", "https://databricks.com"),
    ("letta", "Letta", "https://letta.com"),
    ("factory", "Factory", "https://factory.ai"),
    ("agentman", "Agentman", "https://agentman.ai"),
]


def default_categories() -> List[Category]:
    return [
        Category(slug=slug, name=CATEGORY_NAMES.get(slug, slug), sort_order=i)
        for i, (slug, _) in enumerate(CATEGORY_KEYWORDS)
    ]


def default_clients() -> List[Client]:
    return [
        Client(slug=slug, name=name, website_url=url, sort_order=i)
        for i, (slug, name, url) in enumerate(CLIENT_NAMES)
    ]
