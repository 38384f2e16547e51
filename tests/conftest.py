"""Shared pytest fixtures for mdskills tests."""

from pathlib import Path
from typing import Dict, List, Optional

import httpx
import pytest

from mdskills.fetcher import GitHubFetcher
from mdskills.models import Listing
from mdskills.store import SQLiteStore


SAMPLE_SKILL_MD = """---
name: pdf-tools
description: Extract text and tables from PDF files
tags: [pdf, documents]
---

# PDF Tools

Read a PDF file from disk and write the extracted text to a new file.
"""

SAMPLE_README = """# PDF Tools

A skill for working with PDF documents in Python.

## Install

Run `npx mdskills install acme/pdf-tools`.
"""


class FakeGitHub:
    """In-memory GitHub: raw files, repo metadata, directory listings, trees."""

    def __init__(self) -> None:
        self.files: Dict[str, str] = {}
        self.repos: Dict[str, dict] = {}
        self.dirs: Dict[str, List[dict]] = {}
        self.trees: Dict[str, List[str]] = {}
        self.fail_paths: set = set()
        self.requests: List[httpx.Request] = []

    def add_repo(self, full_name: str, **fields) -> None:
        data = {
            "description": "",
            "stargazers_count": 0,
            "forks_count": 0,
            "topics": [],
            "license": None,
            "default_branch": "main",
        }
        data.update(fields)
        self.repos[full_name] = data

    def add_file(self, full_name: str, path: str, content: str) -> None:
        self.files[f"{full_name}/{path}"] = content

    def add_dir(self, full_name: str, path: str, names: List[str]) -> None:
        self.dirs[f"{full_name}/{path}"] = [{"name": n, "type": "dir"} for n in names]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host
        path = request.url.path.lstrip("/")
        if path in self.fail_paths:
            return httpx.Response(500, text="boom")

        if host == "raw.githubusercontent.com":
            owner, repo, _ref, rest = path.split("/", 3)
            content = self.files.get(f"{owner}/{repo}/{rest}")
            if content is None:
                return httpx.Response(404, text="404: Not Found")
            return httpx.Response(200, text=content)

        parts = path.split("/")
        if parts[0] != "repos" or len(parts) < 3:
            return httpx.Response(404, json={"message": "Not Found"})
        full_name = f"{parts[1]}/{parts[2]}"
        if full_name not in self.repos:
            return httpx.Response(404, json={"message": "Not Found"})
        if len(parts) == 3:
            return httpx.Response(200, json=self.repos[full_name])
        if parts[3] == "contents":
            listing = self.dirs.get(f"{full_name}/{'/'.join(parts[4:])}")
            if listing is None:
                return httpx.Response(404, json={"message": "Not Found"})
            return httpx.Response(200, json=listing)
        if parts[3:5] == ["git", "trees"]:
            blobs = self.trees.get(full_name)
            if blobs is None:
                return httpx.Response(404, json={"message": "Not Found"})
            return httpx.Response(200, json={"tree": [{"path": p, "type": "blob"} for p in blobs], "truncated": False})
        return httpx.Response(404, json={"message": "Not Found"})


@pytest.fixture
def github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def fetcher(github: FakeGitHub) -> GitHubFetcher:
    client = httpx.Client(transport=httpx.MockTransport(github.handler))
    yield GitHubFetcher(client=client)
    client.close()


@pytest.fixture
def store(tmp_path: Path) -> SQLiteStore:
    db = SQLiteStore(tmp_path / "catalog.db")
    yield db
    db.close()


@pytest.fixture
def pdf_repo(github: FakeGitHub) -> FakeGitHub:
    """A single-skill repo with SKILL.md at the root and a README."""
    github.add_repo(
        "acme/pdf-tools",
        description="PDF helpers for agents",
        stargazers_count=42,
        forks_count=3,
        topics=["pdf", "documentation"],
        license={"spdx_id": "MIT"},
    )
    github.add_file("acme/pdf-tools", "SKILL.md", SAMPLE_SKILL_MD)
    github.add_file("acme/pdf-tools", "README.md", SAMPLE_README)
    return github


@pytest.fixture
def make_listing(store: SQLiteStore):
    """Insert a minimal listing and return its stored row."""

    def _make(slug: str, **fields) -> Optional[dict]:
        values = {
            "slug": slug,
            "name": slug.replace("-", " ").title(),
            "description": "",
            "owner": "acme",
            "repo": slug,
            "skill_path": "",
            "github_url": f"https://github.com/acme/{slug}",
            "content": "",
        }
        values.update(fields)
        store.upsert_listing(Listing(**values))
        return store.get_listing(slug)

    return _make
