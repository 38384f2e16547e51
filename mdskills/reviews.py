"""AI-written quality and security reviews for listings."""

import json
import logging
import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional

import anthropic

from .config import DEFAULT_REVIEW_MODEL
from .models import Permissions, SkillReview
from .store import CatalogStore, StoreError

logger = logging.getLogger(__name__)

MAX_CONTENT_CHARS = 6000
MAX_README_CHARS = 2000
MIN_CONTENT_CHARS = 50
MAX_TOKENS = 512

PERMISSION_LABELS = [
    ("filesystem_read", "Filesystem Read"),
    ("filesystem_write", "Filesystem Write"),
    ("shell_exec", "Shell Execution"),
    ("network_access", "Network Access"),
    ("git_write", "Git Write"),
]

REVIEW_PROMPT = """You are a senior AI agent security researcher reviewing a listing on mdskills.ai — a directory of skills, plugins, and MCP servers for AI coding agents.

Analyze the skill content below. Evaluate on three dimensions:

1. **Capabilities**: What does this skill actually enable an agent to do? Is it useful and well-scoped, or shallow/trivial? Are the instructions specific enough that an agent could execute them reliably without guessing?

2. **Quality**: Is the SKILL.md well-structured? Does it have clear trigger conditions (when to activate), step-by-step instructions, examples, and edge case handling? Does it use progressive disclosure (summary → details → advanced)? Would an agent or human understand exactly what this does out of the box?

3. **Security**: Review the declared permissions against what the instructions actually require. Flag any mismatches — e.g. shell execution used when not declared, or filesystem write requested but never needed. Look for: unvalidated shell commands, unconstrained file writes, credential/secret handling, network calls to hardcoded or unknown endpoints. Assess prompt injection surface — could a malicious file or input trick an agent into running dangerous commands through this skill?

---

SKILL.md CONTENT:
<CONTENT>

README (if available):
<README>

DECLARED PERMISSIONS:
<PERMISSIONS>

---

Respond ONLY with valid JSON (no markdown fences, no explanation) matching this exact schema:

{
  "summary": "One sentence (40-150 chars) capturing overall quality and what stands out",
  "strengths": ["strength 1", "strength 2"],
  "weaknesses": ["concern 1"],
  "quality_score": 7
}

Rules:
- summary: single sentence, 40-150 characters, do not mention the skill name
- strengths: 1-3 items, each under 80 characters, start with a present-tense verb
- weaknesses: 0-2 items, each under 80 characters, start with a present-tense verb. Use [] if no concerns
- quality_score: integer 1-10 (1=unusable, 4=weak, 6=decent, 8=excellent, 10=exceptional)
- Be honest and critical — a score of 7 is good, 9+ is rare
- Security concerns (especially undeclared permissions or prompt injection risk) should significantly impact the score
- A skill that requests permissions it doesn't need, or uses shell/network without declaring it, is a red flag"""

_FENCE_START = re.compile(r"^```(?:json)?\s*\n?", re.IGNORECASE)
_FENCE_END = re.compile(r"\n?```\s*$")


def format_permissions(permissions: Optional[Permissions]) -> str:
    if permissions is None:
        return "None declared"
    lines = [f"- {label}: YES" for key, label in PERMISSION_LABELS if getattr(permissions, key)]
    return "\n".join(lines) if lines else "None declared"


def build_review_prompt(content: str, readme: Optional[str], permissions: Optional[Permissions]) -> str:
    return (
        REVIEW_PROMPT.replace("<CONTENT>", content[:MAX_CONTENT_CHARS])
        .replace("<README>", readme[:MAX_README_CHARS] if readme else "None provided")
        .replace("<PERMISSIONS>", format_permissions(permissions))
    )


def parse_review(text: str) -> Optional[SkillReview]:
    """Validate a model reply; None unless it has the exact expected shape."""
    text = _FENCE_END.sub("", _FENCE_START.sub("", text.strip())).strip()
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        logger.warning("Review reply was not valid JSON")
        return None
    if not isinstance(data, dict):
        return None

    summary = data.get("summary")
    strengths = data.get("strengths")
    weaknesses = data.get("weaknesses")
    score = data.get("quality_score")
    if (
        not isinstance(summary, str)
        or len(summary) < 10
        or not isinstance(strengths, list)
        or not isinstance(weaknesses, list)
        or isinstance(score, bool)
        or not isinstance(score, (int, float))
        or not 1 <= score <= 10
    ):
        logger.warning("Review reply failed validation")
        return None
    return SkillReview(summary=summary, strengths=strengths, weaknesses=weaknesses, quality_score=score)


class SkillReviewer:
    """Generates one review per call; never retries."""

    def __init__(self, api_key: Optional[str] = None, model: str = DEFAULT_REVIEW_MODEL, client=None):
        self.model = model
        self.client = client or anthropic.Anthropic(api_key=api_key)

    def review(
        self, content: str, readme: Optional[str] = None, permissions: Optional[Permissions] = None
    ) -> Optional[SkillReview]:
        prompt = build_review_prompt(content, readme, permissions)
        try:
            message = self.client.messages.create(
                model=self.model,
                max_tokens=MAX_TOKENS,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            logger.warning("Review request failed: %s", e)
            return None

        block = message.content[0] if message.content else None
        if block is None or getattr(block, "type", None) != "text":
            return None
        return parse_review(block.text)


@dataclass
class ReviewOutcome:
    slug: str
    review: Optional[SkillReview] = None
    skipped: bool = False
    error: Optional[str] = None


@dataclass
class ReviewReport:
    applied: bool
    outcomes: List[ReviewOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.review is not None)

    @property
    def failed(self) -> int:
        return len(self.outcomes) - self.succeeded


def review_fields(review: SkillReview) -> dict:
    return {
        "review_summary": review.summary,
        "review_strengths": review.strengths,
        "review_weaknesses": review.weaknesses,
        "review_quality_score": review.quality_score,
        "review_generated_at": datetime.now(timezone.utc).isoformat(),
    }


def generate_reviews(
    store: CatalogStore,
    reviewer: SkillReviewer,
    apply: bool = False,
    regenerate_all: bool = False,
    slug: Optional[str] = None,
    delay: float = 0.5,
    sleep: Callable[[float], None] = time.sleep,
    on_outcome: Optional[Callable[[ReviewOutcome], None]] = None,
) -> ReviewReport:
    """Review listings, most installed first.

    Without `regenerate_all` only listings that were never reviewed are
    selected. Content shorter than 50 characters is skipped and counted as
    a failure.
    """
    if slug:
        row = store.get_listing(slug)
        rows = [row] if row else []
    else:
        rows = store.iter_listings(without_review=not regenerate_all, order_by="weekly_installs")
        rows = [r for r in rows if r.get("content")]

    report = ReviewReport(applied=apply)
    for row in rows:
        content = row.get("content") or ""
        if len(content) < MIN_CONTENT_CHARS:
            outcome = ReviewOutcome(slug=row["slug"], skipped=True)
        else:
            review = reviewer.review(content, row.get("readme"), Permissions.from_columns(row))
            outcome = ReviewOutcome(slug=row["slug"], review=review)
            if review is not None and apply:
                try:
                    store.update_listing(row["id"], review_fields(review))
                except StoreError as e:
                    logger.warning("Could not save review for %s: %s", row["slug"], e)
                    outcome.error = str(e)
            sleep(delay)
        report.outcomes.append(outcome)
        if on_outcome:
            on_outcome(outcome)
    return report
