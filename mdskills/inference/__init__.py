"""Heuristic field inference for imported listings.

Every function here is pure and total: no I/O, no exceptions, and a
fallback value for any input.
"""

from .categories import CategoryMatch, detect_category, score_categories
from .classify import detect_artifact_type, detect_rules_format, detect_skill_type
from .description import description_from_readme, infer_description, truncate_text
from .names import infer_display_name, title_case
from .permissions import detect_permissions
from .platforms import client_slugs_for, clients_for_listing, detect_platforms
from .slugs import generate_slug, slugify
from .tags import extract_tags_from_content, merge_tags

__all__ = [
    "CategoryMatch",
    "client_slugs_for",
    "clients_for_listing",
    "description_from_readme",
    "detect_artifact_type",
    "detect_category",
    "detect_permissions",
    "detect_platforms",
    "detect_rules_format",
    "detect_skill_type",
    "extract_tags_from_content",
    "generate_slug",
    "infer_description",
    "infer_display_name",
    "merge_tags",
    "score_categories",
    "slugify",
    "title_case",
    "truncate_text",
]
