"""
Convert the raw landscape JSON document into validated catalog entries.

The document is a root object with an ``items`` list. Every item is converted
on its own; an item that cannot be converted is skipped so that one bad
record never costs the whole batch.
"""
from __future__ import annotations

import json
import logging
import math
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from landscape_catalog.domain import constants
from landscape_catalog.domain.exceptions import DocumentShapeError
from landscape_catalog.domain.models import CatalogEntry, EntryMetadata

logger = logging.getLogger(__name__)

# Candidate keys per field, tried in order. The first present, non-blank value wins.
ID_KEYS = ("id", "name")
NAME_KEYS = ("name",)
CATEGORY_KEYS = ("category",)
SUBCATEGORY_KEYS = ("subcategory",)
DESCRIPTION_KEYS = ("description",)
HOMEPAGE_KEYS = ("homepage_url", "homepage")
REPO_KEYS = ("repo_url", "repository_url")
MATURITY_KEYS = ("maturity", "project")

GITHUB_DATA_KEY = "github_data"

_FRACTION_RE = re.compile(r"\.(\d+)(?=[+-]\d{2}:?\d{2}$|$)")


def _text(item: Dict[str, Any], *keys: str) -> Optional[str]:
    """
    Return the first present, non-blank value among ``keys`` as text, else None.
    """
    for key in keys:
        value = item.get(key)
        if value is None or isinstance(value, (dict, list)):
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        text = str(value)
        if text.strip():
            return text
    return None


def _number(data: Dict[str, Any], key: str) -> float:
    value = data.get(key)
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str):
        try:
            result = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    # NaN and infinities count as missing
    if not math.isfinite(result):
        return 0.0
    return result


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 instant. Anything unparseable is treated as unknown (None).
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    # fromisoformat only takes 3 or 6 fractional digits before 3.11
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _string_list(item: Dict[str, Any], key: str) -> List[str]:
    values = item.get(key)
    if not isinstance(values, list):
        return []
    return [str(v).strip() for v in values if isinstance(v, (str, int, float)) and str(v).strip()]


def build_tags(item: Dict[str, Any]) -> List[str]:
    """
    Derive the tag list for an item from its maturity, category, landscape
    and open-source flag.
    """
    tags: List[str] = []

    maturity = _text(item, *MATURITY_KEYS)
    if maturity:
        tags.append(maturity.lower().strip())

    category = _text(item, *CATEGORY_KEYS)
    if category:
        tags.append(category.lower().strip().replace(" ", "-"))

    landscape = _text(item, "landscape")
    if landscape:
        tags.append(landscape.lower().strip())

    oss = _text(item, "oss")
    if oss is not None and oss.strip().lower() == "true":
        tags.append(constants.OPEN_SOURCE_TAG)

    if any(tier in tags for tier in constants.KNOWN_MATURITY_TIERS):
        tags.append(constants.CNCF_TAG)

    return tags


def build_metadata(item: Dict[str, Any]) -> EntryMetadata:
    github = item.get(GITHUB_DATA_KEY)
    if not isinstance(github, dict):
        github = {}

    return EntryMetadata(
        stars=_number(github, "stars"),
        forks=_number(github, "forks"),
        contributor_count=int(_number(github, "contributors")),
        license=_text(item, "license") or "",
        organization=_text(item, "organization") or "",
        latest_version=_text(item, "latest_version") or "",
        end_user_support=_text(item, "enduser_support") or "",
        acceptance_date=_text(item, "acceptance_date") or "",
        graduation_date=_text(item, "graduation_date") or "",
        maintainers=_string_list(item, "maintainers"),
        companies=_string_list(item, "companies"),
        last_commit_at=parse_timestamp(github.get("last_commit_at")),
        first_commit_at=parse_timestamp(github.get("first_commit_at")),
    )


def parse_item(item: Any) -> Optional[CatalogEntry]:
    """
    Convert a single landscape item.

    Returns None when the item has no usable identity. Raises
    ``pydantic.ValidationError`` when the remaining fields violate the entry
    invariants (blank name or category, negative counts).
    """
    if not isinstance(item, dict):
        return None

    entry_id = _text(item, *ID_KEYS)
    if entry_id is None:
        return None

    return CatalogEntry(
        id=entry_id,
        name=_text(item, *NAME_KEYS) or "",
        category=_text(item, *CATEGORY_KEYS) or "",
        subcategory=_text(item, *SUBCATEGORY_KEYS) or "",
        description=_text(item, *DESCRIPTION_KEYS) or "",
        homepage_url=_text(item, *HOMEPAGE_KEYS) or "",
        repo_url=_text(item, *REPO_KEYS) or "",
        maturity=_text(item, *MATURITY_KEYS) or "",
        tags=build_tags(item),
        metadata=build_metadata(item),
    )


def parse_landscape_document(raw_document: str) -> List[CatalogEntry]:
    """
    Parse the full landscape document.

    Raises:
        DocumentShapeError: If the document is not valid JSON or its root is not an object.
    """
    try:
        root = json.loads(raw_document)
    except ValueError as e:
        raise DocumentShapeError(f"Landscape document is not valid JSON: {e}") from e

    if not isinstance(root, dict):
        raise DocumentShapeError(
            f"Landscape document root must be an object, got {type(root).__name__}"
        )

    items = root.get("items")
    if not isinstance(items, list):
        logger.warning("Landscape document has no 'items' list")
        return []

    entries: List[CatalogEntry] = []
    for position, item in enumerate(items):
        try:
            entry = parse_item(item)
        except ValidationError as e:
            logger.debug(f"Skipping landscape item #{position}: {e.error_count()} validation error(s)")
            continue
        except (ValueError, TypeError, OverflowError) as e:
            logger.debug(f"Skipping landscape item #{position}: {e}")
            continue
        if entry is None:
            logger.debug(f"Skipping landscape item #{position}: no identity")
            continue
        entries.append(entry)

    logger.debug(f"Parsed {len(entries)} entries from {len(items)} landscape items")
    return entries
