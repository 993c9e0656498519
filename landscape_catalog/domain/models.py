"""
Pydantic models for the landscape catalog.

This module defines all data models used throughout the application, including:
- Catalog entries and their popularity metadata
- The snapshot that holds the cached catalog and refresh bookkeeping
- Search queries and scored results

All models are immutable so a snapshot handed to a reader can never change
underneath it.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from landscape_catalog.domain import constants
from landscape_catalog.domain.exceptions import QueryValidationError


def _dedupe(values: Any) -> Tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, str):
        values = [values]
    seen: list[str] = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return tuple(seen)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ---------------------------------------------------------------------------
# Catalog Entry Models
# ---------------------------------------------------------------------------


class EntryMetadata(BaseModel):
    """
    Popularity and descriptive metadata for a catalog entry.

    Collections are never None: an empty tuple is how "no data" is represented.
    """

    model_config = ConfigDict(frozen=True)

    stars: float = Field(default=0.0, ge=0, description="Repository stars.")
    forks: float = Field(default=0.0, ge=0, description="Repository forks.")
    contributor_count: int = Field(default=0, ge=0, description="Number of contributors.")
    license: str = Field(default="", description="License identifier.")
    organization: str = Field(default="", description="Owning organization.")
    latest_version: str = Field(default="", description="Latest released version.")
    end_user_support: str = Field(default="", description="End-user support flag as published.")
    acceptance_date: str = Field(default="", description="Date the project was accepted, as published.")
    graduation_date: str = Field(default="", description="Date the project graduated, as published.")
    maintainers: Tuple[str, ...] = Field(default=(), description="Maintainer names.")
    companies: Tuple[str, ...] = Field(default=(), description="Companies backing the project.")
    last_commit_at: Optional[datetime] = Field(
        default=None,
        description="Timestamp of the most recent commit, if known.",
    )
    first_commit_at: Optional[datetime] = Field(
        default=None,
        description="Timestamp of the first commit, if known.",
    )

    @field_validator("maintainers", "companies", mode="before")
    @classmethod
    def _collections_never_none(cls, value: Any) -> Tuple[str, ...]:
        return _dedupe(value)

    @field_validator("last_commit_at", "first_commit_at")
    @classmethod
    def _timestamps_are_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(value)

    def is_actively_maintained(self, now: Optional[datetime] = None) -> bool:
        """
        True if the last commit happened within the maintenance window of ``now``.
        """
        if self.last_commit_at is None:
            return False
        now = _as_utc(now) or datetime.now(timezone.utc)
        window = timedelta(days=constants.ACTIVE_MAINTENANCE_DAYS)
        return self.last_commit_at > now - window


class CatalogEntry(BaseModel):
    """
    One project record from the landscape.

    ``id``, ``name`` and ``category`` must be non-blank; construction fails
    otherwise, so a partially-built entry never exists.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Stable identifier of the entry.")
    name: str = Field(description="Display name of the project.")
    category: str = Field(description="Landscape category.")
    subcategory: str = Field(default="", description="Landscape subcategory.")
    description: str = Field(default="", description="Short project description.")
    homepage_url: str = Field(default="", description="Project homepage.")
    repo_url: str = Field(default="", description="Source repository URL.")
    maturity: str = Field(
        default="",
        description="Maturity level (sandbox, incubating, graduated, or free-form).",
    )
    tags: Tuple[str, ...] = Field(default=(), description="Tags, duplicates removed.")
    metadata: Optional[EntryMetadata] = None

    @field_validator("id", "name", "category")
    @classmethod
    def _require_text(cls, value: str, info) -> str:
        if not value or not value.strip():
            raise ValueError(f"{info.field_name} cannot be empty")
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def _dedupe_tags(cls, value: Any) -> Tuple[str, ...]:
        return _dedupe(value)

    @property
    def stars(self) -> float:
        return self.metadata.stars if self.metadata is not None else 0.0

    @property
    def is_popular(self) -> bool:
        return self.metadata is not None and self.metadata.stars >= constants.POPULAR_STARS

    @property
    def is_graduated(self) -> bool:
        return self.maturity.lower() == constants.MATURITY_GRADUATED

    @property
    def quality_rating(self) -> str:
        """
        Star rating derived from popularity alone; unrelated to search relevance.
        """
        if self.metadata is None:
            return "⭐⭐"
        stars = self.metadata.stars
        top, high, mid = constants.QUALITY_TIER_STARS
        if stars >= top:
            return "⭐⭐⭐⭐⭐"
        if stars >= high:
            return "⭐⭐⭐⭐"
        if stars >= mid:
            return "⭐⭐⭐"
        return "⭐⭐"


# ---------------------------------------------------------------------------
# Snapshot Models
# ---------------------------------------------------------------------------


class ErrorSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RefreshOutcome(str, Enum):
    """Result of a single refresh attempt."""

    PUBLISHED = "published"
    UNCHANGED = "unchanged"
    SOFT_FAILURE = "soft_failure"
    HARD_FAILURE = "hard_failure"


class ErrorRecord(BaseModel):
    """
    The most recent refresh failure, kept for observability and backoff.
    """

    model_config = ConfigDict(frozen=True)

    message: str
    occurred_at: datetime
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    retry_delay_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Suggested delay before a caller retries. The catalog never sleeps itself.",
    )
    recoverable: bool = False


class Snapshot(BaseModel):
    """
    The atomic unit of cache state.

    A snapshot is never modified; every refresh or failure produces a new one.
    """

    model_config = ConfigDict(frozen=True)

    entries: Tuple[CatalogEntry, ...] = ()
    fingerprint: Optional[str] = Field(
        default=None,
        description="Hash of the source document the entries were parsed from.",
    )
    last_refresh: Optional[datetime] = Field(
        default=None,
        description="When entries were last published. None until the first success.",
    )
    last_error: Optional[ErrorRecord] = None


# ---------------------------------------------------------------------------
# Search Models
# ---------------------------------------------------------------------------


def _first_error_message(error: ValidationError) -> str:
    details = error.errors()
    if not details:
        return str(error)
    cause = details[0].get("ctx", {}).get("error")
    if cause is not None:
        return str(cause)
    return details[0]["msg"]


class SearchQuery(BaseModel):
    """
    Search criteria. Invalid combinations are rejected at construction,
    before any snapshot is touched.
    """

    model_config = ConfigDict(frozen=True)

    keyword: Optional[str] = None
    category: Optional[str] = None
    limit: int = Field(
        default=constants.DEFAULT_SEARCH_LIMIT,
        ge=1,
        le=constants.MAX_SEARCH_RESULTS,
    )

    @field_validator("keyword", "category", mode="before")
    @classmethod
    def _blank_is_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("keyword")
    @classmethod
    def _keyword_min_length(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and len(value) < constants.MIN_QUERY_LENGTH:
            raise ValueError(
                f"Keyword must be at least {constants.MIN_QUERY_LENGTH} characters"
            )
        return value

    @classmethod
    def build(
        cls,
        keyword: Optional[str] = None,
        category: Optional[str] = None,
        limit: Union[int, str, None] = None,
    ) -> "SearchQuery":
        """
        Build a query from raw caller input.

        An unset or non-positive limit falls back to the default; a limit above
        the maximum is clamped to it. A limit given as text must be an integer.
        """
        if isinstance(limit, str):
            text = limit.strip()
            try:
                limit = int(text) if text else None
            except ValueError as e:
                raise QueryValidationError(f"Limit must be an integer, got '{limit}'") from e
        if limit is None or limit <= 0:
            limit = constants.DEFAULT_SEARCH_LIMIT
        limit = min(limit, constants.MAX_SEARCH_RESULTS)
        try:
            return cls(keyword=keyword, category=category, limit=limit)
        except ValidationError as e:
            raise QueryValidationError(_first_error_message(e)) from e

    @property
    def scope(self) -> str:
        if self.category:
            return f"category: {self.category}"
        if self.keyword:
            return f"keyword: {self.keyword}"
        return "all projects"


class ScoredResult(BaseModel):
    """A catalog entry paired with its relevance score."""

    model_config = ConfigDict(frozen=True)

    entry: CatalogEntry
    relevance_score: float = Field(ge=0, le=constants.MAX_SCORE)
    matched_field: str = Field(
        default="",
        description="Field that produced the primary match (name, description, category, tags).",
    )

    @property
    def is_high_relevance(self) -> bool:
        # The threshold is on a 0-1 confidence scale, so any scored result passes.
        return self.relevance_score >= constants.CONFIDENCE_THRESHOLD

    @property
    def summary(self) -> str:
        return f"{self.entry.name} ({self.entry.category}) - Score: {self.relevance_score:.1f}"
