"""Data models for recap."""

import datetime
from datetime import timezone
from typing import List, Optional, Set

from pydantic import BaseModel, Field, field_validator

from recap.utils import normalize_tags, tag_key


def utc_now() -> datetime.datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Current time with UTC timezone info attached.
    """
    return datetime.datetime.now(timezone.utc)


def ensure_timezone_aware(dt_value: Optional[datetime.datetime]) -> Optional[datetime.datetime]:
    """Ensure a datetime is timezone-aware, treating naive datetimes as UTC.

    SQLite hands datetimes back without tzinfo even when they were written
    as UTC.

    Args:
        dt_value: A datetime that may or may not have timezone info.

    Returns:
        The same datetime with UTC timezone if it was naive, otherwise unchanged.
    """
    if dt_value is None:
        return None
    if dt_value.tzinfo is None:
        return dt_value.replace(tzinfo=timezone.utc)
    return dt_value


class Item(BaseModel):
    """A short text record annotated with tags."""

    id: Optional[int] = Field(
        default=None, description="Storage ID, None until the item is first written"
    )
    title: str = Field(..., description="Title of the item")
    content: str = Field(..., description="Content, ciphertext when encrypted is set")
    encrypted: bool = Field(
        default=False, description="Whether content holds ciphertext"
    )
    timestamp: Optional[datetime.datetime] = Field(
        default=None, description="Last write time (UTC), set by the store"
    )
    tags: List[str] = Field(default_factory=list, description="Tag names")

    model_config = {"validate_assignment": True, "extra": "forbid"}

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: Optional[int]) -> Optional[int]:
        """Treat 0 as "not yet persisted" and reject negative IDs."""
        if v is None or v == 0:
            return None
        if v < 0:
            raise ValueError("Item ID cannot be negative")
        return v

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Validate that the title is not empty."""
        if not v.strip():
            raise ValueError("Title cannot be empty")
        return v

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        """Validate that the content is not empty."""
        if not v.strip():
            raise ValueError("Content cannot be empty")
        return v

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: List[str]) -> List[str]:
        """Strip tag names and collapse case-insensitive duplicates."""
        return normalize_tags(v)

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    def tag_set(self) -> Set[str]:
        """Return the case-folded set of this item's tags."""
        return {tag_key(tag) for tag in self.tags}

    def has_tag(self, name: str) -> bool:
        """Check whether the item carries a tag, ignoring case."""
        return tag_key(name) in self.tag_set()


class TrashedItem(BaseModel):
    """A snapshot of an item that was moved to the trash."""

    id: int = Field(..., description="ID of the trash record")
    title: str = Field(..., description="Title at the time of trashing")
    content: str = Field(..., description="Content at the time of trashing")
    tags: str = Field(default="", description="Tag names joined by spaces")
    encrypted: bool = Field(default=False)
    trashed_at: datetime.datetime = Field(
        default_factory=utc_now, description="When the item was trashed (UTC)"
    )

    model_config = {"frozen": True}

    @property
    def tag_list(self) -> List[str]:
        """Split the stored tag string on whitespace.

        Tags are kept space-joined, so a tag that itself contains a space
        comes back as several words.
        """
        return self.tags.split()
