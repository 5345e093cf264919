"""Utility functions for recap."""
from typing import Iterable, List, Optional


def tag_key(name: str) -> str:
    """Return the identity key of a tag name.

    Tags compare case-insensitively and ignore surrounding whitespace, so
    "Work", "work" and " WORK " share one key.

    Examples:
        >>> tag_key(" Work ")
        'work'
    """
    return name.strip().casefold()


def normalize_tags(tags: Iterable[str]) -> List[str]:
    """Strip tag names and drop case-insensitive duplicates.

    The first spelling of each tag wins and input order is kept.

    Raises:
        ValueError: If a tag is blank.
    """
    seen = set()
    result = []
    for tag in tags:
        name = tag.strip()
        if not name:
            raise ValueError("Tag names cannot be empty")
        key = tag_key(name)
        if key in seen:
            continue
        seen.add(key)
        result.append(name)
    return result


def parse_tags(tag_string: Optional[str]) -> List[str]:
    """Parse a comma-separated tag string into a list of tag names.

    Entries are trimmed and blank entries are dropped.

    Examples:
        "work, ideas ,  todo" -> ["work", "ideas", "todo"]
        "solo" -> ["solo"]
        " , " -> []

    Raises:
        ValueError: If no tag string was given at all.
    """
    if tag_string is None:
        raise ValueError("No tags provided")
    return [part.strip() for part in tag_string.split(",") if part.strip()]


def flatten_tags(tags: Iterable[str]) -> str:
    """Join tag names into the single space-separated string kept in the trash."""
    return " ".join(tags)
