"""Storage layer for recap."""

from pathlib import Path
from typing import Union

from recap.storage.base import ItemStore
from recap.storage.database import Database
from recap.storage.item_repository import SQLAlchemyItemStore
from recap.storage.tag_repository import TagRepository


def open_store(location: Union[str, Path]) -> SQLAlchemyItemStore:
    """Open the item store at a location, creating its schema if needed."""
    return SQLAlchemyItemStore.open(location)


__all__ = [
    "Database",
    "ItemStore",
    "SQLAlchemyItemStore",
    "TagRepository",
    "open_store",
]
