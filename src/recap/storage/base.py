"""Abstract contract shared by every item store backend."""
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from recap.models.schema import Item, TrashedItem


class ItemStore(ABC):
    """Persistent, tag-indexed item storage.

    Every public operation is atomic: it either completes or leaves the
    store as it was before the call.
    """

    @abstractmethod
    def write(self, item: Item) -> Item:
        """Create the item (no ID) or update it (ID set).

        The item's stored tag set afterwards equals item.tags exactly.
        The ID and timestamp are written back onto the given item, which
        is also returned.
        """

    @abstractmethod
    def read(self, tags: Sequence[str]) -> List[Item]:
        """Return the items carrying at least one of the tags.

        Each item comes back with its full tag list. An empty tag list
        matches nothing.
        """

    @abstractmethod
    def trash(self, item: Item) -> TrashedItem:
        """Move a stored item to the trash archive."""

    @abstractmethod
    def tags(self) -> List[str]:
        """Return every known tag title, used or not."""

    @abstractmethod
    def get(self, item_id: int) -> Optional[Item]:
        """Return a single item by ID, or None."""

    @abstractmethod
    def find_by_title(self, title: str) -> List[Item]:
        """Return the items whose title matches exactly."""

    @abstractmethod
    def trashed(self) -> List[TrashedItem]:
        """Return the trash archive, oldest first."""

    def close(self) -> None:
        """Release any resources held by the store."""
