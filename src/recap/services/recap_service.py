"""Service layer for recap operations."""

import logging
from typing import List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from recap.exceptions import (
    EncryptionError,
    ItemNotFoundError,
    ItemValidationError,
)
from recap.models.schema import Item, TrashedItem
from recap.services.encryption import Encryptor
from recap.storage.base import ItemStore

logger = logging.getLogger(__name__)


def _require_text(value: Optional[str], field: str) -> None:
    if value is None or not value.strip():
        raise ItemValidationError(
            f"{field.capitalize()} is required", field=field
        )


class RecapService:
    """Operations offered to the command line on top of an item store."""

    def __init__(self, store: ItemStore, encryptor: Optional[Encryptor] = None):
        """Initialize the service.

        Args:
            store: Item storage backend.
            encryptor: Optional encryption collaborator. Needed only to
                write encrypted content or read it back in plaintext.
        """
        self.store = store
        self.encryptor = encryptor

    # ------------------------------------------------------------------
    # Encryption pass-through
    # ------------------------------------------------------------------

    def _require_encryptor(self) -> Encryptor:
        if self.encryptor is None:
            raise EncryptionError("No encryption backend configured")
        return self.encryptor

    def _encrypt(self, plaintext: str, key_id: str) -> str:
        encryptor = self._require_encryptor()
        try:
            return encryptor.encrypt(plaintext, key_id)
        except EncryptionError:
            raise
        except Exception as e:
            raise EncryptionError(
                f"Encryption failed: {e}", key_id=key_id, original_error=e
            ) from e

    def _decrypt(self, ciphertext: str) -> str:
        encryptor = self._require_encryptor()
        try:
            return encryptor.decrypt(ciphertext)
        except EncryptionError:
            raise
        except Exception as e:
            raise EncryptionError(
                f"Decryption failed: {e}", original_error=e
            ) from e

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def create_item(
        self,
        title: str,
        content: str,
        tags: Optional[Sequence[str]] = None,
        encrypt_key: Optional[str] = None,
    ) -> Item:
        """Create a new item.

        Args:
            title: Item title (required).
            content: Item content (required).
            tags: List of tag names.
            encrypt_key: Key ID to encrypt the content with. The content is
                stored in plaintext when None.

        Returns:
            The stored item, with its ID assigned.
        """
        _require_text(title, "title")
        _require_text(content, "content")

        encrypted = encrypt_key is not None
        if encrypted:
            content = self._encrypt(content, encrypt_key)

        try:
            item = Item(
                title=title,
                content=content,
                encrypted=encrypted,
                tags=list(tags or []),
            )
        except PydanticValidationError as e:
            raise ItemValidationError(f"Invalid item: {e}") from e

        return self.store.write(item)

    def get_item(self, item_id: int) -> Optional[Item]:
        return self.store.get(item_id)

    def get_item_by_title(self, title: str) -> Item:
        """Resolve the single item carrying a title.

        Raises:
            ItemNotFoundError: If no item has the title.
            ItemValidationError: If several items share it.
        """
        matches = self.store.find_by_title(title)
        if not matches:
            raise ItemNotFoundError(title, f"Item titled '{title}' not found")
        if len(matches) > 1:
            raise ItemValidationError(
                f"{len(matches)} items are titled '{title}', use an ID instead",
                field="title",
                value=title,
            )
        return matches[0]

    def update_item(
        self,
        item_id: int,
        title: Optional[str] = None,
        content: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
        encrypt_key: Optional[str] = None,
    ) -> Item:
        """Update an existing item.

        Fields left as None keep their stored value. Passing tags replaces
        the item's whole tag set. Passing new content together with an
        encrypt_key stores it encrypted; new content without a key is
        stored in plaintext.

        Raises:
            ItemNotFoundError: If the item does not exist.
        """
        item = self.store.get(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        return self._apply_update(item, title, content, tags, encrypt_key)

    def update_item_by_title(
        self,
        old_title: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
        encrypt_key: Optional[str] = None,
    ) -> Item:
        """Update the item currently titled old_title."""
        item = self.get_item_by_title(old_title)
        return self._apply_update(item, title, content, tags, encrypt_key)

    def _apply_update(
        self,
        item: Item,
        title: Optional[str],
        content: Optional[str],
        tags: Optional[Sequence[str]],
        encrypt_key: Optional[str],
    ) -> Item:
        if title is not None:
            _require_text(title, "title")
        if content is not None:
            _require_text(content, "content")
            if encrypt_key is not None:
                content = self._encrypt(content, encrypt_key)
            item_encrypted = encrypt_key is not None
        else:
            item_encrypted = item.encrypted

        try:
            updated = Item(
                id=item.id,
                title=title if title is not None else item.title,
                content=content if content is not None else item.content,
                encrypted=item_encrypted,
                timestamp=item.timestamp,
                tags=list(tags) if tags is not None else item.tags,
            )
        except PydanticValidationError as e:
            raise ItemValidationError(f"Invalid item: {e}") from e

        logger.debug(f"Updating item {item.id}")
        return self.store.write(updated)

    def find_by_tags(self, tags: Sequence[str], decrypt: bool = False) -> List[Item]:
        """Find items carrying any of the tags.

        Args:
            tags: Tag names, matched case-insensitively.
            decrypt: Return encrypted items with their content decrypted.
        """
        items = self.store.read(tags)
        if decrypt:
            for item in items:
                if item.encrypted:
                    item.content = self._decrypt(item.content)
                    item.encrypted = False
        return items

    def trash_item(self, item_id: int) -> TrashedItem:
        """Move an item to the trash.

        Raises:
            ItemNotFoundError: If the item does not exist.
        """
        item = self.store.get(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        return self.store.trash(item)

    def trash_item_by_title(self, title: str) -> TrashedItem:
        return self.store.trash(self.get_item_by_title(title))

    def list_tags(self) -> List[str]:
        """All tag titles, sorted case-insensitively."""
        return sorted(self.store.tags(), key=str.casefold)

    def list_trash(self) -> List[TrashedItem]:
        return self.store.trashed()
