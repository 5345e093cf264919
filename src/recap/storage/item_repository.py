"""SQLite-backed item store."""
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from recap.exceptions import (
    ErrorCode,
    ItemNotFoundError,
    ItemValidationError,
)
from recap.models.db_models import DBItem, DBItemTag, DBTag, DBTrashItem
from recap.models.schema import Item, TrashedItem, ensure_timezone_aware, utc_now
from recap.observability import traced
from recap.storage.base import ItemStore
from recap.storage.database import Database
from recap.storage.tag_repository import TagRepository
from recap.utils import flatten_tags, normalize_tags, tag_key

logger = logging.getLogger(__name__)


class SQLAlchemyItemStore(ItemStore):
    """Item store on top of a relational schema.

    Items, tags, item-tag links and the trash archive live in four tables.
    Each public method runs in exactly one transaction of the underlying
    Database; a failure anywhere rolls the whole operation back.
    """

    def __init__(self, database: Database, tag_repository: Optional[TagRepository] = None):
        """Initialize the store.

        Args:
            database: An open Database.
            tag_repository: Tag helper, created with defaults if None.
        """
        self.database = database
        self._tags = tag_repository or TagRepository()

    @classmethod
    def open(cls, location: Union[str, Path]) -> "SQLAlchemyItemStore":
        """Open a store at a location, creating the schema if needed."""
        return cls(Database.open(location))

    def close(self) -> None:
        self.database.close()

    def __enter__(self) -> "SQLAlchemyItemStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------

    @traced("write")
    def write(self, item: Item) -> Item:
        """Insert a new item or update a stored one.

        Raises:
            ItemValidationError: If title or content is blank, or a tag
                name is blank.
            ItemNotFoundError: If the item has an ID that is not stored.
            StorageError: If the database rejects the write.
        """
        self._validate(item)
        tags = self._validated_tags(item)
        now = utc_now()

        if not item.id:
            with self.database.transaction("write") as session:
                db_item = DBItem(
                    title=item.title,
                    content=item.content,
                    encrypted=item.encrypted,
                    timestamp=now,
                )
                session.add(db_item)
                session.flush()
                item_id = db_item.id
                self._tags.reconcile(session, item_id, tags)
            logger.info(f"Created item {item_id} with {len(tags)} tag(s)")
        else:
            item_id = item.id
            with self.database.transaction("write") as session:
                db_item = session.get(DBItem, item_id)
                if db_item is None:
                    raise ItemNotFoundError(item_id)
                db_item.title = item.title
                db_item.content = item.content
                db_item.encrypted = item.encrypted
                db_item.timestamp = now
                session.flush()
                self._tags.reconcile(session, item_id, tags, prune=True)
            logger.info(f"Updated item {item_id} with {len(tags)} tag(s)")

        # Only visible on the caller's item once the transaction committed
        item.id = item_id
        item.timestamp = now
        item.tags = tags
        return item

    @traced("read")
    def read(self, tags: Sequence[str]) -> List[Item]:
        """Return the items carrying any of the tags (case-insensitive)."""
        keys = sorted({tag_key(tag) for tag in tags if tag.strip()})
        if not keys:
            return []

        with self.database.transaction("read", ErrorCode.STORAGE_READ_FAILED) as session:
            db_items = session.scalars(
                select(DBItem)
                .join(DBItemTag, DBItemTag.item_id == DBItem.id)
                .join(DBTag, DBItemTag.tag_id == DBTag.id)
                .where(DBTag.title_key.in_(keys))
                .distinct()
                .order_by(DBItem.id)
            ).all()
            return self._to_items(session, db_items)

    @traced("trash")
    def trash(self, item: Item) -> TrashedItem:
        """Move a stored item into the trash archive.

        The snapshot takes its tags from storage, not from the given item.
        Tag rows are left alone; only the item's links are removed.

        Raises:
            ItemValidationError: If the item was never stored (no ID).
            ItemNotFoundError: If no item with that ID is stored.
            StorageError: If the database rejects the change.
        """
        if not item.id:
            raise ItemValidationError(
                "Only stored items can be trashed", field="id"
            )
        item_id = item.id

        with self.database.transaction("trash", ErrorCode.STORAGE_DELETE_FAILED) as session:
            db_item = session.get(DBItem, item_id)
            if db_item is None:
                raise ItemNotFoundError(item_id)

            db_trash = DBTrashItem(
                title=db_item.title,
                content=db_item.content,
                tags=flatten_tags(self._tags.titles_for_item(session, item_id)),
                encrypted=db_item.encrypted,
                timestamp=utc_now(),
            )
            session.add(db_trash)
            session.flush()

            # Links go first, the foreign keys reject the reverse order
            removed = self._tags.unlink_all(session, item_id)
            session.execute(delete(DBItem).where(DBItem.id == item_id))
            trashed = self._to_trashed(db_trash)

        logger.info(f"Trashed item {item_id} ({removed} tag link(s) removed)")
        return trashed

    @traced("tags")
    def tags(self) -> List[str]:
        """Return every tag title in storage."""
        with self.database.transaction("tags", ErrorCode.STORAGE_READ_FAILED) as session:
            return self._tags.get_all(session)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get(self, item_id: int) -> Optional[Item]:
        """Return the item with this ID, or None."""
        with self.database.transaction("get", ErrorCode.STORAGE_READ_FAILED) as session:
            db_item = session.get(DBItem, item_id)
            if db_item is None:
                return None
            return self._to_items(session, [db_item])[0]

    def find_by_title(self, title: str) -> List[Item]:
        """Return the items whose title equals the given one."""
        with self.database.transaction("find_by_title", ErrorCode.STORAGE_READ_FAILED) as session:
            db_items = session.scalars(
                select(DBItem).where(DBItem.title == title).order_by(DBItem.id)
            ).all()
            return self._to_items(session, db_items)

    def trashed(self) -> List[TrashedItem]:
        """Return every trashed item, oldest first."""
        with self.database.transaction("trashed", ErrorCode.STORAGE_READ_FAILED) as session:
            db_trash = session.scalars(
                select(DBTrashItem).order_by(DBTrashItem.id)
            ).all()
            return [self._to_trashed(row) for row in db_trash]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(item: Item) -> None:
        # Items built with model_construct() skip pydantic validation
        if not item.title or not item.title.strip():
            raise ItemValidationError("Title cannot be empty", field="title")
        if not item.content or not item.content.strip():
            raise ItemValidationError("Content cannot be empty", field="content")

    @staticmethod
    def _validated_tags(item: Item) -> List[str]:
        try:
            return normalize_tags(item.tags)
        except ValueError as e:
            raise ItemValidationError(str(e), field="tags", value=item.tags) from e

    def _to_items(self, session: Session, db_items: Sequence[DBItem]) -> List[Item]:
        tag_map = self._tags.titles_for_items(session, [row.id for row in db_items])
        return [
            Item(
                id=row.id,
                title=row.title,
                content=row.content,
                encrypted=row.encrypted,
                timestamp=ensure_timezone_aware(row.timestamp),
                tags=tag_map[row.id],
            )
            for row in db_items
        ]

    @staticmethod
    def _to_trashed(row: DBTrashItem) -> TrashedItem:
        return TrashedItem(
            id=row.id,
            title=row.title,
            content=row.content,
            tags=row.tags,
            encrypted=row.encrypted,
            trashed_at=ensure_timezone_aware(row.timestamp),
        )
