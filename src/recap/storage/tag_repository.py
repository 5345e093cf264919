"""Repository for tags and item-tag links."""
import logging
from typing import Dict, List, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from recap.models.db_models import DBItemTag, DBTag
from recap.utils import normalize_tags, tag_key

logger = logging.getLogger(__name__)


class TagRepository:
    """Tag upsert and link reconciliation.

    Methods take the caller's session and never commit, so they run inside
    whatever transaction the item store has open.
    """

    def get(self, session: Session, tag_name: str) -> Optional[DBTag]:
        """Look up a tag by name, ignoring case."""
        return session.scalar(
            select(DBTag).where(DBTag.title_key == tag_key(tag_name))
        )

    def get_or_create(self, session: Session, tag_name: str) -> DBTag:
        """Get an existing tag or create a new one.

        Args:
            session: Open session.
            tag_name: Tag name in any case. New tags keep this spelling.

        Returns:
            The DBTag row, flushed so that it has an ID.
        """
        db_tag = self.get(session, tag_name)
        if db_tag is None:
            db_tag = DBTag(title=tag_name.strip(), title_key=tag_key(tag_name))
            session.add(db_tag)
            session.flush()
            logger.debug(f"Created tag {db_tag.title!r} (id={db_tag.id})")
        return db_tag

    def get_all(self, session: Session) -> List[str]:
        """Get every tag title, including tags no item uses."""
        return list(session.scalars(select(DBTag.title).order_by(DBTag.id)))

    def titles_for_item(self, session: Session, item_id: int) -> List[str]:
        """Get the titles of all tags linked to an item."""
        return list(
            session.scalars(
                select(DBTag.title)
                .join(DBItemTag, DBItemTag.tag_id == DBTag.id)
                .where(DBItemTag.item_id == item_id)
                .order_by(DBItemTag.id)
            )
        )

    def titles_for_items(self, session: Session, item_ids: Sequence[int]) -> Dict[int, List[str]]:
        """Get the tag titles for several items, keyed by item ID."""
        result: Dict[int, List[str]] = {item_id: [] for item_id in item_ids}
        if not item_ids:
            return result
        rows = session.execute(
            select(DBItemTag.item_id, DBTag.title)
            .join(DBTag, DBItemTag.tag_id == DBTag.id)
            .where(DBItemTag.item_id.in_(item_ids))
            .order_by(DBItemTag.id)
        ).all()
        for item_id, title in rows:
            result[item_id].append(title)
        return result

    def link(self, session: Session, item_id: int, tag_id: int) -> bool:
        """Link an item to a tag unless the link already exists.

        Returns:
            True if a new link was created.
        """
        existing = session.scalar(
            select(DBItemTag.id).where(
                DBItemTag.item_id == item_id, DBItemTag.tag_id == tag_id
            )
        )
        if existing is not None:
            return False
        session.add(DBItemTag(item_id=item_id, tag_id=tag_id))
        session.flush()
        return True

    def reconcile(
        self,
        session: Session,
        item_id: int,
        tag_names: Sequence[str],
        prune: bool = False,
    ) -> None:
        """Make the item's stored links match tag_names.

        Missing tags are created and missing links added. With prune set,
        links to tags that are not in tag_names are deleted afterwards.
        Pruning collects link IDs first and deletes them in a second pass.

        Args:
            session: Open session.
            item_id: ID of a stored item.
            tag_names: The complete new tag set.
            prune: Remove links that are no longer wanted (update path).
        """
        wanted = normalize_tags(tag_names)
        added = 0
        for name in wanted:
            db_tag = self.get_or_create(session, name)
            if self.link(session, item_id, db_tag.id):
                added += 1

        removed = 0
        if prune:
            wanted_keys = {tag_key(name) for name in wanted}
            stale_link_ids = [
                link_id
                for link_id, key in session.execute(
                    select(DBItemTag.id, DBTag.title_key)
                    .join(DBTag, DBItemTag.tag_id == DBTag.id)
                    .where(DBItemTag.item_id == item_id)
                ).all()
                if key not in wanted_keys
            ]
            if stale_link_ids:
                session.execute(
                    delete(DBItemTag).where(DBItemTag.id.in_(stale_link_ids))
                )
                removed = len(stale_link_ids)

        logger.debug(
            f"Reconciled tags for item {item_id}: {added} added, {removed} removed"
        )

    def unlink_all(self, session: Session, item_id: int) -> int:
        """Delete every link of an item. Returns the number of links removed."""
        result = session.execute(delete(DBItemTag).where(DBItemTag.item_id == item_id))
        return result.rowcount or 0
