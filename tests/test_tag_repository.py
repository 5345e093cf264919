"""Tests for tag upsert and link reconciliation."""
from sqlalchemy import func, select

from recap.models.db_models import DBItem, DBItemTag, DBTag
from recap.storage import TagRepository


def _new_item(session, title="Item"):
    db_item = DBItem(title=title, content="content")
    session.add(db_item)
    session.flush()
    return db_item.id


class TestTagRepository:
    """Tests for TagRepository against a real session."""

    def test_get_or_create_reuses_case_variants(self, database):
        repo = TagRepository()
        with database.transaction() as session:
            first = repo.get_or_create(session, "Work")
            second = repo.get_or_create(session, " WORK ")
            assert first.id == second.id
            assert second.title == "Work"
            assert second.title_key == "work"
            assert session.scalar(select(func.count()).select_from(DBTag)) == 1

    def test_get_unknown_tag(self, database):
        with database.transaction() as session:
            assert TagRepository().get(session, "nothing") is None

    def test_link_is_idempotent(self, database):
        repo = TagRepository()
        with database.transaction() as session:
            item_id = _new_item(session)
            tag = repo.get_or_create(session, "a")
            assert repo.link(session, item_id, tag.id) is True
            assert repo.link(session, item_id, tag.id) is False
            assert session.scalar(select(func.count()).select_from(DBItemTag)) == 1

    def test_reconcile_without_prune_only_adds(self, database):
        repo = TagRepository()
        with database.transaction() as session:
            item_id = _new_item(session)
            repo.reconcile(session, item_id, ["a", "b"])
            repo.reconcile(session, item_id, ["c"])
            assert repo.titles_for_item(session, item_id) == ["a", "b", "c"]

    def test_reconcile_with_prune(self, database):
        repo = TagRepository()
        with database.transaction() as session:
            item_id = _new_item(session)
            repo.reconcile(session, item_id, ["a", "b", "c"])
            repo.reconcile(session, item_id, ["B", "c", "d"], prune=True)
            assert sorted(repo.titles_for_item(session, item_id)) == ["b", "c", "d"]
            # Tag rows are never deleted
            assert sorted(repo.get_all(session)) == ["a", "b", "c", "d"]

    def test_prune_leaves_other_items_alone(self, database):
        repo = TagRepository()
        with database.transaction() as session:
            first = _new_item(session, "first")
            second = _new_item(session, "second")
            repo.reconcile(session, first, ["shared"])
            repo.reconcile(session, second, ["shared"])
            repo.reconcile(session, first, [], prune=True)
            assert repo.titles_for_item(session, first) == []
            assert repo.titles_for_item(session, second) == ["shared"]

    def test_titles_for_items(self, database):
        repo = TagRepository()
        with database.transaction() as session:
            first = _new_item(session, "first")
            second = _new_item(session, "second")
            untagged = _new_item(session, "untagged")
            repo.reconcile(session, first, ["x", "y"])
            repo.reconcile(session, second, ["y"])

            result = repo.titles_for_items(session, [first, second, untagged])
            assert result == {first: ["x", "y"], second: ["y"], untagged: []}
            assert repo.titles_for_items(session, []) == {}

    def test_unlink_all(self, database):
        repo = TagRepository()
        with database.transaction() as session:
            item_id = _new_item(session)
            repo.reconcile(session, item_id, ["a", "b"])
            assert repo.unlink_all(session, item_id) == 2
            assert repo.unlink_all(session, item_id) == 0
            assert repo.get_all(session) == ["a", "b"]
