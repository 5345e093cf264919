"""SQLAlchemy database models for recap."""
from pathlib import Path
from typing import Union

from sqlalchemy import (Boolean, Column, DateTime, ForeignKey, Integer, String,
                        Text, UniqueConstraint, create_engine, event)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker
from sqlalchemy.pool import StaticPool

from recap.models.schema import utc_now

# Create base class for SQLAlchemy models
Base = declarative_base()

MEMORY_LOCATION = ":memory:"


class DBItem(Base):
    """Database model for a live item."""
    __tablename__ = "items"
    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False, index=True)
    content = Column(Text, nullable=False)
    encrypted = Column(Boolean, default=False, nullable=False)
    timestamp = Column(DateTime, default=utc_now, nullable=False)

    # Relationships
    tag_links = relationship("DBItemTag", back_populates="item")

    def __repr__(self) -> str:
        """Return string representation of item."""
        return f"<Item(id={self.id}, title='{self.title}')>"


class DBTag(Base):
    """Database model for a tag.

    title keeps the first spelling used, title_key is its case-folded form
    and carries the uniqueness constraint.
    """
    __tablename__ = "tags"
    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    title_key = Column(String(255), unique=True, nullable=False)

    # Relationships
    item_links = relationship("DBItemTag", back_populates="tag")

    def __repr__(self) -> str:
        """Return string representation of tag."""
        return f"<Tag(id={self.id}, title='{self.title}')>"


class DBItemTag(Base):
    """Database model for the link between an item and a tag."""
    __tablename__ = "item_tags"
    id = Column(Integer, primary_key=True, autoincrement=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False, index=True)
    tag_id = Column(Integer, ForeignKey("tags.id"), nullable=False, index=True)

    # Relationships
    item = relationship("DBItem", back_populates="tag_links")
    tag = relationship("DBTag", back_populates="item_links")

    __table_args__ = (
        UniqueConstraint("item_id", "tag_id", name="unique_item_tag"),
    )

    def __repr__(self) -> str:
        """Return string representation of item-tag link."""
        return f"<ItemTag(id={self.id}, item_id={self.item_id}, tag_id={self.tag_id})>"


class DBTrashItem(Base):
    """Database model for a trashed item snapshot.

    No foreign keys: trashing is a one-way move out of the live tables.
    """
    __tablename__ = "trash_items"
    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    content = Column(Text, nullable=False)
    tags = Column(Text, default="", nullable=False)
    encrypted = Column(Boolean, default=False, nullable=False)
    timestamp = Column(DateTime, default=utc_now, nullable=False)

    def __repr__(self) -> str:
        """Return string representation of trashed item."""
        return f"<TrashItem(id={self.id}, title='{self.title}')>"


def database_url(location: Union[str, Path]) -> str:
    """Turn a storage location into a SQLAlchemy URL.

    Accepts a full sqlite URL, ":memory:", or a filesystem path. Parent
    directories of a file path are created.
    """
    location = str(location)
    if location.startswith("sqlite:"):
        return location
    if location == MEMORY_LOCATION:
        return "sqlite://"
    db_path = Path(location).expanduser()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{db_path}"


def is_memory_url(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


def create_db_engine(location: Union[str, Path], echo: bool = False) -> Engine:
    """Create an engine for the location with recap's connection settings.

    - Foreign key enforcement on every connection
    - WAL journal mode for file databases
    - A single static connection for in-memory databases, so the data
      outlives each transaction
    """
    url = database_url(location)
    in_memory = is_memory_url(url)

    if in_memory:
        engine = create_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_engine(url, echo=echo)

    # Let SQLAlchemy own BEGIN so schema and data changes are transactional
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        if not in_memory:
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.close()

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


def init_db(engine: Engine) -> None:
    """Create all tables that do not exist yet, as one atomic unit."""
    with engine.begin() as conn:
        Base.metadata.create_all(conn)


def get_session_factory(engine: Engine):
    """Get a session factory for the database."""
    return sessionmaker(bind=engine, expire_on_commit=False)
