"""
Social Graph - Snapshot Storage
SQLAlchemy models for the last collected graph plus run bookkeeping.

Supports: SQLite (local) and PostgreSQL (shared)

Usage:
    db = SocialGraphDB("sqlite:///social_graph.db")
    db.save_snapshot(nodes, edges, posts, source="import")
    store = GraphStore(db.load_nodes(), db.load_edges())
    db.record_feed(len(feed))
    print(db.get_status())

Records are kept as the collector's raw dicts so a GraphStore built from the
database sees exactly what it would have seen from the JSON files.
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from sqlalchemy import (
    JSON, Column, DateTime, Integer, String, create_engine, event, func, select,
)
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger("social-graph.storage")

Base = declarative_base()


def _now():
    return datetime.now(timezone.utc)


class GraphNodeRow(Base):
    """A node record exactly as collected."""
    __tablename__ = "social_nodes"

    id = Column(Integer, primary_key=True, autoincrement=True)  # Preserves input order
    key = Column(String(256), index=True)
    data = Column(JSON, nullable=False)


class GraphEdgeRow(Base):
    __tablename__ = "social_edges"

    id = Column(Integer, primary_key=True, autoincrement=True)
    from_key = Column(String(256), index=True)
    to_key = Column(String(256), index=True)
    edge_type = Column(String(32))
    data = Column(JSON, nullable=False)


class PostRow(Base):
    """Candidate content for the feed."""
    __tablename__ = "social_posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    author_handle = Column(String(256), index=True)
    submolt = Column(String(128))
    data = Column(JSON, nullable=False)


class CollectionRun(Base):
    """One import/collection that replaced the snapshot."""
    __tablename__ = "collection_runs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    source = Column(String(64), nullable=False)   # amikonet, moltbook, import, manual
    nodes_count = Column(Integer, default=0)
    edges_count = Column(Integer, default=0)
    posts_count = Column(Integer, default=0)
    ran_at = Column(DateTime, default=_now)


class FeedRun(Base):
    __tablename__ = "feed_runs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    items_count = Column(Integer, default=0)
    generated_at = Column(DateTime, default=_now)


def database_exists(db_url: str) -> bool:
    """False only for a SQLite file that has not been created yet."""
    url = make_url(db_url)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        return Path(url.database).expanduser().exists()
    return True


def create_database(db_url: str = "sqlite:///social_graph.db"):
    """Create database and tables."""
    url = make_url(db_url)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).expanduser().parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(db_url)

    if db_url.startswith("sqlite"):
        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.execute("PRAGMA busy_timeout=5000")
            cursor.close()

    Base.metadata.create_all(engine)
    return engine


class SocialGraphDB:
    """Replace-on-write snapshot of nodes, edges and posts."""

    def __init__(self, db_url: str = "sqlite:///social_graph.db"):
        self.db_url = db_url
        self.engine = create_database(db_url)
        self.SessionMaker = sessionmaker(bind=self.engine)

    @contextmanager
    def _session(self) -> Session:
        """Context manager for database sessions."""
        session = self.SessionMaker()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # ==================== SNAPSHOT ====================

    def save_snapshot(self, nodes: List[dict], edges: List[dict], posts: List[dict],
                      source: str = "manual") -> dict:
        """
        Replace the stored graph with a new collection.

        Records that are not dicts are skipped. Returns the counts written.
        """
        nodes = [n for n in nodes if isinstance(n, dict)]
        edges = [e for e in edges if isinstance(e, dict)]
        posts = [p for p in posts if isinstance(p, dict)]

        with self._session() as session:
            session.query(GraphNodeRow).delete()
            session.query(GraphEdgeRow).delete()
            session.query(PostRow).delete()

            session.add_all(
                GraphNodeRow(key=n.get("key") or n.get("handle") or n.get("id") or n.get("did"), data=n)
                for n in nodes
            )
            session.add_all(
                GraphEdgeRow(from_key=e.get("from"), to_key=e.get("to"), edge_type=e.get("type"), data=e)
                for e in edges
            )
            session.add_all(
                PostRow(
                    author_handle=p.get("author_handle"),
                    submolt=p.get("submolt") if isinstance(p.get("submolt"), str) else None,
                    data=p,
                )
                for p in posts
            )
            session.add(CollectionRun(
                source=source,
                nodes_count=len(nodes),
                edges_count=len(edges),
                posts_count=len(posts),
            ))

        logger.info("Saved snapshot from %s: %d nodes, %d edges, %d posts",
                    source, len(nodes), len(edges), len(posts))
        return {"nodes": len(nodes), "edges": len(edges), "posts": len(posts)}

    def load_nodes(self) -> List[dict]:
        with self._session() as session:
            return [row.data for row in session.scalars(select(GraphNodeRow).order_by(GraphNodeRow.id))]

    def load_edges(self) -> List[dict]:
        with self._session() as session:
            return [row.data for row in session.scalars(select(GraphEdgeRow).order_by(GraphEdgeRow.id))]

    def load_posts(self, author_handle: Optional[str] = None) -> List[dict]:
        with self._session() as session:
            query = select(PostRow).order_by(PostRow.id)
            if author_handle:
                query = query.where(PostRow.author_handle == author_handle)
            return [row.data for row in session.scalars(query)]

    # ==================== BOOKKEEPING ====================

    def record_feed(self, items_count: int):
        with self._session() as session:
            session.add(FeedRun(items_count=items_count))

    def get_status(self) -> dict:
        """Counts plus the most recent collection and feed runs."""
        with self._session() as session:
            last_run = session.scalars(
                select(CollectionRun).order_by(CollectionRun.id.desc()).limit(1)
            ).first()
            last_feed = session.scalars(
                select(FeedRun).order_by(FeedRun.id.desc()).limit(1)
            ).first()
            return {
                "nodes": session.scalar(select(func.count()).select_from(GraphNodeRow)),
                "edges": session.scalar(select(func.count()).select_from(GraphEdgeRow)),
                "posts": session.scalar(select(func.count()).select_from(PostRow)),
                "collection": {
                    "source": last_run.source,
                    "ran_at": last_run.ran_at.isoformat() if last_run.ran_at else None,
                } if last_run else None,
                "feed": {
                    "items_count": last_feed.items_count,
                    "generated_at": last_feed.generated_at.isoformat() if last_feed.generated_at else None,
                } if last_feed else None,
            }
