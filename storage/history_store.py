"""
Progress history storage.

Provides an in-memory store for tests and single-process use, and an
SQLAlchemy-backed store for the web service. Both return a user's entries
ordered by timestamp and never modify entries once written.
"""

import logging
import threading
from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import DateTime, Float, Integer, JSON, String, create_engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker

from analysis.exceptions import PersistenceError
from analysis.interfaces import HistoryStore
from analysis.progress_tracker import ProgressEntry

logger = logging.getLogger(__name__)


class InMemoryHistoryStore(HistoryStore):
    """Dictionary-backed store; entries live for the lifetime of the object."""

    def __init__(self):
        self._entries: Dict[str, List[ProgressEntry]] = defaultdict(list)
        self._lock = threading.Lock()

    def append(self, user_id: str, entry: ProgressEntry) -> None:
        with self._lock:
            self._entries[user_id].append(entry)

    def read(self, user_id: str) -> List[ProgressEntry]:
        with self._lock:
            entries = list(self._entries.get(user_id, []))
        return sorted(entries, key=lambda e: (e.timestamp, e.resource_id))


class Base(DeclarativeBase):
    pass


class ProgressRecord(Base):
    __tablename__ = "progress_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    resource_id: Mapped[str] = mapped_column(String(255))
    completion_status: Mapped[str] = mapped_column(String(32), default='completed')
    timestamp: Mapped[datetime] = mapped_column(DateTime, index=True)
    overall_score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    composition_score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    color_score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    technique_score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    typography_score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    # Stored as a JSON object
    feedback: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    @classmethod
    def from_entry(cls, user_id: str, entry: ProgressEntry) -> 'ProgressRecord':
        scores = entry.category_scores or {}
        return cls(
            user_id=user_id,
            resource_id=entry.resource_id,
            completion_status=entry.completion_status,
            timestamp=entry.timestamp,
            overall_score=entry.overall_score,
            composition_score=scores.get('composition'),
            color_score=scores.get('color'),
            technique_score=scores.get('technique'),
            typography_score=entry.typography,
            feedback=entry.feedback
        )

    def to_entry(self) -> ProgressEntry:
        category_scores = None
        if None not in (self.composition_score, self.color_score, self.technique_score):
            category_scores = {
                'composition': self.composition_score,
                'color': self.color_score,
                'technique': self.technique_score
            }

        return ProgressEntry(
            timestamp=self.timestamp,
            resource_id=self.resource_id,
            completion_status=self.completion_status,
            overall_score=self.overall_score,
            category_scores=category_scores,
            typography=self.typography_score,
            feedback=self.feedback
        )


class SqlHistoryStore(HistoryStore):
    """
    Relational history store.

    Args:
        database_url: SQLAlchemy database URL, e.g. ``sqlite:///design_critique.db``
        create_tables: Whether to create the schema on startup
    """

    def __init__(self, database_url: str = "sqlite:///design_critique.db",
                 create_tables: bool = True):
        connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}

        try:
            self.engine = create_engine(
                database_url, echo=False, pool_pre_ping=True, connect_args=connect_args
            )
            self.session_factory = sessionmaker(self.engine, expire_on_commit=False)

            if create_tables:
                Base.metadata.create_all(self.engine)

        except SQLAlchemyError as e:
            logger.error(f"History store initialization failed: {str(e)}")
            raise PersistenceError(f"Could not open history store: {str(e)}") from e

        logger.info(f"SqlHistoryStore initialized ({self.engine.url.get_backend_name()})")

    def append(self, user_id: str, entry: ProgressEntry) -> None:
        try:
            with self.session_factory.begin() as session:
                session.add(ProgressRecord.from_entry(user_id, entry))

        except SQLAlchemyError as e:
            logger.error(f"Failed to store progress entry for {user_id}: {str(e)}")
            raise PersistenceError(f"Could not store progress entry: {str(e)}") from e

    def read(self, user_id: str) -> List[ProgressEntry]:
        query = (
            select(ProgressRecord)
            .where(ProgressRecord.user_id == user_id)
            .order_by(ProgressRecord.timestamp, ProgressRecord.resource_id, ProgressRecord.id)
        )

        try:
            with self.session_factory() as session:
                records = session.scalars(query).all()
                return [record.to_entry() for record in records]

        except SQLAlchemyError as e:
            logger.error(f"Failed to read progress history for {user_id}: {str(e)}")
            raise PersistenceError(f"Could not read progress history: {str(e)}") from e

    def dispose(self):
        self.engine.dispose()
