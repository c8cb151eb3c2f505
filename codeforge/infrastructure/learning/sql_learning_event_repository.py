"""Repository implementation for persisting learning events."""

import logging
import threading
from typing import List

from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from codeforge.application.interfaces.ilearning_sink import ILearningSink
from codeforge.domain.models import LearningEvent
from codeforge.infrastructure.entities.entity_base import EntityBase
from codeforge.infrastructure.entities.learning_event import LearningEventEntity


class SqlLearningEventRepository(ILearningSink):
    """Stores learning events in the ``learning_events`` table.

    Every call opens its own session, so one repository can serve concurrent
    pipeline runs.
    """

    def __init__(self, session_factory: sessionmaker):
        """Initialize the repository.

        Args:
            session_factory: Factory producing SQLAlchemy sessions
        """
        self.session_factory = session_factory
        self.logger = logging.getLogger(__name__)
        self._write_lock = threading.Lock()

    @classmethod
    def from_url(cls, db_url: str = "sqlite:///:memory:") -> "SqlLearningEventRepository":
        """Create a repository for a database URL, creating tables if needed.

        Args:
            db_url: Database URL. Defaults to in-memory SQLite.

        Returns:
            Repository bound to a new engine
        """
        if db_url.startswith("sqlite") and ":memory:" in db_url:
            # one shared connection, otherwise every thread sees an empty database
            engine = create_engine(
                db_url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            engine = create_engine(db_url)
        EntityBase.metadata.create_all(engine)
        return cls(sessionmaker(bind=engine))

    def record(self, event: LearningEvent) -> None:
        """Persist one event.

        Args:
            event: Event to store
        """
        entity = LearningEventEntity.from_domain_event(event)
        with self._write_lock:
            session: Session = self.session_factory()
            try:
                session.add(entity)
                session.commit()
                self.logger.debug(f"Recorded learning event {entity.id}")
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

    def recent(self, limit: int = 20) -> List[LearningEvent]:
        """Return the most recent events, newest first."""
        session: Session = self.session_factory()
        try:
            rows = session.scalars(
                select(LearningEventEntity)
                .order_by(LearningEventEntity.id.desc())
                .limit(limit)
            ).all()
            return [row.to_domain_event() for row in rows]
        finally:
            session.close()

    def count(self) -> int:
        session: Session = self.session_factory()
        try:
            return len(session.scalars(select(LearningEventEntity.id)).all())
        finally:
            session.close()
