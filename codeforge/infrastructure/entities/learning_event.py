"""Entity model for recorded pipeline outcomes."""

import json
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from codeforge.domain.models import LearningEvent
from .entity_base import EntityBase

__all__ = ["LearningEventEntity"]


class LearningEventEntity(EntityBase):
    """Database model for one pipeline run's learning event.

    Context and outcome are stored as JSON text so the schema does not
    follow every change in what the pipeline reports.
    """

    __tablename__ = "learning_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    prompt: Mapped[str] = mapped_column(Text, nullable=False)
    context_json: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    outcome_json: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    success: Mapped[bool] = mapped_column(Boolean, nullable=False)
    fingerprint: Mapped[str] = mapped_column(String(64), nullable=True)
    recorded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def to_domain_event(self) -> LearningEvent:
        """Convert to domain model.

        Returns:
            Domain model representation of this event
        """
        return LearningEvent(
            prompt=self.prompt,
            context=json.loads(self.context_json or "{}"),
            outcome=json.loads(self.outcome_json or "{}"),
            success=self.success,
            recorded_at=self.recorded_at,
        )

    @classmethod
    def from_domain_event(cls, event: LearningEvent) -> "LearningEventEntity":
        return cls(
            prompt=event.prompt,
            context_json=json.dumps(dict(event.context), default=str, sort_keys=True),
            outcome_json=json.dumps(dict(event.outcome), default=str, sort_keys=True),
            success=event.success,
            fingerprint=str(event.outcome.get("fingerprint") or "") or None,
            recorded_at=event.recorded_at,
        )
