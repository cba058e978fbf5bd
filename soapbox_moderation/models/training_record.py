"""Training case table - durable, insert-only log of moderator corrections."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Float, Integer, String, Text, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from soapbox_moderation.models.base import Base
from soapbox_moderation.models.training_case import (
    AIClassification,
    HumanDecision,
    ModeratorAction,
    Outcome,
    TrainingCase,
)
from soapbox_moderation.taxonomy import Category, Priority


class TrainingCaseRecord(Base):
    """Persisted training case.

    Maps to the 'training_cases' table. Rows are only ever inserted; the
    autoincrement id gives the append order.
    """
    __tablename__ = "training_cases"

    case_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    content_type: Mapped[str] = mapped_column(String(50), nullable=False)

    # AI classification snapshot
    ai_priority: Mapped[str] = mapped_column(String(20), nullable=False)
    ai_category: Mapped[str] = mapped_column(String(50), nullable=False)
    ai_confidence: Mapped[float] = mapped_column(Float, nullable=False)

    # Human decision
    final_priority: Mapped[str] = mapped_column(String(20), nullable=False)
    final_category: Mapped[str] = mapped_column(String(50), nullable=False)
    moderator_action: Mapped[str] = mapped_column(String(50), nullable=False)
    moderator_notes: Mapped[Optional[str]] = mapped_column(Text)
    moderator_id: Mapped[Optional[str]] = mapped_column(String(255))

    outcome: Mapped[str] = mapped_column(String(30), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<TrainingCaseRecord {self.case_id}: {self.ai_priority} -> {self.final_priority}>"

    @classmethod
    def from_case(cls, case: TrainingCase) -> "TrainingCaseRecord":
        """Build a row from a training case."""
        return cls(
            content=case.content,
            content_type=case.content_type,
            ai_priority=case.ai_classification.priority.value,
            ai_category=case.ai_classification.category.value,
            ai_confidence=case.ai_classification.confidence,
            final_priority=case.human_decision.final_priority.value,
            final_category=case.human_decision.final_category.value,
            moderator_action=case.human_decision.action.value,
            moderator_notes=case.human_decision.moderator_notes,
            moderator_id=case.human_decision.moderator_id,
            outcome=case.outcome.value,
            timestamp=case.timestamp,
        )

    def to_case(self) -> TrainingCase:
        """Rebuild the immutable training case."""
        timestamp = self.timestamp
        # SQLite drops tzinfo on the way back
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)

        return TrainingCase(
            content=self.content,
            content_type=self.content_type,
            ai_classification=AIClassification(
                priority=Priority(self.ai_priority),
                category=Category(self.ai_category),
                confidence=self.ai_confidence,
            ),
            human_decision=HumanDecision(
                final_priority=Priority(self.final_priority),
                final_category=Category(self.final_category),
                action=ModeratorAction(self.moderator_action),
                moderator_notes=self.moderator_notes,
                moderator_id=self.moderator_id,
            ),
            outcome=Outcome(self.outcome),
            timestamp=timestamp,
        )
