"""Training case model - a classifier prediction paired with a human decision."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from soapbox_moderation.models.classification import ClassificationResult
from soapbox_moderation.taxonomy import Category, Priority


class Outcome(str, Enum):
    """How the classifier's priority compared with the moderator's."""
    CORRECT = "correct"
    UNDER_CLASSIFIED = "under_classified"
    OVER_CLASSIFIED = "over_classified"


class ModeratorAction(str, Enum):
    """Action a human moderator took on the content."""
    APPROVED = "approved"
    HIDDEN = "hidden"
    REMOVED = "removed"
    EDIT_REQUESTED = "edit_requested"


def derive_outcome(ai_priority: Priority, human_priority: Priority) -> Outcome:
    """Compare the AI and human priorities using the tier ordering.

    Category disagreement alone does not change the outcome.
    """
    if ai_priority < human_priority:
        return Outcome.UNDER_CLASSIFIED
    if ai_priority > human_priority:
        return Outcome.OVER_CLASSIFIED
    return Outcome.CORRECT


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AIClassification:
    """Snapshot of what the classifier produced."""
    priority: Priority
    category: Category
    confidence: float

    @classmethod
    def from_result(cls, result: ClassificationResult) -> "AIClassification":
        return cls(
            priority=result.priority,
            category=result.category,
            confidence=result.confidence,
        )


@dataclass(frozen=True)
class HumanDecision:
    """Ground truth supplied by the moderation workflow."""
    final_priority: Priority
    final_category: Category
    action: ModeratorAction
    moderator_notes: Optional[str] = None
    moderator_id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "finalPriority": self.final_priority.value,
            "finalCategory": self.final_category.value,
            "action": self.action.value,
            "moderatorNotes": self.moderator_notes,
            "moderatorId": self.moderator_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HumanDecision":
        return cls(
            final_priority=Priority(data["finalPriority"]),
            final_category=Category(data["finalCategory"]),
            action=ModeratorAction(data["action"]),
            moderator_notes=data.get("moderatorNotes"),
            moderator_id=data.get("moderatorId"),
        )


@dataclass(frozen=True)
class TrainingCase:
    """A recorded (AI prediction, human correction) pair.

    Immutable once created. Use ``TrainingCase.create`` so the outcome is
    always derived from the two priorities.
    """
    content: str
    content_type: str
    ai_classification: AIClassification
    human_decision: HumanDecision
    outcome: Outcome
    timestamp: datetime = field(default_factory=_utcnow)

    @classmethod
    def create(
        cls,
        content: str,
        content_type: str,
        ai_classification: AIClassification,
        human_decision: HumanDecision,
        timestamp: Optional[datetime] = None,
    ) -> "TrainingCase":
        """Build a case, deriving its outcome."""
        return cls(
            content=content,
            content_type=content_type,
            ai_classification=ai_classification,
            human_decision=human_decision,
            outcome=derive_outcome(
                ai_classification.priority, human_decision.final_priority
            ),
            timestamp=timestamp or _utcnow(),
        )

    @property
    def is_correction(self) -> bool:
        return self.outcome != Outcome.CORRECT

    @property
    def pattern(self) -> str:
        """Misclassification pattern, e.g. ``"medium -> high"``."""
        return (
            f"{self.ai_classification.priority.value} -> "
            f"{self.human_decision.final_priority.value}"
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise using the wire field names."""
        return {
            "content": self.content,
            "contentType": self.content_type,
            "aiClassification": {
                "priority": self.ai_classification.priority.value,
                "category": self.ai_classification.category.value,
                "confidence": self.ai_classification.confidence,
            },
            "humanDecision": self.human_decision.to_dict(),
            "outcome": self.outcome.value,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TrainingCase":
        """Rebuild a case serialised by ``to_dict``."""
        ai = data["aiClassification"]
        return cls(
            content=data["content"],
            content_type=data["contentType"],
            ai_classification=AIClassification(
                priority=Priority(ai["priority"]),
                category=Category(ai["category"]),
                confidence=ai["confidence"],
            ),
            human_decision=HumanDecision.from_dict(data["humanDecision"]),
            outcome=Outcome(data["outcome"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )
