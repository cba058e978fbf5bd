"""Classification result returned for every piece of analysed content."""

from dataclasses import dataclass, field
from typing import Any

from soapbox_moderation.taxonomy import (
    Action,
    Category,
    Priority,
    DEFAULT_ACTION,
    DEFAULT_CATEGORY,
    DEFAULT_PRIORITY,
)

FAILED_ANALYSIS_REASON = "analysis_failed"


@dataclass(frozen=True)
class ClassificationResult:
    """Result of content classification.

    Invariant: ``0.0 <= confidence <= 1.0``. Values are clamped by the
    classifier before a result is built.
    """
    flagged: bool
    priority: Priority
    category: Category
    violations: list[str] = field(default_factory=list)
    reason: str = ""
    confidence: float = 0.0
    action_required: Action = DEFAULT_ACTION
    learning_note: str = ""

    @classmethod
    def fail_safe(cls) -> "ClassificationResult":
        """Conservative result used when no trustworthy classification exists.

        Content is sent to review rather than silently approved.
        """
        return cls(
            flagged=False,
            priority=DEFAULT_PRIORITY,
            category=DEFAULT_CATEGORY,
            violations=[],
            reason=FAILED_ANALYSIS_REASON,
            confidence=0.0,
            action_required=DEFAULT_ACTION,
            learning_note="",
        )

    @property
    def is_fail_safe(self) -> bool:
        """Check whether this result came from a failed analysis."""
        return self.reason == FAILED_ANALYSIS_REASON and self.confidence == 0.0

    def to_dict(self) -> dict[str, Any]:
        """Serialise using the wire field names."""
        return {
            "flagged": self.flagged,
            "priority": self.priority.value,
            "category": self.category.value,
            "violations": list(self.violations),
            "reason": self.reason,
            "confidence": self.confidence,
            "actionRequired": self.action_required.value,
            "learningNote": self.learning_note,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClassificationResult":
        """Rebuild a result serialised by ``to_dict``."""
        return cls(
            flagged=data["flagged"],
            priority=Priority(data["priority"]),
            category=Category(data["category"]),
            violations=list(data.get("violations", [])),
            reason=data.get("reason", ""),
            confidence=data.get("confidence", 0.0),
            action_required=Action(data["actionRequired"]),
            learning_note=data.get("learningNote", ""),
        )
