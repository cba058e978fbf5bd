"""State definitions for the moderation LangGraph workflow.

START -> classify -> (interrupt) -> record -> END

Values are kept JSON-friendly (wire-format dicts) so the checkpointer can
persist them.
"""

from datetime import datetime, timezone
from typing import Any, Literal, Optional, TypedDict

ProcessingStep = Literal[
    "unclassified",
    "awaiting_decision",
    "recorded",
    "discarded",
]


class ModerationState(TypedDict, total=False):
    """State of one content item as it moves through moderation."""
    # Content identifiers
    content_id: str
    content_type: str
    content: str

    processing_step: ProcessingStep

    # ClassificationResult.to_dict()
    classification: Optional[dict[str, Any]]

    # HumanDecision.to_dict(), supplied when the graph is resumed
    decision: Optional[dict[str, Any]]

    # Filled in by the record node
    training_case: Optional[dict[str, Any]]
    outcome: Optional[str]

    # Timestamps
    created_at: str
    classified_at: str
    recorded_at: str


def create_initial_state(
    content_id: str,
    content: str,
    content_type: str,
    classification: Optional[dict[str, Any]] = None,
) -> ModerationState:
    """Create initial state for an unclassified content item.

    Args:
        content_id: Identifier assigned by the host platform
        content: Text to moderate
        content_type: post, comment, discussion, ...
        classification: Precomputed classification; the classify node
            skips the classifier call when present

    Returns:
        Initial ModerationState dictionary
    """
    return ModerationState(
        content_id=content_id,
        content_type=content_type,
        content=content,
        processing_step="unclassified",
        classification=classification,
        decision=None,
        training_case=None,
        outcome=None,
        created_at=datetime.now(timezone.utc).isoformat(),
        classified_at="",
        recorded_at="",
    )
