"""Data models for the moderation engine."""

from soapbox_moderation.models.base import Base, create_sync_engine, get_sync_session
from soapbox_moderation.models.classification import ClassificationResult
from soapbox_moderation.models.training_case import (
    AIClassification,
    HumanDecision,
    ModeratorAction,
    Outcome,
    TrainingCase,
    derive_outcome,
)
from soapbox_moderation.models.training_record import TrainingCaseRecord

__all__ = [
    "Base",
    "create_sync_engine",
    "get_sync_session",
    "ClassificationResult",
    "AIClassification",
    "HumanDecision",
    "ModeratorAction",
    "Outcome",
    "TrainingCase",
    "derive_outcome",
    "TrainingCaseRecord",
]
