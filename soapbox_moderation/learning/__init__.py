"""Feedback loop: training log, prompt context and accuracy analysis."""

from soapbox_moderation.learning.context_builder import ContextBuilder, render_correction
from soapbox_moderation.learning.feedback_analyzer import (
    FeedbackAnalyzer,
    MisclassificationPattern,
    TrainingFeedback,
)
from soapbox_moderation.learning.training_store import SqlTrainingStore, TrainingStore

__all__ = [
    "ContextBuilder",
    "render_correction",
    "FeedbackAnalyzer",
    "MisclassificationPattern",
    "TrainingFeedback",
    "SqlTrainingStore",
    "TrainingStore",
]
