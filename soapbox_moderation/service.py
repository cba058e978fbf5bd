"""Wiring for one moderation service instance.

The training store is created once per service instance and shared by the
classifier's context builder, the feedback analyzer and the workflow.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from soapbox_moderation.classifier.classifier import ModerationClassifier
from soapbox_moderation.config import AppConfig, get_config
from soapbox_moderation.learning.context_builder import ContextBuilder
from soapbox_moderation.learning.feedback_analyzer import FeedbackAnalyzer
from soapbox_moderation.learning.training_store import SqlTrainingStore, TrainingStore
from soapbox_moderation.models.base import create_sync_engine
from soapbox_moderation.workflows.moderation import ModerationWorkflow

logger = logging.getLogger(__name__)


@dataclass
class ModerationService:
    """Components sharing one training store."""
    config: AppConfig
    store: TrainingStore | SqlTrainingStore
    classifier: ModerationClassifier
    analyzer: FeedbackAnalyzer
    workflow: ModerationWorkflow


def create_store(config: AppConfig) -> TrainingStore | SqlTrainingStore:
    """Create the training store selected by TRAINING_STORE."""
    if config.training_store == "sql":
        logger.info("Using SQL training store")
        return SqlTrainingStore(create_sync_engine(config.database.url))
    if config.training_store != "memory":
        raise ValueError(f"Unknown training store: {config.training_store}")
    logger.info("Using in-memory training store")
    return TrainingStore()


def build_service(
    config: Optional[AppConfig] = None,
    store=None,
    completion_client=None,
) -> ModerationService:
    """Build a service instance.

    Args:
        config: Application configuration. If None, loads from environment.
        store: Training store to use. If None, creates one from config.
        completion_client: Completion client. If None, the classifier creates
            an AnthropicClient.
    """
    config = config or get_config()
    store = store if store is not None else create_store(config)

    context_builder = ContextBuilder(
        store,
        window=config.learning.context_window,
        excerpt_length=config.learning.excerpt_length,
    )
    classifier = ModerationClassifier(
        completion_client=completion_client,
        context_builder=context_builder,
        config=config,
    )
    analyzer = FeedbackAnalyzer(
        store,
        accuracy_threshold=config.learning.accuracy_threshold,
        top_patterns=config.learning.top_patterns,
    )

    return ModerationService(
        config=config,
        store=store,
        classifier=classifier,
        analyzer=analyzer,
        workflow=ModerationWorkflow(classifier, store),
    )
