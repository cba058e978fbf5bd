"""Builds the "lessons learned" block injected into classification prompts."""

import logging

from soapbox_moderation.models.training_case import Outcome, TrainingCase

logger = logging.getLogger(__name__)

ACCURATE_SENTINEL = "Recent classifications have been accurate."
CONTEXT_HEADER = "RECENT CORRECTIONS TO LEARN FROM:"
BLOCK_SEPARATOR = "\n---\n"

LESSON_MORE_STRICT = "Be more strict with this type of content"
LESSON_LESS_STRICT = "Be less strict with this type of content"


def render_correction(case: TrainingCase, excerpt_length: int = 100) -> str:
    """Render one correction as a fixed-format learning block."""
    ai = case.ai_classification
    human = case.human_decision
    lesson = (
        LESSON_MORE_STRICT
        if case.outcome == Outcome.UNDER_CLASSIFIED
        else LESSON_LESS_STRICT
    )

    return (
        "LEARNING CASE:\n"
        f"Content: \"{case.content[:excerpt_length]}\"\n"
        f"AI Classified: {ai.priority.value} ({ai.category.value})\n"
        f"Human Corrected: {human.final_priority.value} ({human.final_category.value})\n"
        f"Lesson: {lesson}\n"
        f"Notes: {human.moderator_notes or 'None'}"
    )


class ContextBuilder:
    """Turns recent moderator corrections into prompt context.

    Only the ``window`` most recent cases are considered, so prompt size stays
    bounded however large the store grows.
    """

    def __init__(self, store, window: int = 20, excerpt_length: int = 100):
        """Initialize the builder.

        Args:
            store: Training store exposing ``recent(n)``
            window: Number of most recent cases to consider
            excerpt_length: Characters of content quoted per correction
        """
        self.store = store
        self.window = window
        self.excerpt_length = excerpt_length

    def build(self) -> str:
        """Build the context block from a fresh snapshot of the store."""
        return self.build_from(self.store.recent(self.window))

    def build_from(self, cases: tuple[TrainingCase, ...] | list[TrainingCase]) -> str:
        """Build the context block from an explicit snapshot."""
        corrections = [case for case in cases if case.outcome != Outcome.CORRECT]

        if not corrections:
            return ACCURATE_SENTINEL

        logger.debug(f"Injecting {len(corrections)} corrections into prompt context")

        blocks = BLOCK_SEPARATOR.join(
            render_correction(case, self.excerpt_length) for case in corrections
        )
        return f"{CONTEXT_HEADER}\n{blocks}"
