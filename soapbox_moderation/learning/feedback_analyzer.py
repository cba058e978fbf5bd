"""Accuracy and misclassification analysis over the training log."""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from soapbox_moderation.models.training_case import Outcome

logger = logging.getLogger(__name__)

EMPTY_STORE_SUGGESTION = "Collect more training data"


@dataclass(frozen=True)
class MisclassificationPattern:
    """A recurring AI -> human priority correction."""
    pattern: str
    ai_predicted: str
    human_corrected: str
    frequency: int


@dataclass(frozen=True)
class TrainingFeedback:
    """Report on how well the classifier agrees with moderators."""
    total_cases: int
    accuracy_rate: float
    common_misclassifications: list[MisclassificationPattern] = field(default_factory=list)
    improvement_suggestions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialise using the wire field names."""
        return {
            "totalCases": self.total_cases,
            "accuracyRate": self.accuracy_rate,
            "commonMisclassifications": [
                {
                    "pattern": p.pattern,
                    "aiPredicted": p.ai_predicted,
                    "humanCorrected": p.human_corrected,
                    "frequency": p.frequency,
                }
                for p in self.common_misclassifications
            ],
            "improvementSuggestions": list(self.improvement_suggestions),
        }


class FeedbackAnalyzer:
    """Computes accuracy and common errors from a training store.

    Suggestions are threshold-driven, not generated text.
    """

    def __init__(self, store, accuracy_threshold: float = 0.8, top_patterns: int = 5):
        self.store = store
        self.accuracy_threshold = accuracy_threshold
        self.top_patterns = top_patterns

    def analyze(self) -> TrainingFeedback:
        """Analyze a snapshot of every stored case.

        Returns:
            TrainingFeedback with accuracy, top patterns and suggestions
        """
        cases = self.store.all()
        total = len(cases)

        if total == 0:
            return TrainingFeedback(
                total_cases=0,
                accuracy_rate=0.0,
                common_misclassifications=[],
                improvement_suggestions=[EMPTY_STORE_SUGGESTION],
            )

        correct = sum(1 for case in cases if case.outcome == Outcome.CORRECT)
        accuracy_rate = correct / total

        # Counter keeps first-seen order; the stable sort keeps it for ties
        counts = Counter(case.pattern for case in cases if case.outcome != Outcome.CORRECT)
        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)

        patterns = []
        for pattern, frequency in ranked[:self.top_patterns]:
            ai_predicted, human_corrected = pattern.split(" -> ")
            patterns.append(MisclassificationPattern(
                pattern=pattern,
                ai_predicted=ai_predicted,
                human_corrected=human_corrected,
                frequency=frequency,
            ))

        suggestions = []
        if accuracy_rate < self.accuracy_threshold:
            suggestions.append(
                f"Accuracy below {self.accuracy_threshold:.0%} - increase training data"
            )
        if patterns:
            suggestions.append(f"Most common error: {patterns[0].pattern}")

        logger.info(
            f"Training feedback: {total} cases, accuracy {accuracy_rate:.1%}, "
            f"{len(counts)} distinct error patterns"
        )

        return TrainingFeedback(
            total_cases=total,
            accuracy_rate=accuracy_rate,
            common_misclassifications=patterns,
            improvement_suggestions=suggestions,
        )
