"""Regression harness for the classifier.

Runs a fixed, labelled corpus through the classifier and scores priority
agreement. Run it whenever the taxonomy or prompt wording changes.
"""

import logging
from dataclasses import dataclass, field

from soapbox_moderation.models.classification import ClassificationResult
from soapbox_moderation.taxonomy import Category, Priority

logger = logging.getLogger(__name__)

CORPUS_VERSION = "2024.1"


@dataclass(frozen=True)
class CorpusEntry:
    """One labelled example."""
    content: str
    expected_priority: Priority
    expected_category: Category


CORPUS: tuple[CorpusEntry, ...] = (
    # Critical
    CorpusEntry("Looking for a hookup after church 💦 DM me",
                Priority.CRITICAL, Category.SEXUAL_CONTENT),
    CorpusEntry("Jesus was a fraud. Christians are sheep.",
                Priority.CRITICAL, Category.INAPPROPRIATE_CONTENT),
    CorpusEntry("Everyone should avoid John. He's a pervert and a liar.",
                Priority.CRITICAL, Category.HARASSMENT_BULLYING),
    CorpusEntry("Tithing is optional. Jesus never told anyone to give.",
                Priority.CRITICAL, Category.FALSE_INFORMATION),
    CorpusEntry("Here's Pastor Mark's phone number and home address 🏠📞",
                Priority.CRITICAL, Category.PRIVACY_VIOLATION),
    # High
    CorpusEntry("Is it okay if I post thirst traps as long as I quote scripture?",
                Priority.HIGH, Category.SEXUAL_CONTENT),
    CorpusEntry("The Bible supports slavery. Read it again.",
                Priority.HIGH, Category.INAPPROPRIATE_CONTENT),
    CorpusEntry("Prayer is more powerful than medicine. Don't take pills—just pray.",
                Priority.HIGH, Category.FALSE_INFORMATION),
    # Medium
    CorpusEntry("Can Christian couples use sex toys? Just asking here.",
                Priority.MEDIUM, Category.SEXUAL_CONTENT),
    CorpusEntry("Catholics aren't real Christians.",
                Priority.MEDIUM, Category.INAPPROPRIATE_CONTENT),
    CorpusEntry("The rapture is happening next Friday. Be ready!",
                Priority.MEDIUM, Category.FALSE_INFORMATION),
    # Low
    CorpusEntry("Is attraction a sin?",
                Priority.LOW, Category.SEXUAL_CONTENT),
    CorpusEntry("I feel like sermons are boring sometimes.",
                Priority.LOW, Category.INAPPROPRIATE_CONTENT),
    CorpusEntry("Come to our revival event! Free pizza 🍕🎉",
                Priority.LOW, Category.SPAM),
)


@dataclass(frozen=True)
class CaseOutcome:
    """Expected vs. actual for one corpus entry."""
    entry: CorpusEntry
    result: ClassificationResult

    @property
    def passed(self) -> bool:
        # Only priority is scored
        return self.result.priority == self.entry.expected_priority

    @property
    def category_matches(self) -> bool:
        return self.result.category == self.entry.expected_category


@dataclass(frozen=True)
class HarnessReport:
    """Pass rate and per-case diagnostics for one harness run."""
    corpus_version: str
    cases: list[CaseOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.cases)

    @property
    def passed(self) -> int:
        return sum(1 for case in self.cases if case.passed)

    @property
    def pass_rate(self) -> float:
        return self.passed / self.total if self.total else 0.0

    def failures(self) -> list[CaseOutcome]:
        return [case for case in self.cases if not case.passed]


class RegressionHarness:
    """Runs the labelled corpus through a classifier."""

    def __init__(self, classifier, corpus: tuple[CorpusEntry, ...] = CORPUS,
                 content_type: str = "discussion"):
        """Initialize the harness.

        Args:
            classifier: Object with ``classify(content, content_type)``
            corpus: Labelled examples; defaults to the versioned corpus
            content_type: Content type passed for every entry
        """
        self.classifier = classifier
        self.corpus = corpus
        self.content_type = content_type

    def run(self) -> HarnessReport:
        """Classify every corpus entry and score priority agreement."""
        logger.info(f"Running regression corpus v{CORPUS_VERSION} ({len(self.corpus)} cases)")

        cases = []
        for entry in self.corpus:
            result = self.classifier.classify(entry.content, self.content_type)
            outcome = CaseOutcome(entry=entry, result=result)
            cases.append(outcome)

            status = "PASS" if outcome.passed else "FAIL"
            logger.info(
                f"{status} '{entry.content[:40]}' expected={entry.expected_priority.value} "
                f"got={result.priority.value} confidence={result.confidence:.2f}"
            )
            if not outcome.passed:
                logger.info(f"  reason: {result.reason}")
            if not outcome.category_matches:
                logger.info(
                    f"  category mismatch (not scored): expected={entry.expected_category.value} "
                    f"got={result.category.value}"
                )

        report = HarnessReport(corpus_version=CORPUS_VERSION, cases=cases)
        logger.info(f"Accuracy: {report.passed}/{report.total} ({report.pass_rate:.1%})")
        return report
