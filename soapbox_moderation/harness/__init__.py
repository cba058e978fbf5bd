"""Classifier regression harness."""

from soapbox_moderation.harness.regression import (
    CORPUS,
    CORPUS_VERSION,
    CaseOutcome,
    CorpusEntry,
    HarnessReport,
    RegressionHarness,
)

__all__ = [
    "CORPUS",
    "CORPUS_VERSION",
    "CaseOutcome",
    "CorpusEntry",
    "HarnessReport",
    "RegressionHarness",
]
