"""Terminal reports for the moderation engine.

Uses Rich library for terminal output.

Usage:
    # Run the regression corpus against the live model
    python -m soapbox_moderation.cli.report harness

    # Accuracy report over the stored training cases (TRAINING_STORE=sql)
    python -m soapbox_moderation.cli.report feedback
"""

import argparse
import logging
import sys
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from soapbox_moderation.harness.regression import HarnessReport, RegressionHarness
from soapbox_moderation.learning.feedback_analyzer import TrainingFeedback
from soapbox_moderation.service import ModerationService, build_service


class ReportCLI:
    """Renders harness and feedback reports."""

    def __init__(self, service: Optional[ModerationService] = None, console: Optional[Console] = None):
        """Initialize the CLI."""
        self.console = console or Console()
        self._service = service

    @property
    def service(self) -> ModerationService:
        """Lazy-build the service."""
        if self._service is None:
            self._service = build_service()
        return self._service

    def run_harness(self) -> HarnessReport:
        """Run the regression corpus and print the results."""
        self.console.print(
            Panel.fit(
                "[bold blue]Classifier Regression Harness[/bold blue]",
                border_style="blue",
            )
        )
        report = RegressionHarness(self.service.classifier).run()
        self.render_harness(report)
        return report

    def render_harness(self, report: HarnessReport) -> None:
        """Print per-case diagnostics and the pass rate."""
        table = Table(title=f"Corpus v{report.corpus_version}")
        table.add_column("", width=2)
        table.add_column("Content", max_width=40)
        table.add_column("Expected")
        table.add_column("Actual")
        table.add_column("Category")
        table.add_column("Confidence", justify="right")
        table.add_column("Reason", max_width=40)

        for case in report.cases:
            mark = "[green]✓[/green]" if case.passed else "[red]✗[/red]"
            category = case.result.category.value
            if not case.category_matches:
                category = f"[yellow]{category}[/yellow]"
            table.add_row(
                mark,
                case.entry.content[:40],
                case.entry.expected_priority.value,
                case.result.priority.value,
                category,
                self._format_confidence(case.result.confidence),
                "" if case.passed else case.result.reason,
            )

        self.console.print(table)
        self.console.print(
            f"\n[bold]Accuracy: {report.passed}/{report.total} ({report.pass_rate:.1%})[/bold]"
        )

    def run_feedback(self) -> TrainingFeedback:
        """Analyze stored training cases and print the report."""
        feedback = self.service.analyzer.analyze()
        self.render_feedback(feedback)
        return feedback

    def render_feedback(self, feedback: TrainingFeedback) -> None:
        """Print accuracy, error patterns and suggestions."""
        self.console.print(
            Panel(
                f"[bold]Total Training Cases:[/bold] {feedback.total_cases}\n"
                f"[bold]Overall Accuracy:[/bold] {self._format_confidence(feedback.accuracy_rate)}",
                title="Training Feedback",
                border_style="blue",
            )
        )

        if feedback.common_misclassifications:
            table = Table(title="Common Misclassifications")
            table.add_column("#", justify="right")
            table.add_column("AI")
            table.add_column("Human")
            table.add_column("Times", justify="right")
            for idx, pattern in enumerate(feedback.common_misclassifications, 1):
                table.add_row(
                    str(idx),
                    pattern.ai_predicted,
                    pattern.human_corrected,
                    str(pattern.frequency),
                )
            self.console.print(table)

        self.console.print("[bold]Improvement Suggestions:[/bold]")
        for idx, suggestion in enumerate(feedback.improvement_suggestions, 1):
            self.console.print(f"  {idx}. {suggestion}")

    def _format_confidence(self, value: float) -> str:
        """Format a 0-1 score as a colored percentage."""
        if value >= 0.8:
            color = "green"
        elif value >= 0.5:
            color = "yellow"
        else:
            color = "red"
        return f"[{color}]{value:.1%}[/{color}]"


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for CLI."""
    parser = argparse.ArgumentParser(description="Moderation engine reports")
    parser.add_argument("report", choices=["harness", "feedback"])
    parser.add_argument("--verbose", "-v", action="store_true", help="Log per-case diagnostics")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    cli = ReportCLI()
    if args.report == "harness":
        report = cli.run_harness()
        return 0 if report.passed == report.total else 1

    cli.run_feedback()
    return 0


if __name__ == "__main__":
    sys.exit(main())
