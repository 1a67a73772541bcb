"""SummaryReporter: displays the outcome of a sync batch."""

from __future__ import annotations

from hubsync.models import BatchResult, OutcomeStatus, SyncOutcome
from hubsync.output import SECTION_WIDTH
from hubsync.protocols import OutputHandler


class SummaryReporter:
    """Generates and displays per-batch summary reports"""

    def __init__(self, output: OutputHandler):
        """Create a reporter that writes to the given output handler."""
        self.output = output

    def print_summary(self, result: BatchResult, cycle: int | None = None):
        """Print counts per outcome and the details of every failed repository."""
        title = "SYNC SUMMARY" if cycle is None else f"SYNC SUMMARY (cycle {cycle})"
        self.output.section("╔" + "=" * SECTION_WIDTH + "╗")
        self.output.info("║" + title.center(SECTION_WIDTH) + "║")
        self.output.info("╚" + "=" * SECTION_WIDTH + "╝")
        self.output.info(f"Repositories listed:    {result.repos_listed}")
        self.output.info(f"Repositories skipped:   {result.repos_skipped}")
        self.output.info(f"Repositories processed: {result.repos_processed}")
        self.output.info("")

        succeeded = result.get_outcomes_by_status(OutcomeStatus.SUCCESS)
        if not result.has_failures():
            self.output.success(f"✅ {len(succeeded)} repositories in sync")
        else:
            self.output.info(f"✅ Synced: {len(succeeded)}")
            self._print_outcome_category("\U0001f534 FAILED",
                                         result.get_outcomes_by_status(OutcomeStatus.FAILED))
            self._print_outcome_category("⏱️  TIMED OUT",
                                         result.get_outcomes_by_status(OutcomeStatus.TIMED_OUT))
            self.output.info("Failed repositories are retried on the next cycle.")

        self.output.info("=" * SECTION_WIDTH)

    def _print_outcome_category(self, title: str, outcomes: list[SyncOutcome]):
        if not outcomes:
            return

        self.output.warning(f"{title} ({len(outcomes)}):")
        self.output.info("-" * SECTION_WIDTH)
        for outcome in outcomes:
            self.output.info(f"  \U0001f4c1 {outcome.repository} (stopped at {outcome.state.name})")
            if outcome.message:
                self.output.info(f"     ↳ {outcome.message}")
        self.output.info("")
