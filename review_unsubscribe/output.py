"""Output formatting for unsubscribe runs."""

from .models import RunSummary, ThreadOutcome, ThreadState


# ANSI color codes
GREEN = '\033[92m'
YELLOW = '\033[93m'
RED = '\033[91m'
CYAN = '\033[96m'
BOLD = '\033[1m'
RESET = '\033[0m'

STATE_COLORS = {
    ThreadState.UNSUBSCRIBED: GREEN,
    ThreadState.ALREADY_UNSUBSCRIBED: GREEN,
    ThreadState.WOULD_UNSUBSCRIBE: CYAN,
    ThreadState.GUARDED: YELLOW,
    ThreadState.DELETE_FAILED: RED,
}

# Summary order
SUMMARY_STATES = [
    ThreadState.UNSUBSCRIBED,
    ThreadState.ALREADY_UNSUBSCRIBED,
    ThreadState.WOULD_UNSUBSCRIBE,
    ThreadState.GUARDED,
    ThreadState.DELETE_FAILED,
    ThreadState.EXCLUDED,
]


class OutputFormatter:
    """Prints per-thread status lines and a run summary."""

    def __init__(self, use_color: bool = True, show_excluded: bool = False):
        """Initialize the output formatter.

        Args:
            use_color: Whether to use ANSI colors
            show_excluded: Whether to print a line for every excluded thread
        """
        self.use_color = use_color
        self.show_excluded = show_excluded

    def _color(self, text: str, color: str) -> str:
        if not self.use_color:
            return text
        return f"{color}{text}{RESET}"

    def print_header(self, policy_description: str, dry_run: bool = False):
        """Print the run header."""
        print("Review Request Unsubscriber")
        print("="*80)
        print(f"Policy: {policy_description}")
        if dry_run:
            print(self._color("Dry run: no subscriptions will be changed", YELLOW))

    def format_outcome(self, outcome: ThreadOutcome) -> str:
        """Format one outcome as a single status line."""
        thread = outcome.thread
        tag = f"[{outcome.state.value}]"
        line = f"{tag:<24} {thread.label}"
        if thread.subject_title:
            line += f"  {thread.subject_title}"
        if outcome.detail and outcome.state != ThreadState.UNSUBSCRIBED:
            line += f" ({outcome.detail})"
        return self._color(line, STATE_COLORS.get(outcome.state, RESET))

    def print_outcome(self, outcome: ThreadOutcome):
        """Print a status line for a thread, skipping excluded ones unless requested."""
        if outcome.state == ThreadState.EXCLUDED and not self.show_excluded:
            return
        print(self.format_outcome(outcome))

    def print_summary(self, summary: RunSummary):
        """Print the aggregate result of a run."""
        print("\n" + "="*80)
        login = summary.identity.login if summary.identity else 'unknown user'
        print(self._color(f"SUMMARY FOR {login}", BOLD))
        print("="*80)
        print(f"Fetched notifications: {summary.fetched}")

        if summary.is_empty:
            print("\nNo review-request notifications to unsubscribe.")
            return

        for state in SUMMARY_STATES:
            count = summary.count(state)
            if count:
                print(f"  {state.value:<22} {count}")

        failures = summary.failures
        if failures:
            print(self._color(f"\n{len(failures)} thread(s) could not be unsubscribed:", RED))
            for outcome in failures:
                print(f"  - {outcome.thread.label}: {outcome.detail}")
