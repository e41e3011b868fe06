#!/usr/bin/env python3
"""
Progress reporting for mirror runs.

Each group and each repository outcome is printed as it happens, indented
by group depth, followed by a summary with counts per outcome.
"""

from typing import Any

import click

from .exceptions import MirrorError
from .models import Group, OutcomeStatus, RunResult, SyncOutcome


class ProgressReporter:
    """Writes per-outcome lines and the final summary to the terminal."""

    STATUS_COLORS = {
        OutcomeStatus.CLONED: 'green',
        OutcomeStatus.UPDATED: 'cyan',
        OutcomeStatus.SKIPPED: 'yellow',
        OutcomeStatus.FAILED: 'red',
    }

    def __init__(self, quiet: bool = False):
        """
        Args:
            quiet: If True, only failures and the summary are printed
        """
        self.quiet = quiet

    @staticmethod
    def _indent(depth: int) -> str:
        return '  ' * depth

    def group_started(self, group: Group, depth: int) -> None:
        if not self.quiet:
            click.secho(f"{self._indent(depth)}Processing group: {group.name}", fg='green', bold=True)

    def group_failed(self, group_id: Any, stage: str, error: MirrorError, depth: int) -> None:
        click.secho(f"{self._indent(depth)}Error in group {group_id} ({stage}): {error}", fg='red', err=True)

    def outcome(self, outcome: SyncOutcome, depth: int) -> None:
        if outcome.status == OutcomeStatus.FAILED:
            line = f"{self._indent(depth + 1)}{outcome.describe()}"
            if outcome.error is not None:
                line += f": {outcome.error}"
            click.secho(line, fg=self.STATUS_COLORS[outcome.status], err=True)
        elif not self.quiet:
            click.secho(f"{self._indent(depth + 1)}{outcome.describe()}", fg=self.STATUS_COLORS[outcome.status])

    def print_summary(self, result: RunResult) -> None:
        """Print counts by outcome and list every failure."""
        counts = result.counts()
        click.echo("=" * 50)
        click.secho("MIRROR SUMMARY", bold=True)
        click.echo("=" * 50)
        click.echo(f"Groups processed: {result.groups_processed}")
        for status in OutcomeStatus:
            click.secho(f"Repositories {status.value}: {counts[status]}", fg=self.STATUS_COLORS[status])
        if result.group_failures:
            click.secho(f"Group errors: {len(result.group_failures)}", fg='red')
            for failure in result.group_failures:
                click.secho(f"  - {failure.describe()}", fg='red')
        for outcome in result.failed:
            click.secho(f"  - {outcome.repository.display_name}: {outcome.reason}", fg='red')
        click.echo("=" * 50)
