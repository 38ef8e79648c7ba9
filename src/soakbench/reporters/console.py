"""Rich console summary of a consolidated report (stderr)."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from soakbench.core.types import ConsolidatedReport, RunResult, SessionState

err_console = Console(stderr=True)


def _status(ok: bool) -> str:
    return "[green]✓ PASS[/green]" if ok else "[red]✗ FAIL[/red]"


def _layer_row(table: Table, label: str, result: RunResult | None) -> None:
    if result is None:
        return
    table.add_row(
        label,
        f"{result.passed} passed, {result.failed} failed, {result.skipped} skipped",
        _status(result.all_passed),
    )


def print_summary(report: ConsolidatedReport, console: Console | None = None) -> None:
    """Print a test summary table."""
    console = console or err_console

    table = Table(title="Test Summary")
    table.add_column("Component", style="cyan")
    table.add_column("Result", style="magenta")
    table.add_column("Status")

    _layer_row(table, "Unit Tests", report.unit)
    _layer_row(table, "Integration Tests", report.integration)

    if report.performance:
        table.add_row("Performance Tests", f"{len(report.performance)} benchmarks", _status(True))

    if report.stability is not None:
        s = report.stability
        table.add_row(
            "Stability Test",
            f"{s.state.value}, {len(s.errors)} errors, {len(s.recoveries)} recoveries",
            _status(s.state == SessionState.COMPLETED),
        )

    if report.compatibility is not None:
        c = report.compatibility
        env = "passed" if c.environment_checks.all_passed else "failed"
        table.add_row(
            "Compatibility",
            f"target={c.target_system_compatibility.compatible} "
            f"host={c.host_runtime_compatibility.compatible} environment={env}",
            _status(c.compatible),
        )

    for name, message in report.errors.items():
        table.add_row(f"{name} (error)", message, _status(False))

    console.print(table)
    console.print(
        Panel(
            f"Test Run Duration: {report.duration_ms / 1000:.2f} seconds",
            border_style="blue",
            expand=False,
        )
    )


__all__ = ["err_console", "print_summary"]
