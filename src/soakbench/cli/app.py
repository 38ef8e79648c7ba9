"""
app.py - soakbench CLI

Results go to stdout (``--json``); tables, panels and logs go to stderr.

Usage:
    soakbench run --suites mypkg.suites:define_unit --no-integration
    soakbench run --config soak.yaml --performance --report-path reports
    soakbench compat --json
    soakbench benchmark "Vision Processing" --duration-ms 10000
    soakbench stability "Overnight Soak" --duration-ms 28800000
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any

import typer
from rich.panel import Panel

from soakbench import __version__
from soakbench.benchmark import PerformanceBenchmark
from soakbench.compat import CompatibilityProber
from soakbench.config.logging import configure_logging
from soakbench.config.settings import CONFIG_ENV_VAR, load_run_config
from soakbench.core.errors import ConfigurationError
from soakbench.core.options import RunConfig, merge_options
from soakbench.core.types import ConsolidatedReport, SessionState
from soakbench.orchestrator import TestOrchestrator
from soakbench.probes import HostProbes
from soakbench.reporters import JSONReporter, TextReporter, err_console, print_summary
from soakbench.stability import StabilityMonitor

from .suites import load_definer

app = typer.Typer(
    name="soakbench",
    help="Test orchestration, benchmarking and stability monitoring",
    no_args_is_help=True,
    add_completion=False,
)


def _print_banner(title: str, subtitle: str) -> None:
    err_console.print(
        Panel(f"[bold]{title}[/bold]\n[dim]{subtitle}[/dim]", title="soakbench", border_style="cyan")
    )


def _load_config(ctx: typer.Context, overrides: dict[str, Any] | None = None) -> RunConfig:
    path = (ctx.obj or {}).get("config_path")
    try:
        return load_run_config(path, overrides=overrides)
    except ConfigurationError as e:
        err_console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(2) from e


def _emit(record: Any, as_json: bool) -> None:
    if as_json:
        sys.stdout.write(JSONReporter().render(record) + "\n")
    else:
        err_console.print(TextReporter().render(record), markup=False, highlight=False)


def run_failed(report: ConsolidatedReport) -> bool:
    """True if any case failed, the stability session failed, or a component errored."""
    if report.errors:
        return True
    if any(r is not None and r.failed for r in (report.unit, report.integration)):
        return True
    return report.stability is not None and report.stability.state == SessionState.FAILED


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Settings YAML file",
        envvar=CONFIG_ENV_VAR,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    log_level: str = typer.Option("INFO", "--log-level", help="Log level"),
) -> None:
    """Initialize logging and remember the settings file."""
    configure_logging(level=log_level, verbose=verbose, force=True)
    ctx.obj = {"config_path": config}


@app.command()
def version() -> None:
    """Show the soakbench version."""
    typer.echo(f"soakbench {__version__}")


@app.command("run")
def run_command(
    ctx: typer.Context,
    suites: list[str] | None = typer.Option(
        None, "--suites", "-s", help="Unit suite definer as module:function (repeatable)"
    ),
    integration_suites: list[str] | None = typer.Option(
        None, "--integration-suites", help="Integration suite definer as module:function"
    ),
    unit: bool | None = typer.Option(None, "--unit/--no-unit", help="Run unit tests"),
    integration: bool | None = typer.Option(
        None, "--integration/--no-integration", help="Run integration tests"
    ),
    performance: bool | None = typer.Option(
        None, "--performance/--no-performance", help="Run performance benchmarks"
    ),
    stability: bool | None = typer.Option(
        None, "--stability/--no-stability", help="Run the stability test"
    ),
    compatibility: bool | None = typer.Option(
        None, "--compatibility/--no-compatibility", help="Run compatibility checks"
    ),
    report_path: str | None = typer.Option(None, "--report-path", "-o", help="Report directory"),
    reports: bool | None = typer.Option(None, "--reports/--no-reports", help="Write report files"),
    timeout_ms: int | None = typer.Option(None, "--timeout-ms", help="Per-case timeout"),
    json_output: bool = typer.Option(False, "--json", help="Print the report as JSON on stdout"),
) -> None:
    """Run the enabled test components and print a summary."""
    flags = {
        "run_unit": unit,
        "run_integration": integration,
        "run_performance": performance,
        "run_stability": stability,
        "run_compatibility": compatibility,
        "report_path": report_path,
        "generate_reports": reports,
        "per_case_timeout_ms": timeout_ms,
    }
    config = _load_config(ctx, {k: v for k, v in flags.items() if v is not None})

    try:
        unit_definers = [load_definer(spec) for spec in suites or []]
        integration_definers = [load_definer(spec) for spec in integration_suites or []]
    except ConfigurationError as e:
        err_console.print(f"[red]Suite error:[/red] {e}")
        raise typer.Exit(2) from e

    orchestrator = TestOrchestrator(config, probes=HostProbes.from_psutil())
    for definer in unit_definers:
        orchestrator.add_unit_suites(definer)
    for definer in integration_definers:
        orchestrator.add_integration_suites(definer)

    if not json_output:
        _print_banner("TEST RUN", f"report path: {config.report_path}")
    report = asyncio.run(orchestrator.run_all())

    print_summary(report)
    if json_output:
        sys.stdout.write(JSONReporter().render(report) + "\n")
    raise typer.Exit(1 if run_failed(report) else 0)


@app.command("compat")
def compat_command(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Print the report as JSON on stdout"),
) -> None:
    """Check compatibility; exits non-zero unless every check passes."""
    config = _load_config(ctx)
    report = CompatibilityProber(config.compatibility, HostProbes.from_psutil()).run()
    _emit(report, json_output)

    ok = report.compatible and report.environment_checks.all_passed
    if not ok:
        err_console.print("[red]✗ Environment is not compatible[/red]")
    raise typer.Exit(0 if ok else 1)


@app.command("benchmark")
def benchmark_command(
    ctx: typer.Context,
    name: str = typer.Argument("Unnamed Benchmark", help="Benchmark name"),
    duration_ms: float = typer.Option(30_000, "--duration-ms", "-d", help="Benchmark duration"),
    interval_ms: float | None = typer.Option(None, "--interval-ms", help="Sample interval"),
    json_output: bool = typer.Option(False, "--json", help="Print the run as JSON on stdout"),
) -> None:
    """Run one timed performance benchmark."""
    config = _load_config(ctx)
    options = {"sample_interval_ms": interval_ms} if interval_ms is not None else None

    async def _run():
        bench = PerformanceBenchmark(HostProbes.from_psutil(), config.benchmark_defaults)
        bench.start(name, options)
        await asyncio.sleep(duration_ms / 1000)
        return bench.stop()

    try:
        run = asyncio.run(_run())
    except ConfigurationError as e:
        err_console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(2) from e
    _emit(run, json_output)


@app.command("stability")
def stability_command(
    ctx: typer.Context,
    name: str | None = typer.Argument(None, help="Session name"),
    duration_ms: float | None = typer.Option(None, "--duration-ms", "-d", help="Session duration"),
    checkpoint_ms: float | None = typer.Option(None, "--checkpoint-ms", help="Checkpoint interval"),
    sample_ms: float | None = typer.Option(None, "--sample-ms", help="Resource sample interval"),
    json_output: bool = typer.Option(False, "--json", help="Print the session as JSON on stdout"),
) -> None:
    """Run one stability session to completion."""
    config = _load_config(ctx)
    scenario = config.stability_scenario
    flags = {
        "duration_ms": duration_ms,
        "checkpoint_interval_ms": checkpoint_ms,
        "resource_sample_interval_ms": sample_ms,
    }

    try:
        options = merge_options(
            type(scenario.options),
            scenario.options,
            {k: v for k, v in flags.items() if v is not None},
            source="command line",
        )
    except ConfigurationError as e:
        err_console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(2) from e

    async def _run():
        monitor = StabilityMonitor(HostProbes.from_psutil())
        monitor.start(name or scenario.name, options)
        return await monitor.wait()

    session = asyncio.run(_run())
    _emit(session, json_output)
    raise typer.Exit(0 if session.state == SessionState.COMPLETED else 1)


def main() -> None:
    """Console script entry point."""
    app()


__all__ = ["app", "main", "run_failed"]
