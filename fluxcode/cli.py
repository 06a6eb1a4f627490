"""Typer-based CLI for Fluxcode structural analysis."""

from __future__ import annotations

import dataclasses
import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .config_manager import AnalysisSettings, load_settings, reset_settings, set_setting
from .engine import AnalysisEngine
from .exceptions import FluxcodeError
from .graph_export import to_dot, to_graph_data
from .logging_config import setup_logging
from .models import AnalysisResult
from .scanner import collect_files

console = Console()

app = typer.Typer(
    help="Fluxcode: structural analysis, relationship graphs and diagnostics for JS/TS projects.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(
    help="Analysis settings stored in ~/.fluxcode/config.toml.",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"Fluxcode v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors."),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also append logs to this file."),
):
    """Fluxcode: analyze a project directory and report its structure."""
    setup_logging(verbose=verbose, quiet=quiet, log_file=str(log_file) if log_file else None)


def _settings(
    config_file: Optional[Path],
    workers: Optional[int],
    max_file_size: Optional[int],
) -> AnalysisSettings:
    settings = load_settings(config_file)
    overrides = {}
    if workers is not None:
        overrides["max_workers"] = workers
    if max_file_size is not None:
        overrides["max_file_size"] = max_file_size
    return dataclasses.replace(settings, **overrides) if overrides else settings


def _run(
    project_path: Path,
    config_file: Optional[Path],
    workers: Optional[int],
    max_file_size: Optional[int],
) -> AnalysisResult:
    try:
        settings = _settings(config_file, workers, max_file_size)
        inputs = collect_files(project_path, max_file_size=settings.max_file_size)
        return AnalysisEngine(settings).analyze(inputs, project_name=project_path.resolve().name)
    except FluxcodeError as exc:
        console.print(f"[red]✗[/red] {escape(str(exc))}")
        raise typer.Exit(1)


def _score_color(score: float) -> str:
    if score >= 80:
        return "green"
    elif score >= 60:
        return "yellow"
    return "red"


_SEVERITY_STYLE = {"error": "red", "warning": "yellow", "info": "blue"}


def _print_summary(result: AnalysisResult, max_issues: int) -> None:
    metrics = result.metrics
    color = _score_color(metrics.maintainability)
    console.print(
        Panel.fit(
            f"[bold {color}]{metrics.maintainability:.1f}[/bold {color}] / 100",
            title=f"[bold]Maintainability: {result.project_name}[/bold]",
            border_style=color,
        )
    )

    table = Table(title="Quality Metrics", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value")
    dist = metrics.complexity_distribution
    table.add_row("Files", str(len(result.files)))
    table.add_row("Functions", str(sum(len(f.functions) for f in result.files)))
    table.add_row("Relationships", str(len(result.relationships)))
    table.add_row("Complexity (avg / max)", f"{metrics.complexity_average:.1f} / {metrics.complexity_max}")
    table.add_row("Distribution", f"low {dist['low']} · medium {dist['medium']} · high {dist['high']}")
    table.add_row("Function coverage", f"{metrics.function_coverage:.0f}%")
    table.add_row("Technical debt", f"{metrics.debt_hours:.1f}h over {metrics.debt_issues} issues")
    console.print(table)

    if result.issues:
        issues = Table(title=f"Issues ({len(result.issues)})", show_header=True)
        issues.add_column("Severity")
        issues.add_column("Type", style="cyan")
        issues.add_column("Location")
        issues.add_column("Message")
        for issue in result.issues[:max_issues]:
            style = _SEVERITY_STYLE.get(issue.severity, "white")
            issues.add_row(
                f"[{style}]{issue.severity}[/{style}]",
                issue.kind,
                escape(f"{issue.file}:{issue.line}"),
                escape(issue.message),
            )
        console.print(issues)
        if len(result.issues) > max_issues:
            console.print(f"[dim]… {len(result.issues) - max_issues} more (use --json for all)[/dim]")
    else:
        console.print("[green]✓[/green] No issues found.")

    if result.suggestions:
        console.print(
            Panel(
                "\n".join(f"  • ({s.priority}) {s.title}: {escape(s.description)}" for s in result.suggestions[:10]),
                title="[bold yellow]Suggestions[/bold yellow]",
                border_style="yellow",
            )
        )


@app.command("analyze")
def analyze(
    project_path: Path = typer.Argument(..., exists=True, file_okay=False, help="Path to the project directory."),
    as_json: bool = typer.Option(False, "--json", help="Print the full analysis as JSON."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the JSON analysis to a file."),
    include_content: bool = typer.Option(False, "--include-content", help="Embed file contents in JSON output."),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", min=1, help="Extraction worker threads."),
    max_file_size: Optional[int] = typer.Option(None, "--max-file-size", min=1, help="Skip files larger than this (bytes)."),
    max_issues: int = typer.Option(20, "--max-issues", min=1, help="Issues shown in the summary table."),
    config_file: Optional[Path] = typer.Option(None, "--config", help="Alternative config.toml."),
):
    """Analyze a project: facts, relationships, diagnostics and metrics."""
    result = _run(project_path, config_file, workers, max_file_size)
    payload = result.to_dict(include_content=include_content)

    if output is not None:
        output.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    if as_json:
        typer.echo(json.dumps(payload, indent=2))
        return

    _print_summary(result, max_issues)
    if output is not None:
        console.print(f"[green]✓[/green] Analysis written to {output}")


@app.command("graph")
def graph(
    project_path: Path = typer.Argument(..., exists=True, file_okay=False, help="Path to the project directory."),
    fmt: str = typer.Option("json", "--format", "-f", help="Export format: json or dot."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file path (stdout if omitted)."),
    config_file: Optional[Path] = typer.Option(None, "--config", help="Alternative config.toml."),
):
    """Export the file relationship graph as JSON graph data or Graphviz DOT."""
    fmt = fmt.lower()
    if fmt not in {"json", "dot"}:
        raise typer.BadParameter("Format must be one of: json, dot")

    result = _run(project_path, config_file, None, None)
    text = to_dot(result) if fmt == "dot" else json.dumps(to_graph_data(result), indent=2)

    if output is None:
        typer.echo(text)
    else:
        output.write_text(text, encoding="utf-8")
        typer.echo(f"Exported graph to {output}")


@config_app.command("show")
def config_show(
    config_file: Optional[Path] = typer.Option(None, "--config", help="Alternative config.toml."),
):
    """Show the effective analysis settings."""
    try:
        settings = load_settings(config_file)
    except FluxcodeError as exc:
        console.print(f"[red]✗[/red] {escape(str(exc))}")
        raise typer.Exit(1)

    table = Table(title="Analysis Settings", show_header=True)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in settings.to_dict().items():
        shown = ", ".join(value) if isinstance(value, list) else str(value)
        table.add_row(key, shown)
    console.print(table)


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Setting name, e.g. high_complexity."),
    value: str = typer.Argument(..., help="New value; comma-separated for exempt_prefixes."),
    config_file: Optional[Path] = typer.Option(None, "--config", help="Alternative config.toml."),
):
    """Persist one analysis setting."""
    try:
        set_setting(key, value, config_file)
    except FluxcodeError as exc:
        console.print(f"[red]✗[/red] {escape(str(exc))}")
        raise typer.Exit(1)
    typer.echo(f"Set {key} = {value}")


@config_app.command("reset")
def config_reset(
    config_file: Optional[Path] = typer.Option(None, "--config", help="Alternative config.toml."),
):
    """Restore default analysis settings."""
    reset_settings(config_file)
    typer.echo("Analysis settings reset to defaults.")


if __name__ == "__main__":
    app()
