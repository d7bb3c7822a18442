"""Command-line entry points for the trend intelligence workflow."""

import json
import dataclasses
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional

import typer
from pydantic import BaseModel
from rich import print as rprint

from .config import get_settings
from .history import load_past_strategies
from .logging_setup import configure_logging
from .pipeline import run_trend_analysis, to_response

app = typer.Typer(
    help="Analyze Pune & PCMC real-estate signals and log fresh marketing strategies."
)


def _to_plain(value: Any) -> Any:
    """
    Convert pydantic models, dataclasses, Paths, and date-like objects into
    JSON-serializable primitives.
    """
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if dataclasses.is_dataclass(value):
        return _to_plain(
            {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
        )
    if isinstance(value, dict):
        return {k: _to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_to_plain(item) for item in value]
    return value


def _write_output(out_path: Path, json_payload: dict) -> None:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(
        json.dumps(json_payload, ensure_ascii=False, indent=2),
        encoding="utf-8",
    )


def _print_list(title: str, items: list[str]) -> None:
    rprint(f"[bold cyan]{title}[/bold cyan]")
    for idx, item in enumerate(items, start=1):
        rprint(f"  {idx}. {item}")


@app.callback()
def main_callback(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging."
    ),
):
    settings = get_settings()
    configure_logging("DEBUG" if verbose else settings.log_level)


@app.command("run")
def run_command(
    out: Optional[Path] = typer.Option(
        None,
        "--out",
        "-o",
        help="Optional path to write the analysis response as JSON.",
    ),
    no_log: bool = typer.Option(
        False,
        "--no-log",
        help="Skip appending this run to the Trends sheet.",
    ),
):
    """
    Run one analysis: fetch all sources -> analyze -> log to the Trends sheet.
    """
    result = run_trend_analysis(get_settings(), skip_log=no_log)
    response = to_response(result)

    if result.bundle.degraded_sources:
        rprint(
            "[yellow]No data from: "
            f"{', '.join(result.bundle.degraded_sources)}[/yellow]"
        )
    if result.analysis.degraded:
        rprint("[red]Analysis degraded; showing fallback result.[/red]")

    rprint(f"[bold]Summary[/bold] ({response.timestamp})")
    rprint(response.summary)
    _print_list("Patterns", response.patterns)
    _print_list("Strategies", response.strategies)

    if result.logged:
        rprint("[green]Logged to Google Sheets[/green]")
    elif result.log_error:
        rprint(f"[red]Logging failed: {result.log_error}[/red]")

    if out:
        _write_output(out, _to_plain(response))
        rprint(f"[cyan]Wrote output to {out}[/cyan]")


@app.command("history")
def history_command(
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-n",
        help="Show only the most recent N strategies.",
    ),
):
    """
    Print strategies already stored in the Trends sheet (oldest first).
    """
    if limit is not None and limit < 1:
        raise typer.BadParameter("limit must be >= 1.")

    strategies = load_past_strategies(get_settings())
    if not strategies:
        rprint("[yellow]No stored strategies.[/yellow]")
        return
    if limit:
        strategies = strategies[-limit:]
    _print_list(f"Past strategies ({len(strategies)})", strategies)


def main():
    app()


if __name__ == "__main__":
    main()
