"""CLI entry point for the trickplay generator.

Usage:
    trickplay run movie.mp4                 # Sample, extract and build tilesheets
    trickplay plan movie.mp4 --interval 5   # Show the sheet layout only
    trickplay info --config trickplay.yaml  # Show effective configuration
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from trickplay.core.logging import setup_logging

app = typer.Typer(name="trickplay", help="Video scrub-preview tilesheet generator")
console = Console()


def _logging(level: str) -> None:
    try:
        setup_logging(level)
    except ValueError as exc:
        console.print(f"[red]Invalid option:[/red] {escape(str(exc))}")
        raise typer.Exit(2)


def _config(
    config: Optional[Path],
    output_dir: Optional[Path] = None,
    interval: Optional[float] = None,
    width: Optional[int] = None,
    columns: Optional[int] = None,
    rows: Optional[int] = None,
    skip_extraction: Optional[bool] = None,
    engine: Optional[str] = None,
    workers: Optional[int] = None,
):
    import yaml
    from pydantic import ValidationError

    from trickplay.core.pipeline_runner import load_trickplay_config

    try:
        return load_trickplay_config(
            config,
            output_dir=output_dir,
            seconds_between_frames=interval,
            frame_width=width,
            sheet_columns=columns,
            sheet_rows=rows,
            skip_frame_extraction=skip_extraction,
            engine=engine,
            max_workers=workers,
        )
    except ValidationError as exc:
        console.print(f"[red]Invalid configuration:[/red]\n{escape(str(exc))}")
        raise typer.Exit(2)
    except (OSError, yaml.YAMLError) as exc:
        console.print(f"[red]Cannot read config {escape(str(config))}:[/red] {escape(str(exc))}")
        raise typer.Exit(2)


@app.command()
def run(
    video: Path = typer.Argument(..., help="Source video file"),
    config: Optional[Path] = typer.Option(None, help="YAML config path"),
    output_dir: Optional[Path] = typer.Option(None, help="Output root (default <video>.trickplay)"),
    interval: Optional[float] = typer.Option(None, help="Seconds between sampled frames"),
    width: Optional[int] = typer.Option(None, help="Frame width in pixels"),
    columns: Optional[int] = typer.Option(None, help="Frames per sheet row"),
    rows: Optional[int] = typer.Option(None, help="Rows per sheet"),
    skip_extraction: bool = typer.Option(
        False, "--skip-extraction", help="Reuse frames already on disk"
    ),
    engine: Optional[str] = typer.Option(None, help="Backend: opencv|ffmpeg"),
    workers: Optional[int] = typer.Option(None, help="Worker pool size"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """Generate trickplay tilesheets for a video."""
    _logging(log_level)
    from trickplay.core.errors import TrickplayError
    from trickplay.core.pipeline_runner import run_trickplay

    cfg = _config(
        config, output_dir, interval, width, columns, rows, skip_extraction or None, engine, workers
    )
    try:
        output = run_trickplay(video, cfg)
    except TrickplayError as exc:
        console.print(f"[red]{type(exc).__name__}:[/red] {escape(str(exc))}")
        raise typer.Exit(1)
    console.print(f"[green]Done. Output:[/green] {escape(output.model_dump_json(indent=2))}")


@app.command()
def plan(
    video: Path = typer.Argument(..., help="Source video file"),
    config: Optional[Path] = typer.Option(None, help="YAML config path"),
    interval: Optional[float] = typer.Option(None, help="Seconds between sampled frames"),
    columns: Optional[int] = typer.Option(None, help="Frames per sheet row"),
    rows: Optional[int] = typer.Option(None, help="Rows per sheet"),
    engine: Optional[str] = typer.Option(None, help="Backend: opencv|ffmpeg"),
) -> None:
    """Show how many frames and sheets a run would produce."""
    _logging("WARNING")
    from trickplay.core.errors import TrickplayError
    from trickplay.core.pipeline_runner import plan_trickplay

    cfg = _config(config, interval=interval, columns=columns, rows=rows, engine=engine)
    try:
        result = plan_trickplay(video, cfg)
    except TrickplayError as exc:
        console.print(f"[red]{type(exc).__name__}:[/red] {escape(str(exc))}")
        raise typer.Exit(1)

    console.print(
        f"{result.video_path.name}: {result.duration_seconds:.2f}s, "
        f"{result.frame_count} frames ({result.timestamp_source}), {result.total_rows} rows"
    )
    table = Table(title=f"Tilesheets in {result.tilesheet_dir}")
    table.add_column("Sheet", style="cyan")
    table.add_column("Frames", style="green")
    table.add_column("Rows used", style="yellow")
    for i, count in enumerate(result.frames_per_sheet):
        table.add_row(str(i), str(count), str(math.ceil(count / cfg.sheet_columns)))
    console.print(table)


@app.command()
def info(config: Optional[Path] = typer.Option(None, help="YAML config path")) -> None:
    """Show the effective configuration."""
    cfg = _config(config)
    table = Table(title="Trickplay configuration")
    table.add_column("Option", style="cyan")
    table.add_column("Value", style="green")
    for key, value in cfg.model_dump().items():
        table.add_row(key, "-" if value in (None, []) else str(value))
    console.print(table)


if __name__ == "__main__":
    app()
