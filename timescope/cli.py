"""
timescope CLI

Inspect how a timeline document is positioned and windowed.

Usage:
    timescope inspect timeline.json   - Markers, eras and axis ticks
    timescope window 200 --focus 100  - Slide window for a dataset size
"""
import json
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from timescope import __version__
from timescope.config import Settings, configure_logging, get_settings
from timescope.core.dates import format_date, from_epoch_ms
from timescope.core.windowing import SlideWindowConfig, compute_visible_slides
from timescope.engine import TimelineEngine

load_dotenv()

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="timescope")
@click.option("--log-level", default=None, help="Logging level (defaults to TIMESCOPE_LOG_LEVEL)")
def main(log_level):
    """
    timescope - timeline positioning and windowing engine.
    """
    configure_logging(log_level)


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--width", type=float, default=None, help="Display width in pixels")
@click.option("--ticks", "tick_count", type=int, default=None, help="Target axis tick count")
@click.option("--zoom", "zoom_steps", type=int, default=0, help="Zoom in (positive) or out (negative) N steps")
def inspect(path: Path, width, tick_count, zoom_steps: int):
    """
    Position the events of a timeline JSON file.

    Example:
        timescope inspect data/timeline.json --width 1200 --zoom 2
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        console.print(f"[red]✗ Invalid JSON in {path}: {e}[/red]")
        sys.exit(1)

    settings = get_settings()
    overrides = {}
    if width is not None:
        overrides["DISPLAY_WIDTH"] = width
    if tick_count is not None:
        overrides["AXIS_TICK_COUNT"] = tick_count
    if overrides:
        settings = Settings(**{**settings.model_dump(), **overrides})

    try:
        engine = TimelineEngine.from_data(data, settings=settings)
    except ValidationError as e:
        console.print(f"[red]✗ Not a timeline document: {e}[/red]")
        sys.exit(1)

    for _ in range(abs(zoom_steps)):
        if zoom_steps > 0:
            engine.zoom_in()
        else:
            engine.zoom_out()

    start, end = engine.scale.domain
    console.print(Panel(
        f"Domain: [cyan]{format_date(from_epoch_ms(start))}[/cyan] → "
        f"[cyan]{format_date(from_epoch_ms(end))}[/cyan]\n"
        f"Pixel width: {engine.pixel_width:.0f}  Zoom: {engine.zoom_level:.2f}x",
        title=f"📅 {path.name}",
        border_style="cyan",
    ))

    markers = Table(title=f"Markers ({len(engine.events)})")
    markers.add_column("#", style="dim")
    markers.add_column("Date", style="cyan")
    markers.add_column("Headline")
    markers.add_column("x", justify="right")
    markers.add_column("%", justify="right")
    for marker in engine.marker_positions:
        event = marker.event
        headline = event.text.headline if event.text and event.text.headline else ""
        markers.add_row(
            str(marker.index),
            str(event.start_date),
            headline,
            f"{marker.x:.1f}",
            f"{marker.percentage:.2f}",
        )
    console.print(markers)

    if engine.eras:
        eras = Table(title=f"Eras ({len(engine.eras)})")
        eras.add_column("Era")
        eras.add_column("x", justify="right")
        eras.add_column("width", justify="right")
        for era, position in zip(engine.eras, engine.era_positions):
            name = era.text.headline if era.text and era.text.headline else era.unique_id or ""
            eras.add_row(name, f"{position.x:.1f}", f"{position.width:.1f}")
        console.print(eras)

    ticks = Table(title="Axis ticks")
    ticks.add_column("Label", style="green")
    ticks.add_column("Position", justify="right")
    for tick in engine.axis_ticks:
        ticks.add_row(tick.label, f"{tick.position:.1f}")
    console.print(ticks)

    for failure in engine.failures:
        console.print(f"[yellow]⚠ Skipped #{failure.index}: {failure.error}[/yellow]")
    for warning in engine.warnings:
        console.print(f"[yellow]⚠ {warning}[/yellow]")


@main.command()
@click.argument("total", type=int)
@click.option("--focus", type=int, default=0, help="Focused slide index")
@click.option("--buffer", "buffer_size", type=int, default=None, help="Slides on each side")
@click.option("--threshold", type=int, default=None, help="Auto-enable threshold")
@click.option("--title", "has_title", is_flag=True, help="Dataset has a title slide")
def window(total: int, focus: int, buffer_size, threshold, has_title: bool):
    """
    Show which slides are rendered for a dataset size and focus.

    Example:
        timescope window 200 --focus 100
    """
    config = get_settings().slide_window_config()
    updates = {}
    if buffer_size is not None:
        updates["buffer_size"] = buffer_size
    if threshold is not None:
        updates["threshold"] = threshold
    if updates:
        config = SlideWindowConfig(**{**config.model_dump(), **updates})

    result = compute_visible_slides(total, focus, config, has_title=has_title)
    status = "[green]on[/green]" if result.enabled else "[dim]off[/dim]"
    console.print(f"Windowing: {status}")
    console.print(f"Rendered: {result.rendered_count}/{result.total_count} slides")
    console.print(f"Indices: {list(result.indices)}")
    console.print(f"Memory reduction: {result.memory_reduction_percent}%")


if __name__ == "__main__":
    main()
