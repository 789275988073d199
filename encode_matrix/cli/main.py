"""
CLI interface for Encode Matrix.

This module provides the command-line interface using Typer and Rich
for beautiful terminal output.
"""

import asyncio
import sys
from pathlib import Path
from typing import Any, Optional

import typer
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table

from ..config import ConfigManager, MatrixConfig, SweepPreset, get_config_manager
from ..executor import BatchController
from ..inspector import MediaInspector
from ..models import BatchSummary, Resolution, VideoCodec
from ..planner import (
    column_labels,
    generate_quality_axis,
    generate_resolution_axis,
    repeated_values,
    row_labels,
)
from ..transcoder import FFmpegEncoder
from ..ui import MatrixMonitor, SummaryReporter
from ..utils import ConfigurationError, MatrixError, get_logger, setup_logger

# Initialize Typer app
app = typer.Typer(
    name="encode-matrix",
    help="Encode a video across a grid of resolutions and CRF values",
    add_completion=False,
)

# Console for rich output
console = Console()

# Logger
logger = get_logger(__name__)

# Seconds between matrix redraws
POLL_INTERVAL = 0.1


def _load_config(config_file: Optional[Path]) -> MatrixConfig:
    """Load configuration from an explicit file or the default locations."""
    if config_file:
        return ConfigManager(config_file).config
    return get_config_manager().config


def _resolve_preset(config: MatrixConfig, name: Optional[str], **overrides: Any) -> SweepPreset:
    """
    Merge CLI overrides into a named preset.

    Raises:
        ConfigurationError: If the preset is unknown or the merged values are invalid
    """
    preset_name = name or config.default_preset
    preset = config.get_preset(preset_name)
    if preset is None:
        available = ", ".join(config.presets.keys()) or "none"
        raise ConfigurationError(
            f"Preset '{preset_name}' not found. Available presets: {available}"
        )

    values = preset.model_dump()
    values.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return SweepPreset(**values)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid sweep settings: {e}") from e


@app.command()
def sweep(
    input_file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="Input video file to sweep",
    ),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output directory (default: <input>_matrix next to the input)",
    ),
    preset: Optional[str] = typer.Option(
        None,
        "--preset",
        "-p",
        help="Sweep preset from the configuration (see 'presets')",
    ),
    min_res: Optional[str] = typer.Option(None, "--min-res", help="Smallest resolution, e.g. 480p"),
    max_res: Optional[str] = typer.Option(None, "--max-res", help="Largest resolution, e.g. 1080p"),
    res_steps: Optional[int] = typer.Option(None, "--res-steps", help="Number of resolutions"),
    min_crf: Optional[int] = typer.Option(None, "--min-crf", help="Lowest CRF (best quality)"),
    max_crf: Optional[int] = typer.Option(None, "--max-crf", help="Highest CRF"),
    crf_steps: Optional[int] = typer.Option(None, "--crf-steps", help="Number of CRF values"),
    threads: Optional[int] = typer.Option(
        None,
        "--threads",
        "-j",
        help="Maximum concurrent encodes",
    ),
    fps: Optional[int] = typer.Option(None, "--fps", help="Output frame rate"),
    codec: Optional[VideoCodec] = typer.Option(
        None,
        "--codec",
        case_sensitive=False,
        help="Codec family: h264, webm, av1",
    ),
    no_audio: bool = typer.Option(
        False,
        "--no-audio",
        help="Drop the audio track from every encode",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        exists=True,
        dir_okay=False,
        help="Custom configuration file",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log",
        help="Log file path",
    ),
    yes_flag: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Automatic yes to prompts; run non-interactively",
    ),
) -> None:
    """
    Encode a video at every resolution and CRF combination of a sweep.

    The source is probed, every cell is checked for upscaling before any
    encode starts, and the encodes run in parallel under a live matrix view.
    Press Ctrl-C to stop scheduling new encodes; running encodes finish.
    """
    setup_logger(
        name="encode_matrix",
        level="DEBUG" if verbose else "INFO",
        log_file=log_file,
        verbose=verbose,
        console=console,
    )

    console.print()
    console.print(
        Panel.fit(
            "[bold cyan]Encode Matrix[/bold cyan]\n"
            "[dim]Resolution × CRF sweeps[/dim]",
            border_style="cyan",
        )
    )
    console.print()

    try:
        summary = asyncio.run(
            _sweep_async(
                input_file=input_file,
                output_dir=output_dir,
                preset_name=preset,
                overrides={
                    "min_res": min_res,
                    "max_res": max_res,
                    "res_steps": res_steps,
                    "min_crf": min_crf,
                    "max_crf": max_crf,
                    "crf_steps": crf_steps,
                    "max_threads": threads,
                    "frame_rate": fps,
                    "codec": codec,
                    "keep_audio": False if no_audio else None,
                },
                config_file=config_file,
                yes_flag=yes_flag,
            )
        )

    except KeyboardInterrupt:
        console.print("\n[yellow]⚠ Sweep cancelled by user[/yellow]")
        sys.exit(130)
    except MatrixError as e:
        console.print(f"\n[bold red]✗ Error:[/bold red] {escape(str(e))}")
        if verbose:
            console.print_exception()
        sys.exit(1)

    if summary is not None and summary.has_failures:
        sys.exit(1)


async def _sweep_async(
    input_file: Path,
    output_dir: Optional[Path],
    preset_name: Optional[str],
    overrides: dict[str, Any],
    config_file: Optional[Path],
    yes_flag: bool,
) -> Optional[BatchSummary]:
    """
    Async implementation of the sweep workflow.

    Returns:
        BatchSummary, or None if the user declined to start
    """
    reporter = SummaryReporter(console)

    # Step 1: Configuration
    config = _load_config(config_file)
    settings = _resolve_preset(config, preset_name, **overrides)

    # Step 2: Probe
    console.print("[cyan]🎬 Inspecting video file...[/cyan]")
    inspector = MediaInspector(config.ffmpeg.ffprobe_path)
    source = await inspector.inspect(input_file)
    reporter.display_source(source)

    # Step 3: Plan
    resolution_axis = settings.resolution_axis()
    quality_axis = settings.quality_axis()
    resolutions = generate_resolution_axis(resolution_axis)
    quality_levels = generate_quality_axis(quality_axis)

    if output_dir is None:
        output_dir = config.output.directory or input_file.parent / f"{input_file.stem}_matrix"

    reporter.display_plan(
        row_labels(quality_levels),
        column_labels(resolutions),
        settings.max_threads,
        output_dir,
    )

    usable = Resolution.available_for(source.width, source.height)
    too_large = [res.label for res in resolutions if res not in usable]
    if too_large:
        reporter.display_warning(
            f"{', '.join(too_large)} would upscale {source.resolution}; those cells will be skipped"
        )
    repeated = [res.label for res in repeated_values(resolutions)] + [
        f"CRF {quality}" for quality in repeated_values(quality_levels)
    ]
    if repeated:
        reporter.display_warning(
            f"{', '.join(repeated)} repeat on the axis; those cells write the same output file"
        )
    if settings.keep_audio and not source.has_audio:
        reporter.display_warning("Source has no audio; use --no-audio to encode video only")

    if not yes_flag:
        if not Confirm.ask("   [yellow]Start encoding?[/yellow]", default=True):
            console.print("[yellow]Sweep cancelled[/yellow]")
            return None

    console.print()

    # Step 4: Run
    encoder = FFmpegEncoder(config.ffmpeg.ffmpeg_path, config.ffmpeg.preset)
    controller = BatchController(encoder)
    handle = controller.start(
        source,
        resolution_axis,
        quality_axis,
        max_concurrency=settings.max_threads,
        output_dir=output_dir,
        frame_rate=settings.frame_rate,
        keep_audio=settings.keep_audio,
        codec=settings.codec,
    )

    interrupted = False
    with MatrixMonitor(handle.row_labels, handle.column_labels, console=console) as monitor:
        while not handle.done:
            monitor.update(handle.matrix.snapshot(), handle.matrix.completed_count)
            try:
                await asyncio.sleep(POLL_INTERVAL)
            except asyncio.CancelledError:
                # Ctrl-C: stop scheduling, let running encodes finish
                interrupted = True
                if handle.cancel():
                    logger.warning("Cancelling: waiting for running encodes to finish")
                break

        summary = await handle.wait()
        monitor.update(handle.matrix.snapshot(), handle.matrix.completed_count)

    # Step 5: Report
    reporter.display_summary(
        summary,
        handle.matrix.snapshot(),
        handle.row_labels,
        handle.column_labels,
        output_dir=output_dir,
    )

    if interrupted:
        raise KeyboardInterrupt
    return summary


@app.command()
def probe(
    input_file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="Video file to inspect",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        exists=True,
        dir_okay=False,
        help="Custom configuration file",
    ),
) -> None:
    """
    Show source information and the resolutions usable without upscaling.
    """
    try:
        config = _load_config(config_file)
        source = asyncio.run(MediaInspector(config.ffmpeg.ffprobe_path).inspect(input_file))
    except MatrixError as e:
        console.print(f"[bold red]✗ Error:[/bold red] {escape(str(e))}")
        sys.exit(1)

    console.print()
    SummaryReporter(console).display_source(source)


@app.command("presets")
def presets_command(
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        exists=True,
        dir_okay=False,
        help="Custom configuration file",
    ),
) -> None:
    """
    List sweep presets.
    """
    try:
        config = _load_config(config_file)
    except ConfigurationError as e:
        console.print(f"[red]✗ Error:[/red] {escape(str(e))}")
        sys.exit(1)

    table = Table(title="Sweep Presets", show_header=True)
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Codec", style="magenta")
    table.add_column("Resolutions", style="yellow")
    table.add_column("CRF", style="green")
    table.add_column("Encodes", style="white", justify="right")
    table.add_column("Jobs", style="white", justify="right")

    for name, preset in config.presets.items():
        marker = " *" if name == config.default_preset else ""
        table.add_row(
            f"{name}{marker}",
            preset.codec.value,
            f"{preset.min_res}–{preset.max_res} ×{preset.res_steps}",
            f"{preset.min_crf}–{preset.max_crf} ×{preset.crf_steps}",
            str(preset.cell_count),
            str(preset.max_threads),
        )

    console.print()
    console.print(table)
    console.print("[dim]* default preset[/dim]")
    console.print()


@app.command("resolutions")
def resolutions_command() -> None:
    """
    List supported resolutions.
    """
    table = Table(title="Resolutions", show_header=True)
    table.add_column("Name", style="cyan")
    table.add_column("Size", style="yellow")
    table.add_column("Label", style="white")

    for res in Resolution.ordered():
        table.add_row(res.label, res.file_name, res.display_name)

    console.print()
    console.print(table)
    console.print()


@app.command("config")
def config_command(
    action: str = typer.Argument(..., help="Action: init, show"),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file for 'init' action",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite an existing file for 'init' action",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        exists=True,
        dir_okay=False,
        help="Configuration file for 'show' action",
    ),
) -> None:
    """
    Manage configuration files.

    Actions:
    - init: Create a default configuration file
    - show: Display current configuration
    """
    if action == "init":
        output_path = output or Path(".encode-matrix.yaml")

        try:
            ConfigManager().init_default_config(output_path, force=force)
            console.print(f"[green]✓[/green] Created config file: {output_path}")
        except ConfigurationError as e:
            console.print(f"[red]✗ Error:[/red] {escape(str(e))}")
            sys.exit(1)

    elif action == "show":
        try:
            config = _load_config(config_file)
        except ConfigurationError as e:
            console.print(f"[red]✗ Error:[/red] {escape(str(e))}")
            sys.exit(1)

        console.print()
        console.print(Panel("[bold cyan]Current Configuration[/bold cyan]", border_style="cyan"))
        console.print()

        table = Table(title="FFmpeg Settings", show_header=True)
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="white")
        table.add_row("ffmpeg", config.ffmpeg.ffmpeg_path)
        table.add_row("ffprobe", config.ffmpeg.ffprobe_path)
        table.add_row("x264 Preset", config.ffmpeg.preset)
        table.add_row("Output Directory", str(config.output.directory or "<input>_matrix"))
        console.print(table)
        console.print()

        console.print(f"[bold]Presets[/bold] (default: {config.default_preset}):")
        for name, preset in config.presets.items():
            console.print(f"  • {name}: {preset.cell_count} encode(s), {preset.codec.value}")
        console.print()

    else:
        console.print(f"[red]✗ Unknown action:[/red] {action}")
        console.print("Valid actions: init, show")
        sys.exit(1)


@app.command("version")
def version_command() -> None:
    """
    Display version information.
    """
    from .. import __version__

    console.print()
    console.print(
        Panel.fit(
            f"[bold cyan]Encode Matrix[/bold cyan]\n"
            f"[dim]Version {__version__}[/dim]",
            border_style="cyan",
        )
    )
    console.print()


def main() -> None:
    """
    Main entry point for CLI.
    """
    app()


if __name__ == "__main__":
    main()
