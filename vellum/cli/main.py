"""CLI entry point for Vellum."""

import dataclasses
import sys
import logging
from typing import Any, Dict, Optional, Tuple

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn
from rich.table import Table
from rich.panel import Panel

from vellum import Vellum, VellumConfig, __version__
from vellum.exceptions import VellumError, VellumPipelineError
from vellum.models import (
    ChapterMarkerStyle,
    CleaningStep,
    EndMarkerStyle,
    MetadataFormat,
    PresetType,
    StepResult,
)

console = Console()

_STEP_NAMES = [step.value for step in CleaningStep]


def setup_logging(verbose: bool) -> None:
    """Set up logging configuration."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def build_config(
    config_path: Optional[str],
    preset: Optional[str],
    enable: Tuple[str, ...],
    disable: Tuple[str, ...],
    overrides: Dict[str, Any],
) -> VellumConfig:
    """Combine config file, preset, step toggles and option overrides.

    Raises:
        VellumConfigError: If the result is invalid
    """
    if config_path:
        config = VellumConfig.from_yaml(config_path)
    elif preset:
        config = VellumConfig.from_preset(preset)
    else:
        config = VellumConfig()

    values = {key: value for key, value in overrides.items() if value is not None}
    if values:
        config = dataclasses.replace(config, **values)

    for name in enable:
        config.set_step_enabled(CleaningStep.from_string(name), True)
    for name in disable:
        config.set_step_enabled(CleaningStep.from_string(name), False)
    return config


def steps_table(results: Tuple[StepResult, ...]) -> Table:
    table = Table(title="Steps", show_header=True)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Step", style="cyan")
    table.add_column("Status")
    table.add_column("Changes", justify="right")
    table.add_column("Confidence", justify="right")
    table.add_column("Tokens", justify="right")
    table.add_column("Notes", style="dim")

    for result in results:
        status = "[yellow]skipped[/yellow]" if result.skipped else "[green]done[/green]"
        notes = result.skip_reason or ""
        if result.anomalies:
            notes = "; ".join(a.description for a in result.anomalies)
        table.add_row(
            str(result.step.ordinal),
            result.step.label,
            status,
            str(result.change_count),
            f"{result.confidence:.2f}",
            str(result.cost),
            notes,
        )
    return table


@click.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "-o",
    "--output-dir",
    default="./output",
    help="Output directory",
    type=click.Path(),
)
@click.option(
    "-m",
    "--model",
    default=None,
    help="OpenAI model name (default from config)",
)
@click.option(
    "-k",
    "--api-key",
    envvar="OPENAI_API_KEY",
    help="OpenAI API key (or set OPENAI_API_KEY env var)",
)
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True),
    help="Path to configuration YAML file",
)
@click.option(
    "-p",
    "--preset",
    type=click.Choice([p.value for p in PresetType] + ["aggressive", "preserve_citations"]),
    help="Configuration preset (ignored when --config is given)",
)
@click.option(
    "--enable",
    multiple=True,
    type=click.Choice(_STEP_NAMES),
    help="Enable an optional step (repeatable)",
)
@click.option(
    "--disable",
    multiple=True,
    type=click.Choice(_STEP_NAMES),
    help="Disable an optional step (repeatable)",
)
@click.option(
    "--chapter-markers",
    type=click.Choice([s.value for s in ChapterMarkerStyle]),
    help="Chapter marker style",
)
@click.option(
    "--end-marker",
    type=click.Choice([s.value for s in EndMarkerStyle]),
    help="End-of-document marker style",
)
@click.option(
    "--metadata-format",
    type=click.Choice([f.value for f in MetadataFormat]),
    help="Metadata block format",
)
@click.option(
    "--max-paragraph-words",
    type=int,
    help="Split paragraphs longer than this (0 disables)",
)
@click.option(
    "--min-confidence",
    type=float,
    help="Minimum confidence for any boundary removal (0.0-1.0)",
)
@click.option(
    "--no-fallback",
    is_flag=True,
    help="Disable heuristic fallback when the oracle answer is rejected",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose output",
)
@click.version_option(version=__version__)
def cli(
    input_file: str,
    output_dir: str,
    model: Optional[str],
    api_key: Optional[str],
    config: Optional[str],
    preset: Optional[str],
    enable: Tuple[str, ...],
    disable: Tuple[str, ...],
    chapter_markers: Optional[str],
    end_marker: Optional[str],
    metadata_format: Optional[str],
    max_paragraph_words: Optional[int],
    min_confidence: Optional[float],
    no_fallback: bool,
    verbose: bool,
) -> None:
    """Vellum: Document cleaning library.

    Remove front matter, back matter, page furniture and references from
    raw document text, guarding every deletion against bad model answers.

    INPUT_FILE: Path to input document (TXT or MD)
    """
    setup_logging(verbose)

    # Validate API key
    if not api_key:
        console.print(
            "[red]Error:[/red] OpenAI API key required. "
            "Set OPENAI_API_KEY environment variable or use --api-key option."
        )
        sys.exit(1)

    try:
        vellum_config = build_config(
            config,
            preset,
            enable,
            disable,
            {
                "chapter_marker_style": chapter_markers,
                "end_marker_style": end_marker,
                "metadata_format": metadata_format,
                "max_paragraph_words": max_paragraph_words,
                "min_boundary_confidence": min_confidence,
                "heuristic_fallback_enabled": False if no_fallback else None,
                "verbose": True if verbose else None,
            },
        )
    except (VellumError, ValueError) as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)

    # Display header
    console.print(
        Panel.fit(
            f"[bold blue]Vellum v{__version__}[/bold blue]\n"
            f"Document Cleaning ({vellum_config.preset.value} preset, "
            f"{len(vellum_config.enabled_steps)} steps)",
            border_style="blue",
        )
    )
    console.print()

    try:
        vellum = Vellum(openai_api_key=api_key, model=model, config=vellum_config)
    except VellumError as e:
        console.print(f"[red]Initialization error:[/red] {e}")
        sys.exit(1)

    # Process with progress indicator
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        console=console,
    ) as progress:
        task = progress.add_task("[cyan]Cleaning...", total=100)

        def on_progress(stage: str, pct: float) -> None:
            progress.update(task, completed=int(pct * 100), description=f"[cyan]{stage}")

        try:
            result = vellum.clean(
                input_file=input_file,
                output_dir=output_dir,
                progress_callback=on_progress,
            )
        except VellumPipelineError as e:
            console.print(f"\n[red]Processing error in {e.stage_name}:[/red] {e}")
            if e.completed_results:
                console.print(steps_table(tuple(e.completed_results)))
            sys.exit(1)
        except VellumError as e:
            console.print(f"\n[red]Processing error:[/red] {e}")
            sys.exit(1)
        except Exception as e:
            console.print(f"\n[red]Unexpected error:[/red] {e}")
            if verbose:
                console.print_exception()
            sys.exit(1)

    console.print()

    content = result.content
    console.print(steps_table(content.step_results))
    console.print()
    console.print(
        f"[green]✓[/green] {content.original_word_count} → {content.word_count} words "
        f"({content.reduction_percentage:.1f}% removed), "
        f"confidence {content.overall_confidence:.0%}, {content.total_cost} tokens"
    )
    console.print(f"[green]✓[/green] Output: {result.output_path}")
    console.print(f"[green]✓[/green] Report: {result.report_path}")

    # Show warnings
    if content.warnings:
        console.print()
        for warning in content.warnings:
            console.print(f"[yellow]Warning:[/yellow] {warning}")

    if not result.success:
        sys.exit(1)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
