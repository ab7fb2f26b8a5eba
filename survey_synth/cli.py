"""Click CLI: load a survey file, generate synthetic responses, save them as JSON."""

import asyncio
import logging
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from config.config_loader import AppConfig, load_config
from survey_synth.engine import SyntheticResponseEngine, build_engine
from survey_synth.models import BatchReport, GenerationResult
from survey_synth.output import print_generation_summary, save_to_file
from survey_synth.providers.base import MissingCredentialError
from survey_synth.survey_loader import SurveyDefinition, load_survey

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _apply_overrides(config: AppConfig, max_concurrent_batches: int | None, no_diversity: bool) -> None:
    """CLI flags win over settings.yaml and the environment."""
    if max_concurrent_batches is not None:
        config.engine.max_concurrent_batches = max(1, max_concurrent_batches)
    if no_diversity:
        config.engine.enforce_diversity = False


async def _run(engine: SyntheticResponseEngine, survey: SurveyDefinition, count: int) -> GenerationResult:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(f"Generating {count} responses...", total=count)

        def on_batch_complete(report: BatchReport) -> None:
            fallbacks = sum(1 for r in report.responses if r.used_fallback)
            progress.advance(task, report.response_count)
            progress.print(
                f"[green]OK[/green] Batch {report.batch_index + 1} complete "
                f"({report.response_count} responses, {fallbacks} fallback)"
            )

        return await engine.generate(
            survey.questions,
            survey.business_context,
            survey.demographics,
            count,
            on_batch_complete=on_batch_complete,
        )


@click.command()
@click.argument("survey_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--count", default=10, show_default=True, type=click.IntRange(min=1),
              help="Number of responses to generate")
@click.option("--provider", default=None, help="Provider to use (default: from config)")
@click.option("--max-concurrent-batches", default=None, type=int,
              help="Concurrent batches (default: from config or AI_MAX_CONCURRENT_BATCHES)")
@click.option("--no-diversity", is_flag=True, default=False, help="Skip the per-batch option diversity pass")
@click.option("--output", "output_path", default=None, help="Output directory (default: from config)")
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
def main(
    survey_file: Path,
    count: int,
    provider: str | None,
    max_concurrent_batches: int | None,
    no_diversity: bool,
    output_path: str | None,
    verbose: bool,
) -> None:
    """Survey Synth -- generate synthetic respondents for a survey definition.

    \b
    Examples:
      survey-synth survey.yaml --count 25
      survey-synth survey.yaml --count 12 --provider claude --max-concurrent-batches 2
    """
    load_dotenv()
    _setup_logging(verbose)

    try:
        config = load_config()
        survey = load_survey(survey_file)
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[bold red]Config error:[/bold red] {escape(str(exc))}")
        sys.exit(1)

    _apply_overrides(config, max_concurrent_batches, no_diversity)

    try:
        engine = build_engine(config, provider)
    except (KeyError, MissingCredentialError) as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        sys.exit(1)

    console.print(
        f"\n[bold cyan]Survey Synth[/bold cyan] {survey.title}: {len(survey.questions)} questions, "
        f"{count} responses via {engine.provider.name()} ({engine.provider.model_string()})\n"
    )

    result = asyncio.run(_run(engine, survey, count))
    print_generation_summary(result)

    output_dir = Path(output_path) if output_path else config.engine.output_dir
    saved_path = save_to_file(result, output_dir, survey.title)
    console.print(f"\n[dim]Saved to: {saved_path}[/dim]")


if __name__ == "__main__":
    main()
