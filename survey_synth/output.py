"""Rich console summaries and JSON file save for generation results."""

import json
import logging
import re
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from survey_synth.models import GenerationResult, Trait

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)


def _slug(text: str, max_len: int = 40) -> str:
    """Convert text to a filename-safe slug."""
    slug = re.sub(r"[^\w\s-]", "", text.lower())
    slug = re.sub(r"[\s_-]+", "-", slug).strip("-")
    return slug[:max_len] or "survey"


def trait_averages(result: GenerationResult) -> dict[str, float]:
    """Mean score per canonical trait across all responses."""
    if not result.responses:
        return {}
    totals = {t.label: 0 for t in Trait}
    for response in result.responses:
        for score in response.traits:
            totals[score.name] += score.score
    return {name: total / len(result.responses) for name, total in totals.items()}


def print_generation_summary(result: GenerationResult) -> None:
    """Print batch timings and mean trait scores to the console."""
    console.print(Rule("[bold cyan]Generation Summary[/bold cyan]"))
    fallback_count = sum(1 for r in result.responses if r.used_fallback)
    console.print(
        Text(
            f"Responses: {len(result.responses)} | "
            f"Batches: {len(result.batch_timings)} | "
            f"Fallbacks: {fallback_count}",
            style="dim",
        )
    )

    timings = Table(title="Batches")
    timings.add_column("Batch", justify="right")
    timings.add_column("Responses", justify="right")
    timings.add_column("Duration", justify="right")
    for timing in result.batch_timings:
        timings.add_row(str(timing.batch_number), str(timing.response_count), f"{timing.duration_ms / 1000:.1f}s")
    console.print(timings)

    traits = Table(title="Mean trait scores")
    traits.add_column("Trait")
    traits.add_column("Category")
    traits.add_column("Mean", justify="right")
    averages = trait_averages(result)
    for trait in Trait:
        traits.add_row(trait.label, trait.category, f"{averages.get(trait.label, 0):.1f}")
    console.print(traits)


def save_to_file(result: GenerationResult, output_dir: Path, survey_title: str) -> Path:
    """Write responses and batch timings as a JSON document.

    Returns:
        Path to the saved file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filepath = output_dir / f"{timestamp}_{_slug(survey_title)}.json"

    document = {
        "survey": survey_title,
        "generatedAt": datetime.now().isoformat(),
        "responses": [r.to_dict() for r in result.responses],
        "batchTimings": [
            {
                "batchNumber": t.batch_number,
                "batchStartTime": t.started_at.isoformat(),
                "batchCompleteTime": t.completed_at.isoformat(),
                "batchDurationMs": t.duration_ms,
                "responseCount": t.response_count,
            }
            for t in result.batch_timings
        ],
    }
    filepath.write_text(json.dumps(document, indent=2), encoding="utf-8")
    logger.info("Responses saved to: %s", filepath)
    return filepath
