"""Rich console output and markdown file save for generated speeches."""

import logging
import re
from pathlib import Path

from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from verbamind.models import GenerationResult, SpeechHistoryItem, SpeechParams, VerificationResult

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)

# Presentation only: (label, icon) per verification aspect
ASPECT_LABELS: dict[str, tuple[str, str]] = {
    "naturalness": ("Naturalness", "🗣️"),
    "style": ("Style", "✍️"),
    "logic": ("Logic", "🧠"),
}


def _slug(text: str, max_len: int = 40) -> str:
    """Convert text to a filename-safe slug."""
    slug = re.sub(r"[^\w\s-]", "", text.lower())
    slug = re.sub(r"[\s_-]+", "-", slug).strip("-")
    return slug[:max_len]


def aspect_label(result: VerificationResult) -> str:
    label, icon = ASPECT_LABELS.get(result.aspect, (result.aspect.title(), "•"))
    return f"{icon} {label}"


def _score_style(score: int) -> str:
    if score >= 85:
        return "green"
    if score >= 70:
        return "yellow"
    return "red"


def print_verification_summary(result: GenerationResult) -> None:
    """Print per-check scores and notes, or a note that checks were skipped."""
    console.print(Rule("[bold cyan]Quality[/bold cyan]"))
    refined = " (refined)" if result.was_refined else ""
    console.print(
        Text(f"Overall score: {result.overall_score}{refined}", style=f"bold {_score_style(result.overall_score)}")
    )
    if not result.verification_results:
        console.print(Text("Verification skipped.", style="dim"))
        return
    for check in result.verification_results:
        notes = "\n".join(f"- {item}" for item in check.feedback) or "No notes."
        console.print(
            Panel(
                Text(notes),
                title=f"[bold]{aspect_label(check)}[/bold]",
                subtitle=f"{check.score}/100",
                border_style=_score_style(check.score),
            )
        )


def print_speech(params: SpeechParams, result: GenerationResult) -> None:
    console.print(Rule(f"[bold green]{escape(params.topic)}[/bold green]"))
    console.print(Markdown(result.text))


def print_history(items: list[SpeechHistoryItem]) -> None:
    if not items:
        console.print("History is empty.")
        return
    table = Table(show_lines=False)
    table.add_column("ID", style="dim")
    table.add_column("Date")
    table.add_column("Topic")
    table.add_column("Tone")
    table.add_column("Score", justify="right")
    for item in items:
        table.add_row(
            item.id[:8],
            item.created_at.strftime("%Y-%m-%d %H:%M"),
            escape(item.params.topic[:50]),
            item.params.tone.value,
            str(item.result.overall_score),
        )
    console.print(table)


def save_to_file(params: SpeechParams, result: GenerationResult, output_dir: Path) -> Path:
    """Save the speech and its verification summary as a markdown file.

    Returns:
        Path to the saved file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    timestamp = result.generated_at.strftime("%Y%m%d_%H%M%S")
    filepath = output_dir / f"{timestamp}_{_slug(params.topic) or 'speech'}.md"

    lines: list[str] = [
        f"# {params.topic}",
        "",
        f"**Date:** {result.generated_at.strftime('%Y-%m-%d %H:%M:%S')}",
        f"**Tone:** {params.tone.value}",
        f"**Duration:** {params.duration.value}",
        f"**Audience:** {params.audience.value}",
        f"**Score:** {result.overall_score}" + (" (refined)" if result.was_refined else ""),
        "",
        "---",
        "",
        result.text,
        "",
    ]

    if result.verification_results:
        lines += ["---", "", "## Verification", ""]
        for check in result.verification_results:
            label, _icon = ASPECT_LABELS.get(check.aspect, (check.aspect.title(), ""))
            lines.append(f"### {label}: {check.score}/100")
            lines.append("")
            lines += [f"- {item}" for item in check.feedback]
            lines.append("")

    filepath.write_text("\n".join(lines), encoding="utf-8")
    logger.info("Speech saved to: %s", filepath)
    return filepath
