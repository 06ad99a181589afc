"""Click CLI — loads config and keys, runs the speech pipeline, renders and saves output."""

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

from config.config_loader import AppConfig, load_config, load_credentials
from verbamind.healthcheck import run_health_checks
from verbamind.models import ApiKeys, Audience, Duration, SpeechParams, Tone
from verbamind.output import print_history, print_speech, print_verification_summary, save_to_file
from verbamind.pipeline import generate_speech
from verbamind.providers.base import NoProviderAvailable, TextGenerationProvider
from verbamind.selector import build_providers
from verbamind.store import HistoryStore

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)

FAST_MODE_KEY = "fast_mode"


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _load_config_or_exit() -> AppConfig:
    try:
        return load_config()
    except (FileNotFoundError, KeyError, ValueError) as exc:
        console.print(f"[bold red]Config error:[/bold red] {escape(str(exc))}")
        sys.exit(1)


def _require_credentials(credentials: ApiKeys) -> None:
    if not credentials.available():
        console.print(
            "[bold red]Error:[/bold red] No API keys found. "
            "Set ANTHROPIC_API_KEY, OPENAI_API_KEY or GEMINI_API_KEY in .env."
        )
        sys.exit(1)


def _check_providers(
    providers: dict[str, TextGenerationProvider],
    credentials: ApiKeys,
) -> ApiKeys:
    """Run health checks, print results, and drop keys of failing providers.

    Exits if no provider passes or the user declines to continue.
    """
    console.print("\n[bold]Checking providers...[/bold]")
    results: dict[str, tuple[bool, str]] = asyncio.run(run_health_checks(providers, credentials))

    failed_names: list[str] = []
    for name in sorted(results):
        ok, err = results[name]
        if ok:
            console.print(f"  [green]OK  [/green] {name}")
        else:
            short_err = err.splitlines()[0][:120] if err else "unknown error"
            console.print(f"  [red]FAIL[/red] {name}: {escape(short_err)}")
            failed_names.append(name)

    if not failed_names:
        console.print()
        return credentials

    working = ApiKeys(**{n: credentials.get(n) for n in results if n not in failed_names})
    if not working.available():
        console.print("\n[bold red]Error:[/bold red] No providers passed the health check.")
        sys.exit(1)

    console.print(f"\n[yellow]{len(failed_names)} provider(s) failed:[/yellow] {', '.join(failed_names)}")
    if not click.confirm("Continue with working providers only?", default=True):
        sys.exit(0)
    console.print()
    return working


async def _run_generation(
    params: SpeechParams,
    credentials: ApiKeys,
    providers: dict[str, TextGenerationProvider],
    fast_mode: bool,
):
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Starting...", total=None)

        def on_progress(status: str) -> None:
            progress.update(task, description=status)

        return await generate_speech(
            params,
            credentials,
            on_progress,
            fast_mode=fast_mode,
            providers=providers,
        )


@click.group()
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
def main(verbose: bool) -> None:
    """VerbaMind -- speech writing with multi-model verification."""
    # Model output is Polish; avoid crashing the Windows ANSI render path
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8", errors="replace")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8", errors="replace")

    load_dotenv()
    _setup_logging(verbose)


@main.command()
@click.argument("topic")
@click.option("--tone", type=click.Choice([t.value for t in Tone]), default=Tone.OFFICIAL.value, show_default=True)
@click.option(
    "--duration", type=click.Choice([d.value for d in Duration]), default=Duration.FIVE_MINUTES.value,
    show_default=True,
)
@click.option(
    "--audience", type=click.Choice([a.value for a in Audience]), default=Audience.MIXED.value,
    show_default=True,
)
@click.option("--details", default=None, help="Extra context for the speechwriter")
@click.option("--verify/--fast", "verify", default=None,
              help="Run the three quality checks (default: from stored settings, then config)")
@click.option("--output", "output_path", default=None, help="Output directory (default: from config)")
@click.option("--no-history", is_flag=True, default=False, help="Do not store this run in history")
@click.option("--skip-health-check", is_flag=True, default=False,
              help="Skip the API connectivity check at startup")
def generate(
    topic: str,
    tone: str,
    duration: str,
    audience: str,
    details: str | None,
    verify: bool | None,
    output_path: str | None,
    no_history: bool,
    skip_health_check: bool,
) -> None:
    """Write a speech on TOPIC.

    \b
    Examples:
      verbamind generate "Team kickoff" --tone casual --audience mieszana
      verbamind generate "Graduation" --tone emocjonalny --duration "10 minut" --verify
    """
    config = _load_config_or_exit()
    credentials = load_credentials(config)
    _require_credentials(credentials)

    store = HistoryStore(config.defaults.history_path, config.defaults.history_limit)
    if verify is None:
        fast_mode = bool(store.get(FAST_MODE_KEY, config.defaults.fast_mode))
    else:
        fast_mode = not verify
        store.set(FAST_MODE_KEY, fast_mode)

    try:
        params = SpeechParams(topic=topic, tone=tone, duration=duration, audience=audience, details=details)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc

    providers = build_providers(config)
    if not skip_health_check:
        credentials = _check_providers(providers, credentials)

    mode = "fast" if fast_mode else "verified"
    console.print(f"\n[bold cyan]VerbaMind[/bold cyan] — {', '.join(credentials.available())} ({mode} mode)")
    console.print(f"Topic: [italic]{topic[:80]}{'...' if len(topic) > 80 else ''}[/italic]\n")

    try:
        result = asyncio.run(_run_generation(params, credentials, providers, fast_mode))
    except NoProviderAvailable as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        sys.exit(1)

    print_verification_summary(result)
    print_speech(params, result)

    output_dir = Path(output_path) if output_path else config.defaults.output_dir
    saved_path = save_to_file(params, result, output_dir)
    console.print(f"\n[dim]Saved to: {saved_path}[/dim]")

    if not no_history:
        store.add(params, result)


@main.command()
@click.option("--limit", default=20, show_default=True, help="Number of entries to show")
@click.option("--remove", "remove_id", default=None, help="Delete the entry with this ID (or ID prefix)")
@click.option("--clear", is_flag=True, default=False, help="Delete all entries")
def history(limit: int, remove_id: str | None, clear: bool) -> None:
    """List, remove or clear stored speeches."""
    config = _load_config_or_exit()
    store = HistoryStore(config.defaults.history_path, config.defaults.history_limit)

    if clear:
        if click.confirm("Delete all history entries?", default=False):
            store.clear()
            click.echo("History cleared.")
        return

    if remove_id:
        matches = [item.id for item in store.items() if item.id.startswith(remove_id)]
        if len(matches) != 1:
            console.print(f"[bold red]Error:[/bold red] {len(matches)} entries match '{remove_id}'.")
            sys.exit(1)
        store.remove(matches[0])
        click.echo(f"Removed {matches[0][:8]}.")
        return

    print_history(store.items()[:limit])


@main.command()
def check() -> None:
    """Ping every provider that has an API key."""
    config = _load_config_or_exit()
    credentials = load_credentials(config)
    _require_credentials(credentials)
    results = asyncio.run(run_health_checks(build_providers(config), credentials))
    for name in sorted(results):
        ok, err = results[name]
        if ok:
            console.print(f"  [green]OK  [/green] {name}")
        else:
            short_err = err.splitlines()[0][:120] if err else "unknown error"
            console.print(f"  [red]FAIL[/red] {name}: {escape(short_err)}")
    if not any(ok for ok, _ in results.values()):
        sys.exit(1)


if __name__ == "__main__":
    main()
