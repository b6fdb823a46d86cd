"""CLI interface for newsdesk."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, TextColumn
from rich.table import Table

from newsdesk.analysis import analyze_content
from newsdesk.autoprocess.models import (
    AuthoredContent,
    ContentAnalysisReport,
    ProcessingStatus,
    ProcessingStep,
)
from newsdesk.autoprocess.notify import ConsoleNotifier
from newsdesk.autoprocess.session import EditorSession
from newsdesk.config import NewsdeskConfig, load_config, merge_cli_overrides
from newsdesk.formatting import extract_content_info, format_article
from newsdesk.services import ServiceError, create_services

app = typer.Typer(
    name="newsdesk",
    help="Format, translate and analyze news articles.",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from newsdesk import __version__

        console.print(f"newsdesk {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """newsdesk - article auto-processing for the bilingual newsroom."""


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load(config_path: Optional[Path], **overrides: object) -> NewsdeskConfig:
    try:
        return merge_cli_overrides(load_config(config_path), **overrides)
    except ValidationError as exc:
        console.print(f"[red]Invalid option: {exc}[/red]")
        raise typer.Exit(2) from exc


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        console.print(f"[red]Cannot read {path}: {exc}[/red]")
        raise typer.Exit(1) from exc


def _report_table(report: ContentAnalysisReport) -> Table:
    table = Table(title="Content analysis")
    table.add_column("Metric")
    table.add_column("Score", justify="right")
    table.add_column("Detail")
    table.add_row("Readability", str(report.readability.score), report.readability.level)
    table.add_row("SEO", str(report.seo.score), ", ".join(report.seo.keywords))
    table.add_row("Engagement", str(report.engagement.score), "")
    return table


def _build_session(
    config: NewsdeskConfig,
    text: str,
    article_id: str | None,
) -> EditorSession:
    try:
        services = create_services(config.services.backend, config)
    except (ServiceError, ValueError) as exc:
        console.print(f"[red]Cannot set up {config.services.backend} services: {exc}[/red]")
        raise typer.Exit(1) from exc
    return EditorSession(
        services,
        config=config.autoprocess.to_autoprocessing_config(),
        content=AuthoredContent(en=text),
        article_id=article_id,
        notifier=ConsoleNotifier(console),
        quiet_interval=config.autoprocess.quiet_interval,
        min_length=config.autoprocess.min_length,
        done_hold=config.autoprocess.done_hold,
    )


async def _process_once(session: EditorSession) -> bool:
    with Progress(
        TextColumn("{task.description:<12}"),
        BarColumn(),
        TextColumn("{task.percentage:>3.0f}%"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("idle", total=100)

        def _on_status(status: ProcessingStatus) -> None:
            progress.update(task, description=status.current_step.value, completed=status.progress)

        session.add_status_listener(_on_status)
        if not session.process_now():
            return False
        outcomes = await session.wait_idle()
    return bool(outcomes) and outcomes[-1].completed


@app.command()
def process(
    file: Annotated[Path, typer.Argument(help="Text file holding the English article body.")],
    article_id: Annotated[
        Optional[str], typer.Option("--article-id", help="Article id sent to the formatter.")
    ] = None,
    auto_format: Annotated[
        Optional[bool], typer.Option("--format/--no-format", help="Run the Format stage.")
    ] = None,
    auto_translate: Annotated[
        Optional[bool],
        typer.Option("--translate/--no-translate", help="Run the Translate stage."),
    ] = None,
    auto_analyze: Annotated[
        Optional[bool], typer.Option("--analyze/--no-analyze", help="Run the Analyze stage.")
    ] = None,
    services: Annotated[
        Optional[str], typer.Option("--services", "-s", help="Backend: http, llm or local.")
    ] = None,
    output: Annotated[
        Optional[Path], typer.Option("--output", "-o", help="Write the result as JSON here.")
    ] = None,
    config_path: Annotated[
        Optional[Path], typer.Option("--config", "-c", help="Path to .newsdesk.toml.")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging.")] = False,
) -> None:
    """Run one Format → Translate → Analyze cycle on FILE."""
    _setup_logging(verbose)
    config = _load(
        config_path,
        auto_format=auto_format,
        auto_translate=auto_translate,
        auto_analyze=auto_analyze,
        services=services,
    )
    text = _read_text(file)
    session = _build_session(config, text, article_id)

    if not session.should_trigger(text):
        console.print(
            f"[yellow]Nothing to do: auto-processing is disabled or the text is "
            f"shorter than {session.min_length} characters.[/yellow]"
        )
        raise typer.Exit(1)

    completed = asyncio.run(_process_once(session))

    console.rule("English")
    console.print(session.content.en, markup=False)
    if session.content.kh:
        console.rule("Khmer")
        console.print(session.content.kh, markup=False)
    if session.report is not None:
        console.print(_report_table(session.report))

    if output is not None:
        result = {
            "content": session.content.model_dump(),
            "report": session.report.model_dump() if session.report else None,
        }
        output.write_text(json.dumps(result, ensure_ascii=False, indent=2), encoding="utf-8")
        console.print(f"Wrote {output}")

    if not completed:
        raise typer.Exit(1)


@app.command()
def watch(
    file: Annotated[Path, typer.Argument(help="Text file to watch for edits.")],
    article_id: Annotated[Optional[str], typer.Option("--article-id")] = None,
    services: Annotated[Optional[str], typer.Option("--services", "-s")] = None,
    poll: Annotated[float, typer.Option("--poll", help="Seconds between file checks.")] = 0.5,
    config_path: Annotated[Optional[Path], typer.Option("--config", "-c")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Auto-process FILE whenever it has been left unchanged for the quiet interval."""
    _setup_logging(verbose)
    config = _load(config_path, services=services)
    session = _build_session(config, "", article_id)

    def _on_status(status: ProcessingStatus) -> None:
        if status.current_step == ProcessingStep.DONE and session.report is not None:
            console.print(_report_table(session.report))

    session.add_status_listener(_on_status)
    console.print(f"Watching {file} (quiet interval {config.autoprocess.quiet_interval}s)")
    try:
        asyncio.run(_watch_file(file, session, poll))
    except KeyboardInterrupt:
        console.print("Stopped.")


async def _watch_file(path: Path, session: EditorSession, poll: float) -> None:
    last: str | None = None
    try:
        while True:
            text = _read_text(path)
            if text != last:
                last = text
                session.edit(text)
            await asyncio.sleep(poll)
    finally:
        await session.close()


@app.command("format")
def format_cmd(
    file: Annotated[Path, typer.Argument(help="Plain-text article to format.")],
    info: Annotated[
        bool, typer.Option("--info", help="Also print a summary and key points.")
    ] = False,
) -> None:
    """Format FILE into article HTML with the local formatter."""
    text = _read_text(file)
    result = format_article(text)
    console.print(result.html, markup=False)
    console.print(
        f"[dim]{result.word_count} words, {result.read_time} min read[/dim]", highlight=False
    )
    if info:
        content_info = extract_content_info(text)
        console.rule("Summary")
        console.print(content_info.summary, markup=False)
        for point in content_info.key_points:
            console.print(f"• {point}", markup=False)


@app.command()
def analyze(
    file: Annotated[Path, typer.Argument(help="Article (text or HTML) to score.")],
    as_json: Annotated[bool, typer.Option("--json", help="Print the report as JSON.")] = False,
) -> None:
    """Score FILE with the local readability / SEO / engagement heuristics."""
    report = analyze_content(_read_text(file))
    if as_json:
        typer.echo(report.model_dump_json(indent=2))
    else:
        console.print(_report_table(report))


if __name__ == "__main__":
    app()
