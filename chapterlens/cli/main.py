"""
Typer CLI for chapterlens.

Commands:
    chapterlens analyze PATH     - Score a chapter against ten learning principles
    chapterlens extract PATH     - Show the concepts extracted from a chapter
    chapterlens principles       - List principles and their weights

Usage:
    chapterlens analyze chapter.md
    chapterlens analyze chapter.md --json --output report.json
    chapterlens analyze notes.txt --title "Chapter 3" --no-cross-domain --workers 4
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.console import Console

from chapterlens.cli.report import render_analysis, render_concepts, render_principles
from chapterlens.config import get_settings
from chapterlens.content.parser import ChapterParser
from chapterlens.errors import ChapterLensError, ExtractionError
from chapterlens.extraction.base import safe_extract
from chapterlens.extraction.lexical import LexicalConceptExtractor
from chapterlens.extraction.library import load_custom_concepts
from chapterlens.logs import configure_logging
from chapterlens.models.serialization import analysis_to_json
from chapterlens.worker.messages import AnalysisRequest, ProgressMessage
from chapterlens.worker.runner import AnalysisWorker

app = typer.Typer(
    help="chapterlens: score instructional chapters against evidence-based learning principles",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    configure_logging(get_settings().log_level, verbose=verbose)


def _load_chapter(path: Path, title: Optional[str], domain: Optional[str]):
    try:
        return ChapterParser().parse_file(path, title=title, domain=domain or get_settings().default_domain)
    except (FileNotFoundError, UnicodeDecodeError) as exc:
        err_console.print(f"[red]Could not read chapter:[/red] {exc}")
        raise typer.Exit(code=1)


def _custom_concepts(path: Optional[Path]):
    path = path or get_settings().custom_concepts_path
    if path is None:
        return ()
    try:
        return load_custom_concepts(path)
    except (FileNotFoundError, ValueError) as exc:
        err_console.print(f"[red]Invalid custom concepts file:[/red] {exc}")
        raise typer.Exit(code=1)


@app.command()
def analyze(
    path: Path = typer.Argument(..., help="Chapter file (.md or .txt)"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="Chapter title (default: first heading or file name)"),
    domain: Optional[str] = typer.Option(None, "--domain", "-d", help="Subject domain recorded on the chapter"),
    no_cross_domain: bool = typer.Option(False, "--no-cross-domain", help="Do not seed extraction with the cross-domain library"),
    custom_concepts: Optional[Path] = typer.Option(None, "--custom-concepts", help="JSON file of custom concept definitions"),
    as_json: bool = typer.Option(False, "--json", help="Print the full analysis as JSON"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the JSON analysis to a file"),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", min=1, max=16, help="Threads for principle evaluators"),
    findings: bool = typer.Option(False, "--findings", help="List every finding per principle"),
) -> None:
    """Analyze a chapter and report principle scores and recommendations."""
    settings = get_settings()
    if workers is not None:
        settings = settings.model_copy(update={"max_workers": workers})

    chapter = _load_chapter(path, title, domain)
    request = AnalysisRequest(
        chapter=chapter,
        domain=domain,
        include_cross_domain=settings.include_cross_domain and not no_cross_domain,
        custom_concepts=_custom_concepts(custom_concepts),
    )

    worker = AnalysisWorker(settings)
    try:
        worker.submit(request)
    except ChapterLensError as exc:
        err_console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    with err_console.status("Analyzing chapter...") as status:
        for message in worker.messages():
            if isinstance(message, ProgressMessage):
                status.update(f"{message.step}: {message.detail}" if message.detail else message.step)

    try:
        analysis = worker.result()
    except ChapterLensError as exc:
        err_console.print(f"[red]Analysis failed:[/red] {exc}")
        raise typer.Exit(code=1)

    payload = analysis_to_json(analysis) if as_json or output else None
    if output:
        output.write_text(payload, encoding="utf-8")
        logger.info("Wrote analysis to {}", output)
        err_console.print(f"[green]✓[/green] Analysis written to {output}")
    if as_json:
        console.print_json(payload)
    else:
        render_analysis(console, analysis, title=chapter.title, show_findings=findings)


@app.command()
def extract(
    path: Path = typer.Argument(..., help="Chapter file (.md or .txt)"),
    no_cross_domain: bool = typer.Option(False, "--no-cross-domain", help="Do not seed extraction with the cross-domain library"),
    custom_concepts: Optional[Path] = typer.Option(None, "--custom-concepts", help="JSON file of custom concept definitions"),
    limit: int = typer.Option(40, "--limit", "-n", min=1, help="Maximum concepts to list"),
) -> None:
    """Show the concept graph extracted from a chapter."""
    settings = get_settings()
    chapter = _load_chapter(path, None, None)
    extractor = LexicalConceptExtractor(
        domain=chapter.metadata.domain,
        include_cross_domain=settings.include_cross_domain and not no_cross_domain,
        custom_concepts=_custom_concepts(custom_concepts),
    )
    try:
        graph = safe_extract(extractor, chapter.content, chapter.sections)
    except ExtractionError as exc:
        err_console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    render_concepts(console, graph, limit=limit)
    console.print(
        f"[dim]{len(graph.relationships)} relationships · "
        f"{len(graph.hierarchy.core)} core / {len(graph.hierarchy.supporting)} supporting / "
        f"{len(graph.hierarchy.detail)} detail[/dim]"
    )


@app.command()
def principles() -> None:
    """List the learning principles, in report order, with their weights."""
    render_principles(console)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
