"""
Rich rendering of analysis results.
"""
from __future__ import annotations

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from chapterlens.models.analysis import ChapterAnalysis
from chapterlens.models.concepts import ConceptGraph
from chapterlens.models.evaluation import FindingType, Priority
from chapterlens.principles.registry import EVALUATORS

PRIORITY_STYLES = {
    Priority.HIGH: "bold red",
    Priority.MEDIUM: "yellow",
    Priority.LOW: "dim",
}

FINDING_ICONS = {
    FindingType.CRITICAL: "[red]✗[/red]",
    FindingType.WARNING: "[yellow]![/yellow]",
    FindingType.POSITIVE: "[green]✓[/green]",
}

MAX_RECOMMENDATIONS = 10


def score_style(score: float) -> str:
    if score >= 70:
        return "green"
    if score >= 40:
        return "yellow"
    return "red"


def render_analysis(console: Console, analysis: ChapterAnalysis, title: str = "", show_findings: bool = False) -> None:
    overall = Text(f"{analysis.overall_score}/100", style=f"bold {score_style(analysis.overall_score)}")
    metrics = analysis.metrics
    structure = analysis.structure_analysis
    header = Text.assemble(
        ("Overall score: ", "bold"), overall, "\n",
        f"{metrics.total_words} words · ~{metrics.reading_time_minutes} min read · "
        f"{structure.section_count} sections ({structure.pacing.value} pacing) · "
        f"{analysis.concept_analysis.total_concepts_identified} concepts",
    )
    console.print(Panel(header, title=title or analysis.chapter_id, border_style="cyan", box=box.ROUNDED))

    table = Table(title="Learning Principles", box=box.SIMPLE_HEAVY)
    table.add_column("Principle", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Weight", justify="right", style="dim")
    table.add_column("Top finding")
    for evaluation in analysis.principles:
        finding = evaluation.findings[0] if evaluation.findings else None
        table.add_row(
            evaluation.principle.display_name,
            f"[{score_style(evaluation.score)}]{evaluation.score:.0f}[/]",
            f"{evaluation.weight:.2f}",
            f"{FINDING_ICONS[finding.type]} {finding.message}" if finding else "",
        )
    console.print(table)

    if show_findings:
        for evaluation in analysis.principles:
            if not evaluation.findings:
                continue
            console.print(f"[bold]{evaluation.principle.display_name}[/bold]")
            for finding in evaluation.findings:
                console.print(f"  {FINDING_ICONS[finding.type]} {finding.message}")

    scaffolding = structure.scaffolding
    flags = ", ".join(
        name for name, present in (
            ("introduction", scaffolding.has_introduction),
            ("summary", scaffolding.has_summary),
            ("review", scaffolding.has_review),
        ) if present
    ) or "none"
    console.print(
        f"[dim]Scaffolding:[/dim] {flags}   "
        f"[dim]Transitions:[/dim] {structure.transition_quality:.0%}   "
        f"[dim]Blocking:[/dim] {analysis.visualizations.interleaving_pattern.blocking_ratio:.0%}"
    )

    if analysis.recommendations:
        recs = Table(title="Recommendations", box=box.SIMPLE)
        recs.add_column("Priority")
        recs.add_column("Principle", style="cyan")
        recs.add_column("Recommendation")
        for rec in analysis.recommendations[:MAX_RECOMMENDATIONS]:
            recs.add_row(
                f"[{PRIORITY_STYLES[rec.priority]}]{rec.priority.value}[/]",
                rec.category,
                f"[bold]{rec.title}[/bold]\n{rec.description}",
            )
        console.print(recs)
        hidden = len(analysis.recommendations) - MAX_RECOMMENDATIONS
        if hidden > 0:
            console.print(f"[dim]... and {hidden} more (use --json for the full report)[/dim]")


def render_concepts(console: Console, graph: ConceptGraph, limit: int = 40) -> None:
    table = Table(title=f"Concepts ({len(graph.concepts)})", box=box.SIMPLE_HEAVY)
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Tier")
    table.add_column("Mentions", justify="right")
    table.add_column("First", justify="right", style="dim")
    table.add_column("Links", justify="right")

    ranked = sorted(graph.concepts, key=lambda c: (-len(c.mentions), c.id))
    for concept in ranked[:limit]:
        table.add_row(
            concept.id,
            concept.name,
            concept.importance.value,
            str(len(concept.mentions)),
            str(concept.first_mention_position),
            str(graph.relationship_count(concept.id)),
        )
    console.print(table)


def render_principles(console: Console) -> None:
    table = Table(title="Learning Principles", box=box.SIMPLE_HEAVY)
    table.add_column("#", justify="right", style="dim")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Weight", justify="right")
    for index, evaluator in enumerate(EVALUATORS, start=1):
        table.add_row(str(index), evaluator.principle.value, evaluator.name, f"{evaluator.weight:.2f}")
    console.print(table)
