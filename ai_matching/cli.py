"""
AI Matching Command Line Interface

Provides CLI commands for operating the matching engine: database setup,
scoring single applications or whole jobs, reading scores and managing
per-organization scoring configuration.
"""

import asyncio
from typing import Optional

import typer
from pymongo.errors import PyMongoError
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from ai_matching.utils.constants import Recommendation
from ai_matching.utils.exceptions import MatchingError

app = typer.Typer(
    name="ai-matching",
    help="Candidate-to-job AI matching and scoring engine CLI",
    add_completion=False,
)
console = Console()


def _recommendation_color(value: str) -> str:
    return {
        "strong_match": "green",
        "good_match": "blue",
        "moderate_match": "yellow",
        "weak_match": "magenta",
        "poor_match": "red",
    }.get(value, "white")


def _run(coro_factory):
    """Run an async command body with logging set up and the database closed afterwards."""
    from ai_matching.data.database import DatabaseManager
    from ai_matching.utils.logger import setup_logging

    setup_logging()
    db_manager = DatabaseManager()

    async def runner():
        try:
            return await coro_factory(db_manager)
        finally:
            db_manager.close_all()

    try:
        return asyncio.run(runner())
    except MatchingError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        if e.details:
            console.print(f"[dim]{e.details}[/dim]")
        raise typer.Exit(1)


@app.command()
def version():
    """Show application version."""
    from ai_matching import __app_name__, __version__

    console.print(f"[bold blue]{__app_name__}[/bold blue] version [green]{__version__}[/green]")


@app.command()
def info():
    """Show system information and configuration."""
    from ai_matching.utils.config import get_settings

    settings = get_settings()

    table = Table(title="AI Matching Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Environment", settings.environment)
    table.add_row("Debug Mode", str(settings.debug))
    table.add_row("Database Host", settings.database.host)
    table.add_row("Database Name", settings.database.name)
    table.add_row("OpenAI Key", "configured" if settings.openai.api_key else "[red]missing[/red]")
    table.add_row("Chat Model", settings.openai.chat_model)
    table.add_row("Embedding Provider", settings.ml.embedding_provider)
    if settings.ml.embedding_provider == "openai":
        table.add_row("Embedding Model", settings.openai.embedding_model)
    else:
        table.add_row("Embedding Model", settings.ml.local_embedding_model)
        table.add_row("ML Device", settings.ml.device)
    table.add_row("Resume Storage", f"{settings.storage.backend} ({settings.storage.bucket})")
    table.add_row("Batch Concurrency", str(settings.scoring.max_concurrency))
    table.add_row("Log Level", settings.logging.level)

    console.print(table)


@app.command()
def init_db():
    """Initialize the database with required indexes."""
    console.print("[yellow]Initializing database...[/yellow]")

    async def initialize(db_manager) -> bool:
        console.print("  Checking database connection...")
        if not await db_manager.check_connection():
            return False
        console.print("  [green]✓[/green] Connected to MongoDB")

        console.print("  Creating indexes...")
        await db_manager.ensure_indexes()
        console.print("  [green]✓[/green] Indexes created")
        return True

    try:
        connected = _run(initialize)
    except PyMongoError as e:
        console.print(f"[red]Error initializing database: {e}[/red]")
        raise typer.Exit(1)

    if not connected:
        console.print("[red]Error: Could not connect to MongoDB.[/red]")
        console.print("[dim]Make sure MongoDB is running and connection settings are correct.[/dim]")
        raise typer.Exit(1)

    console.print("\n[green]Database initialized successfully![/green]")


@app.command()
def score(
    application_id: str = typer.Argument(..., help="Application ID to score"),
    org: str = typer.Option(..., "--org", "-o", help="Organization ID"),
):
    """Score one application against its job."""
    from ai_matching.services import build_matching_service

    async def body(db_manager):
        service = build_matching_service(db_manager=db_manager)
        return await service.score_one(application_id, org)

    console.print(f"[yellow]Scoring application: {application_id}[/yellow]")
    result = _run(body)

    recommendation = Recommendation.parse(result.recommendation).value
    color = _recommendation_color(recommendation)
    table = Table(title=f"Match Score for {application_id}")
    table.add_column("Component", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Weight", justify="right", style="dim")

    table.add_row("Skills", str(result.skill_score), f"{result.weights.skill:g}")
    table.add_row("Experience", str(result.experience_score), f"{result.weights.experience:g}")
    table.add_row("Semantic", str(result.semantic_score), f"{result.weights.semantic:g}")
    table.add_row("[bold]Overall[/bold]", f"[bold]{result.overall_score}[/bold]", "")
    console.print(table)

    console.print(f"\nRecommendation: [{color}]{recommendation}[/{color}]")
    console.print(f"Summary: {result.ai_summary}")
    if result.strengths:
        console.print("\n[green]Strengths:[/green]")
        for item in result.strengths:
            console.print(f"  • {item}")
    if result.concerns:
        console.print("\n[yellow]Concerns:[/yellow]")
        for item in result.concerns:
            console.print(f"  • {item}")


@app.command()
def score_batch(
    job_id: str = typer.Argument(..., help="Job ID whose applications to score"),
    org: str = typer.Option(..., "--org", "-o", help="Organization ID"),
    rescore: bool = typer.Option(False, "--rescore", help="Re-score every application, not just unscored ones"),
    interval: Optional[float] = typer.Option(None, "--interval", "-i", help="Progress poll interval in seconds"),
):
    """Score the applications of a job in the background and follow progress."""
    from ai_matching.core.batch import CancellationToken
    from ai_matching.services import build_matching_service

    mode = "all" if rescore else "unscored"
    console.print(f"[yellow]Scoring {mode} applications for job: {job_id}[/yellow]")

    async def body(db_manager):
        service = build_matching_service(db_manager=db_manager)
        # Surface a disabled organization as an error instead of a silent no-op
        await service.config_resolver.require_enabled(org)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total}"),
            console=console,
        ) as progress:
            task = progress.add_task("Scoring candidates...", total=None)

            def on_progress(update):
                progress.update(task, completed=update.scored, total=update.total)

            poller = service.create_poller(job_id, org, interval=interval, on_progress=on_progress)
            token = CancellationToken()
            if rescore:
                final = await poller.rescore_all(token)
            else:
                final = await poller.score_unscored(token)

            handle = poller.handle
            result = await handle.wait() if handle is not None else None
        return final, result

    final, result = _run(body)

    if result is None:
        console.print("[red]Batch could not be started. See the log for details.[/red]")
        raise typer.Exit(1)
    if result.total == 0:
        console.print("[green]All applications already scored.[/green]")
        raise typer.Exit(0)

    console.print(f"\n[green]Scored {result.scored}/{result.total} application(s)[/green]")
    if result.errors:
        console.print(f"[yellow]{len(result.errors)} failed:[/yellow]")
        for error in result.errors:
            console.print(f"  [dim]{error}[/dim]")
    if final is not None and not final.complete:
        console.print(f"[dim]{final.total - final.scored} application(s) have no score yet.[/dim]")


@app.command()
def scores(
    job_id: str = typer.Argument(..., help="Job ID"),
    org: str = typer.Option(..., "--org", "-o", help="Organization ID"),
    top_n: int = typer.Option(0, "--top", "-n", help="Show only the top N (0 for all)"),
):
    """List the persisted match scores of a job, best first."""
    from ai_matching.services import build_matching_service

    async def body(db_manager):
        service = build_matching_service(db_manager=db_manager)
        return await service.get_scores_for_job(job_id, org)

    results = _run(body)
    if top_n > 0:
        results = results[:top_n]

    if not results:
        console.print("[yellow]No scores found for this job.[/yellow]")
        raise typer.Exit(0)

    table = Table(title=f"Match Scores for Job {job_id}")
    table.add_column("Rank", style="dim", width=4)
    table.add_column("Application", style="cyan")
    table.add_column("Overall", justify="right")
    table.add_column("Skills", justify="right")
    table.add_column("Experience", justify="right")
    table.add_column("Semantic", justify="right")
    table.add_column("Recommendation", justify="center")
    table.add_column("Scored At", style="dim")

    for i, match_score in enumerate(results, 1):
        row = match_score.summary_row()
        recommendation = Recommendation.parse(row["recommendation"]).value
        color = _recommendation_color(recommendation)
        table.add_row(
            str(i),
            row["application_id"],
            f"[bold]{row['overall_score']}[/bold]",
            str(row["skill_score"]),
            str(row["experience_score"]),
            str(row["semantic_score"]),
            f"[{color}]{recommendation}[/{color}]",
            row["scored_at"].strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)


def _print_config(config) -> None:
    table = Table(title=f"Scoring Config for {config.organization_id}")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Enabled", str(config.enabled))
    table.add_row("Auto Score", str(config.auto_score))
    table.add_row("Skill Weight", f"{config.weights.skill:g}")
    table.add_row("Experience Weight", f"{config.weights.experience:g}")
    table.add_row("Semantic Weight", f"{config.weights.semantic:g}")
    table.add_row("Stored", "yes" if config.id else "no (defaults)")

    console.print(table)


@app.command()
def config_show(
    org: str = typer.Argument(..., help="Organization ID"),
):
    """Show the scoring configuration of an organization."""
    from ai_matching.core.scoring import ScoringConfigResolver
    from ai_matching.data.repositories import ScoringConfigRepository

    async def body(db_manager):
        resolver = ScoringConfigResolver(ScoringConfigRepository(db_manager))
        return await resolver.get_config(org)

    _print_config(_run(body))


@app.command()
def config_set(
    org: str = typer.Argument(..., help="Organization ID"),
    skill: Optional[float] = typer.Option(None, "--skill", help="Skill weight (0-100)"),
    experience: Optional[float] = typer.Option(None, "--experience", help="Experience weight (0-100)"),
    semantic: Optional[float] = typer.Option(None, "--semantic", help="Semantic weight (0-100)"),
    enabled: Optional[bool] = typer.Option(None, "--enabled/--disabled", help="Enable or disable AI scoring"),
    auto_score: Optional[bool] = typer.Option(None, "--auto-score/--no-auto-score", help="Score new applications automatically"),
):
    """Update the scoring configuration of an organization."""
    from ai_matching.core.scoring import ScoringConfigResolver
    from ai_matching.data.repositories import ScoringConfigRepository

    weights = {
        name: value
        for name, value in (("skill", skill), ("experience", experience), ("semantic", semantic))
        if value is not None
    }

    async def body(db_manager):
        resolver = ScoringConfigResolver(ScoringConfigRepository(db_manager))
        return await resolver.set_config(
            org,
            weights=weights or None,
            enabled=enabled,
            auto_score=auto_score,
        )

    config = _run(body)
    console.print("[green]Scoring configuration updated.[/green]")
    _print_config(config)


if __name__ == "__main__":
    app()
