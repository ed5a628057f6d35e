"""
Maps Prospector CLI

Examples:
    # Basic search
    prospector search "boulangerie" "Lyon"

    # JSON output, piped to jq
    prospector search "avocat" "Paris" -f json -q | jq '.[:5]'

    # Underperformers only, saved to the CRM
    prospector search "coiffeur" "Nantes" --max-rating 4 --no-website-only --save

    # Deep analysis of one business
    prospector analyze "Boulangerie Dupont" --address "12 rue de la Paix, Lyon"

    # CRM
    prospector crm list --sort date
    prospector crm status 1f0c... Contacted

    # Check configuration
    prospector check
"""

import asyncio
import json
import logging
import sys
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .config import Settings, load_config
from .crm import SORT_KEYS, sort_prospects, status_breakdown
from .explorer import ExplorerSession
from .export import export_prospects_csv_string, export_prospects_json
from .gemini import Analyzer, EmailFinder
from .models import BusinessData, Prospect, SearchResult, UserStatus
from .storage import ProspectStore, SQLStore

# Progress to stderr, data to stdout
console = Console(stderr=True)
logger = logging.getLogger(__name__)


def setup_logging(verbose: bool, quiet: bool, debug: bool) -> None:
    """Configure logging based on CLI flags."""
    if quiet:
        level = logging.ERROR
    elif debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    # Suppress noisy loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("google_genai").setLevel(logging.WARNING)


def open_store(settings: Settings) -> ProspectStore:
    return ProspectStore(SQLStore(settings.database_url), settings.storage_key)


def _score_color(score: float, scale: int) -> str:
    ratio = score / scale if scale else 0
    return "green" if ratio >= 0.7 else "yellow" if ratio >= 0.4 else "red"


def display_results(results: list[SearchResult], session: ExplorerSession) -> None:
    """Display a table of search results."""
    table = Table(title="Résultats", show_header=True, header_style="bold magenta")

    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan", max_width=30)
    table.add_column("Rating", justify="right")
    table.add_column("Website", max_width=30)
    table.add_column("Phone")
    table.add_column("Score", justify="right")
    table.add_column("Offer", max_width=25)

    for r in results:
        business = r.business_data
        insight = session.results.score_for(r.source_id)
        score = insight.score if insight else 0
        color = _score_color(score, 10)
        table.add_row(
            r.source_id,
            business.name[:30],
            f"{business.rating:.1f}" if business.rating is not None else "-",
            business.website or "-",
            business.phone or "-",
            f"[{color}]{score}[/{color}]",
            insight.suggested_offer if insight else "-",
        )

    console.print(table)


def display_prospects(prospects: list[Prospect]) -> None:
    """Display the CRM table."""
    table = Table(title="Mes Prospects", show_header=True, header_style="bold magenta")

    table.add_column("ID", style="dim", max_width=8)
    table.add_column("Name", style="cyan", max_width=30)
    table.add_column("Score", justify="right")
    table.add_column("Offer", max_width=40)
    table.add_column("Status")

    for p in prospects:
        color = _score_color(p.score, 100)
        offer = p.ai_insight.suggested_offer if p.ai_insight else "Pas d'analyse disponible"
        table.add_row(
            p.id[:8],
            p.business_data.name[:30],
            f"[{color}]{p.score:.0f}[/{color}]/100",
            offer[:40],
            p.user_status.value,
        )

    console.print(table)
    console.print(f"[dim]{len(prospects)} entreprises enregistrées[/dim]")


# ============================================================================
# CLI Group
# ============================================================================

@click.group(invoke_without_command=True)
@click.option("--config", type=click.Path(exists=True), help="YAML config file")
@click.pass_context
@click.version_option(version=__version__, prog_name="maps-prospector")
def cli(ctx, config: Optional[str]):
    """Find local businesses that need a website, score them, track them."""
    ctx.ensure_object(dict)
    ctx.obj["settings"] = load_config(config) if config else load_config()
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# ============================================================================
# Search Command
# ============================================================================

@cli.command()
@click.argument("query")
@click.argument("locality", required=False)
@click.option("-o", "--output", type=click.Path(), help="Write CSV to this file")
@click.option("--export", "export_default", is_flag=True,
              help="Write CSV to prospects_<query>_<locality>.csv")
@click.option("-f", "--format", "output_format",
              type=click.Choice(["table", "csv", "json"]),
              default="table", help="Output format")
@click.option("-q", "--quiet", is_flag=True, help="Suppress progress, only emit data")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
@click.option("--debug", is_flag=True, help="Enable debug logging")
# Filtering
@click.option("--max-rating", type=float, help="Keep businesses rated at most this")
@click.option("--no-website-only", is_flag=True, help="Keep businesses without a website")
@click.option("--min-score", type=float, help="Minimum local score (0-10)")
# CRM
@click.option("--save", is_flag=True, help="Save every displayed result to the CRM")
@click.pass_context
def search(
    ctx,
    query: str,
    locality: Optional[str],
    output: Optional[str],
    export_default: bool,
    output_format: str,
    quiet: bool,
    verbose: bool,
    debug: bool,
    max_rating: Optional[float],
    no_website_only: bool,
    min_score: Optional[float],
    save: bool,
):
    """
    Search businesses matching QUERY in LOCALITY.

    Data goes to stdout, progress to stderr (use -q to suppress).

    Examples:

        prospector search "boulangerie" "Lyon"

        prospector search "avocat" "Paris" -f json -q | jq '.'
    """
    setup_logging(verbose, quiet, debug)
    settings: Settings = ctx.obj["settings"]
    locality = locality or settings.default_locality

    session = ExplorerSession.from_settings(settings)
    session.filters.max_rating = max_rating
    session.filters.no_website_only = no_website_only
    session.filters.min_score = min_score

    if quiet:
        asyncio.run(session.search(query, locality))
    else:
        with console.status(f"[cyan]Recherche « {query} » à {locality}..."):
            asyncio.run(session.search(query, locality))

    for error in session.errors:
        console.print(f"[yellow]Warning:[/yellow] {error}")

    results = session.filtered()

    if not quiet:
        console.print(
            f"[green]Found:[/green] {len(session.results)} businesses, "
            f"{len(results)} after filtering"
        )

    if save:
        for result in results:
            session.save(result.source_id)
        if not quiet:
            console.print(f"[green]Saved:[/green] {len(results)} prospects to the CRM")

    if output or export_default:
        filename, content = session.export_csv()
        path = output or filename
        with open(path, "w", newline="", encoding="utf-8") as f:
            f.write(content)
        if not quiet:
            console.print(f"[green]Saved:[/green] {path}")

    if output_format == "json":
        click.echo(json.dumps([r.to_dict() for r in results], indent=2, ensure_ascii=False))
    elif output_format == "csv":
        click.echo(session.export_csv()[1], nl=False)
    elif results:
        display_results(results, session)
    else:
        console.print(
            "[yellow]Aucun résultat.[/yellow]\n"
            "[dim]Possible causes:[/dim]\n"
            "  - No results for this query/locality\n"
            "  - Gemini unavailable or quota exceeded (see warnings above)"
        )

    # Exit code: 0 if results, 1 if empty
    sys.exit(0 if results else 1)


# ============================================================================
# Analyze / Find Email Commands
# ============================================================================

def _business_from_options(name, website, rating, address, phone) -> BusinessData:
    return BusinessData(name=name, website=website, rating=rating, address=address, phone=phone)


@cli.command()
@click.argument("name")
@click.option("--website", help="Business website")
@click.option("--rating", type=float, help="Google rating")
@click.option("--address", help="Business address")
@click.option("--phone", help="Business phone")
@click.option("--save", is_flag=True, help="Save the business and its analysis to the CRM")
@click.pass_context
def analyze(ctx, name, website, rating, address, phone, save):
    """Deep-analyse one business with Gemini (score 0-100)."""
    settings: Settings = ctx.obj["settings"]
    business = _business_from_options(name, website, rating, address, phone)

    with console.status(f"[cyan]Analyse de {name}..."):
        insight = asyncio.run(Analyzer.from_settings(settings).analyze(business))

    if insight.failed:
        console.print("[red]Analysis failed[/red] (provider error or quota). Verify manually.")
        sys.exit(1)

    console.print(Panel.fit(
        f"[bold]{name}[/bold]\n"
        f"Score: [{_score_color(insight.score, 100)}]{insight.score:.0f}[/]/100"
        f"{'  [green]● cible[/green]' if insight.is_target else ''}\n\n"
        f"{insight.analysis_summary}\n\n"
        f"[cyan]Offre:[/cyan] {insight.suggested_offer}",
        border_style="blue",
    ))

    if save:
        prospect = Prospect.from_result(
            SearchResult(source_id="cli", business_data=business),
            insight,
            fallback_location=settings.default_location,
        )
        open_store(settings).upsert(prospect)
        console.print(f"[green]Saved:[/green] {prospect.id}")


@cli.command("find-email")
@click.argument("name")
@click.option("--website", help="Business website")
@click.option("--address", help="Business address")
@click.pass_context
def find_email(ctx, name, website, address):
    """Look up the public contact email of a business."""
    settings: Settings = ctx.obj["settings"]
    business = _business_from_options(name, website, None, address, None)

    with console.status(f"[cyan]Recherche de l'email de {name}..."):
        email = asyncio.run(EmailFinder.from_settings(settings).find_email(business))

    if not email:
        console.print("[yellow]No public email found[/yellow]")
        sys.exit(1)

    click.echo(email)


# ============================================================================
# CRM Commands
# ============================================================================

@cli.group()
def crm():
    """Manage saved prospects."""


@crm.command("list")
@click.option("--sort", "sort_by", type=click.Choice(SORT_KEYS), default="score")
@click.option("--status", type=click.Choice([s.value for s in UserStatus]), help="Only this status")
@click.option("-f", "--format", "output_format",
              type=click.Choice(["table", "json", "csv"]), default="table")
@click.pass_context
def crm_list(ctx, sort_by: str, status: Optional[str], output_format: str):
    """List saved prospects."""
    settings: Settings = ctx.obj["settings"]
    prospects = sort_prospects(open_store(settings).list(), sort_by)
    if status:
        prospects = [p for p in prospects if p.user_status.value == status]

    if output_format == "json":
        click.echo(json.dumps([p.to_dict() for p in prospects], indent=2, ensure_ascii=False))
    elif output_format == "csv":
        click.echo(export_prospects_csv_string(prospects), nl=False)
    elif prospects:
        display_prospects(prospects)
        counts = status_breakdown(prospects)
        console.print("[dim]" + ", ".join(f"{k}: {v}" for k, v in counts.items()) + "[/dim]")
    else:
        console.print(
            "Aucun prospect enregistré. Lancez [cyan]prospector search[/cyan] pour en trouver."
        )


def _resolve_id(store: ProspectStore, prefix: str) -> Optional[str]:
    """Accept a full id or an unambiguous prefix (as shown by crm list)."""
    matches = [p.id for p in store.list() if p.id.startswith(prefix)]
    if len(matches) == 1:
        return matches[0]
    return None


@crm.command("status")
@click.argument("prospect_id")
@click.argument("status", type=click.Choice([s.value for s in UserStatus]))
@click.pass_context
def crm_status(ctx, prospect_id: str, status: str):
    """Change the status of a prospect."""
    store = open_store(ctx.obj["settings"])
    full_id = _resolve_id(store, prospect_id)
    if not full_id:
        console.print(f"[red]No single prospect matches[/red] {prospect_id}")
        sys.exit(1)

    store.update_status(full_id, UserStatus(status))
    console.print(f"[green]✓[/green] {full_id} → {status}")


@crm.command("delete")
@click.argument("prospect_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def crm_delete(ctx, prospect_id: str, yes: bool):
    """Delete a prospect."""
    store = open_store(ctx.obj["settings"])
    full_id = _resolve_id(store, prospect_id)
    if not full_id:
        console.print(f"[red]No single prospect matches[/red] {prospect_id}")
        sys.exit(1)

    if not yes:
        click.confirm("Supprimer ce prospect ?", abort=True)

    store.remove(full_id)
    console.print(f"[green]✓[/green] deleted {full_id}")


@crm.command("export")
@click.argument("output", type=click.Path())
@click.pass_context
def crm_export(ctx, output: str):
    """Dump every prospect to a JSON file."""
    prospects = open_store(ctx.obj["settings"]).list()
    path = export_prospects_json(prospects, output)
    console.print(f"[green]Saved:[/green] {path} ({len(prospects)} prospects)")


# ============================================================================
# Check Command
# ============================================================================

@cli.command()
@click.pass_context
def check(ctx):
    """Check configuration."""
    settings: Settings = ctx.obj["settings"]

    if settings.gemini_api_key:
        click.echo(f"✓ GEMINI_API_KEY: {settings.gemini_api_key[:8]}...")
    else:
        click.echo("✗ GEMINI_API_KEY: not set (search and analysis disabled)")

    if settings.maps_api_key:
        click.echo("✓ GOOGLE_MAPS_API_KEY: live map")
    else:
        click.echo("✗ GOOGLE_MAPS_API_KEY: not set (placeholder map)")

    store = open_store(settings)
    click.echo(f"✓ Database: {settings.database_url} ({len(store.list())} prospects)")


# ============================================================================
# Version Command
# ============================================================================

@cli.command()
def version():
    """Show version info."""
    from prospector import get_version
    click.echo(f"maps-prospector {get_version()}")


# ============================================================================
# Web Command
# ============================================================================

@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to.")
@click.option("--port", default=8000, help="Port to bind to.")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development.")
def web(host: str, port: int, reload: bool) -> None:
    """Start the JSON API."""
    import uvicorn

    console.print(
        Panel.fit(
            f"[bold]Maps Prospector API[/bold]\n"
            f"Running at: [cyan]http://{host}:{port}/docs[/cyan]",
            border_style="blue",
        )
    )
    console.print("Press Ctrl+C to stop\n")

    uvicorn.run(
        "prospector.web.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
