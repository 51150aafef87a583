"""
Rate Quoter CLI

Command-line interface for looking up and ranking freight rates.
"""

import asyncio
import logging
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..config import get_settings
from ..db import get_repository
from ..formatting import rates_found_message, ranked_message
from ..models import PolicyWeights, RankingMethod, ScoredQuote, ScoringPolicy, ShipmentSpec
from ..service import get_service

app = typer.Typer(
    name="rate-quoter",
    help="Rate Quoter: freight rate lookup and ranking",
    add_completion=False,
)
console = Console()
settings = get_settings()


@app.callback()
def configure_logging(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
):
    """Route engine logs through rich."""
    level = logging.DEBUG if verbose else settings.LOG_LEVEL
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


def _shipment(origin: str, destination: str, weight: float, mode: Optional[str]) -> ShipmentSpec:
    try:
        return ShipmentSpec(origin=origin, destination=destination, weight_lbs=weight, mode=mode)
    except ValidationError as e:
        console.print(f"[red]Invalid shipment: {e.errors()[0]['msg']}[/red]")
        raise typer.Exit(1)


def _quotes_table(title: str, quotes: list[ScoredQuote], composite: bool) -> Table:
    table = Table(title=title)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Carrier", style="cyan")
    table.add_column("Mode")
    table.add_column("Transit", justify="right")
    table.add_column("Total", justify="right", style="green")
    table.add_column("Per lb", justify="right")
    table.add_column("Bracket")
    if composite:
        table.add_column("Composite", justify="right", style="bold")

    for rank, quote in enumerate(quotes, start=1):
        breakdown = quote.breakdown
        row = [
            str(rank),
            quote.display_name,
            quote.mode.value,
            f"{quote.transit_days}d" if quote.transit_days else "-",
            f"{breakdown.total_cost_usd:,.2f} {quote.currency}",
            f"{breakdown.cost_per_lb_usd:,.4f}",
            "[green]fits[/green]" if breakdown.weight_fit_penalty == 0 else "[yellow]outside[/yellow]",
        ]
        if composite:
            row.append(f"{breakdown.composite_score:.3f}")
        table.add_row(*row)
    return table


# =============================================================================
# Quoting Commands
# =============================================================================

@app.command()
def rates(
    origin: str = typer.Argument(..., help="Origin (substring match)"),
    destination: str = typer.Argument(..., help="Destination (substring match)"),
    weight: float = typer.Option(..., "--weight", "-w", help="Shipment weight in lbs"),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="parcel, LTL, FTL, air or ocean"),
):
    """
    Look up rates for a lane.

    Lists every valid rate the store returns, normalized into quotes.
    """
    shipment = _shipment(origin, destination, weight, mode)
    service = get_service()

    quotes = asyncio.run(service.fetch_and_normalize(shipment))

    if not quotes:
        console.print(f"[yellow]{rates_found_message(shipment, len(quotes))}[/yellow]")
        return

    table = Table(title=f"Quotes for {shipment}")
    table.add_column("Carrier", style="cyan")
    table.add_column("Mode")
    table.add_column("Base Rate", justify="right")
    table.add_column("Basis")
    table.add_column("Fuel %", justify="right")
    table.add_column("Bracket (lbs)")
    table.add_column("Transit", justify="right")

    for quote in quotes:
        low = f"{quote.min_weight_lbs:g}" if quote.min_weight_lbs is not None else "0"
        high = f"{quote.max_weight_lbs:g}" if quote.max_weight_lbs is not None else "any"
        table.add_row(
            quote.display_name,
            quote.mode.value,
            f"{quote.components.base_rate:,.2f} {quote.currency}",
            quote.charge_basis,
            f"{quote.fuel_pct:g}",
            f"{low} - {high}",
            f"{quote.transit_days}d" if quote.transit_days else "-",
        )

    console.print(table)


@app.command()
def top(
    origin: str = typer.Argument(..., help="Origin (substring match)"),
    destination: str = typer.Argument(..., help="Destination (substring match)"),
    weight: float = typer.Option(..., "--weight", "-w", help="Shipment weight in lbs"),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="parcel, LTL, FTL, air or ocean"),
    limit: int = typer.Option(3, "--limit", "-l", min=1, help="Number of quotes to show"),
    composite: bool = typer.Option(False, "--composite", "-c", help="Rank by composite score"),
    cost_weight: Optional[float] = typer.Option(None, "--cost", min=0, help="Composite cost weight"),
    time_weight: Optional[float] = typer.Option(None, "--time", min=0, help="Composite time weight"),
    reliability_weight: Optional[float] = typer.Option(None, "--reliability", min=0, help="Composite reliability weight"),
    risk_weight: Optional[float] = typer.Option(None, "--risk", min=0, help="Composite risk weight"),
):
    """
    Show the best rates for a shipment.

    Ranks by weight-adjusted cost, or with --composite by a blend of cost,
    transit time, reliability and mode risk. Weight options override the
    configured composite defaults.
    """
    shipment = _shipment(origin, destination, weight, mode)
    service = get_service()

    method = RankingMethod.COMPOSITE if composite else RankingMethod.WEIGHT_FIT
    policy = ScoringPolicy(weights=PolicyWeights(
        cost=cost_weight,
        time=time_weight,
        reliability=reliability_weight,
        risk=risk_weight,
    ))

    ranked = asyncio.run(service.get_top_rates(shipment, limit=limit, method=method, policy=policy))

    title = f"for {shipment} at {shipment.weight_lbs:g} lbs"
    if not ranked:
        console.print(f"[yellow]{ranked_message(title, ranked)}[/yellow]")
        return

    console.print(_quotes_table(f"Top {len(ranked)} {title}", ranked, composite))

    if composite:
        weights = ranked[0].breakdown.weights
        console.print(
            f"[dim]Weights: cost {weights.cost:.2f} | time {weights.time:.2f} | "
            f"reliability {weights.reliability:.2f} | risk {weights.risk:.2f}[/dim]"
        )


# =============================================================================
# System Commands
# =============================================================================

@app.command()
def init():
    """
    Initialize the rate store tables.

    Run this once against a new DATABASE_URL.
    """
    if not settings.store_configured():
        console.print("[red]DATABASE_URL is not configured.[/red]")
        raise typer.Exit(1)

    console.print("[cyan]Initializing rate store...[/cyan]")
    repo = get_repository()
    repo.init_db()
    console.print("[green]Database initialized.[/green]")

    stats = repo.get_stats()
    console.print(Panel.fit(
        "[bold green]Rate store is ready![/bold green]\n\n"
        f"Carriers: {stats['carriers']}\n"
        f"Rates: {stats['rates']['total']} ({stats['rates']['valid_now']} valid now)",
        title="Setup Complete",
    ))


@app.command()
def health():
    """Probe the rate store."""
    report = asyncio.run(get_service().health())
    color = "green" if report.status == "healthy" else "yellow"
    console.print(f"[{color}]{report.status.upper()}[/{color}] {report.summary}")
    if report.error:
        console.print(f"[dim]{report.error}[/dim]")


@app.command()
def version():
    """Show version information."""
    console.print(Panel(
        f"[bold]{settings.APP_NAME}[/bold] v{settings.APP_VERSION}\n"
        "Freight rate lookup and ranking",
        title="Version",
    ))


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to bind to"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload on code changes"),
):
    """
    Start the Rate Quoter API server.

    Swagger UI available at: http://localhost:8000/docs
    """
    import uvicorn

    console.print(Panel.fit(
        "[bold green]Rate Quoter API Server[/bold green]\n\n"
        f"Starting server on http://{host}:{port}\n\n"
        "[cyan]Endpoints:[/cyan]\n"
        "  • Swagger UI: /docs\n"
        "  • Rates: POST /v1/rates\n"
        "  • Top rates: POST /v1/rates/top\n"
        "  • Score quotes: POST /v1/quotes/score\n\n"
        "[dim]Press Ctrl+C to stop[/dim]",
        title="Server Mode",
    ))

    try:
        uvicorn.run(
            "rate_quoter.server:app",
            host=host,
            port=port,
            reload=reload,
            log_level="info",
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Server stopped by user[/yellow]")
    except Exception as e:
        console.print(f"[red]Server error: {e}[/red]")
        raise typer.Exit(1)


# =============================================================================
# Entry Point
# =============================================================================

def main():
    """Main entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
