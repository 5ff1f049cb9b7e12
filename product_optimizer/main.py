"""
Product Optimizer - CLI Entry Point.
Production-grade CLI using Click and Rich.
"""

import sys
import asyncio
from functools import wraps
from typing import Optional

import click
import httpx
from rich.console import Console
from rich.markdown import Markdown
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.panel import Panel
from rich.table import Table

from product_optimizer import __version__
from product_optimizer.config.resolver import MARKETPLACE_IDS
from product_optimizer.config.settings import get_settings
from product_optimizer.models.schemas import BenchmarkReport, DataSource
from product_optimizer.pipeline.orchestrator import BenchmarkPipeline
from product_optimizer.utils.errors import AppError
from product_optimizer.utils.formatters import ReportFormatter
from product_optimizer.utils.logger import setup_logging

# Initialize Rich Console
console = Console()

STAGE_LABELS = {
    "resolve_product": "Resolving product...",
    "resolve_competitors": "Resolving competitors...",
    "aggregate": "Aggregating market data...",
    "generate_insights": "Generating insights...",
}

# =============================================================================
# Helper Functions
# =============================================================================

def async_command(f):
    """Decorator to run async click commands."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        return asyncio.run(f(*args, **kwargs))
    return wrapper


def setup_logger(verbose: bool):
    """Configure logging based on verbosity."""
    setup_logging(level="DEBUG" if verbose else "WARNING", json_format=False)


def print_summary(report: BenchmarkReport) -> None:
    """Render the headline numbers of a report as a Rich table."""
    insights = report.market_insights
    table = Table(title="Benchmark Summary", show_header=False)
    table.add_row("Product", f"{report.target_product.title} ({report.target_product.identifier})")
    table.add_row("Category", report.category)
    table.add_row("Competitors", str(len(report.competitors)))
    table.add_row("Average Price", f"${insights.average_price:.2f}")
    table.add_row("Price Range", f"${insights.price_range.min:.2f} - ${insights.price_range.max:.2f}")
    table.add_row("Average Rating", f"{insights.average_rating:.2f}")
    table.add_row("Market Size", f"{insights.total_market_size:,} units")

    for stage, outcome in report.data_sources.items():
        if outcome.source == DataSource.LIVE:
            status = "[green]live[/green]"
        else:
            status = f"[yellow]fallback[/yellow] ({outcome.reason})"
        table.add_row(f"Source: {stage}", status)

    console.print(table)

# =============================================================================
# CLI Group
# =============================================================================

@click.group()
@click.version_option(version=__version__)
def cli():
    """Product Optimizer: competitive benchmarking for Amazon listings"""
    pass

# =============================================================================
# Commands
# =============================================================================

@cli.command()
@click.argument('identifier')
@click.option('--marketplace', default=None, help='Marketplace domain (default: amazon.com)')
@click.option('--format', type=click.Choice(['markdown', 'json']), default='markdown', help='Output format')
@click.option('--verbose', is_flag=True, help='Detailed logging')
@async_command
async def benchmark(identifier: str, marketplace: Optional[str], format: str, verbose: bool):
    """
    Benchmark a product against its category competitors.

    IDENTIFIER: The product ASIN (e.g., B01DFKC2SO)
    """
    setup_logger(verbose)

    try:
        settings = get_settings()

        async with BenchmarkPipeline(settings=settings) as pipeline:
            if format == "json":
                report = await pipeline.run(identifier, marketplace)
            else:
                console.print(Panel.fit(f"[bold blue]Competitive Benchmark[/bold blue]\nTarget: [cyan]{identifier}[/cyan]"))
                with Progress(
                    SpinnerColumn(),
                    TextColumn("[progress.description]{task.description}"),
                    console=console
                ) as progress:
                    task = progress.add_task("[cyan]Running pipeline...", total=None)

                    def update_progress(node: str):
                        progress.update(task, description=f"[cyan]{STAGE_LABELS.get(node, node)}")

                    pipeline.progress_callback = update_progress
                    report = await pipeline.run(identifier, marketplace)
                    progress.update(task, completed=True, description="[green]Benchmark complete!")

        if format == "json":
            click.echo(ReportFormatter().format(report, "json"))
            return

        print_summary(report)
        console.print(Markdown(ReportFormatter().format(report, "markdown")))

    except AppError as e:
        console.print(f"[bold red]Error:[/bold red] {e.message}")
        sys.exit(1)
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {str(e)}")
        if verbose:
            console.print_exception()
        sys.exit(1)


@cli.command()
@click.option('--host', default='127.0.0.1', help='Bind address')
@click.option('--port', default=8000, type=int, help='Bind port')
@click.option('--reload', is_flag=True, help='Auto-reload on code changes')
def serve(host: str, port: int, reload: bool):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = get_settings()
    setup_logging(level=settings.log_level, json_format=settings.log_json)
    console.print(f"[bold]Serving on[/bold] [cyan]http://{host}:{port}[/cyan]")
    uvicorn.run("product_optimizer.api.app:app", host=host, port=port, reload=reload)


@cli.command()
@click.option('--strict', is_flag=True, help='Exit non-zero when any live source is unconfigured')
def validate_setup(strict: bool):
    """Check API keys and environment configuration."""
    console.print("[bold]Validating Setup...[/bold]")

    try:
        settings = get_settings()

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Check")
        table.add_column("Status")
        table.add_column("Details")

        # Amazon Selling Partner
        has_amazon = settings.has_amazon_credentials
        status = "[green]Pass[/green]" if has_amazon else "[yellow]Fallback[/yellow]"
        details = "refresh-token grant" if has_amazon else "static product tables"
        table.add_row("Amazon SP-API", status, details)

        # Anthropic
        has_llm = settings.has_llm_credentials
        status = "[green]Pass[/green]" if has_llm else "[yellow]Fallback[/yellow]"
        details = settings.claude_model if has_llm else "template insights"
        table.add_row("Anthropic API Key", status, details)

        # Configuration
        marketplace_ok = settings.default_marketplace in MARKETPLACE_IDS
        status = "[green]Pass[/green]" if marketplace_ok else "[red]Fail[/red]"
        table.add_row("Default Marketplace", status, settings.default_marketplace)
        table.add_row("SP-API Endpoint", "[blue]Info[/blue]", httpx.URL(settings.sp_api_base_url).host)
        table.add_row("Data Sources", "[blue]Info[/blue]", settings.get_data_source())
        table.add_row("Environment", "[blue]Info[/blue]", settings.app_env)

        console.print(table)

        if not marketplace_ok:
            sys.exit(1)
        if not (has_amazon and has_llm):
            console.print("\n[yellow]Warning: Some live sources are not configured. Static fallback data will be used.[/yellow]")
            if strict:
                sys.exit(1)

    except Exception as e:
        console.print(f"[bold red]Configuration Error:[/bold red] {e}")
        sys.exit(1)

if __name__ == "__main__":
    cli()
