"""
Main CLI application for Ethereum Fund Flow analysis.
"""

from .utils import is_valid_ethereum_address, format_number
from .models import CounterpartyAggregate, Role
from typing import Optional, List
from datetime import datetime
import json
from pathlib import Path

import typer
import uvicorn
from rich.console import Console
from rich.table import Table
from rich.logging import RichHandler

from .config import ANALYSIS_MODES, WETH_CONTRACT_ADDRESS, Config
from .api_clients import EtherscanClient
from .analyzer import FundFlowAnalyzer
from .errors import EtherscanError
from .server import create_app

# Logging setup
import logging
logger = logging.getLogger(__name__)


app = typer.Typer(
    name="eth-fund-flow",
    help="Analyze where funds flow to and from an Ethereum address."
)

console = Console()


def load_config() -> Config:
    """Load application configuration."""
    try:
        return Config.from_env()
    except ValueError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        console.print(
            "\n[yellow]Please create a .env file with your API key:[/yellow]")
        console.print("ETHERSCAN_API_KEY=your_key_here")
        raise typer.Exit(1)


def configure_logging(level: str, verbose: bool) -> None:
    """Send log records through rich; verbose lowers the threshold to DEBUG."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


def validate_mode(mode: str) -> str:
    if mode not in ANALYSIS_MODES:
        console.print(
            "[red]Error: mode must be 'beneficiary', 'payer', or 'both'[/red]")
        raise typer.Exit(1)
    return mode


def build_analyzer(config: Config) -> FundFlowAnalyzer:
    client = EtherscanClient(config, verbose=config.verbose)
    return FundFlowAnalyzer(client, display_timezone=config.display_timezone,
                            verbose=config.verbose)


def roles_for_mode(mode: str) -> List[Role]:
    if mode == "both":
        return [Role.BENEFICIARY, Role.PAYER]
    return [Role(mode)]


def role_title(role: Role) -> str:
    return "Beneficiaries" if role is Role.BENEFICIARY else "Payers"


def display_results_table(address: str, role: Role, results: List[CounterpartyAggregate]):
    """Display results in a rich table."""
    title = role_title(role)

    console.print(f"\n[bold]{title} of {address}:[/bold] [green]{len(results)}[/green] addresses")
    if not results:
        console.print(f"[yellow]No {title.lower()} found.[/yellow]")
        return

    table = Table(title=f"\n{title}")
    table.add_column("Rank", style="cyan", no_wrap=True)
    table.add_column("Address", style="magenta", no_wrap=True)
    table.add_column("Total (ETH)", style="green", justify="right")
    table.add_column("Transactions", style="white", justify="right")
    table.add_column("Transaction", style="yellow", no_wrap=True)
    table.add_column("Date", style="white", no_wrap=True)

    for i, agg in enumerate(results, 1):
        first = agg.transactions[0]
        table.add_row(
            str(i),
            agg.address,
            format_number(agg.total_amount),
            str(len(agg.transactions)),
            f"{first.transaction_id[:10]}...",
            first.display_time,
        )

    console.print(table)


def export_to_json(address: str, results: dict, filepath: str):
    """Export analysis results to JSON."""
    data = {
        'address': address,
        'analysis_date': datetime.now().isoformat(),
    }
    for role, aggregates in results.items():
        data[role_title(role).lower()] = [agg.to_dict() for agg in aggregates]

    with open(filepath, 'w') as jsonfile:
        json.dump(data, jsonfile, indent=2)


@app.command()
def serve(
    address: str = typer.Option(
        WETH_CONTRACT_ADDRESS, "--address", "-a", help="Ethereum address used for the example links"),
    mode: str = typer.Option(
        "both", "--mode", "-m", help="Analysis mode: beneficiary, payer, or both"),
    port: Optional[int] = typer.Option(
        None, "--port", "-p", help="Port to run the server on (overrides PORT)"),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log detailed fetch and aggregation diagnostics"),
):
    """Start the HTTP API."""
    validate_mode(mode)
    config = load_config()
    config.verbose = config.verbose or verbose
    if port is not None:
        config.port = port
    config.default_address = address
    config.analysis_mode = mode
    configure_logging(config.log_level, config.verbose)

    logger.info("Starting Ethereum Fund Flow Analysis API")
    logger.info(f"Default Ethereum address: {address}")
    logger.info(f"Analysis mode: {mode}")

    api = create_app(build_analyzer(config), config.default_address, config.analysis_mode)

    logger.info(f"Server starting on port {config.port}")
    uvicorn.run(api, host="0.0.0.0", port=config.port, log_config=None)


@app.command()
def analyze(
    address: str = typer.Argument(..., help="Ethereum address to analyze"),
    mode: str = typer.Option(
        "both", "--mode", "-m", help="Analysis mode: beneficiary, payer, or both"),
    output_format: str = typer.Option(
        "table", "--format", "-f", help="Output format: table, json"),
    output_file: Optional[str] = typer.Option(
        None, "--output", "-o", help="Output file path"),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log detailed fetch and aggregation diagnostics"),
):
    """Run a one-off analysis and print the results."""
    validate_mode(mode)
    config = load_config()
    config.verbose = config.verbose or verbose
    configure_logging(config.log_level, config.verbose)

    if not is_valid_ethereum_address(address):
        console.print(
            f"[yellow]Warning: {address} does not look like an Ethereum address[/yellow]")

    analyzer = build_analyzer(config)
    results = {}
    for role in roles_for_mode(mode):
        console.print(f"[cyan]Analyzing {role_title(role).lower()} of {address}...[/cyan]")
        try:
            results[role] = analyzer.analyze(address, role)
        except EtherscanError as e:
            console.print(f"[red]Analysis failed: {e}[/red]")
            raise typer.Exit(1)

    if output_format == "table" or not output_file:
        for role, aggregates in results.items():
            display_results_table(address, role, aggregates)

    if output_file:
        if output_format == "json":
            export_to_json(address, results, output_file)
            console.print(f"[green]Results exported to {output_file}[/green]")
        else:
            console.print(
                f"[yellow]Unsupported output format: {output_format}[/yellow]")


@app.command()
def setup():
    """Setup the application by creating a .env file template."""
    env_content = """# Ethereum Fund Flow Configuration

# Required: Etherscan API Key (get from https://etherscan.io/apis)
ETHERSCAN_API_KEY=your_etherscan_api_key_here

# Server Settings
PORT=8080

# Request Settings
REQUEST_TIMEOUT=60
MAX_RETRIES=3
RETRY_BACKOFF=1.0

# Output Settings
DISPLAY_TIMEZONE=UTC
LOG_LEVEL=INFO
VERBOSE=false
"""

    env_path = Path(".env")
    if env_path.exists():
        console.print("[yellow].env file already exists![/yellow]")
        if not typer.confirm("Overwrite existing .env file?"):
            return

    with open(env_path, 'w') as f:
        f.write(env_content)

    console.print(f"[green]Created .env file at {env_path.absolute()}[/green]")
    console.print(
        "\n[yellow]Please edit the .env file and add your API key:[/yellow]")
    console.print("1. Get an Etherscan API key from https://etherscan.io/apis")
    console.print(
        "2. Replace 'your_etherscan_api_key_here' with your real key")
    console.print("3. Run: eth-fund-flow serve --address <address>")


if __name__ == "__main__":
    app()
