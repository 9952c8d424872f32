"""CLI for the customer API.

Usage:
    python -m customer_api serve                 # Run the API with demo data
    python -m customer_api serve --no-seed       # Run the API with an empty store
    python -m customer_api demo                  # Drive a running API through the demo scenarios
"""

from __future__ import annotations

from typing import Optional

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from customer_api.client import ApiClient, run_demo
from customer_api.config import ClientSettings, Settings
from customer_api.logging_config import configure_logging
from customer_api.web import create_app

app = typer.Typer(
    name="customer-api",
    help="Customer, invoice and phone number API",
    no_args_is_help=True,
)
console = Console(stderr=True)


@app.command("serve")
def cmd_serve(
    host: Optional[str] = typer.Option(None, "--host", help="Interface to bind"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to listen on"),
    seed: Optional[bool] = typer.Option(None, "--seed/--no-seed", help="Populate demo data at startup"),
    customers: Optional[int] = typer.Option(None, "--customers", help="Number of demo customers"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level"),
) -> None:
    """Run the API server."""
    overrides = {
        "host": host,
        "port": port,
        "seed_demo_data": seed,
        "seed_customer_count": customers,
        "log_level": log_level,
    }
    settings = Settings(**{key: value for key, value in overrides.items() if value is not None})
    configure_logging(settings.log_level)

    console.print(f"[bold]{settings.title}[/bold] on http://{settings.host}:{settings.port}")
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


@app.command("demo")
def cmd_demo(
    base_url: Optional[str] = typer.Option(None, "--base-url", help="API base URL"),
    token: Optional[str] = typer.Option(None, "--token", help="API key for delete requests"),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level"),
) -> None:
    """Run the scripted client scenarios against a running API."""
    settings = ClientSettings()
    configure_logging(log_level)
    url = base_url or settings.base_url
    api_token = token or settings.api_token

    table = Table(title="Client configuration", show_header=False)
    table.add_row("Base URL", url)
    table.add_row("API Token", f"{api_token[:4]}***" if api_token else "NOT SET")
    console.print(table)

    with ApiClient(url, api_token, timeout=settings.timeout_seconds) as client:
        outcomes = run_demo(client, console, show_full_stack_trace=settings.show_full_stack_trace)

    if any(isinstance(outcome, Exception) for outcome in outcomes.values()):
        console.print("[red]Demo aborted by a transport error.[/red]")
        raise typer.Exit(1)
    console.print("[bold green]All examples completed.[/bold green]")


if __name__ == "__main__":
    app()
