"""Scripted walk through the API used by ``python -m customer_api demo``."""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
from rich.console import Console
from rich.table import Table

from .api_client import ApiClient, ApiRequestError, ProblemDetails

logger = logging.getLogger(__name__)

EXPECTED = "Expected"
FAILED = "Failed"
UNEXPECTED = "Unexpected"


def log_problem(problem: Optional[ProblemDetails], operation: str, severity: str) -> None:
    """Log a problem body at the level matching ``severity``."""

    if problem is None:
        return
    if severity == EXPECTED:
        log = logger.info
    elif severity == FAILED:
        log = logger.warning
    else:
        log = logger.error
    log(
        "%s error in %s - Status: %s, Title: %s, Detail: %s, TraceId: %s",
        severity,
        operation,
        problem.status,
        problem.title,
        problem.detail,
        problem.trace_id,
    )
    if problem.errors:
        logger.warning("Validation Errors (%d fields):", len(problem.errors))
        for name, messages in problem.errors.items():
            logger.warning("  Field: %s, Errors: %s", name, ", ".join(messages))


def show_problem(console: Console, problem: ProblemDetails, style: str) -> None:
    console.print(f"[{style}]{problem.status} {problem.title}[/{style}]: {problem.detail}")
    for name, messages in problem.errors.items():
        console.print(f"  [bold]{name}[/bold]: {'; '.join(messages)}")


def _now() -> str:
    return datetime.now().replace(microsecond=0).isoformat()


def _unique(prefix: str) -> str:
    return f"{prefix}{time.time_ns()}"


# ----------------------------------------------------------------------
# Scenarios
# ----------------------------------------------------------------------
def list_customers(client: ApiClient, console: Console) -> None:
    customers = client.get("/api/customers") or []
    if not customers:
        logger.warning("No customers found in the API response")
        console.print("[yellow]No customers found.[/yellow]")
        return
    logger.info("Retrieved %d customers from API", len(customers))
    table = Table(title=f"Customers ({len(customers)} total, first 3 shown)", header_style="bold")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Email")
    table.add_column("Balance", justify="right")
    table.add_column("Invoices", justify="right")
    table.add_column("Phones", justify="right")
    for customer in customers[:3]:
        table.add_row(
            str(customer["id"]),
            customer.get("name") or "",
            customer.get("email") or "",
            f"{customer.get('balance', 0):.2f}",
            str(len(customer.get("invoices", []))),
            str(len(customer.get("phoneNumbers", []))),
        )
    console.print(table)


def create_customer(client: ApiClient, console: Console) -> None:
    created = client.post(
        "/api/customers",
        {
            "name": "TechCorp Solutions Ltd",
            "email": "contact@techcorp.com",
            "invoices": [
                {"invoiceNumber": "INV-TECH001", "invoiceDate": _now(), "amount": 1500.00},
                {"invoiceNumber": "INV-TECH002", "invoiceDate": _now(), "amount": 2750.50},
                {"invoiceNumber": "INV-TECH003", "invoiceDate": _now(), "amount": 899.99},
            ],
            "phoneNumbers": [
                {"type": "Mobile", "number": "+44 7700 900123"},
                {"type": "Work", "number": "+44 20 7946 0958"},
                {"type": "DirectDial", "number": "+44 20 7946 0959"},
            ],
        },
    )
    logger.info("Customer created successfully with ID: %s", created["id"])
    console.print(
        f"[green]Created customer {created['id']}[/green] {created['name']} "
        f"with {len(created['invoices'])} invoices, balance {created['balance']:.2f}"
    )


def create_duplicate_customer(client: ApiClient, console: Console) -> None:
    client.post(
        "/api/customers",
        {
            "name": "TechCorp Solutions Ltd",
            "email": "contact@techcorp.com",
            "invoices": [
                {"invoiceNumber": _unique("INV-DUP"), "invoiceDate": _now(), "amount": 500.00}
            ],
            "phoneNumbers": [{"type": "Mobile", "number": "+44 7700 111222"}],
        },
    )
    logger.warning("Duplicate customer creation succeeded unexpectedly")


def delete_customer_10(client: ApiClient, console: Console) -> None:
    client.delete("/api/customers/10")
    logger.info("Customer ID 10 deleted successfully")
    console.print("[green]Customer 10 deleted.[/green]")


def delete_customer_10_again(client: ApiClient, console: Console) -> None:
    client.delete("/api/customers/10")
    logger.warning("Customer ID 10 deleted again unexpectedly")


def add_invoice_to_customer_5(client: ApiClient, console: Console) -> None:
    created = client.post(
        "/api/invoices",
        {
            "customerId": 5,
            "invoiceNumber": _unique("INV-NEW"),
            "invoiceDate": _now(),
            "amount": 3500.00,
        },
    )
    logger.info(
        "Invoice created successfully: %s for Customer ID: %s",
        created["invoiceNumber"],
        created["customerId"],
    )
    console.print(
        f"[green]Created invoice {created['invoiceNumber']}[/green] "
        f"for customer {created['customerId']}: {created['amount']:.2f}"
    )


def add_invoice_to_missing_customer(client: ApiClient, console: Console) -> None:
    client.post(
        "/api/invoices",
        {
            "customerId": 99,
            "invoiceNumber": _unique("INV-INVALID"),
            "invoiceDate": _now(),
            "amount": 1000.00,
        },
    )
    logger.warning("Invoice created for non-existing customer unexpectedly")


def add_invoice_with_invalid_number(client: ApiClient, console: Console) -> None:
    client.post(
        "/api/invoices",
        {"customerId": 5, "invoiceNumber": "ORDER-12345", "invoiceDate": _now(), "amount": 750.00},
    )
    logger.warning("Invoice with invalid format created unexpectedly")


def add_invoice_with_empty_number(client: ApiClient, console: Console) -> None:
    client.post(
        "/api/invoices",
        {"customerId": 5, "invoiceNumber": "", "invoiceDate": _now(), "amount": 500.00},
    )
    logger.warning("Invoice with empty number created unexpectedly")


def add_invoice_with_multiple_errors(client: ApiClient, console: Console) -> None:
    client.post(
        "/api/invoices",
        {"customerId": 0, "invoiceNumber": "QUOTE-999", "invoiceDate": _now(), "amount": 500.00},
    )
    logger.warning("Invoice with multiple errors created unexpectedly")


Scenario = Tuple[str, Callable[[ApiClient, Console], None], bool]

# (title, runner, whether an API error is the expected outcome)
SCENARIOS: List[Scenario] = [
    ("Get All Customers", list_customers, False),
    ("Create New Customer", create_customer, False),
    ("Duplicate Customer Creation", create_duplicate_customer, True),
    ("Delete Customer ID 10", delete_customer_10, False),
    ("Delete Customer ID 10 Again", delete_customer_10_again, True),
    ("Add Invoice to Customer ID 5", add_invoice_to_customer_5, False),
    ("Add Invoice to Non-Existing Customer ID 99", add_invoice_to_missing_customer, True),
    ("Add Invoice with Invalid Number Format", add_invoice_with_invalid_number, True),
    ("Add Invoice with Empty Number", add_invoice_with_empty_number, True),
    ("Add Invoice with Multiple Errors", add_invoice_with_multiple_errors, True),
]


def run_demo(
    client: ApiClient,
    console: Optional[Console] = None,
    *,
    show_full_stack_trace: bool = False,
) -> Dict[str, Any]:
    """Run every scenario in order and return the outcome of each.

    API errors are logged and the run carries on with the next scenario. A
    transport failure ends the run early.
    """

    console = console or Console()
    outcomes: Dict[str, Any] = {}
    for index, (title, runner, error_expected) in enumerate(SCENARIOS, start=1):
        logger.info("Starting example %d: %s", index, title)
        console.rule(f"Example {index}: {title}")
        try:
            runner(client, console)
        except ApiRequestError as exc:
            severity = EXPECTED if error_expected else FAILED
            if error_expected:
                logger.info("Expected error caught: %s, StatusCode: %d", exc, exc.status_code)
            else:
                logger.warning("%s failed: %s, StatusCode: %d", title, exc, exc.status_code)
            log_problem(exc.problem, title, severity)
            show_problem(console, exc.problem, "yellow" if error_expected else "red")
            outcomes[title] = exc.problem
        except httpx.HTTPError as exc:
            if show_full_stack_trace:
                logger.exception("Critical error during %s", title)
            else:
                logger.error("Critical error during %s: %s", title, exc)
            log_problem(
                ProblemDetails(status=0, type="UnexpectedError", title=type(exc).__name__, detail=str(exc)),
                title,
                UNEXPECTED,
            )
            console.print(f"[bold red]Aborting:[/bold red] {exc}")
            outcomes[title] = exc
            break
        else:
            outcomes[title] = None
    return outcomes


__all__ = ["run_demo", "log_problem", "SCENARIOS"]
