import io
import logging

import httpx
import pytest
from rich.console import Console
from starlette.testclient import TestClient

from customer_api.client import ApiClient, ApiRequestError, ProblemDetails, log_problem, run_demo
from customer_api.client.demo import SCENARIOS


@pytest.fixture
def api(app):
    """ApiClient that talks to the in-process app through a Starlette test client."""

    with TestClient(app) as test_client:
        with ApiClient("http://testserver", "test-token", http_client=test_client) as client:
            yield client


def test_get_and_post_round_trip(api, make_customer):
    customer = make_customer()

    created = api.post(
        "/api/invoices",
        {"customerId": customer.id, "invoiceNumber": "INV-C1", "invoiceDate": "2024-01-01T00:00:00", "amount": 12},
    )

    assert created["invoiceNumber"] == "INV-C1"
    assert api.get(f"/api/customers/{customer.id}")["balance"] == 12.0


def test_put_updates_customer(api, make_customer):
    customer = make_customer()

    updated = api.put(f"/api/customers/{customer.id}", {"name": "Renamed", "email": "r@x"})

    assert updated["name"] == "Renamed"


def test_errors_carry_problem_details(api):
    with pytest.raises(ApiRequestError) as caught:
        api.get("/api/customers/123")

    problem = caught.value.problem
    assert caught.value.status_code == 404
    assert problem.title == "Customer Not Found"
    assert problem.trace_id
    assert problem.extensions["customerId"] == 123
    assert "Customer Not Found" in str(caught.value)


def test_delete_sends_api_key(api, make_customer, database):
    customer = make_customer()

    assert api.delete(f"/api/customers/{customer.id}") is True
    assert database.find_customer(customer.id) is None


def test_delete_without_token_is_unauthorized(app, make_customer):
    customer = make_customer()
    with TestClient(app) as test_client:
        with ApiClient("http://testserver", http_client=test_client) as client:
            with pytest.raises(ApiRequestError) as caught:
                client.delete(f"/api/customers/{customer.id}")

    assert caught.value.problem.title == "API Key Missing"


def test_problem_details_from_non_problem_payload():
    problem = ProblemDetails.from_json("gateway exploded", 502)

    assert problem.status == 502
    assert problem.detail == "gateway exploded"
    assert problem.errors == {}


def test_log_problem_levels(caplog):
    problem = ProblemDetails(status=400, title="Validation Failed", errors={"amount": ["bad"]})

    with caplog.at_level(logging.INFO, logger="customer_api.client.demo"):
        log_problem(problem, "Add Invoice", "Expected")
        log_problem(problem, "Add Invoice", "Unexpected")

    levels = [record.levelno for record in caplog.records]
    assert levels[0] == logging.INFO
    assert logging.ERROR in levels
    assert any("Field: amount" in record.getMessage() for record in caplog.records)


def test_run_demo_against_seeded_store(api, make_customer):
    for index in range(1, 11):
        make_customer(name=f"Customer {index}", email=f"c{index}@x", invoices=[(f"INV-S{index}", "1")])

    outcomes = run_demo(api, Console(file=io.StringIO()))

    assert list(outcomes) == [title for title, _, _ in SCENARIOS]
    assert outcomes["Get All Customers"] is None
    assert outcomes["Create New Customer"] is None
    assert outcomes["Duplicate Customer Creation"].status == 409
    assert outcomes["Delete Customer ID 10"] is None
    assert outcomes["Delete Customer ID 10 Again"].status == 404
    assert outcomes["Add Invoice to Customer ID 5"] is None
    assert outcomes["Add Invoice to Non-Existing Customer ID 99"].status == 404
    assert outcomes["Add Invoice with Invalid Number Format"].status == 400
    assert outcomes["Add Invoice with Empty Number"].status == 400
    multiple = outcomes["Add Invoice with Multiple Errors"]
    assert set(multiple.errors) == {"customerId", "invoiceNumber"}


def test_run_demo_stops_on_transport_errors():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    with ApiClient("http://nowhere", transport=httpx.MockTransport(refuse)) as client:
        outcomes = run_demo(client, Console(file=io.StringIO()))

    assert list(outcomes) == ["Get All Customers"]
    assert isinstance(outcomes["Get All Customers"], httpx.ConnectError)
