import pytest
from starlette.testclient import TestClient

from customer_api.config import Settings
from customer_api.web import create_app


@pytest.fixture
def seeded(make_customer):
    return make_customer(invoices=[("INV-1", "1")], phones=[("Mobile", "1")])


def _delete_urls(customer):
    return [
        f"/api/customers/{customer.id}",
        "/api/invoices/INV-1",
        f"/api/invoices/customer/{customer.id}",
        f"/api/phonenumbers/{customer.phone_numbers[0].id}",
        f"/api/phonenumbers/customer/{customer.id}",
    ]


def test_missing_key_is_rejected_without_mutation(client, seeded, database):
    for url in _delete_urls(seeded):
        response = client.delete(url)
        assert response.status_code == 401
        problem = response.json()
        assert problem["title"] == "API Key Missing"
        assert problem["requiredHeader"] == "X-API-Key"
        assert problem["type"] == "https://yourapi.com/problems/unauthorized"

    assert database.find_customer(seeded.id) is not None
    assert database.invoice_count() == 1
    assert database.phone_number_count() == 1


def test_wrong_key_is_rejected_without_mutation(client, seeded, database):
    for url in _delete_urls(seeded):
        response = client.delete(url, headers={"X-API-Key": "test-token-wrong"})
        assert response.status_code == 401
        assert response.json()["title"] == "Invalid API Key"

    assert database.find_customer(seeded.id).invoices[0].invoice_number == "INV-1"


def test_auth_runs_before_path_validation(client):
    response = client.delete("/api/customers/not-a-number")

    assert response.status_code == 401


def test_reads_need_no_key(client, seeded):
    assert client.get(f"/api/customers/{seeded.id}").status_code == 200


def test_unconfigured_token_rejects_every_key(database, make_customer):
    customer = make_customer()
    app = create_app(Settings(seed_demo_data=False, api_token=""), database=database)

    with TestClient(app) as client:
        response = client.delete(f"/api/customers/{customer.id}", headers={"X-API-Key": ""})

    assert response.status_code == 401
    assert response.json()["title"] == "Invalid API Key"
    assert database.find_customer(customer.id) is not None
