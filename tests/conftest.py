from datetime import datetime
from decimal import Decimal

import pytest
from starlette.testclient import TestClient

from customer_api.config import Settings
from customer_api.domain import Customer, Invoice, PhoneNumber, PhoneType
from customer_api.repository import AppDatabase
from customer_api.web import create_app

API_TOKEN = "test-token"


@pytest.fixture
def database():
    return AppDatabase()


@pytest.fixture
def settings():
    return Settings(seed_demo_data=False, api_token=API_TOKEN)


@pytest.fixture
def app(settings, database):
    return create_app(settings, database=database)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    return {"X-API-Key": API_TOKEN}


@pytest.fixture
def make_customer(database):
    """Insert a customer straight into the store and return it populated."""

    def _make(name="Acme Ltd", email="info@acme.example", invoices=(), phones=()):
        return database.insert_customer(
            Customer(
                id=0,
                name=name,
                email=email,
                invoices=[
                    Invoice(
                        id=0,
                        invoice_number=number,
                        customer_id=0,
                        invoice_date=datetime(2024, 1, 15),
                        amount=Decimal(amount),
                    )
                    for number, amount in invoices
                ],
                phone_numbers=[
                    PhoneNumber(id=0, customer_id=0, type=PhoneType(kind), number=number)
                    for kind, number in phones
                ],
            )
        )

    return _make


@pytest.fixture
def invoice_payload():
    def _payload(customer_id, number="INV-1000", amount=125.5):
        return {
            "customerId": customer_id,
            "invoiceNumber": number,
            "invoiceDate": "2024-03-01T09:30:00",
            "amount": amount,
        }

    return _payload
