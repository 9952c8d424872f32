"""End-to-end flows across several endpoints."""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from decimal import Decimal

from customer_api.domain import Invoice

CUSTOMER = {
    "name": "Scenario Traders Ltd",
    "email": "accounts@scenario.example",
    "invoices": [
        {"invoiceNumber": number, "invoiceDate": "2024-06-01T12:00:00", "amount": 10.0}
        for number in ("INV-A", "INV-B", "INV-C")
    ],
    "phoneNumbers": [
        {"type": "Mobile", "number": "07700 900001"},
        {"type": "Work", "number": "020 7946 0001"},
        {"type": "DirectDial", "number": "020 7946 0002"},
    ],
}


def test_create_customer_with_embedded_children(client, make_customer):
    other = make_customer(invoices=[("INV-X", "1")], phones=[("Mobile", "1")])

    response = client.post("/api/customers", json=CUSTOMER)

    assert response.status_code == 201
    created = response.json()
    child_ids = [("invoice", i["id"]) for i in created["invoices"]] + [
        ("phone", p["id"]) for p in created["phoneNumbers"]
    ]
    assert len(set(child_ids)) == 6
    assert ("invoice", other.invoices[0].id) not in child_ids
    assert ("phone", other.phone_numbers[0].id) not in child_ids
    assert created["id"] != other.id


def test_repeating_a_customer_conflicts_on_name_and_email(client):
    client.post("/api/customers", json=CUSTOMER)

    response = client.post("/api/customers", json={**CUSTOMER, "invoices": [], "phoneNumbers": []})

    assert response.status_code == 409
    assert set(response.json()["duplicateFields"]) == {"name", "email"}


def test_delete_needs_key_then_succeeds_once(client, make_customer, auth_headers):
    customer = make_customer()
    url = f"/api/customers/{customer.id}"

    assert client.delete(url).status_code == 401
    assert client.delete(url, headers=auth_headers).status_code == 204
    assert client.delete(url, headers=auth_headers).status_code == 404


def test_invoice_for_deleted_customer_is_not_found(
    client, make_customer, auth_headers, invoice_payload
):
    customer = make_customer()
    client.delete(f"/api/customers/{customer.id}", headers=auth_headers)

    response = client.post("/api/invoices", json=invoice_payload(customer.id, "INV-GONE"))

    assert response.status_code == 404


def test_concurrent_invoice_inserts_get_distinct_ids(database, make_customer):
    owners = [make_customer(name=f"C{n}", email=f"c{n}@x").id for n in range(4)]

    def insert(index):
        return database.insert_invoice(
            Invoice(
                id=0,
                invoice_number=f"INV-{index}",
                customer_id=owners[index % len(owners)],
                invoice_date=datetime(2024, 1, 1),
                amount=Decimal("1"),
            )
        ).id

    with ThreadPoolExecutor(max_workers=8) as pool:
        ids = list(pool.map(insert, range(200)))

    assert sorted(ids) == list(range(1, 201))
