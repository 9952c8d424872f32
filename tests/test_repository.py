from datetime import datetime
from decimal import Decimal

import pytest

from customer_api.domain import Customer, Invoice, PhoneNumber, PhoneType
from customer_api.repository import (
    AppDatabase,
    DuplicateRecordError,
    InMemoryRepository,
    InvalidRecordError,
    RecordNotFoundError,
)


def _invoice(number, customer_id=0, amount="10.00"):
    return Invoice(
        id=0,
        invoice_number=number,
        customer_id=customer_id,
        invoice_date=datetime(2024, 5, 1),
        amount=Decimal(amount),
    )


def test_in_memory_repository_basics():
    repo = InMemoryRepository()
    first, second = repo.next_id(), repo.next_id()
    repo.add(first, "a")
    repo.add(second, "b")

    assert (first, second) == (1, 2)
    assert len(repo) == 2
    assert repo.get(first) == "a"
    assert repo.find(99) is None
    with pytest.raises(DuplicateRecordError):
        repo.add(first, "again")

    repo.remove(first)
    with pytest.raises(RecordNotFoundError):
        repo.get(first)
    assert repo.next_id() == 3


def test_customer_ids_start_at_one_and_ignore_caller_id(database):
    created = database.insert_customer(Customer(id=42, name="A", email="a@x"))
    assert created.id == 1
    assert database.insert_customer(Customer(id=0, name="B", email="b@x")).id == 2


def test_insert_customer_assigns_child_ids_and_balance(database, make_customer):
    customer = make_customer(
        invoices=[("INV-1", "100.00"), ("INV-2", "50.25")],
        phones=[("Mobile", "07700 900123")],
    )

    assert [invoice.id for invoice in customer.invoices] == [1, 2]
    assert all(invoice.customer_id == customer.id for invoice in customer.invoices)
    assert customer.phone_numbers[0].id == 1
    assert customer.phone_numbers[0].customer_id == customer.id
    assert customer.balance == Decimal("150.25")


def test_invoice_ids_increase_across_customers(database, make_customer):
    first = make_customer(name="One", email="one@x")
    second = make_customer(name="Two", email="two@x")
    ids = []
    for index in range(6):
        owner = first if index % 2 else second
        ids.append(database.insert_invoice(_invoice(f"INV-{index}", owner.id)).id)
        ids.append(
            database.insert_phone_number(
                PhoneNumber(id=0, customer_id=owner.id, type=PhoneType.WORK, number="1")
            ).id
        )

    invoice_ids, phone_ids = ids[0::2], ids[1::2]
    assert invoice_ids == sorted(set(invoice_ids))
    assert phone_ids == sorted(set(phone_ids))


def test_deleted_ids_are_never_reused(database, make_customer):
    customer = make_customer()
    invoice = database.insert_invoice(_invoice("INV-1", customer.id))
    assert database.delete_invoice_by_id(invoice.id)

    assert database.insert_invoice(_invoice("INV-2", customer.id)).id == invoice.id + 1


def test_delete_customer_cascades(database, make_customer):
    customer = make_customer(invoices=[("INV-1", "1")], phones=[("Work", "1")])
    other = make_customer(name="Other", email="other@x", invoices=[("INV-2", "1")])

    assert database.delete_customer(customer.id)

    assert database.find_customer(customer.id) is None
    assert database.list_invoices_by_customer(customer.id) == []
    assert database.list_phone_numbers_by_customer(customer.id) == []
    assert database.invoice_count() == 1
    assert database.find_customer(other.id).invoices[0].invoice_number == "INV-2"
    assert not database.delete_customer(customer.id)


def test_returned_records_are_copies(database, make_customer):
    customer = make_customer(invoices=[("INV-1", "10")])
    customer.name = "Changed"
    customer.invoices[0].amount = Decimal("999")

    stored = database.find_customer(customer.id)
    assert stored.name == "Acme Ltd"
    assert stored.balance == Decimal("10")

    listed = database.list_invoices()
    listed[0].invoice_number = "INV-X"
    assert database.find_invoice("INV-1") is not None


def test_balance_is_recomputed_on_read(database, make_customer):
    customer = make_customer(invoices=[("INV-1", "10")])
    database.insert_invoice(_invoice("INV-2", customer.id, amount="5.50"))

    assert database.find_customer(customer.id).balance == Decimal("15.50")
    assert database.list_customers()[0].balance == Decimal("15.50")


def test_duplicate_lookup_is_trimmed_and_case_insensitive(database, make_customer):
    acme = make_customer(name="ACME", email="sales@acme.example")

    assert database.find_customer_by_name("  acme ").id == acme.id
    assert database.find_customer_by_email("SALES@ACME.EXAMPLE").id == acme.id
    assert database.find_customer_by_name("") is None
    assert database.is_duplicate_customer("Acme", "new@x")
    assert not database.is_duplicate_customer("Acme2", "new@x")
    assert not database.is_duplicate_customer("acme", "sales@acme.example", exclude_id=acme.id)


def test_duplicate_fields_reports_every_colliding_field(database, make_customer):
    acme = make_customer(name="Acme", email="a@x")
    other = make_customer(name="Other", email="o@x")

    assert database.duplicate_customer_fields("acme", "A@X") == {"name": acme.id, "email": acme.id}
    assert database.duplicate_customer_fields("Acme", "o@x") == {"name": acme.id, "email": other.id}
    assert database.duplicate_customer_fields(None, None) == {}


def test_update_customer_replaces_name_and_email_only(database, make_customer):
    customer = make_customer(invoices=[("INV-1", "10")])

    assert database.update_customer(customer.id, Customer(id=999, name="New", email="new@x"))
    updated = database.find_customer(customer.id)
    assert (updated.id, updated.name, updated.email) == (customer.id, "New", "new@x")
    assert len(updated.invoices) == 1
    assert not database.update_customer(0, Customer(id=0))
    assert not database.update_customer(77, Customer(id=77))


def test_insert_invoice_rejects_unusable_records(database):
    with pytest.raises(InvalidRecordError):
        database.insert_invoice(_invoice("INV-1", customer_id=0))
    with pytest.raises(InvalidRecordError):
        database.insert_invoice(_invoice("  ", customer_id=1))
    with pytest.raises(InvalidRecordError):
        database.insert_phone_number(
            PhoneNumber(id=0, customer_id=-1, type=PhoneType.MOBILE, number="1")
        )


def test_insert_customer_with_blank_embedded_invoice_stores_nothing(database):
    with pytest.raises(InvalidRecordError):
        database.insert_customer(Customer(id=0, name="A", email="a@x", invoices=[_invoice("")]))

    assert database.customer_count() == 0
    assert database.invoice_count() == 0


def test_invoice_lookup_and_update(database, make_customer):
    customer = make_customer(invoices=[("INV-1", "10")])
    invoice = database.find_invoice("INV-1")

    assert database.find_invoice("inv-1") is None
    assert database.find_invoice_by_id(invoice.id).invoice_number == "INV-1"
    assert database.update_invoice(invoice.id, _invoice("INV-9", customer_id=555, amount="3"))
    changed = database.find_invoice("INV-9")
    assert changed.customer_id == customer.id
    assert changed.amount == Decimal("3")


def test_delete_by_customer_is_true_for_any_positive_id(database, make_customer):
    customer = make_customer(invoices=[("INV-1", "1")], phones=[("Mobile", "1")])

    assert database.delete_invoices_by_customer(customer.id)
    assert database.delete_phone_numbers_by_customer(customer.id)
    assert database.delete_invoices_by_customer(12345)
    assert not database.delete_invoices_by_customer(0)
    assert database.find_customer(customer.id).invoices == []


def test_phone_number_update_and_delete(database, make_customer):
    make_customer(phones=[("Mobile", "07700 900123")])
    phone = database.list_phone_numbers()[0]

    assert database.update_phone_number(
        phone.id, PhoneNumber(id=0, customer_id=0, type=PhoneType.WORK, number="020 7946 0958")
    )
    assert database.find_phone_number(phone.id).type is PhoneType.WORK
    assert database.delete_phone_number(phone.id)
    assert not database.delete_phone_number(phone.id)
    assert database.phone_number_count() == 0


def test_fresh_databases_do_not_share_state():
    first, second = AppDatabase(), AppDatabase()
    first.insert_customer(Customer(id=0, name="A", email="a@x"))

    assert second.customer_count() == 0
