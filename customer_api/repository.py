"""In-memory repositories backing the customer API."""

from __future__ import annotations

import itertools
import threading
from dataclasses import replace
from decimal import Decimal
from typing import (
    Callable,
    Dict,
    Generic,
    Iterator,
    List,
    MutableMapping,
    Optional,
    TypeVar,
)

from .domain import Customer, Invoice, PhoneNumber

T = TypeVar("T")


class RepositoryError(RuntimeError):
    """Base exception for repository errors."""


class DuplicateRecordError(RepositoryError):
    """Raised when attempting to insert a record that already exists."""


class RecordNotFoundError(RepositoryError):
    """Raised when a requested record is missing."""


class InvalidRecordError(RepositoryError):
    """Raised when a record is refused because a required field is unusable."""


class InMemoryRepository(Generic[T]):
    """Generic repository backed by a dictionary with auto-assigned ids.

    Ids come from a counter that only moves forward, so a removed id is
    never handed out again.
    """

    def __init__(self, start_id: int = 1) -> None:
        self._items: MutableMapping[int, T] = {}
        self._ids = itertools.count(start_id)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items.values()))

    def next_id(self) -> int:
        return next(self._ids)

    def add(self, item_id: int, item: T) -> None:
        if item_id in self._items:
            raise DuplicateRecordError(f"Record with id {item_id!r} already exists")
        self._items[item_id] = item

    def get(self, item_id: int) -> T:
        try:
            return self._items[item_id]
        except KeyError as exc:
            raise RecordNotFoundError(f"Record with id {item_id!r} not found") from exc

    def find(self, item_id: int) -> Optional[T]:
        return self._items.get(item_id)

    def first(self, predicate: Callable[[T], bool]) -> Optional[T]:
        return next((item for item in self._items.values() if predicate(item)), None)

    def remove(self, item_id: int) -> None:
        if item_id not in self._items:
            raise RecordNotFoundError(f"Record with id {item_id!r} not found")
        del self._items[item_id]

    def remove_where(self, predicate: Callable[[T], bool]) -> int:
        doomed = [key for key, item in self._items.items() if predicate(item)]
        for key in doomed:
            del self._items[key]
        return len(doomed)

    def list(self) -> List[T]:
        return list(self._items.values())

    def filter(self, predicate: Callable[[T], bool]) -> List[T]:
        return [item for item in self._items.values() if predicate(item)]


def _normalize(value: Optional[str]) -> str:
    return (value or "").strip().casefold()


class AppDatabase:
    """Owns the customer, invoice and phone number collections.

    Every public method runs under one re-entrant lock, so claiming an id and
    storing the record it belongs to happen as a single step. Records handed
    out are copies; mutating them never changes what is stored.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self.customers: InMemoryRepository[Customer] = InMemoryRepository()
        self.invoices: InMemoryRepository[Invoice] = InMemoryRepository()
        self.phone_numbers: InMemoryRepository[PhoneNumber] = InMemoryRepository()

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------
    def _populated(self, customer: Customer) -> Customer:
        invoices = self._invoices_for(customer.id)
        return Customer(
            id=customer.id,
            name=customer.name,
            email=customer.email,
            invoices=invoices,
            phone_numbers=self._phones_for(customer.id),
            balance=sum((invoice.amount for invoice in invoices), Decimal("0")),
        )

    def find_customer(self, customer_id: int) -> Optional[Customer]:
        if customer_id <= 0:
            return None
        with self._lock:
            customer = self.customers.find(customer_id)
            return self._populated(customer) if customer else None

    def find_customer_by_name(self, name: Optional[str]) -> Optional[Customer]:
        wanted = _normalize(name)
        if not wanted:
            return None
        with self._lock:
            customer = self.customers.first(lambda c: _normalize(c.name) == wanted)
            return self._populated(customer) if customer else None

    def find_customer_by_email(self, email: Optional[str]) -> Optional[Customer]:
        wanted = _normalize(email)
        if not wanted:
            return None
        with self._lock:
            customer = self.customers.first(lambda c: _normalize(c.email) == wanted)
            return self._populated(customer) if customer else None

    def duplicate_customer_fields(
        self, name: Optional[str], email: Optional[str], exclude_id: int = 0
    ) -> Dict[str, int]:
        """Map each colliding field to the id of the other customer holding it."""

        wanted_name = _normalize(name)
        wanted_email = _normalize(email)
        conflicts: Dict[str, int] = {}
        with self._lock:
            for customer in self.customers:
                if customer.id == exclude_id:
                    continue
                if wanted_name and "name" not in conflicts and _normalize(customer.name) == wanted_name:
                    conflicts["name"] = customer.id
                if wanted_email and "email" not in conflicts and _normalize(customer.email) == wanted_email:
                    conflicts["email"] = customer.id
        return conflicts

    def is_duplicate_customer(
        self, name: Optional[str], email: Optional[str], exclude_id: int = 0
    ) -> bool:
        return bool(self.duplicate_customer_fields(name, email, exclude_id))

    def insert_customer(self, customer: Customer) -> Customer:
        """Store ``customer`` under a fresh id together with its embedded children.

        Any id supplied by the caller is ignored, and every embedded invoice
        and phone number gets its own id and the new customer's id.
        """

        if any(not (i.invoice_number or "").strip() for i in customer.invoices):
            raise InvalidRecordError("Embedded invoices need an invoice number")
        with self._lock:
            customer_id = self.customers.next_id()
            self.customers.add(
                customer_id,
                Customer(id=customer_id, name=customer.name, email=customer.email),
            )
            for invoice in customer.invoices:
                self._store_invoice(replace(invoice, customer_id=customer_id))
            for phone in customer.phone_numbers:
                self._store_phone(replace(phone, customer_id=customer_id))
            return self._populated(self.customers.get(customer_id))

    def update_customer(self, customer_id: int, patch: Customer) -> bool:
        if customer_id <= 0:
            return False
        with self._lock:
            existing = self.customers.find(customer_id)
            if existing is None:
                return False
            existing.name = patch.name
            existing.email = patch.email
            return True

    def delete_customer(self, customer_id: int) -> bool:
        if customer_id <= 0:
            return False
        with self._lock:
            if customer_id not in self.customers:
                return False
            self.customers.remove(customer_id)
            self.invoices.remove_where(lambda i: i.customer_id == customer_id)
            self.phone_numbers.remove_where(lambda p: p.customer_id == customer_id)
            return True

    def list_customers(self) -> List[Customer]:
        with self._lock:
            return [self._populated(customer) for customer in self.customers]

    def customer_count(self) -> int:
        with self._lock:
            return len(self.customers)

    # ------------------------------------------------------------------
    # Invoices
    # ------------------------------------------------------------------
    def _invoices_for(self, customer_id: int) -> List[Invoice]:
        return [replace(i) for i in self.invoices.filter(lambda i: i.customer_id == customer_id)]

    def _store_invoice(self, invoice: Invoice) -> Invoice:
        if invoice.customer_id <= 0 or not (invoice.invoice_number or "").strip():
            raise InvalidRecordError(
                "Invoices need a positive customer id and an invoice number"
            )
        stored = replace(invoice, id=self.invoices.next_id())
        self.invoices.add(stored.id, stored)
        return replace(stored)

    def find_invoice(self, invoice_number: Optional[str]) -> Optional[Invoice]:
        if not (invoice_number or "").strip():
            return None
        with self._lock:
            invoice = self.invoices.first(lambda i: i.invoice_number == invoice_number)
            return replace(invoice) if invoice else None

    def find_invoice_by_id(self, invoice_id: int) -> Optional[Invoice]:
        if invoice_id <= 0:
            return None
        with self._lock:
            invoice = self.invoices.find(invoice_id)
            return replace(invoice) if invoice else None

    def insert_invoice(self, invoice: Invoice) -> Invoice:
        """Store ``invoice`` under a fresh id.

        Customer existence and invoice number uniqueness are the caller's
        business; only a non-positive customer id or a blank number is
        refused here.
        """

        with self._lock:
            return self._store_invoice(invoice)

    def update_invoice(self, invoice_id: int, patch: Invoice) -> bool:
        if invoice_id <= 0:
            return False
        with self._lock:
            existing = self.invoices.find(invoice_id)
            if existing is None:
                return False
            existing.invoice_number = patch.invoice_number
            existing.invoice_date = patch.invoice_date
            existing.amount = patch.amount
            return True

    def delete_invoice(self, invoice_number: Optional[str]) -> bool:
        with self._lock:
            invoice = self.find_invoice(invoice_number)
            if invoice is None:
                return False
            self.invoices.remove(invoice.id)
            return True

    def delete_invoice_by_id(self, invoice_id: int) -> bool:
        if invoice_id <= 0:
            return False
        with self._lock:
            if invoice_id not in self.invoices:
                return False
            self.invoices.remove(invoice_id)
            return True

    def delete_invoices_by_customer(self, customer_id: int) -> bool:
        if customer_id <= 0:
            return False
        with self._lock:
            self.invoices.remove_where(lambda i: i.customer_id == customer_id)
            return True

    def list_invoices(self) -> List[Invoice]:
        with self._lock:
            return [replace(invoice) for invoice in self.invoices]

    def list_invoices_by_customer(self, customer_id: int) -> List[Invoice]:
        if customer_id <= 0:
            return []
        with self._lock:
            return self._invoices_for(customer_id)

    def invoice_count(self) -> int:
        with self._lock:
            return len(self.invoices)

    # ------------------------------------------------------------------
    # Phone numbers
    # ------------------------------------------------------------------
    def _phones_for(self, customer_id: int) -> List[PhoneNumber]:
        return [replace(p) for p in self.phone_numbers.filter(lambda p: p.customer_id == customer_id)]

    def _store_phone(self, phone: PhoneNumber) -> PhoneNumber:
        if phone.customer_id <= 0:
            raise InvalidRecordError("Phone numbers need a positive customer id")
        stored = replace(phone, id=self.phone_numbers.next_id())
        self.phone_numbers.add(stored.id, stored)
        return replace(stored)

    def find_phone_number(self, phone_id: int) -> Optional[PhoneNumber]:
        if phone_id <= 0:
            return None
        with self._lock:
            phone = self.phone_numbers.find(phone_id)
            return replace(phone) if phone else None

    def insert_phone_number(self, phone: PhoneNumber) -> PhoneNumber:
        with self._lock:
            return self._store_phone(phone)

    def update_phone_number(self, phone_id: int, patch: PhoneNumber) -> bool:
        if phone_id <= 0:
            return False
        with self._lock:
            existing = self.phone_numbers.find(phone_id)
            if existing is None:
                return False
            existing.type = patch.type
            existing.number = patch.number
            return True

    def delete_phone_number(self, phone_id: int) -> bool:
        if phone_id <= 0:
            return False
        with self._lock:
            if phone_id not in self.phone_numbers:
                return False
            self.phone_numbers.remove(phone_id)
            return True

    def delete_phone_numbers_by_customer(self, customer_id: int) -> bool:
        if customer_id <= 0:
            return False
        with self._lock:
            self.phone_numbers.remove_where(lambda p: p.customer_id == customer_id)
            return True

    def list_phone_numbers(self) -> List[PhoneNumber]:
        with self._lock:
            return [replace(phone) for phone in self.phone_numbers]

    def list_phone_numbers_by_customer(self, customer_id: int) -> List[PhoneNumber]:
        if customer_id <= 0:
            return []
        with self._lock:
            return self._phones_for(customer_id)

    def phone_number_count(self) -> int:
        with self._lock:
            return len(self.phone_numbers)


__all__ = [
    "InMemoryRepository",
    "AppDatabase",
    "RepositoryError",
    "DuplicateRecordError",
    "RecordNotFoundError",
    "InvalidRecordError",
]
