"""Random demo data for a freshly started API."""

from __future__ import annotations

import logging
import random
import string
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional

from .domain import Customer, Invoice, PhoneNumber, PhoneType
from .repository import AppDatabase

logger = logging.getLogger(__name__)

SURNAMES = [
    "Ashworth", "Barker", "Clarke", "Dawson", "Ellis", "Fletcher", "Gibson",
    "Harper", "Irving", "Jennings", "Kendall", "Lawson", "Marsh", "Norris",
    "Oakley", "Parker", "Quinn", "Rowe", "Sutton", "Thornton", "Underwood",
    "Vaughan", "Walsh", "Yates",
]
COMPANY_SUFFIXES = ["Ltd", "PLC", "and Sons", "Group", "Holdings", "LLP"]
EMAIL_DOMAINS = ["example.co.uk", "mail.example.com", "example.org"]
INVOICE_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


def _company_name(rng: random.Random) -> str:
    first, second = rng.sample(SURNAMES, 2)
    if rng.random() < 0.5:
        return f"{first} {rng.choice(COMPANY_SUFFIXES)}"
    return f"{first}, {second} and {rng.choice(SURNAMES)}"


def _email_for(name: str, rng: random.Random) -> str:
    local = "".join(ch for ch in name.lower() if ch.isalnum())
    return f"contact@{local}.{rng.choice(EMAIL_DOMAINS)}"


def _phone_type(rng: random.Random) -> PhoneType:
    return rng.choice(list(PhoneType))


def _uk_phone(rng: random.Random) -> str:
    if rng.random() < 0.5:
        return f"07{rng.randint(100, 999)} {rng.randint(100000, 999999)}"
    return f"0{rng.randint(11, 20)}{rng.randint(1, 9)} {rng.randint(100, 999)} {rng.randint(1000, 9999)}"


def _invoice_number(rng: random.Random) -> str:
    return "INV-" + "".join(rng.choice(INVOICE_SUFFIX_ALPHABET) for _ in range(8))


def _invoices(rng: random.Random, now: datetime, taken: set) -> List[Invoice]:
    invoices = []
    for _ in range(rng.randint(1, 4)):
        number = _invoice_number(rng)
        while number in taken:
            number = _invoice_number(rng)
        taken.add(number)
        invoices.append(
            Invoice(
                id=0,
                invoice_number=number,
                customer_id=0,
                invoice_date=now - timedelta(days=rng.randint(0, 730), minutes=rng.randint(0, 1439)),
                amount=Decimal(rng.randint(1000, 500000)) / 100,
            )
        )
    return invoices


def populate_demo_data(
    database: AppDatabase,
    customer_count: int,
    *,
    rng: Optional[random.Random] = None,
) -> int:
    """Insert ``customer_count`` random customers with invoices and phone numbers.

    Customers go through the regular insert path, so the id counters carry
    on from wherever the seed leaves them. Generated names and emails never
    collide with each other or with existing customers. Returns the number of
    customers inserted.
    """

    rng = rng or random.Random()
    now = datetime.now().replace(microsecond=0)
    taken_numbers = {invoice.invoice_number for invoice in database.list_invoices()}
    inserted = 0
    for _ in range(max(customer_count, 0)):
        name = _company_name(rng)
        email = _email_for(name, rng)
        attempt = 1
        while database.is_duplicate_customer(name, email):
            attempt += 1
            name = f"{_company_name(rng)} {attempt}"
            email = _email_for(name, rng)
        database.insert_customer(
            Customer(
                id=0,
                name=name,
                email=email,
                invoices=_invoices(rng, now, taken_numbers),
                phone_numbers=[
                    PhoneNumber(
                        id=0,
                        customer_id=0,
                        type=_phone_type(rng),
                        number=_uk_phone(rng),
                    )
                    for _ in range(rng.randint(1, 2))
                ],
            )
        )
        inserted += 1
    logger.info(
        "Seeded %d customers (%d invoices, %d phone numbers in store)",
        inserted,
        database.invoice_count(),
        database.phone_number_count(),
    )
    return inserted


__all__ = ["populate_demo_data"]
