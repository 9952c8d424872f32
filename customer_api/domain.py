"""Core data structures for the customer, invoice and phone number API."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional


class PhoneType(str, Enum):
    """Kinds of phone number a customer can register."""

    MOBILE = "Mobile"
    WORK = "Work"
    DIRECT_DIAL = "DirectDial"

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]


@dataclass(slots=True)
class Invoice:
    """An invoice raised against a customer."""

    id: int
    invoice_number: str
    customer_id: int
    invoice_date: datetime
    amount: Decimal = Decimal("0")


@dataclass(slots=True)
class PhoneNumber:
    """A phone number belonging to a customer."""

    id: int
    customer_id: int
    type: PhoneType
    number: str = ""


@dataclass(slots=True)
class Customer:
    """Customer master data.

    ``invoices``, ``phone_numbers`` and ``balance`` are filled in by the
    repository whenever a customer is read; the stored record keeps them
    empty.
    """

    id: int
    name: Optional[str] = None
    email: Optional[str] = None
    invoices: List[Invoice] = field(default_factory=list)
    phone_numbers: List[PhoneNumber] = field(default_factory=list)
    balance: Decimal = Decimal("0")


__all__ = [
    "PhoneType",
    "Invoice",
    "PhoneNumber",
    "Customer",
]
