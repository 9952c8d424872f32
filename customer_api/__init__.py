"""Customer, invoice and phone number REST API with an in-memory store."""

from .domain import Customer, Invoice, PhoneNumber, PhoneType
from .repository import AppDatabase, InMemoryRepository
from .services import CustomerService

__all__ = [
    "Customer",
    "Invoice",
    "PhoneNumber",
    "PhoneType",
    "AppDatabase",
    "InMemoryRepository",
    "CustomerService",
]
