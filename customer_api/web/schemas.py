"""Request and response bodies exchanged over HTTP."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel

from ..domain import PhoneType
from ..validation import invoice_number_errors, phone_type_errors, positive_id_errors

# JSON amounts are numbers; cents stay exact up to about 15 significant digits.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _raise_first(messages: List[str]) -> None:
    if messages:
        raise ValueError(messages[0])


# ----------------------------------------------------------------------
# Requests
# ----------------------------------------------------------------------
class InvoiceDraft(ApiModel):
    """Invoice embedded in a customer create request."""

    invoice_number: Optional[str] = Field(default=None, validate_default=True)
    invoice_date: datetime
    amount: Decimal

    @field_validator("invoice_number")
    @classmethod
    def _check_invoice_number(cls, value: Optional[str]) -> Optional[str]:
        _raise_first(invoice_number_errors(value))
        return value


class PhoneNumberDraft(ApiModel):
    """Phone number embedded in a customer create request."""

    type: Optional[str] = Field(default=None, validate_default=True)
    number: Optional[str] = None

    @field_validator("type")
    @classmethod
    def _check_type(cls, value: Optional[str]) -> Optional[str]:
        _raise_first(phone_type_errors(value))
        return value


class InvoiceCreate(InvoiceDraft):
    customer_id: Optional[int] = Field(default=None, validate_default=True)

    @field_validator("customer_id")
    @classmethod
    def _check_customer_id(cls, value: Optional[int]) -> Optional[int]:
        _raise_first(positive_id_errors(value))
        return value


class PhoneNumberCreate(PhoneNumberDraft):
    customer_id: Optional[int] = Field(default=None, validate_default=True)

    @field_validator("customer_id")
    @classmethod
    def _check_customer_id(cls, value: Optional[int]) -> Optional[int]:
        _raise_first(positive_id_errors(value))
        return value


class CustomerIn(ApiModel):
    """Customer body for create and update; ``id`` is accepted and ignored."""

    id: Optional[int] = None
    name: Optional[str] = None
    email: Optional[str] = None
    invoices: List[InvoiceDraft] = Field(default_factory=list)
    phone_numbers: List[PhoneNumberDraft] = Field(default_factory=list)


# ----------------------------------------------------------------------
# Responses
# ----------------------------------------------------------------------
class InvoiceOut(ApiModel):
    id: int
    invoice_number: str
    customer_id: int
    invoice_date: datetime
    amount: Money


class PhoneNumberOut(ApiModel):
    id: int
    customer_id: int
    type: PhoneType
    number: str


class CustomerOut(ApiModel):
    id: int
    name: Optional[str] = None
    email: Optional[str] = None
    balance: Money
    invoices: List[InvoiceOut] = Field(default_factory=list)
    phone_numbers: List[PhoneNumberOut] = Field(default_factory=list)


class HealthOut(BaseModel):
    status: str = "Healthy"


__all__ = [
    "Money",
    "InvoiceDraft",
    "PhoneNumberDraft",
    "InvoiceCreate",
    "PhoneNumberCreate",
    "CustomerIn",
    "InvoiceOut",
    "PhoneNumberOut",
    "CustomerOut",
    "HealthOut",
]
