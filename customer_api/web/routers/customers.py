"""Customer endpoints."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Request, Response

from ...errors import ValidationFailure
from ...services import CustomerService, InvoiceDraft, PhoneNumberDraft
from ..dependencies import get_service
from ..schemas import CustomerIn, CustomerOut, InvoiceOut
from ..security import require_api_key

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/customers", tags=["customers"])


def _require_body(customer: Optional[CustomerIn]) -> CustomerIn:
    if customer is None:
        raise ValidationFailure(
            "Invalid Customer Data",
            "Customer object is required and cannot be null.",
            errors={"customer": ["Customer object is required"]},
        )
    return customer


@router.get("", response_model=List[CustomerOut])
async def list_customers(service: CustomerService = Depends(get_service)):
    return [CustomerOut.model_validate(customer) for customer in service.list_customers()]


@router.get("/{customer_id}", response_model=CustomerOut)
async def get_customer(customer_id: int, service: CustomerService = Depends(get_service)):
    logger.debug("Fetching customer %d", customer_id)
    return CustomerOut.model_validate(service.get_customer(customer_id))


@router.get("/{customer_id}/invoices", response_model=List[InvoiceOut])
async def list_customer_invoices(
    customer_id: int, service: CustomerService = Depends(get_service)
):
    logger.debug("Fetching invoices of customer %d", customer_id)
    return [InvoiceOut.model_validate(i) for i in service.list_customer_invoices(customer_id)]


@router.post("", status_code=201, response_model=CustomerOut)
async def create_customer(
    request: Request,
    response: Response,
    customer: Optional[CustomerIn] = Body(None),
    service: CustomerService = Depends(get_service),
):
    payload = _require_body(customer)
    logger.debug("Creating customer name=%r email=%r", payload.name, payload.email)
    created = service.create_customer(
        payload.name,
        payload.email,
        invoices=[
            InvoiceDraft(
                invoice_number=draft.invoice_number,
                invoice_date=draft.invoice_date,
                amount=draft.amount,
            )
            for draft in payload.invoices
        ],
        phone_numbers=[
            PhoneNumberDraft(type=phone.type, number=phone.number or "")
            for phone in payload.phone_numbers
        ],
    )
    response.headers["Location"] = str(request.url_for("get_customer", customer_id=created.id))
    return CustomerOut.model_validate(created)


@router.put("/{customer_id}", response_model=CustomerOut)
async def update_customer(
    customer_id: int,
    customer: Optional[CustomerIn] = Body(None),
    service: CustomerService = Depends(get_service),
):
    payload = _require_body(customer)
    logger.debug("Updating customer %d", customer_id)
    return CustomerOut.model_validate(
        service.update_customer(customer_id, payload.name, payload.email)
    )


@router.delete(
    "/{customer_id}",
    status_code=204,
    response_class=Response,
    dependencies=[Depends(require_api_key)],
)
async def delete_customer(customer_id: int, service: CustomerService = Depends(get_service)):
    logger.debug("Deleting customer %d", customer_id)
    service.delete_customer(customer_id)
    return Response(status_code=204)


__all__ = ["router"]
