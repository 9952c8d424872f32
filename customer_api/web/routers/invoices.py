"""Invoice endpoints."""

from __future__ import annotations

import logging
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Body, Depends, Request, Response

from ...errors import ValidationFailure
from ...services import CustomerService
from ..dependencies import get_service
from ..schemas import InvoiceCreate, InvoiceOut
from ..security import require_api_key

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


@router.get("", response_model=List[InvoiceOut])
async def list_invoices(service: CustomerService = Depends(get_service)):
    return [InvoiceOut.model_validate(invoice) for invoice in service.list_invoices()]


# Registered before "/{customer_id}/{invoice_number}", which would otherwise
# capture "customer" as a customer id.
@router.get("/customer/{customer_id}", response_model=List[InvoiceOut])
async def list_invoices_for_customer(
    customer_id: int, service: CustomerService = Depends(get_service)
):
    logger.debug("Fetching invoices of customer %d", customer_id)
    return [
        InvoiceOut.model_validate(invoice)
        for invoice in service.list_invoices_for_customer(customer_id)
    ]


@router.get("/{customer_id}/{invoice_number}", response_model=InvoiceOut)
async def get_invoice(
    customer_id: int, invoice_number: str, service: CustomerService = Depends(get_service)
):
    logger.debug("Fetching invoice %s of customer %d", invoice_number, customer_id)
    return InvoiceOut.model_validate(service.get_invoice(customer_id, invoice_number))


@router.post("", status_code=201, response_model=InvoiceOut)
async def create_invoice(
    request: Request,
    response: Response,
    invoice: Optional[InvoiceCreate] = Body(None),
    service: CustomerService = Depends(get_service),
):
    if invoice is None:
        raise ValidationFailure(
            "Invalid Invoice Data",
            "Invoice object is required and cannot be null.",
            errors={"invoice": ["Invoice object is required"]},
        )
    logger.debug(
        "Creating invoice %s for customer %s", invoice.invoice_number, invoice.customer_id
    )
    created = service.create_invoice(
        customer_id=invoice.customer_id,
        invoice_number=invoice.invoice_number,
        invoice_date=invoice.invoice_date,
        amount=invoice.amount,
    )
    response.headers["Location"] = invoice_location(
        request, created.customer_id, created.invoice_number
    )
    return InvoiceOut.model_validate(created)


def invoice_location(request: Request, customer_id: int, invoice_number: str) -> str:
    # Invoice numbers may contain "/", which url_for refuses for a path segment.
    base = str(request.url_for("list_invoices")).rstrip("/")
    return f"{base}/{customer_id}/{quote(invoice_number, safe='')}"


@router.delete(
    "/customer/{customer_id}",
    status_code=204,
    response_class=Response,
    dependencies=[Depends(require_api_key)],
)
async def delete_invoices_for_customer(
    customer_id: int, service: CustomerService = Depends(get_service)
):
    logger.debug("Deleting all invoices of customer %d", customer_id)
    service.delete_invoices_for_customer(customer_id)
    return Response(status_code=204)


@router.delete(
    "/{invoice_number}",
    status_code=204,
    response_class=Response,
    dependencies=[Depends(require_api_key)],
)
async def delete_invoice(invoice_number: str, service: CustomerService = Depends(get_service)):
    logger.debug("Deleting invoice %s", invoice_number)
    service.delete_invoice(invoice_number)
    return Response(status_code=204)


__all__ = ["router"]
