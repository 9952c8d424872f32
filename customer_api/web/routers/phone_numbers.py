"""Phone number endpoints."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Request, Response

from ...errors import ValidationFailure
from ...services import CustomerService
from ..dependencies import get_service
from ..schemas import PhoneNumberCreate, PhoneNumberOut
from ..security import require_api_key

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/phonenumbers", tags=["phone numbers"])


@router.get("", response_model=List[PhoneNumberOut])
async def list_phone_numbers(service: CustomerService = Depends(get_service)):
    return [PhoneNumberOut.model_validate(phone) for phone in service.list_phone_numbers()]


@router.get("/customer/{customer_id}", response_model=List[PhoneNumberOut])
async def list_phone_numbers_for_customer(
    customer_id: int, service: CustomerService = Depends(get_service)
):
    logger.debug("Fetching phone numbers of customer %d", customer_id)
    return [
        PhoneNumberOut.model_validate(phone)
        for phone in service.list_phone_numbers_for_customer(customer_id)
    ]


@router.get("/{phone_id}", response_model=PhoneNumberOut)
async def get_phone_number(phone_id: int, service: CustomerService = Depends(get_service)):
    logger.debug("Fetching phone number %d", phone_id)
    return PhoneNumberOut.model_validate(service.get_phone_number(phone_id))


@router.post("", status_code=201, response_model=PhoneNumberOut)
async def create_phone_number(
    request: Request,
    response: Response,
    phone: Optional[PhoneNumberCreate] = Body(None),
    service: CustomerService = Depends(get_service),
):
    if phone is None:
        raise ValidationFailure(
            "Invalid Phone Number Data",
            "Phone number object is required and cannot be null.",
            errors={"phoneNumber": ["Phone number object is required"]},
        )
    logger.debug("Creating %s phone number for customer %s", phone.type, phone.customer_id)
    created = service.create_phone_number(
        customer_id=phone.customer_id,
        phone_type=phone.type,
        number=phone.number or "",
    )
    response.headers["Location"] = str(request.url_for("get_phone_number", phone_id=created.id))
    return PhoneNumberOut.model_validate(created)


@router.delete(
    "/customer/{customer_id}",
    status_code=204,
    response_class=Response,
    dependencies=[Depends(require_api_key)],
)
async def delete_phone_numbers_for_customer(
    customer_id: int, service: CustomerService = Depends(get_service)
):
    logger.debug("Deleting all phone numbers of customer %d", customer_id)
    service.delete_phone_numbers_for_customer(customer_id)
    return Response(status_code=204)


@router.delete(
    "/{phone_id}",
    status_code=204,
    response_class=Response,
    dependencies=[Depends(require_api_key)],
)
async def delete_phone_number(phone_id: int, service: CustomerService = Depends(get_service)):
    logger.debug("Deleting phone number %d", phone_id)
    service.delete_phone_number(phone_id)
    return Response(status_code=204)


__all__ = ["router"]
