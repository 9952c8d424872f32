"""Resource routers mounted by :func:`customer_api.web.create_app`."""

from .customers import router as customers_router
from .invoices import router as invoices_router
from .phone_numbers import router as phone_numbers_router

__all__ = ["customers_router", "invoices_router", "phone_numbers_router"]
