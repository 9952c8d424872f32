"""Request-scoped accessors for objects stored on the application."""

from __future__ import annotations

from fastapi import Request

from ..services import CustomerService


def get_service(request: Request) -> CustomerService:
    return request.app.state.customer_service


__all__ = ["get_service"]
