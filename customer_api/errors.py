"""Failure taxonomy shared by the service and web layers.

Each exception maps onto one RFC 7807 Problem Details response. Extension
members are passed as keyword arguments and rendered verbatim, so they use
the API's camelCase names.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

PROBLEM_BASE_URI = "https://yourapi.com/problems/"


class ProblemTypes:
    """Problem type URIs used across the API."""

    RESOURCE_NOT_FOUND = PROBLEM_BASE_URI + "resource-not-found"
    VALIDATION_FAILED = PROBLEM_BASE_URI + "validation-failed"
    DUPLICATE_RESOURCE = PROBLEM_BASE_URI + "duplicate-resource"
    UNAUTHORIZED = PROBLEM_BASE_URI + "unauthorized"
    INTERNAL_ERROR = PROBLEM_BASE_URI + "internal-error"


class ApiProblem(Exception):
    """Base class for failures that are reported to the caller."""

    status: int = 500
    problem_type: str = ProblemTypes.INTERNAL_ERROR

    def __init__(
        self,
        title: str,
        detail: str,
        *,
        errors: Optional[Mapping[str, List[str]]] = None,
        **extensions: Any,
    ) -> None:
        super().__init__(f"{title}: {detail}")
        self.title = title
        self.detail = detail
        self.errors: Optional[Dict[str, List[str]]] = dict(errors) if errors else None
        self.extensions: Dict[str, Any] = extensions


class ValidationFailure(ApiProblem):
    status = 400
    problem_type = ProblemTypes.VALIDATION_FAILED


class Unauthorized(ApiProblem):
    status = 401
    problem_type = ProblemTypes.UNAUTHORIZED


class NotFound(ApiProblem):
    status = 404
    problem_type = ProblemTypes.RESOURCE_NOT_FOUND


class Conflict(ApiProblem):
    status = 409
    problem_type = ProblemTypes.DUPLICATE_RESOURCE


class InternalFailure(ApiProblem):
    status = 500
    problem_type = ProblemTypes.INTERNAL_ERROR


__all__ = [
    "PROBLEM_BASE_URI",
    "ProblemTypes",
    "ApiProblem",
    "ValidationFailure",
    "Unauthorized",
    "NotFound",
    "Conflict",
    "InternalFailure",
]
