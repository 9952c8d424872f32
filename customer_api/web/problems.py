"""Rendering of RFC 7807 Problem Details responses."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic.alias_generators import to_camel

from ..errors import ApiProblem, ProblemTypes

logger = logging.getLogger(__name__)

PROBLEM_MEDIA_TYPE = "application/problem+json"
TRACE_HEADER = "X-Trace-Id"
NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}

STATUS_TITLES = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    409: "Conflict",
    415: "Unsupported Media Type",
    500: "Internal Server Error",
}


def trace_id_for(request: Request) -> str:
    """Return the request's trace id, assigning one on first use."""

    trace_id = getattr(request.state, "trace_id", None)
    if trace_id is None:
        trace_id = uuid.uuid4().hex
        request.state.trace_id = trace_id
    return trace_id


def problem_type_for(status: int) -> str:
    if status == 401:
        return ProblemTypes.UNAUTHORIZED
    if status == 404:
        return ProblemTypes.RESOURCE_NOT_FOUND
    if status == 409:
        return ProblemTypes.DUPLICATE_RESOURCE
    if status >= 500:
        return ProblemTypes.INTERNAL_ERROR
    return ProblemTypes.VALIDATION_FAILED


def problem_response(
    request: Request,
    *,
    status: int,
    title: str,
    detail: str,
    problem_type: Optional[str] = None,
    errors: Optional[Mapping[str, List[str]]] = None,
    extensions: Optional[Mapping[str, Any]] = None,
    headers: Optional[Mapping[str, str]] = None,
) -> JSONResponse:
    trace_id = trace_id_for(request)
    body: Dict[str, Any] = {
        "type": problem_type or problem_type_for(status),
        "title": title,
        "status": status,
        "detail": detail,
        "instance": f"{request.method} {request.url.path}",
        "traceId": trace_id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    body.update(extensions or {})
    if errors:
        body["errors"] = {field: list(messages) for field, messages in errors.items()}
    response_headers = {**NO_CACHE_HEADERS, TRACE_HEADER: trace_id, **(headers or {})}
    return JSONResponse(
        status_code=status,
        content=jsonable_encoder(body),
        media_type=PROBLEM_MEDIA_TYPE,
        headers=response_headers,
    )


def render_problem(request: Request, problem: ApiProblem) -> JSONResponse:
    log = logger.error if problem.status >= 500 else logger.warning
    log(
        "%s %s rejected with %d %s (trace %s): %s",
        request.method,
        request.url.path,
        problem.status,
        problem.title,
        trace_id_for(request),
        problem.detail,
    )
    return problem_response(
        request,
        status=problem.status,
        title=problem.title,
        detail=problem.detail,
        problem_type=problem.problem_type,
        errors=problem.errors,
        extensions=problem.extensions,
    )


def error_field_name(loc: Iterable[Any]) -> str:
    """Turn a pydantic error location into ``invoices[0].invoiceNumber`` form."""

    parts = list(loc)
    if parts and parts[0] in {"body", "path", "query", "header"}:
        source = parts.pop(0)
        if source != "body":
            parts = [to_camel(str(part)) if isinstance(part, str) else part for part in parts]
    name = ""
    for part in parts:
        if isinstance(part, int):
            name += f"[{part}]"
        else:
            name += f".{part}" if name else str(part)
    return name or "body"


def error_message(error: Mapping[str, Any]) -> str:
    ctx = error.get("ctx") or {}
    if error.get("type") == "value_error" and "error" in ctx:
        return str(ctx["error"])
    if error.get("type") == "missing":
        field = error_field_name(error.get("loc", ()))
        return f"The {field} field is required."
    return str(error.get("msg", "Invalid value"))


def collect_validation_errors(errors: Iterable[Mapping[str, Any]]) -> Dict[str, List[str]]:
    collected: Dict[str, List[str]] = {}
    for error in errors:
        field = error_field_name(error.get("loc", ()))
        collected.setdefault(field, []).append(error_message(error))
    return collected


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "TRACE_HEADER",
    "NO_CACHE_HEADERS",
    "STATUS_TITLES",
    "trace_id_for",
    "problem_type_for",
    "problem_response",
    "render_problem",
    "error_field_name",
    "collect_validation_errors",
]
