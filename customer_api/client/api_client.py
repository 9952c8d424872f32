"""HTTP client for the customer API."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-Key"
PROBLEM_FIELDS = {"type", "title", "status", "detail", "instance", "traceId", "errors"}


@dataclass(slots=True)
class ProblemDetails:
    """Parsed RFC 7807 error body."""

    status: int
    type: Optional[str] = None
    title: Optional[str] = None
    detail: Optional[str] = None
    instance: Optional[str] = None
    trace_id: Optional[str] = None
    errors: Dict[str, List[str]] = field(default_factory=dict)
    extensions: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_json(cls, payload: Any, status: int) -> "ProblemDetails":
        if not isinstance(payload, dict):
            return cls(status=status, detail=str(payload) if payload else None)
        errors = payload.get("errors") or {}
        return cls(
            status=int(payload.get("status") or status),
            type=payload.get("type"),
            title=payload.get("title"),
            detail=payload.get("detail"),
            instance=payload.get("instance"),
            trace_id=payload.get("traceId"),
            errors={key: list(value) for key, value in errors.items()},
            extensions={k: v for k, v in payload.items() if k not in PROBLEM_FIELDS},
        )


class ApiRequestError(RuntimeError):
    """Raised for any non-success response from the API."""

    def __init__(self, method: str, endpoint: str, problem: ProblemDetails) -> None:
        if problem.title:
            message = f"{method} {endpoint} failed: {problem.title} - {problem.detail}"
        else:
            message = f"{method} {endpoint} failed with status code {problem.status}"
        super().__init__(message)
        self.method = method
        self.endpoint = endpoint
        self.problem = problem

    @property
    def status_code(self) -> int:
        return self.problem.status


class ApiClient:
    """Thin JSON wrapper around :class:`httpx.Client`.

    ``delete`` sends the API key header; the other verbs are anonymous. An
    existing ``http_client`` can be supplied, in which case it is used as-is
    and left open by :meth:`close`.
    """

    def __init__(
        self,
        base_url: str,
        api_token: Optional[str] = None,
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_token = api_token
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )
        logger.info("ApiClient initialised with base URL %s", self.base_url)

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def get(self, endpoint: str) -> Any:
        return self._request("GET", endpoint)

    def post(self, endpoint: str, data: Any) -> Any:
        return self._request("POST", endpoint, json=data)

    def put(self, endpoint: str, data: Any) -> Any:
        return self._request("PUT", endpoint, json=data)

    def delete(self, endpoint: str) -> bool:
        headers = {}
        if self.api_token:
            headers[API_KEY_HEADER] = self.api_token
        else:
            logger.warning("No API token configured for DELETE %s", endpoint)
        self._request("DELETE", endpoint, headers=headers)
        return True

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        logger.debug("%s %s%s", method, self.base_url, endpoint)
        try:
            response = self._http.request(method, endpoint, **kwargs)
        except httpx.HTTPError:
            logger.error("Network error during %s %s", method, endpoint)
            raise
        if response.is_success:
            logger.info("Response: %d %s", response.status_code, response.reason_phrase)
            if not response.content:
                return None
            return response.json()
        logger.warning("Response: %d %s", response.status_code, response.reason_phrase)
        raise ApiRequestError(method, endpoint, self._problem_from(response))

    @staticmethod
    def _problem_from(response: httpx.Response) -> ProblemDetails:
        try:
            payload = response.json()
        except ValueError:
            payload = response.text
        return ProblemDetails.from_json(payload, response.status_code)


__all__ = ["ApiClient", "ApiRequestError", "ProblemDetails", "API_KEY_HEADER"]
