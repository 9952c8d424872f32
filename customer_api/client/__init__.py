"""Console client for the customer API."""

from .api_client import ApiClient, ApiRequestError, ProblemDetails
from .demo import log_problem, run_demo

__all__ = ["ApiClient", "ApiRequestError", "ProblemDetails", "log_problem", "run_demo"]
