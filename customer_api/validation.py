"""Field rules shared by the request schemas and the service layer.

Each ``*_errors`` function returns the list of messages for one field; an
empty list means the value is acceptable.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional

from .domain import PhoneType

INVOICE_NUMBER_PATTERN = re.compile(r"^INV")


def invoice_number_errors(value: Optional[str]) -> List[str]:
    if value is None or not value.strip():
        return ["Invoice number is required"]
    # Literal prefix; "INVOICE-1" is as valid as "INV-1".
    if not INVOICE_NUMBER_PATTERN.match(value):
        return ["Invoice number must start with 'INV'"]
    return []


def phone_type_errors(value: Optional[str]) -> List[str]:
    if value is None or not value.strip():
        return ["Phone type is required"]
    if value not in PhoneType.values():
        return [f"Phone type must be one of: {', '.join(PhoneType.values())}"]
    return []


def positive_id_errors(value: Optional[int], label: str = "Customer ID") -> List[str]:
    if value is None or value <= 0:
        return [f"{label} must be greater than 0"]
    return []


def collect_errors(**fields: List[str]) -> Dict[str, List[str]]:
    """Drop the fields without messages from a ``field -> messages`` mapping."""

    return {name: messages for name, messages in fields.items() if messages}


__all__ = [
    "INVOICE_NUMBER_PATTERN",
    "invoice_number_errors",
    "phone_type_errors",
    "positive_id_errors",
    "collect_errors",
]
