"""Error types specific to the eSewa payment gateway layer.

Purpose:
- Provide typed exceptions thrown by ``EsewaClient``.
- Expose HTTP-oriented context (status code, response body) for diagnosis.
"""

from __future__ import annotations

from typing import Any, Optional


class EsewaApiError(Exception):
    """Base error for eSewa gateway failures.

    Args:
        message: Human-readable error description.
        status_code: Optional HTTP status code associated with the failure.
        details: Optional payload from the gateway (e.g., response text).
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details
