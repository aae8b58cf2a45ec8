"""
eSewa payment gateway integration.

Builds checkout redirect URLs and verifies completed transactions.
"""

from .client import EsewaClient, SUCCESS_MARKER
from .errors import EsewaApiError

__all__ = ["EsewaApiError", "EsewaClient", "SUCCESS_MARKER"]
