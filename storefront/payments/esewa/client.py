"""eSewa payment gateway client

Overview
--------
Thin client for the eSewa ePay (v1) redirect flow:

1. ``build_payment_url`` produces the checkout URL the customer is sent to.
   It carries the amount, the order id (``pid``), the merchant code and the
   success/failure callback URLs.
2. After payment eSewa redirects the customer to the success callback with
   ``oid``, ``amt`` and ``refId``. ``verify`` posts those back to the
   transaction verification endpoint, which answers with a small XML
   document whose ``response_code`` is ``Success`` for a genuine payment.

Errors
------
Transport failures and non-2xx answers from the verification endpoint are
raised as ``EsewaApiError``. A well-formed "failure" answer is not an error:
``verify`` simply returns ``False``.

Usage
-----
>>> client = EsewaClient(payment_url=..., verify_url=..., merchant_code="EPAYTEST")
>>> url = client.build_payment_url(amount=115.0, order_id=42, success_url=su, failure_url=fu)
>>> ok = await client.verify(amount="115.00", order_id="42", reference_id="000AE01")
"""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlencode

import httpx

from .errors import EsewaApiError

SUCCESS_MARKER = "<response_code>Success</response_code>"


def format_amount(amount: float) -> str:
    return f"{amount:.2f}"


class EsewaClient:
    """HTTP client for the eSewa checkout and verification endpoints."""

    def __init__(
        self,
        *,
        payment_url: str,
        verify_url: str,
        merchant_code: str,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Create an eSewa client.

        Args:
            payment_url: Checkout page customers are redirected to.
            verify_url: Transaction verification endpoint.
            merchant_code: Merchant code (``scd``) issued by eSewa.
            timeout: Default HTTP timeout for the internal client.
            client: Optional preconfigured ``httpx.AsyncClient`` to use.
        """
        self.payment_url = payment_url
        self.verify_url = verify_url
        self.merchant_code = merchant_code
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._logger = logging.getLogger(__name__)

    def build_payment_url(self, *, amount: float, order_id: int | str, success_url: str, failure_url: str) -> str:
        """Build the checkout URL for an order.

        Service and delivery charges and tax are already folded into
        ``amount``, so they are sent as zero and ``tAmt`` equals ``amt``.

        Args:
            amount: Total amount to charge.
            order_id: Order id, sent as the product id (``pid``).
            success_url: Callback eSewa redirects to after a payment.
            failure_url: Callback eSewa redirects to on failure or cancellation.

        Returns:
            Absolute checkout URL.
        """
        total = format_amount(amount)
        params = {
            "amt": total,
            "psc": 0,
            "pdc": 0,
            "txAmt": 0,
            "tAmt": total,
            "pid": str(order_id),
            "scd": self.merchant_code,
            "su": success_url,
            "fu": failure_url,
        }
        return f"{self.payment_url}?{urlencode(params)}"

    async def verify(self, *, amount: str, order_id: str, reference_id: str) -> bool:
        """Ask eSewa whether a payment really happened.

        Args:
            amount: Amount reported in the callback (``amt``).
            order_id: Order id reported in the callback (``oid``).
            reference_id: eSewa transaction reference (``refId``).

        Returns:
            True if eSewa confirms the transaction.

        Raises:
            EsewaApiError: If the endpoint is unreachable or answers with an HTTP error.
        """
        params = {"amt": amount, "scd": self.merchant_code, "rid": reference_id, "pid": order_id}
        try:
            response = await self._client.post(self.verify_url, params=params)
        except httpx.HTTPError as e:
            self._logger.error("eSewa verification request failed: %s", e)
            raise EsewaApiError(f"eSewa verification request failed: {e}") from e

        if response.status_code >= 400:
            self._logger.warning("eSewa verification returned HTTP %s", response.status_code)
            raise EsewaApiError(
                "eSewa verification returned an error",
                status_code=response.status_code,
                details=response.text,
            )

        verified = SUCCESS_MARKER in response.text
        self._logger.info("eSewa verification for order %s: %s", order_id, "success" if verified else "failure")
        return verified

    async def aclose(self) -> None:
        await self._client.aclose()
