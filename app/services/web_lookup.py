import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from app.core.exceptions import LookupFailure, NotAvailable
from app.schemas.scan import WebProduct

logger = logging.getLogger(__name__)


def normalize_price(price: Optional[str]) -> Optional[str]:
    """"12,50" -> "12.50"; blank stays None."""
    if price is None:
        return None
    price = price.strip()
    return price.replace(",", ".") if price else None


class WebProductLookup:
    """Client for the third-party product lookup (GET /fetch-product)."""

    def __init__(self, base_url: str, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def fetch(self, barcode: str) -> WebProduct:
        """
        Raises NotAvailable on a 404 or a ``notAvailable`` flag, LookupFailure on
        anything else that is not a well-formed product.
        """
        url = f"{self.base_url}/fetch-product"
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(url, params={"barcode": barcode})
            except httpx.TimeoutException as e:
                logger.warning("Web lookup timed out for %s", barcode)
                raise LookupFailure(f"Web lookup timed out after {self.timeout}s") from e
            except httpx.RequestError as e:
                logger.error(f"Web lookup error for {barcode}: {e}")
                raise LookupFailure(f"Web lookup unreachable: {e}") from e

        if response.status_code == 404:
            raise NotAvailable(f"Product {barcode} not available")
        if not response.is_success:
            raise LookupFailure(f"Web lookup returned HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise LookupFailure("Web lookup returned a non-JSON body") from e

        if isinstance(payload, dict) and payload.get("notAvailable") is True:
            raise NotAvailable(f"Product {barcode} not available")

        try:
            product = WebProduct.model_validate(payload)
        except ValidationError as e:
            raise LookupFailure(f"Web lookup returned malformed product data: {e.error_count()} error(s)") from e

        return product
