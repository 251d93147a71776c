"""
Barcode resolution: our own store first, then the web lookup, then a
manual-entry draft seeded with the operator's defaults.
"""
import asyncio
import logging
from typing import List, Optional, Union

from app.core.exceptions import InvalidInput, LookupFailure, NotAvailable, StoreError
from app.schemas.product import ProductRecord
from app.schemas.scan import BatchItem, BatchResult, Draft, Found, WebProduct
from app.schemas.settings import InventoryDefaults
from app.services.category_matcher import match_category
from app.services.stores import CategoryStore, ProductStore
from app.services.web_lookup import WebProductLookup, normalize_price

logger = logging.getLogger(__name__)


def seed_product(barcode: str, defaults: InventoryDefaults) -> ProductRecord:
    """Blank product pre-filled with the operator defaults. Name stays empty."""
    return ProductRecord(
        name="",
        barcode=barcode,
        price=defaults.default_selling_price,
        purchase_price=defaults.default_purchase_price,
        stock=defaults.default_stock,
        min_stock=defaults.default_min_stock,
        category_id=defaults.default_category_id,
        expiry_notification_days=defaults.default_expiry_notification_days,
    )


def describe(web: WebProduct) -> str:
    return f"Category: {web.category or 'Unknown'}, In Stock: {'Yes' if web.isInStock else 'No'}"


class BarcodeResolver:

    def __init__(self, products: ProductStore, categories: CategoryStore, web: WebProductLookup):
        self.products = products
        self.categories = categories
        self.web = web

    async def resolve(self, barcode: str, defaults: InventoryDefaults) -> Union[Found, Draft]:
        if not barcode or not barcode.strip():
            raise InvalidInput("Barcode is required")
        barcode = barcode.strip()

        # 1. Our own store is authoritative
        try:
            stored = await self.products.get_by_barcode(barcode)
        except StoreError as e:
            logger.error(f"Store lookup failed for {barcode}: {e}")
            return self._failed(barcode, defaults, f"Product store unavailable: {e}")
        if stored:
            return Found(barcode=barcode, product=stored)

        # 2. Web lookup
        try:
            web = await self.web.fetch(barcode)
        except NotAvailable:
            logger.info("Barcode %s not available on the web", barcode)
            return Draft(
                barcode=barcode,
                product=seed_product(barcode, defaults),
                source="web",
                not_available=True,
                diagnostic=f"Product with barcode {barcode} not found",
            )
        except LookupFailure as e:
            return self._failed(barcode, defaults, str(e))
        except Exception as e:
            logger.exception("Unexpected web lookup error for %s", barcode)
            return self._failed(barcode, defaults, f"Unexpected error: {e}")

        # 3. Merge external data with the operator defaults
        web = web.model_copy(update={"price": normalize_price(web.price)})
        try:
            known = await self.categories.list()
        except StoreError as e:
            logger.warning("Category list unavailable, using default category: %s", e)
            known = []
        category_id = match_category(web.category, known) or defaults.default_category_id

        draft = ProductRecord(
            name=web.name or "",
            barcode=barcode,
            # Selling price always comes from the operator's settings
            price=defaults.default_selling_price,
            purchase_price=defaults.default_purchase_price,
            stock=defaults.default_stock,
            min_stock=defaults.default_min_stock,
            category_id=category_id,
            quantity=web.quantity,
            image=web.image,
            description=describe(web),
            expiry_notification_days=defaults.default_expiry_notification_days,
        )
        return Draft(barcode=barcode, product=draft, source="web", web_product=web)

    def _failed(self, barcode: str, defaults: InventoryDefaults, reason: str) -> Draft:
        return Draft(
            barcode=barcode,
            product=seed_product(barcode, defaults),
            source="error",
            not_available=False,
            diagnostic=reason or "Product lookup failed",
        )

    async def resolve_batch(
        self,
        barcodes: List[str],
        defaults: InventoryDefaults,
        max_barcodes: int = 100,
        concurrency: int = 5,
    ) -> BatchResult:
        if not barcodes:
            raise InvalidInput("Valid barcodes array is required")

        todo = barcodes[:max_barcodes]
        if len(barcodes) > max_barcodes:
            logger.warning("Batch truncated to %d of %d barcodes", max_barcodes, len(barcodes))

        results: List[BatchItem] = []
        for i in range(0, len(todo), concurrency):
            chunk = todo[i:i + concurrency]
            results.extend(await asyncio.gather(*(self._resolve_item(b, defaults) for b in chunk)))

        found = sum(1 for r in results if r.success)
        logger.info("Batch resolved %d barcodes: %d found, %d not found", len(results), found, len(results) - found)
        return BatchResult(total=len(todo), found=found, not_found=len(results) - found, results=results)

    async def _resolve_item(self, barcode: str, defaults: InventoryDefaults) -> BatchItem:
        try:
            outcome = await self.resolve(barcode, defaults)
        except InvalidInput as e:
            return BatchItem(barcode=barcode, success=False, error=str(e))

        if isinstance(outcome, Found) or outcome.web_product is not None:
            return BatchItem(barcode=barcode, success=True, outcome=outcome)
        return BatchItem(barcode=barcode, success=False, outcome=outcome, error=outcome.diagnostic)
