import logging
from typing import Awaitable, Callable, Optional

from app.schemas.product import ProductRecord
from app.services.change_feed import CategoryChange, ChangeType, ProductChange

logger = logging.getLogger(__name__)

Mailer = Callable[[str, ProductRecord], Awaitable[object]]


class StockAlertNotifier:
    """
    Presentation side of the change feed: logs every change and emails an
    alert when a product drops into low stock.
    """

    def __init__(self, recipient: Optional[str] = None, mailer: Optional[Mailer] = None):
        self.recipient = recipient
        self.mailer = mailer

    async def on_product_change(self, event: ProductChange) -> None:
        if event.event_type == ChangeType.DELETE:
            logger.info("Product deleted: %s", (event.old or {}).get("id"))
            return
        product = event.new
        if product is None:
            return

        verb = "added" if event.event_type == ChangeType.INSERT else "updated"
        logger.info("Product %s: %s", verb, product.name)

        if product.is_low_stock and self.recipient and self.mailer:
            await self.mailer(self.recipient, product)
            logger.info("Low stock alert sent for %s to %s", product.name, self.recipient)

    def on_category_change(self, event: CategoryChange) -> None:
        if event.event_type == ChangeType.DELETE:
            logger.info("Category deleted: %s", (event.old or {}).get("id"))
        elif event.new is not None:
            logger.info("Category %s: %s", event.event_type.value.lower(), event.new.name)
