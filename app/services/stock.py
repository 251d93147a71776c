import logging

from app.core.exceptions import ProductNotFound, StoreError
from app.schemas.product import ProductRecord
from app.services.stores import ProductStore

logger = logging.getLogger(__name__)


async def adjust_stock(product: ProductRecord, delta: int, store: ProductStore) -> ProductRecord:
    """
    Add (delta > 0) or remove (delta < 0) stock. Removals stop at zero.

    The new stock is written first; the caller's product is left untouched
    and an updated copy is returned only once the write succeeded.
    """
    if product.id is None:
        raise ProductNotFound("Product must be saved before its stock can be adjusted")

    new_stock = max(0, product.stock + delta)
    try:
        await store.update_stock(product.id, new_stock)
    except (StoreError, ProductNotFound):
        raise
    except Exception as e:
        raise StoreError(f"Failed to update stock: {e}") from e

    updated = product.model_copy(update={"stock": new_stock})
    logger.info(
        "Stock for %s: %d -> %d%s",
        product.id, product.stock, new_stock, " (LOW)" if updated.is_low_stock else "",
    )
    return updated
