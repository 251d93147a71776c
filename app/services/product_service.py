import logging
from typing import Optional

from pydantic import ValidationError

from app.core.exceptions import InvalidInput, ProductNotFound
from app.schemas.product import ProductBase, ProductRecord, ProductUpdate
from app.schemas.scan import HistoryEntry
from app.services.history import HistoryCache
from app.services.stores import ProductStore

logger = logging.getLogger(__name__)


async def _remember(history: HistoryCache, saved: ProductRecord) -> None:
    # The product is already persisted; a broken history slot must not fail the save.
    try:
        await history.record(HistoryEntry(product=saved))
    except OSError:
        logger.exception("Could not record product %s in scan history", saved.id)


async def save_product(
    data: ProductBase,
    store: ProductStore,
    history: HistoryCache,
    actor: Optional[str] = None,
) -> ProductRecord:
    """
    Persist a confirmed draft. A product already stored under the same
    barcode is updated in place (its id is kept); otherwise it is inserted.
    The saved product is then recorded in the scan history.
    """
    if not data.name or not data.name.strip():
        raise InvalidInput("Product name is required")

    existing = await store.get_by_barcode(data.barcode) if data.barcode else None
    if existing:
        logger.info("Updating existing product %s", existing.id)
        record = ProductRecord(
            **data.model_dump(),
            id=existing.id,
            created_at=existing.created_at,
            created_by=existing.created_by,
            updated_by=actor,
        )
        saved = await store.update(record)
    else:
        record = ProductRecord(**data.model_dump(), created_by=actor, updated_by=actor)
        saved = await store.insert(record)

    await _remember(history, saved)
    return saved


async def update_product(
    product_id,
    changes: ProductUpdate,
    store: ProductStore,
    history: HistoryCache,
    actor: Optional[str] = None,
) -> ProductRecord:
    current = await store.get(product_id)
    if not current:
        raise ProductNotFound(f"Product {product_id} not found")

    data = changes.model_dump(exclude_unset=True)
    if "name" in data and not (data["name"] or "").strip():
        raise InvalidInput("Product name is required")

    try:
        record = ProductRecord.model_validate({**current.model_dump(), **data, "updated_by": actor})
    except ValidationError as e:
        raise InvalidInput(f"Invalid product update: {e.errors()[0]['msg']}") from e
    saved = await store.update(record)
    await _remember(history, saved)
    return saved
