import pytest

from app.core.exceptions import InvalidInput, ProductNotFound, StoreError
from app.schemas.product import ProductBase, ProductCreate, ProductUpdate
from app.services.history import HistoryCache
from app.services.product_service import save_product, update_product

from conftest import MemorySlot, make_product


async def test_new_product_is_inserted_and_recorded(product_store, history):
    saved = await save_product(ProductCreate(name="Milk 1L", barcode="6111"), product_store, history, actor="op@shop.test")

    assert saved.id in product_store.products
    assert saved.created_by == "op@shop.test"
    (entry,) = await history.list()
    assert entry.product.id == saved.id


async def test_known_barcode_updates_existing(product_store, history):
    existing = make_product(barcode="6111", name="Old name")
    product_store.products[existing.id] = existing

    saved = await save_product(ProductCreate(name="New name", barcode="6111", stock=3), product_store, history)

    assert saved.id == existing.id
    assert len(product_store.products) == 1
    assert product_store.products[existing.id].name == "New name"


async def test_name_is_required(product_store, history):
    with pytest.raises(InvalidInput):
        await save_product(ProductBase(name="  ", barcode="1"), product_store, history)
    assert await history.list() == []


def test_create_schema_rejects_blank_name():
    with pytest.raises(ValueError):
        ProductCreate(name=" ")


async def test_store_failure_does_not_touch_history(product_store, history):
    product_store.fail_writes = True
    with pytest.raises(StoreError):
        await save_product(ProductCreate(name="Milk", barcode="1"), product_store, history)
    assert await history.list() == []


async def test_partial_update(product_store, history):
    existing = make_product(stock=10, min_stock=5)
    product_store.products[existing.id] = existing

    saved = await update_product(existing.id, ProductUpdate(min_stock=20), product_store, history, actor="op")

    assert saved.min_stock == 20
    assert saved.stock == 10
    assert saved.is_low_stock is True
    assert saved.updated_by == "op"


async def test_update_unknown_product(product_store, history):
    with pytest.raises(ProductNotFound):
        await update_product(make_product().id, ProductUpdate(name="x"), product_store, history)


async def test_update_with_null_for_required_field_is_invalid(product_store, history):
    existing = make_product(price="12.99", stock=4)
    product_store.products[existing.id] = existing

    with pytest.raises(InvalidInput):
        await update_product(existing.id, ProductUpdate.model_validate({"price": None}), product_store, history)
    with pytest.raises(InvalidInput):
        await update_product(existing.id, ProductUpdate.model_validate({"stock": None}), product_store, history)
    assert product_store.products[existing.id].price == "12.99"


class FailingSlot(MemorySlot):

    def write(self, data):
        raise OSError("disk full")


async def test_history_failure_does_not_fail_save(product_store):
    history = HistoryCache(FailingSlot())

    saved = await save_product(ProductCreate(name="Milk 1L", barcode="6111"), product_store, history)

    assert saved.id in product_store.products
    assert await history.list() == []


async def test_history_failure_does_not_fail_update(product_store):
    existing = make_product(stock=1)
    product_store.products[existing.id] = existing

    saved = await update_product(existing.id, ProductUpdate(stock=7), product_store, HistoryCache(FailingSlot()))

    assert saved.stock == 7
    assert product_store.products[existing.id].stock == 7
