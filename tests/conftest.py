import os

os.environ.setdefault("MONGODB_URL", "mongodb://localhost:27017")
os.environ.setdefault("DATABASE_NAME", "scan_inventory_test")
os.environ.setdefault("SECRET_KEY", "test-secret")

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID, uuid4

import pytest

from app.core.exceptions import NotAvailable, ProductNotFound, StoreError
from app.schemas.category import CategoryRecord
from app.schemas.product import ProductRecord
from app.schemas.scan import WebProduct
from app.schemas.settings import InventoryDefaults
from app.services.history import HistoryCache


class InMemoryProductStore:

    def __init__(self, products: Optional[List[ProductRecord]] = None):
        self.products: Dict[UUID, ProductRecord] = {p.id: p for p in products or []}
        self.barcode_lookups: List[str] = []
        self.fail_writes = False

    async def get_by_barcode(self, barcode):
        self.barcode_lookups.append(barcode)
        return next((p for p in self.products.values() if p.barcode == barcode), None)

    async def get(self, product_id):
        return self.products.get(product_id)

    async def insert(self, product):
        if self.fail_writes:
            raise StoreError("insert failed")
        now = datetime.utcnow()
        saved = product.model_copy(update={"id": uuid4(), "created_at": now, "updated_at": now})
        self.products[saved.id] = saved
        return saved

    async def update(self, product):
        if self.fail_writes:
            raise StoreError("update failed")
        if product.id not in self.products:
            raise ProductNotFound(str(product.id))
        saved = product.model_copy(update={"updated_at": datetime.utcnow()})
        self.products[saved.id] = saved
        return saved

    async def update_stock(self, product_id, stock):
        if self.fail_writes:
            raise StoreError("stock write failed")
        if product_id not in self.products:
            raise ProductNotFound(str(product_id))
        self.products[product_id] = self.products[product_id].model_copy(update={"stock": stock})

    async def search(self, text=None):
        items = sorted(self.products.values(), key=lambda p: p.name)
        if not text:
            return items
        text = text.lower()
        return [p for p in items if text in p.name.lower() or (p.barcode and text in p.barcode)]

    async def list_incomplete(self):
        return [p for p in self.products.values() if not p.name or not p.image]


class InMemoryCategoryStore:

    def __init__(self, categories: Optional[List[CategoryRecord]] = None):
        self.categories = list(categories or [])

    async def list(self):
        return sorted(self.categories, key=lambda c: c.name)

    async def get(self, category_id):
        return next((c for c in self.categories if c.id == category_id), None)

    async def create(self, name, description=None):
        category = CategoryRecord(id=uuid4(), name=name, slug=name.lower(), description=description)
        self.categories.append(category)
        return category


class InMemorySettingsProvider:

    def __init__(self, defaults: Optional[InventoryDefaults] = None):
        self.defaults = defaults or InventoryDefaults()

    async def get(self):
        return self.defaults

    async def save(self, defaults, updated_by=None):
        self.defaults = defaults
        return defaults


class FakeWebLookup:
    """Returns a canned WebProduct, or raises the configured error."""

    def __init__(self, product: Optional[WebProduct] = None, error: Optional[Exception] = None):
        self.product = product
        self.error = error
        self.calls: List[str] = []

    async def fetch(self, barcode):
        self.calls.append(barcode)
        if self.error is not None:
            raise self.error
        if self.product is None:
            raise NotAvailable(barcode)
        return self.product


class MemorySlot:

    def __init__(self, data: Optional[str] = None):
        self.data = data

    def read(self):
        return self.data

    def write(self, data):
        self.data = data

    def delete(self):
        self.data = None


DAIRY_ID = UUID("00000000-0000-0000-0000-0000000000c1")


@pytest.fixture
def defaults():
    return InventoryDefaults(
        default_selling_price="15.00",
        default_purchase_price="9.00",
        default_stock=10,
        default_min_stock=5,
        default_expiry_notification_days=30,
    )


@pytest.fixture
def categories():
    return InMemoryCategoryStore([
        CategoryRecord(id=uuid4(), name="Beverages"),
        CategoryRecord(id=DAIRY_ID, name="Dairy"),
        CategoryRecord(id=uuid4(), name="Snacks"),
    ])


@pytest.fixture
def product_store():
    return InMemoryProductStore()


@pytest.fixture
def slot():
    return MemorySlot()


@pytest.fixture
def history(slot):
    return HistoryCache(slot)


def make_product(**overrides) -> ProductRecord:
    data = dict(id=uuid4(), name="Milk Chocolate Bar", barcode="6111245591063", price="12.99",
                stock=10, min_stock=5)
    data.update(overrides)
    return ProductRecord(**data)
