"""
Store contracts used by the scanner core, plus their MongoDB (Beanie)
implementations.

The core only depends on the Protocols; tests plug in in-memory fakes.
"""
import logging
import re
from datetime import datetime
from typing import List, Optional, Protocol
from uuid import UUID, uuid4

from pymongo.errors import PyMongoError
from slugify import slugify

from app.core.exceptions import StoreError, ProductNotFound
from app.models.category import Category
from app.models.product import Product
from app.models.settings import OperatorSettings
from app.schemas.category import CategoryRecord
from app.schemas.product import ProductRecord
from app.schemas.settings import InventoryDefaults

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE = "placeholder"


# ==========================================
# CONTRACTS
# ==========================================

class ProductStore(Protocol):
    async def get_by_barcode(self, barcode: str) -> Optional[ProductRecord]: ...
    async def get(self, product_id: UUID) -> Optional[ProductRecord]: ...
    async def insert(self, product: ProductRecord) -> ProductRecord: ...
    async def update(self, product: ProductRecord) -> ProductRecord: ...
    async def update_stock(self, product_id: UUID, stock: int) -> None: ...
    async def search(self, text: Optional[str] = None) -> List[ProductRecord]: ...
    async def list_incomplete(self) -> List[ProductRecord]: ...


class CategoryStore(Protocol):
    async def list(self) -> List[CategoryRecord]: ...
    async def get(self, category_id: UUID) -> Optional[CategoryRecord]: ...
    async def create(self, name: str, description: Optional[str] = None) -> CategoryRecord: ...


class SettingsProvider(Protocol):
    async def get(self) -> InventoryDefaults: ...
    async def save(self, defaults: InventoryDefaults, updated_by: Optional[str] = None) -> InventoryDefaults: ...


# ==========================================
# MONGODB IMPLEMENTATIONS
# ==========================================

def _to_record(doc: Product) -> ProductRecord:
    return ProductRecord.model_validate(doc, from_attributes=True)


def search_filter(text: str) -> dict:
    """Case-insensitive literal substring match on name or barcode."""
    pattern = re.escape(text)
    return {"$or": [
        {"name": {"$regex": pattern, "$options": "i"}},
        {"barcode": {"$regex": pattern, "$options": "i"}}
    ]}


class BeanieProductStore:

    async def get_by_barcode(self, barcode: str) -> Optional[ProductRecord]:
        try:
            doc = await Product.find_one(Product.barcode == barcode)
        except PyMongoError as e:
            raise StoreError(f"Barcode lookup failed: {e}") from e
        return _to_record(doc) if doc else None

    async def get(self, product_id: UUID) -> Optional[ProductRecord]:
        try:
            doc = await Product.get(product_id)
        except PyMongoError as e:
            raise StoreError(f"Product lookup failed: {e}") from e
        return _to_record(doc) if doc else None

    async def insert(self, product: ProductRecord) -> ProductRecord:
        now = datetime.utcnow()
        doc = Product(
            **product.model_dump(include=set(type(product).model_fields) - {"id", "created_at", "updated_at"}),
            id=product.id or uuid4(),
            created_at=now,
            updated_at=now,
        )
        try:
            await doc.insert()
        except PyMongoError as e:
            raise StoreError(f"Could not insert product: {e}") from e
        logger.info("Inserted product %s (barcode=%s)", doc.id, doc.barcode)
        return _to_record(doc)

    async def update(self, product: ProductRecord) -> ProductRecord:
        if product.id is None:
            raise ProductNotFound("Cannot update a product without an id")
        data = product.model_dump(
            include=set(type(product).model_fields) - {"id", "created_at", "created_by"}
        )
        data["updated_at"] = datetime.utcnow()
        try:
            doc = await Product.get(product.id)
            if not doc:
                raise ProductNotFound(f"Product {product.id} not found")
            await doc.update({"$set": data})
            doc = await Product.get(product.id)
        except PyMongoError as e:
            raise StoreError(f"Could not update product: {e}") from e
        return _to_record(doc)

    async def update_stock(self, product_id: UUID, stock: int) -> None:
        try:
            result = await Product.find_one(Product.id == product_id).update(
                {"$set": {"stock": stock, "updated_at": datetime.utcnow()}}
            )
        except PyMongoError as e:
            raise StoreError(f"Could not update stock: {e}") from e
        if result is None or result.matched_count == 0:
            raise ProductNotFound(f"Product {product_id} not found")

    async def search(self, text: Optional[str] = None) -> List[ProductRecord]:
        query = Product.find(search_filter(text)) if text else Product.find_all()
        try:
            docs = await query.sort(+Product.name).to_list()
        except PyMongoError as e:
            raise StoreError(f"Product search failed: {e}") from e
        return [_to_record(d) for d in docs]

    async def list_incomplete(self) -> List[ProductRecord]:
        try:
            docs = await Product.find(
                {"$or": [
                    {"name": {"$in": [None, ""]}},
                    {"image": {"$in": [None, ""]}},
                    {"image": {"$regex": PLACEHOLDER_IMAGE}},
                    {"stock": None},
                    {"min_stock": None},
                ]}
            ).to_list()
        except PyMongoError as e:
            raise StoreError(f"Incomplete product query failed: {e}") from e
        return [_to_record(d) for d in docs]


class BeanieCategoryStore:

    async def list(self) -> List[CategoryRecord]:
        # Alphabetical order keeps category matching deterministic
        try:
            docs = await Category.find(
                {"name": {"$nin": [None, ""]}}
            ).sort(+Category.name).to_list()
        except PyMongoError as e:
            raise StoreError(f"Could not list categories: {e}") from e
        return [CategoryRecord.model_validate(d, from_attributes=True) for d in docs]

    async def get(self, category_id: UUID) -> Optional[CategoryRecord]:
        try:
            doc = await Category.get(category_id)
        except PyMongoError as e:
            raise StoreError(f"Category lookup failed: {e}") from e
        return CategoryRecord.model_validate(doc, from_attributes=True) if doc else None

    async def create(self, name: str, description: Optional[str] = None) -> CategoryRecord:
        doc = Category(name=name, description=description, slug=slugify(name))
        try:
            await doc.insert()
        except PyMongoError as e:
            raise StoreError(f"Could not create category: {e}") from e
        return CategoryRecord.model_validate(doc, from_attributes=True)


class BeanieSettingsProvider:

    async def get(self) -> InventoryDefaults:
        try:
            doc = await OperatorSettings.find_one(OperatorSettings.key == "inventory")
        except PyMongoError as e:
            logger.warning("Falling back to built-in defaults: %s", e)
            return InventoryDefaults()
        if not doc:
            return InventoryDefaults()
        return InventoryDefaults.model_validate(doc, from_attributes=True)

    async def save(self, defaults: InventoryDefaults, updated_by: Optional[str] = None) -> InventoryDefaults:
        data = defaults.model_dump()
        data["updated_at"] = datetime.utcnow()
        data["updated_by"] = updated_by
        try:
            doc = await OperatorSettings.find_one(OperatorSettings.key == "inventory")
            if doc:
                await doc.update({"$set": data})
            else:
                await OperatorSettings(**data).insert()
        except PyMongoError as e:
            raise StoreError(f"Could not save settings: {e}") from e
        return defaults
