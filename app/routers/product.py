from fastapi import APIRouter, HTTPException, Depends, status
from typing import List, Optional
from uuid import UUID

from app.core.exceptions import InvalidInput, ProductNotFound, StoreError
from app.dependencies.auth import get_current_active_user
from app.dependencies.services import get_history, get_product_store
from app.models.user import User
from app.schemas.product import ProductCreate, ProductRecord, ProductUpdate, StockAdjustmentSchema
from app.services.history import HistoryCache
from app.services.product_service import save_product, update_product
from app.services.stock import adjust_stock
from app.services.stores import ProductStore

router = APIRouter()


def _store_failed(e: StoreError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Product store error: {e}")


@router.get("/", response_model=List[ProductRecord])
async def search_products(
    search: Optional[str] = None,
    store: ProductStore = Depends(get_product_store),
    user: User = Depends(get_current_active_user)
):
    try:
        return await store.search(search)
    except StoreError as e:
        raise _store_failed(e)


@router.get("/incomplete", response_model=List[ProductRecord])
async def get_incomplete_products(
    store: ProductStore = Depends(get_product_store),
    user: User = Depends(get_current_active_user)
):
    """Products missing a name, a real image or stock levels."""
    try:
        return await store.list_incomplete()
    except StoreError as e:
        raise _store_failed(e)


@router.get("/{product_id}", response_model=ProductRecord)
async def get_product(
    product_id: UUID,
    store: ProductStore = Depends(get_product_store),
    user: User = Depends(get_current_active_user)
):
    try:
        product = await store.get(product_id)
    except StoreError as e:
        raise _store_failed(e)
    if not product:
        raise HTTPException(404, "Product not found")
    return product


@router.post("/", response_model=ProductRecord, status_code=status.HTTP_201_CREATED)
async def submit_product(
    product_data: ProductCreate,
    store: ProductStore = Depends(get_product_store),
    history: HistoryCache = Depends(get_history),
    user: User = Depends(get_current_active_user)
):
    """
    Save a confirmed draft (insert, or update when the barcode is already
    known) and add it to the scan history.
    """
    try:
        return await save_product(product_data, store, history, actor=user.email)
    except InvalidInput as e:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(e))
    except StoreError as e:
        raise _store_failed(e)


@router.put("/{product_id}", response_model=ProductRecord)
async def edit_product(
    product_id: UUID,
    update_data: ProductUpdate,
    store: ProductStore = Depends(get_product_store),
    history: HistoryCache = Depends(get_history),
    user: User = Depends(get_current_active_user)
):
    try:
        return await update_product(product_id, update_data, store, history, actor=user.email)
    except ProductNotFound:
        raise HTTPException(404, "Product not found")
    except InvalidInput as e:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(e))
    except StoreError as e:
        raise _store_failed(e)


@router.post("/{product_id}/stock", response_model=ProductRecord)
async def adjust_product_stock(
    product_id: UUID,
    data: StockAdjustmentSchema,
    store: ProductStore = Depends(get_product_store),
    user: User = Depends(get_current_active_user)
):
    """
    Add or remove stock. Removals never go below zero and the low-stock
    flag in the response reflects the new level.
    """
    try:
        product = await store.get(product_id)
        if not product:
            raise ProductNotFound(f"Product {product_id} not found")
        return await adjust_stock(product, data.delta, store)
    except ProductNotFound:
        raise HTTPException(404, "Product not found")
    except StoreError as e:
        raise _store_failed(e)
