from functools import lru_cache

from fastapi import Depends

from app.core.config import settings
from app.schemas.settings import InventoryDefaults
from app.services.history import FileHistorySlot, HistoryCache
from app.services.resolver import BarcodeResolver
from app.services.stores import (
    BeanieCategoryStore,
    BeanieProductStore,
    BeanieSettingsProvider,
    CategoryStore,
    ProductStore,
    SettingsProvider,
)
from app.services.web_lookup import WebProductLookup


def get_product_store() -> ProductStore:
    return BeanieProductStore()


def get_category_store() -> CategoryStore:
    return BeanieCategoryStore()


def get_settings_provider() -> SettingsProvider:
    return BeanieSettingsProvider()


def get_web_lookup() -> WebProductLookup:
    return WebProductLookup(settings.WEB_LOOKUP_URL, timeout=settings.WEB_LOOKUP_TIMEOUT)


@lru_cache
def get_history() -> HistoryCache:
    # One instance per process so the lock serializes every writer
    return HistoryCache(FileHistorySlot(settings.HISTORY_DIR), max_entries=settings.HISTORY_MAX_ENTRIES)


async def get_inventory_defaults(
    provider: SettingsProvider = Depends(get_settings_provider),
) -> InventoryDefaults:
    return await provider.get()


def get_resolver(
    products: ProductStore = Depends(get_product_store),
    categories: CategoryStore = Depends(get_category_store),
    web: WebProductLookup = Depends(get_web_lookup),
) -> BarcodeResolver:
    return BarcodeResolver(products, categories, web)
