from fastapi import APIRouter, HTTPException, Depends, status

from app.core.exceptions import StoreError
from app.dependencies.auth import get_admin_user, get_current_active_user
from app.dependencies.services import get_settings_provider
from app.models.user import User
from app.schemas.settings import InventoryDefaults
from app.services.stores import SettingsProvider

router = APIRouter()


@router.get("/inventory", response_model=InventoryDefaults)
async def get_inventory_settings(
    provider: SettingsProvider = Depends(get_settings_provider),
    user: User = Depends(get_current_active_user)
):
    return await provider.get()


@router.put("/inventory", response_model=InventoryDefaults)
async def update_inventory_settings(
    data: InventoryDefaults,
    provider: SettingsProvider = Depends(get_settings_provider),
    admin: User = Depends(get_admin_user)
):
    try:
        return await provider.save(data, updated_by=admin.email)
    except StoreError as e:
        raise HTTPException(status.HTTP_502_BAD_GATEWAY, f"Settings store error: {e}")
