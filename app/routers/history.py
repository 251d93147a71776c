from fastapi import APIRouter, HTTPException, Depends
from typing import List, Optional
from uuid import UUID

from app.dependencies.auth import get_current_active_user
from app.dependencies.services import get_history
from app.models.user import User
from app.schemas.scan import HistoryEntry
from app.services.history import HistoryCache

router = APIRouter()


@router.get("/", response_model=List[HistoryEntry])
async def get_history_entries(
    search: Optional[str] = None,
    history: HistoryCache = Depends(get_history),
    user: User = Depends(get_current_active_user)
):
    """Most recent scans first. `search` filters on name or barcode."""
    if search:
        return await history.search(search)
    return await history.list()


@router.delete("/entry")
async def remove_history_entry(
    barcode: Optional[str] = None,
    product_id: Optional[UUID] = None,
    history: HistoryCache = Depends(get_history),
    user: User = Depends(get_current_active_user)
):
    if not await history.remove(barcode, product_id):
        raise HTTPException(404, "History entry not found")
    return {"message": "Product has been removed from history"}


@router.delete("/")
async def clear_history(
    history: HistoryCache = Depends(get_history),
    user: User = Depends(get_current_active_user)
):
    await history.clear()
    return {"message": "All scan history has been cleared"}
