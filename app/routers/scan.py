from fastapi import APIRouter, HTTPException, Depends, status

from app.core.config import settings
from app.core.exceptions import InvalidInput
from app.dependencies.auth import get_current_active_user
from app.dependencies.services import get_inventory_defaults, get_resolver
from app.models.user import User
from app.schemas.scan import BatchRequest, BatchResult, ResolutionOutcome
from app.schemas.settings import InventoryDefaults
from app.services.resolver import BarcodeResolver

router = APIRouter()


# ==========================================
# 1. RESOLVE A SINGLE BARCODE
# ==========================================

@router.get("/{barcode}", response_model=ResolutionOutcome)
async def resolve_barcode(
    barcode: str,
    user: User = Depends(get_current_active_user),
    resolver: BarcodeResolver = Depends(get_resolver),
    defaults: InventoryDefaults = Depends(get_inventory_defaults)
):
    """
    Look the barcode up in our catalogue, then on the web.

    Returns `kind="found"` with the stored product, or `kind="draft"` with a
    pre-filled product to confirm. Drafts are always returned, even when the
    web lookup failed (`source="error"`) or has no data (`not_available=true`).
    """
    try:
        return await resolver.resolve(barcode, defaults)
    except InvalidInput as e:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(e))


# ==========================================
# 2. BATCH RESOLUTION
# ==========================================

@router.post("/batch", response_model=BatchResult)
async def resolve_batch(
    data: BatchRequest,
    user: User = Depends(get_current_active_user),
    resolver: BarcodeResolver = Depends(get_resolver),
    defaults: InventoryDefaults = Depends(get_inventory_defaults)
):
    try:
        return await resolver.resolve_batch(
            data.barcodes,
            defaults,
            max_barcodes=settings.BATCH_MAX_BARCODES,
            concurrency=settings.BATCH_CONCURRENCY,
        )
    except InvalidInput as e:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(e))
