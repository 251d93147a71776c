from fastapi import APIRouter, HTTPException, Depends, status
from typing import List
from uuid import UUID

from app.core.exceptions import StoreError
from app.dependencies.auth import get_admin_user, get_current_active_user
from app.dependencies.services import get_category_store
from app.models.user import User
from app.schemas.category import CategoryCreate, CategoryRecord
from app.services.stores import CategoryStore

router = APIRouter()

# ==========================================
# 🔒 ADMIN ENDPOINTS
# ==========================================

@router.post(
    "/",
    response_model=CategoryRecord,
    status_code=status.HTTP_201_CREATED,
    summary="Create a New Category (Admin Only)",
    description="Creates a new product category. Auto-generates a slug from the name."
)
async def create_category(
    category_data: CategoryCreate,
    store: CategoryStore = Depends(get_category_store),
    admin: User = Depends(get_admin_user)
):
    name = category_data.name.strip()
    if not name:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Category name is required")

    try:
        existing = await store.list()
        if any(c.name.lower() == name.lower() for c in existing):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Category with this name already exists"
            )
        return await store.create(name, category_data.description)
    except StoreError as e:
        raise HTTPException(status.HTTP_502_BAD_GATEWAY, f"Category store error: {e}")


# ==========================================
# 🌍 OPERATOR ENDPOINTS (Read Only)
# ==========================================

@router.get(
    "/",
    response_model=List[CategoryRecord],
    summary="List All Categories",
    description="Returns every category, sorted by name."
)
async def get_categories(
    store: CategoryStore = Depends(get_category_store),
    user: User = Depends(get_current_active_user)
):
    try:
        return await store.list()
    except StoreError as e:
        raise HTTPException(status.HTTP_502_BAD_GATEWAY, f"Category store error: {e}")


@router.get("/{category_id}", response_model=CategoryRecord, summary="Get Single Category")
async def get_category(
    category_id: UUID,
    store: CategoryStore = Depends(get_category_store),
    user: User = Depends(get_current_active_user)
):
    category = await store.get(category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category
