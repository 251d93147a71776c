from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from uuid import UUID


class InventoryDefaults(BaseModel):
    """Defaults injected into every draft. Read-only for the resolver."""
    default_selling_price: str = "0.00"
    default_purchase_price: str = "0.00"
    default_category_id: Optional[UUID] = None
    default_stock: int = Field(default=10, ge=0)
    default_min_stock: int = Field(default=5, ge=0)
    default_expiry_notification_days: int = Field(default=30, ge=0)

    model_config = ConfigDict(from_attributes=True, extra="ignore", frozen=True)
