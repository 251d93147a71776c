from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from typing import Optional, Literal
from uuid import UUID
from datetime import date, datetime


class ProductBase(BaseModel):
    name: str = ""
    barcode: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[str] = None
    price: str = "0.00"
    purchase_price: Optional[str] = None
    stock: int = Field(default=0, ge=0)
    min_stock: int = Field(default=0, ge=0)
    expiry_date: Optional[date] = None
    expiry_notification_days: int = 30
    category_id: Optional[UUID] = None
    image: Optional[str] = None


class ProductRecord(ProductBase):
    """
    A product as the scanner sees it: persisted (id set) or a draft (id None).

    The alert flags are derived from stock/expiry every time they are read,
    they cannot be set by callers.
    """
    id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    @computed_field
    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.min_stock

    @computed_field
    @property
    def is_expiring_soon(self) -> bool:
        if self.expiry_date is None:
            return False
        days_left = (self.expiry_date - date.today()).days
        return 0 <= days_left <= self.expiry_notification_days


# Input: what the operator submits after confirming a draft
class ProductCreate(ProductBase):
    @field_validator("name")
    @classmethod
    def name_required(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Product name is required")
        return v.strip()


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    barcode: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[str] = None
    price: Optional[str] = None
    purchase_price: Optional[str] = None
    stock: Optional[int] = Field(default=None, ge=0)
    min_stock: Optional[int] = Field(default=None, ge=0)
    expiry_date: Optional[date] = None
    expiry_notification_days: Optional[int] = None
    category_id: Optional[UUID] = None
    image: Optional[str] = None


# Used by: POST /products/{id}/stock
class StockAdjustmentSchema(BaseModel):
    action: Literal["add", "remove"]
    quantity: int = Field(..., gt=0, description="Amount to add or remove. Must be positive.")

    @property
    def delta(self) -> int:
        return self.quantity if self.action == "add" else -self.quantity
