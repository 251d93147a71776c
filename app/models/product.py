from beanie import Document, Indexed
from pydantic import Field
from typing import Optional, Annotated
from uuid import UUID, uuid4
from datetime import date, datetime

class Product(Document):
    id: UUID = Field(default_factory=uuid4)

    # --- Identification ---
    name: str = Field(...)
    barcode: Annotated[Optional[str], Indexed(unique=True, sparse=True)] = None
    description: Optional[str] = None
    quantity: Optional[str] = None        # Free text, e.g. "1L" or "6 x 33cl"

    # --- Financials (kept as decimal strings, "12.50") ---
    price: str = "0.00"                   # Selling Price
    purchase_price: Optional[str] = None  # Buying Price

    # --- Stock ---
    stock: int = Field(default=0, ge=0)
    min_stock: int = Field(default=0, ge=0)  # Alert Trigger Level

    # --- Expiry ---
    expiry_date: Optional[date] = None
    expiry_notification_days: int = 30

    category_id: Optional[UUID] = None
    image: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    created_by: Optional[str] = None
    updated_by: Optional[str] = None

    class Settings:
        name = "products"
