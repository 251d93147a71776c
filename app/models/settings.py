from beanie import Document
from pydantic import Field
from typing import Optional
from uuid import UUID
from datetime import datetime

class OperatorSettings(Document):
    """
    Operator-configured defaults used to pre-fill drafts.
    Only one document is ever stored (key = "inventory").
    """
    key: str = "inventory"

    default_selling_price: str = "0.00"
    default_purchase_price: str = "0.00"
    default_category_id: Optional[UUID] = None
    default_stock: int = 10
    default_min_stock: int = 5
    default_expiry_notification_days: int = 30

    updated_at: datetime = Field(default_factory=datetime.utcnow)
    updated_by: Optional[str] = None

    class Settings:
        name = "operator_settings"
