from pydantic import BaseModel, Field
from typing import List, Literal, Optional, Union, Annotated
from datetime import datetime

from app.schemas.product import ProductRecord


# --- 1. WEB LOOKUP PAYLOAD ---
# Shape returned by GET /fetch-product?barcode=<code>
class WebProduct(BaseModel):
    name: str
    price: Optional[str] = None        # comma-decimal, e.g. "12,50"
    image: Optional[str] = None
    category: Optional[str] = None
    isInStock: bool = False
    quantity: Optional[str] = None


# --- 2. RESOLUTION OUTCOMES ---
class Found(BaseModel):
    kind: Literal["found"] = "found"
    barcode: str
    product: ProductRecord


class Draft(BaseModel):
    """An unpersisted product awaiting operator confirmation."""
    kind: Literal["draft"] = "draft"
    barcode: str
    product: ProductRecord
    source: Literal["web", "error"]
    not_available: bool = False
    diagnostic: Optional[str] = None
    web_product: Optional[WebProduct] = None


ResolutionOutcome = Annotated[Union[Found, Draft], Field(discriminator="kind")]


# --- 3. HISTORY ---
class HistoryEntry(BaseModel):
    product: ProductRecord
    created_at: datetime = Field(default_factory=datetime.utcnow)


# --- 4. BATCH ---
class BatchRequest(BaseModel):
    barcodes: List[str] = Field(..., min_length=1)


class BatchItem(BaseModel):
    barcode: str
    success: bool
    outcome: Optional[ResolutionOutcome] = None
    error: Optional[str] = None


class BatchResult(BaseModel):
    total: int
    found: int
    not_found: int
    results: List[BatchItem]
