from beanie import Document
from pydantic import Field
from typing import Optional
from uuid import UUID, uuid4
from datetime import datetime

class Category(Document):
    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., unique=True)
    description: Optional[str] = None
    slug: str = Field(..., unique=True)      # e.g., "personal-care"

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "categories"
