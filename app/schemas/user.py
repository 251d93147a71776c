from pydantic import BaseModel
from typing import Optional

class Token(BaseModel):
    access_token: str
    token_type: str
    role: Optional[str] = None
    name: Optional[str] = None

class TokenData(BaseModel):
    email: Optional[str] = None
