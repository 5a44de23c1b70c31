from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field


class Barber(SQLModel, table=True):
    __tablename__ = "barbers"

    id: Optional[int] = Field(default=None, primary_key=True)

    name: str
    specialty: Optional[str] = None
    rating: float = Field(default=0.0, ge=0, le=5, index=True)

    # contato
    phone: Optional[str] = None
    email: Optional[str] = None
    image_url: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
