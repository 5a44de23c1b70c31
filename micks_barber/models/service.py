from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field


class Service(SQLModel, table=True):
    __tablename__ = "services"

    id: Optional[int] = Field(default=None, primary_key=True)

    name: str
    description: Optional[str] = None
    price: float
    duration: int = 30  # minutos

    created_at: datetime = Field(default_factory=datetime.utcnow)
