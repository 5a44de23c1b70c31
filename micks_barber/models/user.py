from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field


class UserBase(SQLModel):
    name: str = Field(min_length=1)
    email: str = Field(index=True, unique=True, min_length=1)
    phone: Optional[str] = None


class User(UserBase, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    password_hash: str
    role: str = Field(default="customer", index=True)  # "customer" ou "admin"

    created_at: datetime = Field(default_factory=datetime.utcnow)


class UserCreate(UserBase):
    password: str = Field(min_length=1)


class UserLogin(SQLModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserRead(UserBase):
    id: int
    role: str
