from typing import Literal, Optional
from datetime import datetime
from sqlmodel import SQLModel, Field


class PaymentMethod(SQLModel, table=True):
    __tablename__ = "payment_methods"

    id: Optional[int] = Field(default=None, primary_key=True)

    user_id: int = Field(foreign_key="users.id", index=True)

    method_type: str  # card | gcash | paymaya | bank_account
    method_name: str

    is_default: bool = False
    is_active: bool = Field(default=True, index=True)  # delete = soft delete

    created_at: datetime = Field(default_factory=datetime.utcnow)


class PaymentMethodCreate(SQLModel):
    user_id: int
    method_type: Literal["card", "gcash", "paymaya", "bank_account"]
    method_name: str = Field(min_length=1)
    is_default: bool = False


class PaymentMethodUpdate(SQLModel):
    method_name: Optional[str] = None
    is_default: Optional[bool] = None
    is_active: Optional[bool] = None
