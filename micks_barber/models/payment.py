from typing import Literal, Optional
from datetime import datetime
from sqlmodel import SQLModel, Field


PAYMENT_METHODS = ("cash", "card", "gcash", "paymaya", "bank_transfer")

# resultado da verificação do admin -> payment_status
VERIFICATION_RESULTS = {"approved": "completed", "rejected": "failed"}


class Payment(SQLModel, table=True):
    __tablename__ = "payments"

    id: Optional[int] = Field(default=None, primary_key=True)

    appointment_id: int = Field(foreign_key="appointments.id", index=True)
    user_id: int = Field(foreign_key="users.id", index=True)

    amount: float
    payment_method: str  # cash | card | gcash | paymaya | bank_transfer
    transaction_id: Optional[str] = None
    payment_reference: Optional[str] = None

    # comprovante enviado pelo cliente (caminho /uploads/receipts/...)
    receipt_image: Optional[str] = None
    receipt_upload_date: Optional[datetime] = None

    payment_status: str = Field(default="pending", index=True)
    # pending | completed | failed | refunded
    payment_date: Optional[datetime] = None

    # verificação manual do admin
    admin_verified_by: Optional[int] = Field(default=None, foreign_key="users.id")
    admin_verification_date: Optional[datetime] = None
    admin_notes: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)


class PaymentCreate(SQLModel):
    appointment_id: int
    user_id: int
    amount: float = Field(gt=0)
    payment_method: Literal["cash", "card", "gcash", "paymaya", "bank_transfer"]
    transaction_id: Optional[str] = None
    payment_reference: Optional[str] = None
    receipt_image: Optional[str] = None


class PaymentStatusUpdate(SQLModel):
    payment_status: Literal["pending", "completed", "failed", "refunded"]
    payment_date: Optional[datetime] = None


class PaymentVerification(SQLModel):
    admin_id: int
    status: Literal["approved", "rejected"]
    notes: Optional[str] = None
