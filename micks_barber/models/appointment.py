from typing import Optional
from datetime import date, datetime, time
from sqlmodel import SQLModel, Field


# STATUS DO AGENDAMENTO
APPOINTMENT_STATUSES = ("pending", "confirmed", "completed", "cancelled")

# STATUS DO PAGAMENTO (espelha payments.payment_status)
PAYMENT_STATUSES = ("pending", "completed", "failed", "refunded")


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"

    id: Optional[int] = Field(default=None, primary_key=True)

    user_id: int = Field(foreign_key="users.id", index=True)
    barber_id: int = Field(foreign_key="barbers.id", index=True)
    service_id: int = Field(foreign_key="services.id", index=True)

    appointment_date: date = Field(index=True)
    appointment_time: time

    status: str = Field(default="pending", index=True)
    notes: str = ""

    total_amount: float = 0
    payment_status: str = Field(default="pending", index=True)
    # sem FK: payments já aponta para appointments
    payment_id: Optional[int] = Field(default=None, index=True)

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: Optional[datetime] = None


class AppointmentCreate(SQLModel):
    user_id: int
    barber_id: int
    service_id: int
    appointment_date: date
    appointment_time: time
    notes: Optional[str] = None
    total_amount: Optional[float] = None
    payment_status: Optional[str] = None


class AppointmentStatusUpdate(SQLModel):
    status: Optional[str] = None


class AppointmentPaymentUpdate(SQLModel):
    payment_status: Optional[str] = None
    payment_id: Optional[int] = None
