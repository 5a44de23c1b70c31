import logging
import re
from datetime import date, datetime
from enum import IntEnum
from typing import Any, BinaryIO, List, Optional

from micks_barber import config
from micks_barber.client.api import BarberShopClient
from micks_barber.client.payments import format_currency, generate_transaction_id, process_payment

logger = logging.getLogger(__name__)

TIME_RE = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")


class BookingError(Exception):
    pass


class PaymentFailed(BookingError):
    pass


class Step(IntEnum):
    SERVICE = 1
    BARBER = 2
    DATE_TIME = 3
    PAYMENT = 4
    OVERVIEW = 5


def time_slots(step_minutes: int = 30) -> List[str]:
    """Grade de horários dentro do expediente (09:00 ... 17:30)."""
    slots = []
    for hour in range(config.BUSINESS_OPEN_HOUR, config.BUSINESS_CLOSE_HOUR):
        for minute in range(0, 60, step_minutes):
            slots.append(f"{hour:02d}:{minute:02d}")
    return slots


class BookingWizard:
    """Fluxo de agendamento: serviço -> barbeiro -> data/hora -> pagamento -> resumo.

    O agendamento é criado no servidor ao entrar na etapa de pagamento, com
    ``payment_status="pending"``. Voltar etapas não apaga nada: um agendamento
    já criado continua no banco mesmo se o fluxo for abandonado. Avançar de
    novo com outra seleção cancela o anterior antes de criar o novo.
    """

    def __init__(self, client: BarberShopClient, user: Optional[dict] = None):
        self.client = client
        self.user = user or client.user
        if not self.user:
            raise BookingError("You must be logged in to book an appointment")
        self.reset()

    def reset(self):
        self.step = Step.SERVICE
        self.service: Optional[dict] = None
        self.barber: Optional[dict] = None
        self.date: Optional[str] = None
        self.time: Optional[str] = None
        self.appointment_id: Optional[int] = None
        self.payment: Optional[dict] = None
        self._booked_for: Optional[tuple] = None

    # =========================
    # SELEÇÕES
    # =========================
    def select_service(self, service: dict):
        self.service = service

    def select_barber(self, barber: dict):
        self.barber = barber

    def select_date(self, value):
        if isinstance(value, date):
            day = value
        else:
            try:
                day = datetime.strptime(value, "%Y-%m-%d").date()
            except (TypeError, ValueError):
                raise BookingError("Please enter date in YYYY-MM-DD format (e.g., 2024-01-15)")

        if day < date.today():
            raise BookingError("Please select a date from today onwards")
        self.date = day.isoformat()

    def select_time(self, value: str):
        match = TIME_RE.match(value or "")
        if not match:
            raise BookingError("Please enter time in HH:MM format (e.g., 14:30)")

        hour, minute = int(match.group(1)), int(match.group(2))
        if not config.BUSINESS_OPEN_HOUR <= hour < config.BUSINESS_CLOSE_HOUR:
            raise BookingError(f"Please select a time between {config.business_hours_label()}")
        self.time = f"{hour:02d}:{minute:02d}"

    # =========================
    # NAVEGAÇÃO
    # =========================
    def can_proceed(self) -> bool:
        if self.step == Step.SERVICE:
            return self.service is not None
        if self.step == Step.BARBER:
            return self.barber is not None
        if self.step == Step.DATE_TIME:
            return bool(self.date) and bool(self.time)
        return True

    def next(self) -> Step:
        if self.step == Step.OVERVIEW:
            return self.step

        if not self.can_proceed():
            raise BookingError("Please complete all booking details")

        if self.step == Step.DATE_TIME:
            self._create_appointment()

        self.step = Step(self.step + 1)
        logger.debug("Booking wizard moved to %s", self.step.name)
        return self.step

    def back(self) -> Step:
        if self.step > Step.SERVICE:
            self.step = Step(self.step - 1)
        return self.step

    def _create_appointment(self):
        key = (self.service["id"], self.barber["id"], self.date, self.time)
        if self.appointment_id:
            if self._booked_for == key:
                return
            if self.payment:
                raise BookingError("This appointment is already paid, start a new booking to change it")
            # a seleção mudou: libera o horário anterior
            self.client.cancel_appointment(self.appointment_id)
            logger.info("Cancelled superseded appointment %s", self.appointment_id)
            self.appointment_id = None
            self._booked_for = None

        response = self.client.create_appointment(
            user_id=self.user["id"],
            barber_id=self.barber["id"],
            service_id=self.service["id"],
            appointment_date=self.date,
            appointment_time=self.time,
            notes="",
            total_amount=self.service["price"],
            payment_status="pending",
        )
        self.appointment_id = response["appointmentId"]
        self._booked_for = key
        self.payment = None
        logger.info("Created appointment %s for payment", self.appointment_id)

    # =========================
    # PAGAMENTO
    # =========================
    def _require_payment_step(self):
        if self.step != Step.PAYMENT or not self.appointment_id:
            raise BookingError("Payment is only available after the appointment is created")

    def pay_direct(self, payment_method: str = "card", rng=None) -> dict:
        """Pagamento simulado; aprovado vira ``completed`` na hora."""
        self._require_payment_step()
        amount = float(self.service["price"])

        result = process_payment(
            amount=amount,
            payment_method=payment_method,
            user_id=self.user["id"],
            appointment_id=self.appointment_id,
            rng=rng,
        )
        if not result["success"]:
            raise PaymentFailed(result["error"])

        created = self.client.create_payment(
            appointment_id=self.appointment_id,
            user_id=self.user["id"],
            amount=amount,
            payment_method=payment_method,
            transaction_id=result["transaction_id"],
            payment_reference=result["payment_reference"],
        )
        updated = self.client.update_payment_status(created["id"], "completed", datetime.utcnow())

        self.payment = updated["data"]
        self.step = Step.OVERVIEW
        return self.payment

    def pay_with_receipt(
        self,
        file: BinaryIO,
        filename: str = "receipt.jpg",
        content_type: str = "image/jpeg",
        payment_method: str = "gcash",
    ) -> dict:
        """Envia o comprovante; o pagamento fica ``pending`` até o admin verificar."""
        self._require_payment_step()

        receipt_url = self.client.upload_receipt(file, filename=filename, content_type=content_type)
        created = self.client.create_payment(
            appointment_id=self.appointment_id,
            user_id=self.user["id"],
            amount=float(self.service["price"]),
            payment_method=payment_method,
            transaction_id=generate_transaction_id(),
            receipt_image=receipt_url,
        )

        self.payment = created["data"]
        self.step = Step.OVERVIEW
        return self.payment

    def overview(self) -> dict[str, Any]:
        return {
            "appointment_id": self.appointment_id,
            "service": self.service["name"] if self.service else None,
            "barber": self.barber["name"] if self.barber else None,
            "date": self.date,
            "time": self.time,
            "total": format_currency(float(self.service["price"])) if self.service else None,
            "payment_status": self.payment["payment_status"] if self.payment else "pending",
        }
