import logging
from datetime import date
from typing import List, Optional

from micks_barber.client.api import APIError, BarberShopClient

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("user_name", "barber_name", "service_name", "appointment_date", "appointment_time", "status")


class AdminDashboard:
    """Painel do admin: aprovação de agendamentos e verificação de comprovantes."""

    def __init__(self, client: BarberShopClient):
        if not client.user or client.user.get("role") != "admin":
            raise PermissionError("Admin login required")
        self.client = client
        self.appointments: List[dict] = []

    @property
    def admin_id(self) -> int:
        return self.client.user["id"]

    def refresh(self) -> List[dict]:
        self.appointments = self.client.get_all_appointments()
        logger.info("Loaded %d appointments", len(self.appointments))
        return self.appointments

    def pending(self) -> List[dict]:
        return [a for a in self.appointments if a["status"] == "pending"]

    def todays_confirmed(self, day: Optional[date] = None) -> List[dict]:
        today = (day or date.today()).isoformat()
        return [
            a for a in self.appointments
            if a["appointment_date"] == today and a["status"] == "confirmed"
        ]

    def search(self, query: str) -> List[dict]:
        query = (query or "").strip().lower()
        if not query:
            return list(self.appointments)
        return [
            a for a in self.appointments
            if any(query in str(a.get(field) or "").lower() for field in SEARCH_FIELDS)
        ]

    def approve(self, appointment_id: int):
        self.client.update_appointment_status(appointment_id, "confirmed")
        logger.info("Appointment %s approved", appointment_id)
        return self.refresh()

    def reject(self, appointment_id: int):
        self.client.update_appointment_status(appointment_id, "cancelled")
        logger.info("Appointment %s rejected", appointment_id)
        return self.refresh()

    def receipt_for(self, appointment_id: int) -> Optional[dict]:
        """Pagamento (com comprovante) do agendamento, ou None se não houver."""
        try:
            return self.client.get_payment_by_appointment(appointment_id)
        except APIError as e:
            if e.status_code == 404:
                return None
            raise

    def verify_receipt(self, payment_id: int, approve: bool, notes: Optional[str] = None) -> dict:
        status = "approved" if approve else "rejected"
        return self.client.verify_payment(payment_id, self.admin_id, status, notes)

    def summary(self, day: Optional[date] = None) -> dict:
        return self.client.dashboard_summary(day.isoformat() if day else None)
