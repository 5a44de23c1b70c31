import logging
from datetime import datetime
from typing import Any, BinaryIO, Optional

import httpx

from micks_barber import config

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Erro devolvido pela API (ou falha de conexão)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BarberShopClient:
    """Cliente REST usado pelo app (fluxo de agendamento e painel admin)."""

    TIMEOUT = 10.0

    def __init__(self, base_url: Optional[str] = None, http: Optional[httpx.Client] = None):
        if http is None:
            http = httpx.Client(
                base_url=base_url or config.API_BASE_URL,
                timeout=self.TIMEOUT,
                follow_redirects=True,
            )
        self.http = http
        self.user: Optional[dict[str, Any]] = None
        self.access_token: Optional[str] = None

    def close(self):
        self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _request(self, method: str, url: str, fallback: str, **kwargs) -> Any:
        headers = kwargs.pop("headers", {})
        if self.access_token:
            headers.setdefault("Authorization", f"Bearer {self.access_token}")

        logger.debug("API request: %s %s %s", method, url, kwargs.get("json"))
        try:
            response = self.http.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error("API request error: %s %s: %s", method, url, e)
            raise APIError(f"{fallback}: {e}") from e

        logger.debug("API response: %s %s", response.status_code, response.text[:200])

        if response.is_error:
            message = fallback
            try:
                body = response.json()
                message = body.get("detail") or body.get("message") or body.get("error") or fallback
            except ValueError:
                pass
            logger.error("API response error: %s %s -> %s %s", method, url, response.status_code, message)
            raise APIError(str(message), response.status_code)

        return response.json()

    # =========================
    # AUTH
    # =========================
    def register(self, name: str, email: str, password: str, phone: Optional[str] = None):
        return self._request(
            "POST", "/auth/register", "Registration failed",
            json={"name": name, "email": email, "password": password, "phone": phone},
        )

    def login(self, email: str, password: str):
        data = self._request(
            "POST", "/auth/login", "Login failed",
            json={"email": email, "password": password},
        )
        self.user = data["user"]
        self.access_token = data.get("access_token")
        return data

    def logout(self):
        self.user = None
        self.access_token = None

    def me(self):
        return self._request("GET", "/auth/me", "Failed to fetch current user")["user"]

    # =========================
    # CATÁLOGO
    # =========================
    def get_barbers(self):
        return self._request("GET", "/barbers", "Failed to fetch barbers")["data"]

    def get_barber(self, barber_id: int):
        return self._request("GET", f"/barbers/{barber_id}", "Failed to fetch barber")["data"]

    def get_services(self):
        return self._request("GET", "/services", "Failed to fetch services")["data"]

    def get_service(self, service_id: int):
        return self._request("GET", f"/services/{service_id}", "Failed to fetch service")["data"]

    # =========================
    # AGENDAMENTOS
    # =========================
    def get_all_appointments(self, status: Optional[str] = None):
        params = {"status": status} if status else None
        return self._request("GET", "/appointments", "Failed to fetch appointments", params=params)["data"]

    def get_user_appointments(self, user_id: int):
        return self._request("GET", f"/appointments/user/{user_id}", "Failed to fetch appointments")["data"]

    def get_appointment(self, appointment_id: int):
        return self._request("GET", f"/appointments/{appointment_id}", "Failed to fetch appointment")["data"]

    def create_appointment(
        self,
        user_id: int,
        barber_id: int,
        service_id: int,
        appointment_date: str,
        appointment_time: str,
        notes: str = "",
        total_amount: Optional[float] = None,
        payment_status: str = "pending",
    ):
        return self._request(
            "POST", "/appointments", "Failed to create appointment",
            json={
                "user_id": user_id,
                "barber_id": barber_id,
                "service_id": service_id,
                "appointment_date": appointment_date,
                "appointment_time": appointment_time,
                "notes": notes,
                "total_amount": total_amount,
                "payment_status": payment_status,
            },
        )

    def update_appointment_status(self, appointment_id: int, status: str):
        return self._request(
            "PUT", f"/appointments/{appointment_id}/status", "Failed to update appointment status",
            json={"status": status},
        )

    def cancel_appointment(self, appointment_id: int):
        return self._request("PUT", f"/appointments/{appointment_id}/cancel", "Failed to cancel appointment")

    def update_appointment(
        self,
        appointment_id: int,
        payment_status: Optional[str] = None,
        payment_id: Optional[int] = None,
    ):
        return self._request(
            "PUT", f"/appointments/{appointment_id}", "Failed to update appointment",
            json={"payment_status": payment_status, "payment_id": payment_id},
        )

    # =========================
    # PAGAMENTOS
    # =========================
    def get_payments(self, status: Optional[str] = None):
        params = {"status": status} if status else None
        return self._request("GET", "/payments", "Failed to fetch payments", params=params)

    def get_user_payments(self, user_id: int):
        return self._request("GET", f"/payments/user/{user_id}", "Failed to fetch payments")

    def get_payment(self, payment_id: int):
        return self._request("GET", f"/payments/{payment_id}", "Failed to fetch payment")

    def get_payment_by_appointment(self, appointment_id: int):
        return self._request("GET", f"/payments/appointment/{appointment_id}", "Failed to fetch payment")

    def get_pending_payments(self):
        return self._request("GET", "/payments/admin/pending", "Failed to fetch pending payments")

    def create_payment(
        self,
        appointment_id: int,
        user_id: int,
        amount: float,
        payment_method: str,
        transaction_id: Optional[str] = None,
        payment_reference: Optional[str] = None,
        receipt_image: Optional[str] = None,
    ):
        return self._request(
            "POST", "/payments", "Failed to create payment",
            json={
                "appointment_id": appointment_id,
                "user_id": user_id,
                "amount": amount,
                "payment_method": payment_method,
                "transaction_id": transaction_id,
                "payment_reference": payment_reference,
                "receipt_image": receipt_image,
            },
        )

    def update_payment_status(self, payment_id: int, payment_status: str, payment_date: Optional[datetime] = None):
        return self._request(
            "PUT", f"/payments/{payment_id}/status", "Failed to update payment status",
            json={
                "payment_status": payment_status,
                "payment_date": payment_date.isoformat() if payment_date else None,
            },
        )

    def verify_payment(self, payment_id: int, admin_id: int, status: str, notes: Optional[str] = None):
        return self._request(
            "PUT", f"/payments/{payment_id}/verify", "Failed to verify payment",
            json={"admin_id": admin_id, "status": status, "notes": notes},
        )

    # formas de pagamento salvas
    def get_payment_methods(self, user_id: int):
        return self._request("GET", f"/payments/methods/{user_id}", "Failed to fetch payment methods")

    def add_payment_method(self, user_id: int, method_type: str, method_name: str, is_default: bool = False):
        return self._request(
            "POST", "/payments/methods", "Failed to add payment method",
            json={
                "user_id": user_id,
                "method_type": method_type,
                "method_name": method_name,
                "is_default": is_default,
            },
        )

    def update_payment_method(self, method_id: int, **changes):
        return self._request(
            "PUT", f"/payments/methods/{method_id}", "Failed to update payment method",
            json=changes,
        )

    def delete_payment_method(self, method_id: int):
        return self._request("DELETE", f"/payments/methods/{method_id}", "Failed to delete payment method")

    # =========================
    # COMPROVANTES
    # =========================
    def upload_receipt(self, file: BinaryIO, filename: str = "receipt.jpg", content_type: str = "image/jpeg") -> str:
        """Envia o comprovante e devolve a URL (/uploads/receipts/...)."""
        data = self._request(
            "POST", "/upload/receipt", "Upload failed",
            files={"receipt": (filename, file, content_type)},
        )
        return data["data"]["url"]

    def delete_receipt(self, filename: str):
        return self._request("DELETE", f"/upload/receipt/{filename}", "Failed to delete receipt")

    # =========================
    # PAINEL ADMIN
    # =========================
    def dashboard_summary(self, day: Optional[str] = None):
        params = {"day": day} if day else None
        return self._request("GET", "/admin/dashboard/summary", "Failed to load dashboard", params=params)
