import logging
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, select

from micks_barber import config
from micks_barber.database import get_session
from micks_barber.models.appointment import (
    APPOINTMENT_STATUSES,
    PAYMENT_STATUSES,
    Appointment,
    AppointmentCreate,
    AppointmentPaymentUpdate,
    AppointmentStatusUpdate,
)
from micks_barber.models.barber import Barber
from micks_barber.models.payment import Payment
from micks_barber.models.service import Service
from micks_barber.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["appointments"])


def _overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Retorna True se [a_start, a_end) sobrepõe [b_start, b_end)."""
    return a_start < b_end and a_end > b_start


def _within_business_hours(appointment_time) -> bool:
    return config.BUSINESS_OPEN_HOUR <= appointment_time.hour < config.BUSINESS_CLOSE_HOUR


def _find_conflict(
    session: Session,
    barber_id: int,
    day: date,
    start: datetime,
    end: datetime,
    exclude_id: Optional[int] = None,
) -> Optional[Appointment]:
    """Primeiro agendamento do barbeiro no dia que sobrepõe [start, end).
    Obs: ignora agendamentos cancelados.
    """
    statement = (
        select(Appointment, Service.duration)
        .join(Service, Appointment.service_id == Service.id)
        .where(
            Appointment.barber_id == barber_id,
            Appointment.appointment_date == day,
            Appointment.status != "cancelled",
        )
    )
    if exclude_id is not None:
        statement = statement.where(Appointment.id != exclude_id)

    for appt, duration in session.exec(statement).all():
        b_start = datetime.combine(appt.appointment_date, appt.appointment_time)
        b_end = b_start + timedelta(minutes=duration)
        if _overlaps(start, end, b_start, b_end):
            return appt
    return None


def _ensure_slot_free(
    session: Session,
    barber_id: int,
    day: date,
    start_time,
    duration: int,
    exclude_id: Optional[int] = None,
):
    """409 se o barbeiro já tiver outro agendamento ativo no intervalo."""
    start = datetime.combine(day, start_time)
    end = start + timedelta(minutes=duration)
    conflict = _find_conflict(session, barber_id, day, start, end, exclude_id)
    if conflict:
        logger.info(
            "Rejected double booking for barber %s at %s (conflicts with appointment %s)",
            barber_id, start, conflict.id,
        )
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="This barber is already booked for the selected time",
        )


def _appointment_rows(session: Session, *filters) -> List[Dict]:
    """Agendamentos com nomes de cliente, barbeiro e serviço (visão do app)."""
    statement = (
        select(
            Appointment,
            User.name,
            Barber.name,
            Service.name,
            Service.price,
        )
        .join(User, Appointment.user_id == User.id)
        .join(Barber, Appointment.barber_id == Barber.id)
        .join(Service, Appointment.service_id == Service.id)
        .where(*filters)
        .order_by(Appointment.appointment_date.desc(), Appointment.appointment_time.desc())
    )

    data = []
    for appt, user_name, barber_name, service_name, service_price in session.exec(statement).all():
        row = appt.model_dump()
        row.update(
            user_name=user_name,
            barber_name=barber_name,
            service_name=service_name,
            service_price=service_price,
        )
        data.append(row)
    return data


def _get_or_404(session: Session, appointment_id: int) -> Appointment:
    appt = session.get(Appointment, appointment_id)
    if not appt:
        raise HTTPException(status_code=404, detail="Appointment not found")
    return appt


# =========================
# LISTAR TODOS (ADMIN)
# =========================
@router.get("")
def list_appointments(
    status: Optional[str] = None,
    session: Session = Depends(get_session),
):
    filters = []
    if status:
        if status not in APPOINTMENT_STATUSES:
            raise HTTPException(status_code=400, detail="Valid status is required")
        filters.append(Appointment.status == status)

    data = _appointment_rows(session, *filters)
    logger.debug("Returning %d appointments", len(data))
    return {"success": True, "data": data}


# =========================
# HISTÓRICO DO CLIENTE
# =========================
@router.get("/user/{user_id}")
def list_user_appointments(user_id: int, session: Session = Depends(get_session)):
    return {"success": True, "data": _appointment_rows(session, Appointment.user_id == user_id)}


@router.get("/{appointment_id}")
def get_appointment(appointment_id: int, session: Session = Depends(get_session)):
    rows = _appointment_rows(session, Appointment.id == appointment_id)
    if not rows:
        raise HTTPException(status_code=404, detail="Appointment not found")
    return {"success": True, "data": rows[0]}


# =========================
# CRIAR AGENDAMENTO (CLIENTE)
# =========================
@router.post("", status_code=status.HTTP_201_CREATED)
def create_appointment(
    payload: AppointmentCreate,
    session: Session = Depends(get_session),
):
    if not session.get(User, payload.user_id):
        raise HTTPException(status_code=404, detail="User not found")

    if not session.get(Barber, payload.barber_id):
        raise HTTPException(status_code=404, detail="Barber not found")

    service = session.get(Service, payload.service_id)
    if not service:
        raise HTTPException(status_code=404, detail="Service not found")

    if payload.payment_status and payload.payment_status not in PAYMENT_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid payment status")

    # Regras: data a partir de hoje, dentro do expediente
    if payload.appointment_date < date.today():
        raise HTTPException(status_code=400, detail="Please select a date from today onwards")

    if not _within_business_hours(payload.appointment_time):
        raise HTTPException(
            status_code=400,
            detail=f"Please select a time between {config.business_hours_label()}",
        )

    # Conflito com outros agendamentos do barbeiro (por duração)
    _ensure_slot_free(
        session, payload.barber_id, payload.appointment_date,
        payload.appointment_time, service.duration,
    )

    appointment = Appointment(
        user_id=payload.user_id,
        barber_id=payload.barber_id,
        service_id=payload.service_id,
        appointment_date=payload.appointment_date,
        appointment_time=payload.appointment_time,
        notes=payload.notes or "",
        total_amount=payload.total_amount if payload.total_amount is not None else service.price,
        payment_status=payload.payment_status or "pending",
        # status inicial
        status="pending",
    )

    session.add(appointment)
    session.commit()
    session.refresh(appointment)

    logger.info(
        "Created appointment %s: user %s, barber %s, %s %s",
        appointment.id, appointment.user_id, appointment.barber_id,
        appointment.appointment_date, appointment.appointment_time,
    )

    return {
        "success": True,
        "message": "Appointment created successfully",
        "appointmentId": appointment.id,
        "data": appointment,
    }


# =========================
# ALTERAR STATUS (ADMIN: aprovar / rejeitar / finalizar)
# =========================
@router.put("/{appointment_id}/status")
def update_appointment_status(
    appointment_id: int,
    payload: AppointmentStatusUpdate,
    session: Session = Depends(get_session),
):
    if not payload.status or payload.status not in APPOINTMENT_STATUSES:
        raise HTTPException(status_code=400, detail="Valid status is required")

    appt = _get_or_404(session, appointment_id)

    # reativar um cancelado ocupa o horário de novo
    if appt.status == "cancelled" and payload.status != "cancelled":
        service = session.get(Service, appt.service_id)
        _ensure_slot_free(
            session, appt.barber_id, appt.appointment_date,
            appt.appointment_time, service.duration, exclude_id=appt.id,
        )

    previous = appt.status
    appt.status = payload.status
    appt.updated_at = datetime.utcnow()

    session.add(appt)
    session.commit()
    session.refresh(appt)

    logger.info("Appointment %s status %s -> %s", appt.id, previous, appt.status)

    return {
        "success": True,
        "message": "Appointment status updated successfully",
        "data": appt,
    }


# =========================
# CANCELAR (CLIENTE)
# =========================
@router.put("/{appointment_id}/cancel")
def cancel_appointment(appointment_id: int, session: Session = Depends(get_session)):
    appt = _get_or_404(session, appointment_id)

    if appt.status == "completed":
        raise HTTPException(status_code=400, detail="Completed appointments cannot be cancelled")

    if appt.status != "cancelled":
        appt.status = "cancelled"
        appt.updated_at = datetime.utcnow()
        session.add(appt)
        session.commit()
        session.refresh(appt)
        logger.info("Appointment %s cancelled", appt.id)

    return {
        "success": True,
        "message": "Appointment cancelled successfully",
        "data": appt,
    }


# =========================
# VINCULAR PAGAMENTO
# =========================
@router.put("/{appointment_id}")
def update_appointment(
    appointment_id: int,
    payload: AppointmentPaymentUpdate,
    session: Session = Depends(get_session),
):
    appt = _get_or_404(session, appointment_id)

    if payload.payment_status is not None:
        if payload.payment_status not in PAYMENT_STATUSES:
            raise HTTPException(status_code=400, detail="Invalid payment status")
        appt.payment_status = payload.payment_status

    if payload.payment_id is not None:
        if not session.get(Payment, payload.payment_id):
            raise HTTPException(status_code=404, detail="Payment not found")
        appt.payment_id = payload.payment_id

    appt.updated_at = datetime.utcnow()
    session.add(appt)
    session.commit()
    session.refresh(appt)

    return {
        "success": True,
        "message": "Appointment updated successfully",
        "data": appt,
    }
