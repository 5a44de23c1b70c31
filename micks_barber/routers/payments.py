import logging
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from micks_barber.database import get_session
from micks_barber.models.appointment import PAYMENT_STATUSES, Appointment
from micks_barber.models.barber import Barber
from micks_barber.models.payment import (
    VERIFICATION_RESULTS,
    Payment,
    PaymentCreate,
    PaymentStatusUpdate,
    PaymentVerification,
)
from micks_barber.models.payment_method import (
    PaymentMethod,
    PaymentMethodCreate,
    PaymentMethodUpdate,
)
from micks_barber.models.service import Service
from micks_barber.models.user import User


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


def _payment_rows(session: Session, *filters) -> List[Dict]:
    statement = (
        select(
            Payment,
            Appointment.appointment_date,
            Appointment.appointment_time,
            Appointment.status,
            Service.name,
            Service.price,
            Barber.name,
            User.name,
            User.email,
        )
        .join(Appointment, Payment.appointment_id == Appointment.id)
        .join(Service, Appointment.service_id == Service.id)
        .join(Barber, Appointment.barber_id == Barber.id)
        .join(User, Payment.user_id == User.id)
        .where(*filters)
        .order_by(Payment.created_at.desc(), Payment.id.desc())
    )

    data = []
    for row in session.exec(statement).all():
        payment = row[0]
        item = payment.model_dump()
        item.update(
            appointment_date=row[1],
            appointment_time=row[2],
            appointment_status=row[3],
            service_name=row[4],
            service_price=row[5],
            barber_name=row[6],
            user_name=row[7],
            user_email=row[8],
        )
        data.append(item)
    return data


def _sync_appointment_payment_status(session: Session, payment: Payment):
    # mesmo commit do pagamento: os dois mudam juntos ou nenhum muda
    appt = session.get(Appointment, payment.appointment_id)
    if appt:
        appt.payment_status = payment.payment_status
        appt.payment_id = payment.id
        appt.updated_at = datetime.utcnow()
        session.add(appt)


def _unset_other_defaults(session: Session, user_id: int, keep_id: Optional[int] = None):
    others = session.exec(
        select(PaymentMethod).where(
            PaymentMethod.user_id == user_id,
            PaymentMethod.is_default == True,  # noqa: E712
        )
    ).all()
    for method in others:
        if method.id != keep_id:
            method.is_default = False
            session.add(method)


# =========================
# LISTAGENS
# =========================
@router.get("")
def list_payments(
    status: Optional[str] = None,
    session: Session = Depends(get_session),
):
    filters = []
    if status:
        if status not in PAYMENT_STATUSES:
            raise HTTPException(status_code=400, detail="Invalid payment status")
        filters.append(Payment.payment_status == status)
    return _payment_rows(session, *filters)


@router.get("/user/{user_id}")
def list_user_payments(user_id: int, session: Session = Depends(get_session)):
    return _payment_rows(session, Payment.user_id == user_id)


@router.get("/admin/pending")
def list_pending_payments(session: Session = Depends(get_session)):
    """Pagamentos aguardando verificação do comprovante."""
    return _payment_rows(session, Payment.payment_status == "pending")


@router.get("/appointment/{appointment_id}")
def get_payment_by_appointment(appointment_id: int, session: Session = Depends(get_session)):
    rows = _payment_rows(session, Payment.appointment_id == appointment_id)
    if not rows:
        raise HTTPException(status_code=404, detail="Payment not found for this appointment")
    return rows[0]


# =========================
# FORMAS DE PAGAMENTO SALVAS
# =========================
@router.get("/methods/{user_id}")
def list_payment_methods(user_id: int, session: Session = Depends(get_session)):
    return session.exec(
        select(PaymentMethod)
        .where(
            PaymentMethod.user_id == user_id,
            PaymentMethod.is_active == True,  # noqa: E712
        )
        .order_by(PaymentMethod.is_default.desc(), PaymentMethod.created_at.desc(), PaymentMethod.id.desc())
    ).all()


@router.post("/methods")
def add_payment_method(payload: PaymentMethodCreate, session: Session = Depends(get_session)):
    if not session.get(User, payload.user_id):
        raise HTTPException(status_code=404, detail="User not found")

    if payload.is_default:
        _unset_other_defaults(session, payload.user_id)

    method = PaymentMethod(
        user_id=payload.user_id,
        method_type=payload.method_type,
        method_name=payload.method_name,
        is_default=payload.is_default,
    )
    session.add(method)
    session.commit()
    session.refresh(method)

    logger.info("Added payment method %s for user %s", method.id, method.user_id)

    return {
        "id": method.id,
        "message": "Payment method added successfully",
        "data": method,
    }


@router.put("/methods/{method_id}")
def update_payment_method(
    method_id: int,
    payload: PaymentMethodUpdate,
    session: Session = Depends(get_session),
):
    method = session.get(PaymentMethod, method_id)
    if not method:
        raise HTTPException(status_code=404, detail="Payment method not found")

    if payload.method_name is not None:
        method.method_name = payload.method_name
    if payload.is_active is not None:
        method.is_active = payload.is_active
    if payload.is_default is not None:
        if payload.is_default and method.is_active:
            _unset_other_defaults(session, method.user_id, keep_id=method.id)
        method.is_default = payload.is_default
    # forma desativada nunca fica como padrão
    if not method.is_active:
        method.is_default = False

    session.add(method)
    session.commit()
    session.refresh(method)

    return {"message": "Payment method updated successfully", "data": method}


@router.delete("/methods/{method_id}")
def delete_payment_method(method_id: int, session: Session = Depends(get_session)):
    method = session.get(PaymentMethod, method_id)
    if not method:
        raise HTTPException(status_code=404, detail="Payment method not found")

    # soft delete
    method.is_active = False
    method.is_default = False
    session.add(method)
    session.commit()

    logger.info("Deactivated payment method %s", method_id)
    return {"message": "Payment method deleted successfully"}


# =========================
# PAGAMENTO
# =========================
@router.post("")
def create_payment(payload: PaymentCreate, session: Session = Depends(get_session)):
    appt = session.get(Appointment, payload.appointment_id)
    if not appt:
        raise HTTPException(status_code=404, detail="Appointment not found")

    if not session.get(User, payload.user_id):
        raise HTTPException(status_code=404, detail="User not found")

    payment = Payment(
        appointment_id=payload.appointment_id,
        user_id=payload.user_id,
        amount=payload.amount,
        payment_method=payload.payment_method,
        transaction_id=payload.transaction_id,
        payment_reference=payload.payment_reference,
        receipt_image=payload.receipt_image,
        receipt_upload_date=datetime.utcnow() if payload.receipt_image else None,
        payment_status="pending",
    )
    session.add(payment)
    session.flush()  # gera o id antes de vincular ao agendamento

    appt.payment_id = payment.id
    appt.total_amount = payload.amount
    appt.payment_status = "pending"
    appt.updated_at = datetime.utcnow()
    session.add(appt)

    session.commit()
    session.refresh(payment)

    logger.info(
        "Created payment %s for appointment %s (%s, receipt=%s)",
        payment.id, appt.id, payment.payment_method, bool(payment.receipt_image),
    )

    return {
        "id": payment.id,
        "message": "Payment created successfully",
        "payment_status": payment.payment_status,
        "data": payment,
    }


@router.get("/{payment_id}")
def get_payment(payment_id: int, session: Session = Depends(get_session)):
    rows = _payment_rows(session, Payment.id == payment_id)
    if not rows:
        raise HTTPException(status_code=404, detail="Payment not found")
    return rows[0]


@router.put("/{payment_id}/status")
def update_payment_status(
    payment_id: int,
    payload: PaymentStatusUpdate,
    session: Session = Depends(get_session),
):
    payment = session.get(Payment, payment_id)
    if not payment:
        raise HTTPException(status_code=404, detail="Payment not found")

    payment.payment_status = payload.payment_status
    payment.payment_date = payload.payment_date or datetime.utcnow()
    session.add(payment)

    _sync_appointment_payment_status(session, payment)
    session.commit()
    session.refresh(payment)

    logger.info("Payment %s status -> %s", payment.id, payment.payment_status)

    return {
        "message": "Payment status updated successfully",
        "payment_status": payment.payment_status,
        "data": payment,
    }


# =========================
# VERIFICAR COMPROVANTE (ADMIN)
# =========================
@router.put("/{payment_id}/verify")
def verify_payment(
    payment_id: int,
    payload: PaymentVerification,
    session: Session = Depends(get_session),
):
    admin = session.get(User, payload.admin_id)
    if not admin or admin.role != "admin":
        raise HTTPException(status_code=403, detail="Only admins can verify payments")

    payment = session.get(Payment, payment_id)
    if not payment:
        raise HTTPException(status_code=404, detail="Payment not found")

    now = datetime.utcnow()
    payment.payment_status = VERIFICATION_RESULTS[payload.status]
    payment.admin_verified_by = admin.id
    payment.admin_verification_date = now
    payment.admin_notes = payload.notes
    if payload.status == "approved":
        payment.payment_date = now
    session.add(payment)

    _sync_appointment_payment_status(session, payment)
    session.commit()
    session.refresh(payment)

    logger.info("Payment %s %s by admin %s", payment.id, payload.status, admin.id)

    return {
        "message": f"Payment {payload.status} successfully",
        "payment_status": payment.payment_status,
        "data": payment,
    }
