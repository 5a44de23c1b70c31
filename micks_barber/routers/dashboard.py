from collections import Counter
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from micks_barber.database import get_session
from micks_barber.core.security import get_current_admin
from micks_barber.models.user import User
from micks_barber.models.appointment import APPOINTMENT_STATUSES, Appointment
from micks_barber.models.payment import Payment
from micks_barber.models.service import Service


router = APIRouter(prefix="/admin/dashboard", tags=["dashboard"])


@router.get("/summary")
def dashboard_summary(
    day: Optional[date] = None,
    session: Session = Depends(get_session),
    current_admin: User = Depends(get_current_admin),
):
    day = day or date.today()

    appts = session.exec(select(Appointment)).all()

    # métricas
    by_status = Counter(a.status for a in appts)
    status_counts = {s: by_status.get(s, 0) for s in APPOINTMENT_STATUSES}

    todays_confirmed = [
        a for a in appts if a.appointment_date == day and a.status == "confirmed"
    ]

    payments = session.exec(select(Payment)).all()
    pending_receipts = sum(
        1 for p in payments if p.payment_status == "pending" and p.receipt_image
    )

    # receita: só pagamentos concluídos
    revenue = sum(float(p.amount) for p in payments if p.payment_status == "completed")

    # top serviços (por quantidade de agendamentos não cancelados)
    service_ids = [a.service_id for a in appts if a.status != "cancelled"]
    services = session.exec(select(Service).where(Service.id.in_(list(set(service_ids))))).all()
    service_map = {s.id: s for s in services}

    top = []
    for sid, qty in Counter(service_ids).most_common(5):
        s = service_map.get(sid)
        if s:
            top.append({"service_id": sid, "name": s.name, "count": qty})

    return {
        "day": day.isoformat(),
        "total_appointments": len(appts),
        "status": status_counts,
        "pending_approvals": status_counts["pending"],
        "todays_confirmed": len(todays_confirmed),
        "pending_receipts": pending_receipts,
        "revenue_completed": round(revenue, 2),
        "top_services": top,
    }
