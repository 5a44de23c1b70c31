from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from micks_barber.database import get_session
from micks_barber.models.service import Service


router = APIRouter(
    prefix="/services",
    tags=["services"]
)


@router.get("")
def list_services(session: Session = Depends(get_session)):
    services = session.exec(
        select(Service).order_by(Service.price)
    ).all()

    return {"success": True, "data": services}


@router.get("/{service_id}")
def get_service(service_id: int, session: Session = Depends(get_session)):
    service = session.get(Service, service_id)
    if not service:
        raise HTTPException(status_code=404, detail="Service not found")

    return {"success": True, "data": service}
