from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from micks_barber.database import get_session
from micks_barber.models.barber import Barber


router = APIRouter(prefix="/barbers", tags=["barbers"])


@router.get("")
def list_barbers(session: Session = Depends(get_session)):
    barbers = session.exec(
        select(Barber).order_by(Barber.rating.desc())
    ).all()

    return {"success": True, "data": barbers}


@router.get("/{barber_id}")
def get_barber(barber_id: int, session: Session = Depends(get_session)):
    barber = session.get(Barber, barber_id)
    if not barber:
        raise HTTPException(status_code=404, detail="Barber not found")

    return {"success": True, "data": barber}
