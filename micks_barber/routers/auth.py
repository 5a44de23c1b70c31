import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, select

from micks_barber.database import get_session
from micks_barber.models.user import User, UserCreate, UserLogin
from micks_barber.core.security import (
    create_access_token,
    get_current_user,
    get_password_hash,
    verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _public_user(user: User) -> dict:
    # nunca devolve o hash da senha
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "role": user.role,
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(user: UserCreate, session: Session = Depends(get_session)):

    existing_user = session.exec(
        select(User).where(User.email == user.email)
    ).first()

    if existing_user:
        raise HTTPException(status_code=400, detail="User already exists with this email")

    db_user = User(
        name=user.name,
        email=user.email,
        phone=user.phone,
        password_hash=get_password_hash(user.password),
    )

    session.add(db_user)
    session.commit()
    session.refresh(db_user)

    logger.info("Registered user %s (%s)", db_user.id, db_user.email)

    return {
        "success": True,
        "message": "User registered successfully",
        "user": _public_user(db_user),
    }


@router.post("/login")
def login(credentials: UserLogin, session: Session = Depends(get_session)):
    user = session.exec(
        select(User).where(User.email == credentials.email)
    ).first()

    if not user or not verify_password(credentials.password, user.password_hash):
        logger.warning("Failed login for %s", credentials.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    access_token = create_access_token(
        data={"sub": str(user.id), "role": user.role}
    )

    return {
        "success": True,
        "message": "Login successful",
        "user": _public_user(user),
        "access_token": access_token,
        "token_type": "bearer",
    }


@router.get("/me")
def me(current_user: User = Depends(get_current_user)):
    return {"success": True, "user": _public_user(current_user)}
