import logging
import os

from sqlmodel import Session, select

from micks_barber.database import create_db_and_tables, engine
from micks_barber.models.barber import Barber
from micks_barber.models.service import Service
from micks_barber.models.user import User
from micks_barber.core.security import get_password_hash

logger = logging.getLogger(__name__)


ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@micksbarber.com")
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "admin123")

BARBERS = [
    dict(name="Mick Santos", specialty="Classic cuts & fades", rating=4.9, phone="09171234567"),
    dict(name="Joel Reyes", specialty="Beard grooming", rating=4.7, phone="09181234567"),
    dict(name="Carlo Dela Cruz", specialty="Modern styles", rating=4.5, phone="09191234567"),
]

SERVICES = [
    dict(name="Classic Haircut", description="Scissor and clipper cut", price=250.0, duration=30),
    dict(name="Beard Trim", description="Shape and line-up", price=150.0, duration=20),
    dict(name="Haircut + Beard", description="Full grooming package", price=350.0, duration=50),
    dict(name="Hot Towel Shave", description="Straight razor shave", price=300.0, duration=40),
]


def seed(session: Session):
    # 1) admin do painel
    admin = session.exec(select(User).where(User.email == ADMIN_EMAIL)).first()
    if not admin:
        session.add(
            User(
                name="Administrator",
                email=ADMIN_EMAIL,
                password_hash=get_password_hash(ADMIN_PASSWORD),
                role="admin",
            )
        )

    # 2) barbeiros (se não existirem)
    if not session.exec(select(Barber)).first():
        session.add_all([Barber(**b) for b in BARBERS])

    # 3) serviços (se não existirem)
    if not session.exec(select(Service)).first():
        session.add_all([Service(**s) for s in SERVICES])

    session.commit()


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    create_db_and_tables()
    with Session(engine) as session:
        seed(session)

    logger.info("Seed concluído! Admin: %s", ADMIN_EMAIL)
    logger.info("Barbeiros: %d, serviços: %d", len(BARBERS), len(SERVICES))


if __name__ == "__main__":
    main()
