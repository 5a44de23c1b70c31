import logging

from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from micks_barber.config import DATABASE_URL

logger = logging.getLogger(__name__)


def build_engine(url: str):
    """MySQL em produção, SQLite em desenvolvimento/testes."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # banco em memória precisa de uma única conexão compartilhada
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=False, **kwargs)

    return create_engine(url, echo=False, pool_pre_ping=True, pool_recycle=300)


engine = build_engine(DATABASE_URL)


def create_db_and_tables(bind=None):
    # registra as tabelas no metadata
    from micks_barber.models import appointment, barber, payment, payment_method, service, user  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)
    logger.info("Database tables ready")


def get_session():
    with Session(engine) as session:
        yield session
