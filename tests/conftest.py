import os
import tempfile
from datetime import date, timedelta

# antes de importar a aplicação
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="micks-barber-uploads-")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from micks_barber.client.api import BarberShopClient
from micks_barber.core.security import create_access_token, get_password_hash
from micks_barber.database import create_db_and_tables, get_session
from micks_barber.main import app
from micks_barber.models.barber import Barber
from micks_barber.models.service import Service
from micks_barber.models.user import User

PASSWORD = "secret123"


def future_day(days: int = 7) -> str:
    return (date.today() + timedelta(days=days)).isoformat()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_db_and_tables(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def api(client):
    """Cliente do app apontando para a API de teste."""
    return BarberShopClient(http=TestClient(app, base_url="http://testserver/api"))


def make_user(session, email, role="customer", name="Test User"):
    user = User(name=name, email=email, password_hash=get_password_hash(PASSWORD), role=role)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def customer(session):
    return make_user(session, "juan@example.com", name="Juan Dela Cruz")


@pytest.fixture
def other_customer(session):
    return make_user(session, "maria@example.com", name="Maria Clara")


@pytest.fixture
def admin(session):
    return make_user(session, "admin@micksbarber.com", role="admin", name="Admin")


@pytest.fixture
def barbers(session):
    rows = [
        Barber(name="Joel Reyes", specialty="Beard grooming", rating=4.7),
        Barber(name="Mick Santos", specialty="Fades", rating=4.9),
        Barber(name="Carlo Cruz", specialty="Modern styles", rating=4.5),
    ]
    session.add_all(rows)
    session.commit()
    for row in rows:
        session.refresh(row)
    return rows


@pytest.fixture
def barber(barbers):
    return barbers[0]


@pytest.fixture
def services(session):
    rows = [
        Service(name="Haircut + Beard", description="Full package", price=350.0, duration=50),
        Service(name="Classic Haircut", description="Scissor cut", price=250.0, duration=30),
        Service(name="Beard Trim", description="Line-up", price=150.0, duration=20),
    ]
    session.add_all(rows)
    session.commit()
    for row in rows:
        session.refresh(row)
    return rows


@pytest.fixture
def service(services):
    return services[1]


@pytest.fixture
def booking(customer, barber, service):
    return {
        "user_id": customer.id,
        "barber_id": barber.id,
        "service_id": service.id,
        "appointment_date": future_day(),
        "appointment_time": "10:00",
    }


@pytest.fixture
def appointment(client, booking):
    response = client.post("/api/appointments", json=booking)
    assert response.status_code == 201
    return response.json()["data"]


def auth_header(user) -> dict:
    token = create_access_token({"sub": str(user.id), "role": user.role})
    return {"Authorization": f"Bearer {token}"}
