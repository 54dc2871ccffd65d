import os
import tempfile
from datetime import date, time, timedelta

# Settings are read once at import time, so the test database has to be
# configured before anything from canteen is imported.
_DB_DIR = tempfile.mkdtemp(prefix="canteen-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'canteen.db')}"
os.environ["CART_STORE"] = "database"
os.environ["CART_SAVE_DEBOUNCE_SECONDS"] = "0"
os.environ["CART_SAVE_BACKOFF_SECONDS"] = "0"
os.environ["SEED_DEMO_DATA"] = "true"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from canteen.database import engine  # noqa: E402
from canteen.main import app  # noqa: E402
from canteen.seed import seed_demo_data  # noqa: E402

API = "/api/v1"

STUDENT_EMAIL = "student@test.com"
ADMIN_EMAIL = "admin@test.com"


def tomorrow_noon() -> tuple[date, time]:
    return date.today() + timedelta(days=1), time(12, 0)


@pytest.fixture
def db_engine():
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield engine


@pytest.fixture
def session(db_engine):
    with Session(db_engine) as session:
        yield session


@pytest.fixture
def seeded(db_engine, session):
    seed_demo_data(db_engine)
    return session


@pytest.fixture
def client(db_engine):
    # The lifespan seeds the demo data and starts the cart save queue
    with TestClient(app) as c:
        yield c


def login(client: TestClient, email: str) -> dict[str, str]:
    res = client.post(f"{API}/auth/login", json={"email": email, "password": "whatever"})
    assert res.status_code == 200, res.text
    return {"Authorization": f"Bearer {res.json()['access_token']}"}
