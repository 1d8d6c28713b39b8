import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from family_tree.core.db import get_db
from family_tree.main import app
from family_tree.models.base import Base
from family_tree.models import entities  # noqa: F401


engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def seeded_family(client):
    """Two root lines: Grandpa John over Uncle Bob, Grandma Mary over Aunt Alice."""
    grandpa = client.post("/api/family", json={"name": "Grandpa John"}).json()
    grandma = client.post("/api/family", json={"name": "Grandma Mary", "position": 1}).json()
    bob = client.post("/api/family", json={"name": "Uncle Bob", "parentId": grandpa["id"]}).json()
    alice = client.post("/api/family", json={"name": "Aunt Alice", "parentId": grandma["id"]}).json()
    return {"grandpa": grandpa, "grandma": grandma, "bob": bob, "alice": alice}
