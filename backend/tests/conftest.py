from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.session import Base, get_session
from app.main import app

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_session] = override_get_session


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def master_data(client):
    """One client with a 142/h service, a consultant, sector, service type and project."""
    sky = client.post(
        "/clients",
        json={"code": "CLI001", "name": "SkyStone", "tax_id": "12.345.678/0001-90", "email": "a@sky.com"},
    ).json()
    other = client.post(
        "/clients",
        json={"code": "CLI002", "name": "TechCorp", "tax_id": "98.765.432/0001-10", "email": "b@tech.com"},
    ).json()
    consultant = client.post("/consultants", json={"code": "LEON", "name": "Leon", "password": "secret1"}).json()
    service = client.post(
        "/services",
        json={"code": "DEV001", "client_id": sky["id"], "description": "ERP development", "hourly_rate": "142"},
    ).json()
    other_service = client.post(
        "/services",
        json={"code": "SUP001", "client_id": other["id"], "description": "Support", "hourly_rate": "120"},
    ).json()
    sector = client.post("/sectors", json={"code": "TI", "description": "IT", "client_id": sky["id"]}).json()
    service_type = client.post("/service-types", json={"code": "CONS", "description": "Consulting"}).json()
    project = client.post("/projects", json={"code": "ERP", "client_id": sky["id"], "name": "ERP rollout"}).json()
    return {
        "client": sky,
        "other_client": other,
        "consultant": consultant,
        "service": service,
        "other_service": other_service,
        "sector": sector,
        "service_type": service_type,
        "project": project,
    }


@pytest.fixture
def entry_payload(master_data):
    def build(**overrides):
        payload = {
            "date": "2024-12-01",
            "consultant_id": master_data["consultant"]["id"],
            "client_id": master_data["client"]["id"],
            "service_id": master_data["service"]["id"],
            "start_time": "08:00",
            "end_time": "17:00",
            "break_start": "12:00",
            "break_end": "13:00",
        }
        payload.update(overrides)
        return payload

    return build
