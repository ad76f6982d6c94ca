import os
import tempfile

# The engine is built at import time, so the database is chosen before
# anything from backoffice is imported
DB_FILE = os.path.join(tempfile.mkdtemp(prefix="backoffice-"), "test.db")
os.environ["DB_URL"] = f"sqlite:///{DB_FILE}"
os.environ["OPENOBSERVE_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event

from backoffice.main import app
from backoffice.src.db import ORMbase, engine, sessionMaker
from backoffice.src.urls import URL_COMPANY


@event.listens_for(engine, "connect")
def enableForeignKeys(dbapi_connection, connection_record):
    # SQLite only enforces foreign keys, and their ON DELETE actions, when asked to
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture(autouse=True)
def tables():
    ORMbase.metadata.create_all(engine)
    yield
    ORMbase.metadata.drop_all(engine)


@pytest.fixture
def client():
    with TestClient(app) as testClient:
        yield testClient


@pytest.fixture
def session():
    session = sessionMaker()
    yield session
    session.close()


@pytest.fixture
def company(client):
    response = client.post(
        "/api" + URL_COMPANY,
        json={
            "name": "AfriCar Transport",
            "address": "Boulevard de la République, Abidjan",
            "phone_number": "+33142685300",
            "email_id": "contact@africar.ci",
        },
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def stationData():
    return {
        "name": "Gare Test",
        "city": "Abidjan",
        "address": "Boulevard Nangui Abrogoua, Adjamé",
        "capacity": 50,
        "latitude": "5.3599",
        "longitude": "-4.0083",
    }
