import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from backend.database import Base, Database
from backend.main import create_app


@pytest.fixture
def database():
    database = Database('sqlite://', poolclass=StaticPool)
    database.open()
    try:
        yield database
    finally:
        Base.metadata.drop_all(bind=database.engine)
        database.close()


@pytest.fixture
def db(database):
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(database):
    app = create_app(database)
    with TestClient(app) as test_client:
        yield test_client
