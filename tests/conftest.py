import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from storefront import identity
from storefront.app import app
from storefront.database import get_db, init_db, make_engine

PASSWORD = "Secret123!"
ADMIN_PASSWORD = "Admin123123!"


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'store.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth(token):
    return {"Authorization": f"Bearer {token}"}


def register(client, username, email=None, password=PASSWORD):
    response = client.post(
        "/api/auth/register",
        json={"username": username, "email": email or f"{username}@example.com", "password": password},
    )
    assert response.status_code == 201, response.text
    return response.json()["token"]


@pytest.fixture
def admin_token(client, session_factory):
    session = session_factory()
    try:
        identity.ensure_admin(session, "admin", "admin@example.com", ADMIN_PASSWORD)
    finally:
        session.close()
    response = client.post("/api/auth/login", json={"username": "admin", "password": ADMIN_PASSWORD})
    return response.json()["token"]


@pytest.fixture
def alice_token(client):
    return register(client, "alice")


@pytest.fixture
def bob_token(client):
    return register(client, "bob")


@pytest.fixture
def make_product(client, admin_token):
    def make(name="Widget", price="10.00", stock=5, description="A widget"):
        response = client.post(
            "/api/products",
            json={"name": name, "description": description, "price": price, "stock": stock},
            headers=auth(admin_token),
        )
        assert response.status_code == 201, response.text
        return response.json()

    return make
