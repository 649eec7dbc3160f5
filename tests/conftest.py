import pytest

from api import create_app

USER_PAYLOAD = {
    "fullname": "Ann Lee",
    "email": "ann@example.com",
    "password": "Abcdef1",
    "role": "user",
    "phone": "123",
}


@pytest.fixture
def app(tmp_path):
    app = create_app("test", overrides={"DATABASE_URL": f"sqlite:///{tmp_path / 'test.db'}"})
    yield app
    app.extensions["storage"].close()
    app.extensions["storage"].dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def storage(app):
    return app.extensions["storage"]


@pytest.fixture
def token_service(app):
    return app.extensions["token_service"]


@pytest.fixture
def registered_user(client):
    response = client.post("/users", json=USER_PAYLOAD)
    assert response.status_code == 201
    return response.get_json()


@pytest.fixture
def tokens(client, registered_user):
    response = client.post(
        "/users/login",
        json={"email": USER_PAYLOAD["email"], "password": USER_PAYLOAD["password"]},
    )
    assert response.status_code == 200
    return response.get_json()


@pytest.fixture
def auth_headers(tokens):
    return {"Authorization": f"Bearer {tokens['accessToken']}"}
