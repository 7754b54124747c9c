import pytest

from sitepay.main import create_app
from tests.fakes import OWNER, fake_container


@pytest.fixture
def app(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container=fake_container())


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def logged_in(client):
    with client.session_transaction() as sess:
        sess["user_id"] = OWNER
        sess["role"] = "user"
    return client
