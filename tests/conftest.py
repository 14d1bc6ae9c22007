import pytest

from app import create_app
from config import TestingConfig
from database import DatabaseService
from models import db
import auth


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()
    auth.SESSIONS.clear()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def logged_in_client(client):
    resp = client.post('/login', data={'username': 'generator_admin', 'password': 'moodAsset'})
    assert resp.status_code == 302
    return client


@pytest.fixture
def metal_workspace(app):
    return DatabaseService.get_workspace_by_key('metal')
