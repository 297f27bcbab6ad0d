from datetime import datetime

import pytest

from app import create_app
from database import db
from recorder import Recorder


NOW = datetime(2026, 10, 19, 12, 0)


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
    })
    yield app
    with app.app_context():
        db.drop_all()


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield


@pytest.fixture
def recorder(ctx):
    return Recorder(now=lambda: NOW)


@pytest.fixture
def runner(app):
    return app.test_cli_runner()
