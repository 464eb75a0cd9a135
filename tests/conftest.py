# tests/conftest.py

import pytest

from fitai import create_app, db
from fitai.models.food import Food

TEST_CONFIG = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
    # Nunca llamar a APIs reales desde los tests
    "OPENAI_API_KEY": "",
    "NUTRITIONIX_APP_ID": "",
    "NUTRITIONIX_API_KEY": "",
    "OFF_ENABLED": True,
}


@pytest.fixture
def app():
    app = create_app(dict(TEST_CONFIG))
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def add_food(app):
    """Crea y guarda un Food; devuelve la instancia."""
    def _add(name_en, **fields):
        f = Food(name_en=name_en, **fields)
        db.session.add(f)
        db.session.commit()
        return f
    return _add
