# conftest.py
from decimal import Decimal

import pytest

from rentapp import create_app, db
from rentapp.models import Tenant
from rentapp.utils.registry import create_property


@pytest.fixture
def app():
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'SECRET_KEY': 'test',
    })
    yield app


@pytest.fixture
def session(app):
    """db.session dentro de un contexto de aplicación."""
    with app.app_context():
        yield db.session


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(app):
    client = app.test_client()
    resp = client.post('/api/login', json={'username': 'admin', 'password': 'admin123'})
    assert resp.get_json()['ok'] is True
    return client


@pytest.fixture
def oak_street(session):
    """Propiedad 'Oak St #2' (renta base 1200) con su inquilina inicial."""
    prop_id = create_property(session, name='Oak St #2', base_rent=Decimal('1200.00'),
                              tenant_name='Jane Roe', tenant_email='jane@example.com',
                              label='Oak Street Unit 2', address='12 Oak St')
    tenant = session.query(Tenant).filter_by(property_id=prop_id).one()
    return prop_id, tenant.id
