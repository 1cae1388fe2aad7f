import pytest
from sqlalchemy.exc import OperationalError

from rentapp import db
from rentapp.errors import StoreError
from rentapp.utils.registry import load_properties


@pytest.mark.parametrize('method,url', [
    ('get', '/api/properties'),
    ('get', '/api/dashboard'),
    ('get', '/api/settings'),
    ('post', '/api/payments'),
    ('get', '/api/leases/alerts'),
    ('get', '/api/taxreport'),
    ('get', '/api/email-log'),
    ('get', '/api/users'),
])
def test_api_requires_login(client, method, url):
    resp = getattr(client, method)(url)
    assert resp.status_code == 401
    assert resp.get_json() == {'ok': False, 'msg': 'Not logged in.'}


def test_login_me_logout(client):
    assert client.get('/api/me').get_json() is None

    resp = client.post('/api/login', json={'username': 'admin', 'password': 'nope'})
    assert resp.get_json() == {'ok': False, 'msg': 'Invalid username or password.'}

    resp = client.post('/api/login', json={'username': 'admin', 'password': 'admin123'})
    body = resp.get_json()
    assert body['ok'] is True
    assert body['user']['username'] == 'admin'
    assert body['user']['role'] == 'admin'
    assert 'password_hash' not in body['user']

    assert client.get('/api/me').get_json()['username'] == 'admin'
    assert client.get('/api/properties').status_code == 200

    assert client.post('/api/logout').get_json() == {'ok': True}
    assert client.get('/api/me').get_json() is None
    assert client.get('/api/properties').status_code == 401


def test_login_with_form_body(client):
    resp = client.post('/api/login', data={'username': 'admin', 'password': 'admin123'})
    assert resp.get_json()['ok'] is True


def test_user_management(admin_client, app):
    resp = admin_client.post('/api/users', json={'username': 'maria', 'password': 'secret99', 'role': 'manager'})
    assert resp.get_json()['ok'] is True

    resp = admin_client.post('/api/users', json={'username': 'maria', 'password': 'other999'})
    assert resp.status_code == 400
    assert resp.get_json() == {'ok': False, 'msg': 'Username already exists.'}

    users = admin_client.get('/api/users').get_json()
    assert [u['username'] for u in users] == ['admin', 'maria']
    assert all(set(u) == {'id', 'username', 'role'} for u in users)

    admin_id = next(u['id'] for u in users if u['username'] == 'admin')
    maria_id = next(u['id'] for u in users if u['username'] == 'maria')

    resp = admin_client.delete(f'/api/users/{admin_id}')
    assert resp.status_code == 400
    assert resp.get_json() == {'ok': False, 'msg': 'Cannot delete yourself.'}

    # Un gestor no administra usuarios
    manager = app.test_client()
    manager.post('/api/login', json={'username': 'maria', 'password': 'secret99'})
    assert manager.get('/api/properties').status_code == 200
    assert manager.get('/api/users').status_code == 403

    assert admin_client.delete(f'/api/users/{maria_id}').get_json() == {'ok': True}
    assert [u['username'] for u in admin_client.get('/api/users').get_json()] == ['admin']


def test_settings_roundtrip(admin_client):
    settings = admin_client.get('/api/settings').get_json()
    assert set(settings) >= {'ll_name', 'll_email', 'll_phone', 'll_addr'}

    resp = admin_client.post('/api/settings', json={'ll_name': 'Acme Rentals', 'late_fee_days': 5})
    assert resp.get_json() == {'ok': True}

    settings = admin_client.get('/api/settings').get_json()
    assert settings['ll_name'] == 'Acme Rentals'
    assert settings['late_fee_days'] == '5'


def test_store_failure_is_not_an_empty_result(session, monkeypatch):
    def broken_execute(*args, **kwargs):
        raise OperationalError('SELECT', {}, Exception('disk I/O error'))

    monkeypatch.setattr(session, 'execute', broken_execute)
    with pytest.raises(StoreError):
        load_properties(session)


def test_store_failure_maps_to_500(admin_client, monkeypatch):
    def broken_execute(*args, **kwargs):
        raise OperationalError('SELECT', {}, Exception('disk I/O error'))

    monkeypatch.setattr(db.session, 'execute', broken_execute)
    resp = admin_client.get('/api/properties')
    assert resp.status_code == 500
    assert resp.get_json() == {'ok': False, 'msg': 'Database error.'}
