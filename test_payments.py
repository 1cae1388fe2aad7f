from datetime import date
from decimal import Decimal

from rentapp.models import Payment
from rentapp.utils.ledger import (
    record_payment, get_payment, list_payments, add_expense, list_expenses, delete_expense,
)


def test_record_payment_inserts_then_updates_same_row(session, oak_street):
    prop_id, tenant_id = oak_street
    record_payment(session, prop_id, tenant_id, 3, 2024, '1200', '500', today=date(2024, 3, 5))
    record_payment(session, prop_id, tenant_id, 3, 2024, '1250', '1250', late_fee='25',
                   notes='completo', today=date(2024, 3, 20))

    rows = session.query(Payment).filter_by(property_id=prop_id, month=3, year=2024).all()
    assert len(rows) == 1
    p = rows[0]
    assert p.rent_due == Decimal('1250.00')
    assert p.rent_received == Decimal('1250.00')
    assert p.late_fee == Decimal('25.00')
    assert p.notes == 'completo'
    assert p.paid_date == date(2024, 3, 20)


def test_update_keeps_original_tenant(session, oak_street):
    prop_id, tenant_id = oak_street
    record_payment(session, prop_id, tenant_id, 4, 2024, '1200', '1200')
    record_payment(session, prop_id, tenant_id + 100, 4, 2024, '1200', '1000')

    assert get_payment(session, prop_id, 4, 2024).tenant_id == tenant_id


def test_paid_date_only_when_something_received(session, oak_street):
    prop_id, tenant_id = oak_street
    record_payment(session, prop_id, tenant_id, 5, 2024, '1200', '0', today=date(2024, 5, 2))
    assert get_payment(session, prop_id, 5, 2024).paid_date is None

    record_payment(session, prop_id, tenant_id, 5, 2024, '1200', '100', today=date(2024, 5, 9))
    assert get_payment(session, prop_id, 5, 2024).paid_date == date(2024, 5, 9)

    # Volver a cero borra la fecha de pago
    record_payment(session, prop_id, tenant_id, 5, 2024, '1200', '0', today=date(2024, 5, 10))
    assert get_payment(session, prop_id, 5, 2024).paid_date is None


def test_negative_amounts_are_accepted(session, oak_street):
    prop_id, tenant_id = oak_street
    record_payment(session, prop_id, tenant_id, 6, 2024, '1200', '-50')

    p = get_payment(session, prop_id, 6, 2024)
    assert p.rent_received == Decimal('-50.00')
    assert p.paid_date is None


def test_list_payments_ordered_by_month(session, oak_street):
    prop_id, tenant_id = oak_street
    for month in (9, 2, 7):
        record_payment(session, prop_id, tenant_id, month, 2024, '1200', '1200')
    record_payment(session, prop_id, tenant_id, 1, 2023, '1200', '1200')

    assert [p.month for p in list_payments(session, prop_id, 2024)] == [2, 7, 9]


def test_expenses_add_list_delete(session, oak_street):
    prop_id, _ = oak_street
    first = add_expense(session, prop_id, 3, 2024, '80.5', 'Utilities', today=date(2024, 3, 1))
    add_expense(session, prop_id, 1, 2024, '200', 'Repairs', 'grifo')
    add_expense(session, prop_id, 3, 2024, '15', 'Utilities')

    expenses = list_expenses(session, prop_id, 2024)
    assert [(e.month, e.category) for e in expenses] == [(1, 'Repairs'), (3, 'Utilities'), (3, 'Utilities')]
    assert expenses[1].amount == Decimal('80.50')
    assert expenses[1].expense_date == date(2024, 3, 1)

    delete_expense(session, first)
    assert len(list_expenses(session, prop_id, 2024)) == 2


def test_payment_api(admin_client, app):
    resp = admin_client.post('/api/properties', json={
        'name': 'Elm 5', 'base_rent': 900, 'tenant_name': 'Sam', 'tenant_email': 'sam@example.com',
    })
    prop_id = resp.get_json()['id']
    tenant_id = admin_client.get('/api/properties').get_json()[0]['tenant_id']

    resp = admin_client.post('/api/payments', json={
        'property_id': prop_id, 'tenant_id': tenant_id, 'month': 2, 'year': 2024,
        'rent_due': 900, 'rent_received': 0,
    })
    assert resp.get_json() == {'ok': True}

    rows = admin_client.get(f'/api/payments?property_id={prop_id}&year=2024').get_json()
    assert len(rows) == 1
    assert rows[0]['rent_due'] == 900.0
    assert rows[0]['rent_received'] == 0.0
    assert rows[0]['late_fee'] == 0.0
    assert rows[0]['paid_date'] is None


def test_payment_api_rejects_missing_amount(admin_client):
    resp = admin_client.post('/api/payments', json={
        'property_id': 1, 'tenant_id': 1, 'month': 2, 'year': 2024, 'rent_due': 900,
    })
    assert resp.status_code == 400
    body = resp.get_json()
    assert body['ok'] is False
    assert body['msg'].startswith('rent_received')


def test_payment_api_rejects_bad_month(admin_client):
    resp = admin_client.post('/api/payments', json={
        'property_id': 1, 'tenant_id': 1, 'month': 13, 'year': 2024,
        'rent_due': 900, 'rent_received': 900,
    })
    assert resp.status_code == 400


def test_payments_list_requires_property(admin_client):
    resp = admin_client.get('/api/payments?year=2024')
    assert resp.status_code == 400
    assert resp.get_json()['ok'] is False


def test_expense_api(admin_client):
    prop_id = admin_client.post('/api/properties', json={
        'name': 'Elm 5', 'base_rent': 900, 'tenant_name': 'Sam', 'tenant_email': 'sam@example.com',
    }).get_json()['id']

    resp = admin_client.post('/api/expenses', json={
        'property_id': prop_id, 'month': 4, 'year': 2024, 'amount': '120.25', 'category': 'Insurance',
    })
    expense_id = resp.get_json()['id']

    rows = admin_client.get(f'/api/expenses?property_id={prop_id}&year=2024').get_json()
    assert rows[0]['amount'] == 120.25
    assert rows[0]['description'] == ''

    assert admin_client.delete(f'/api/expenses/{expense_id}').get_json() == {'ok': True}
    assert admin_client.get(f'/api/expenses?property_id={prop_id}&year=2024').get_json() == []


def test_payment_api_null_amounts(admin_client):
    prop_id = admin_client.post('/api/properties', json={
        'name': 'Elm 5', 'base_rent': 900, 'tenant_name': 'Sam', 'tenant_email': 'sam@example.com',
    }).get_json()['id']
    tenant_id = admin_client.get('/api/properties').get_json()[0]['tenant_id']

    # late_fee null cuenta como ausente (0)
    resp = admin_client.post('/api/payments', json={
        'property_id': prop_id, 'tenant_id': tenant_id, 'month': 3, 'year': 2024,
        'rent_due': 1000, 'rent_received': 1000, 'late_fee': None, 'notes': None,
    })
    assert resp.get_json() == {'ok': True}
    row = admin_client.get(f'/api/payments?property_id={prop_id}&year=2024').get_json()[0]
    assert row['late_fee'] == 0.0
    assert row['notes'] == ''

    # Un importe obligatorio a null es un 400, no un 500
    resp = admin_client.post('/api/payments', json={
        'property_id': prop_id, 'tenant_id': tenant_id, 'month': 3, 'year': 2024,
        'rent_due': None, 'rent_received': 1000,
    })
    assert resp.status_code == 400
    assert resp.get_json()['msg'].startswith('rent_due')

    resp = admin_client.post('/api/payments', json={
        'property_id': None, 'tenant_id': tenant_id, 'month': 3, 'year': 2024,
        'rent_due': 1000, 'rent_received': 1000,
    })
    assert resp.status_code == 400


def test_ledger_writes_reject_unknown_property(admin_client):
    resp = admin_client.post('/api/payments', json={
        'property_id': 4242, 'tenant_id': 1, 'month': 1, 'year': 2024,
        'rent_due': 1000, 'rent_received': 1000,
    })
    assert resp.status_code == 404
    assert resp.get_json() == {'ok': False, 'msg': 'Property not found.'}

    resp = admin_client.post('/api/expenses', json={
        'property_id': 4242, 'month': 1, 'year': 2024, 'amount': 500, 'category': 'Repairs',
    })
    assert resp.status_code == 404
    assert resp.get_json() == {'ok': False, 'msg': 'Property not found.'}

    assert admin_client.get('/api/payments?property_id=4242&year=2024').get_json() == []
    assert admin_client.get('/api/expenses?property_id=4242&year=2024').get_json() == []
