from datetime import date
from decimal import Decimal
from types import SimpleNamespace
from urllib.parse import unquote

import pytest

from rentapp.errors import NotFound
from rentapp.models import EmailLog
from rentapp.utils.ledger import record_payment
from rentapp.utils.receipts import (
    receipt_number, receipt_status, format_receipt, encode_uri_component,
    send_receipt, list_email_log, RULE,
)

PROP = SimpleNamespace(name='Oak St #2', label='Oak Street Unit 2', address='12 Oak St',
                       base_rent=Decimal('1200.00'))
TENANT = SimpleNamespace(name='Jane Roe', email='jane@example.com')
SETTINGS = {'ll_name': 'J3MPI Rentals', 'll_phone': '(555) 123-4567', 'll_email': 'office@example.com'}


def payment(due, recv, late='0'):
    return SimpleNamespace(rent_due=Decimal(due), rent_received=Decimal(recv), late_fee=Decimal(late))


def test_receipt_number():
    assert receipt_number('Oak St #2', 3, 2024) == 'OAKST2-MAR-2024'
    assert receipt_number('12-b apt.', 12, 2025) == '12BAPT-DEC-2025'


def test_receipt_status_lines():
    assert receipt_status(Decimal('1200'), Decimal('1200')) == 'PAID IN FULL'
    assert receipt_status(Decimal('1200'), Decimal('500')) == 'PARTIAL - Balance: $700.00'
    assert receipt_status(Decimal('1200'), Decimal('0')) == 'BALANCE DUE: $1200.00'
    assert receipt_status(Decimal('0'), Decimal('0')) == 'BALANCE DUE: $0.00'


def test_receipt_body_layout():
    receipt = format_receipt(PROP, TENANT, payment('1200', '1200', '35'), 3, 2024,
                             SETTINGS, today=date(2024, 3, 7))
    lines = receipt['body'].split('\n')

    assert lines[:8] == [
        'Hi Jane Roe,',
        '',
        'Your rent receipt for March 2024:',
        '',
        RULE,
        '         J3MPI PROPERTY MANAGEMENT',
        '           OFFICIAL RENT RECEIPT',
        RULE,
    ]
    assert '  Property  : Oak Street Unit 2' in lines
    assert '  Address   : 12 Oak St' in lines
    assert '  Receipt # : OAKST2-MAR-2024' in lines
    assert '  Date      : March 7, 2024' in lines
    assert '  Rent Due        : $1200.00' in lines
    assert '  Late Fee        : $35.00' in lines
    assert '  TOTAL RECEIVED  : $1235.00' in lines
    assert '  >> STATUS: PAID IN FULL' in lines
    assert lines[-5:] == ['', 'J3MPI Rentals', '(555) 123-4567', 'office@example.com', RULE]

    assert receipt['subject'] == 'Rent Receipt - Oak Street Unit 2 - March 2024'
    assert receipt['total'] == Decimal('1235.00')


def test_receipt_without_payment_row_uses_base_rent():
    prop = SimpleNamespace(name='Oak', label='Oak', address='', base_rent=Decimal('1200.00'))
    receipt = format_receipt(prop, TENANT, None, 1, 2024, {}, today=date(2024, 1, 31))
    lines = receipt['body'].split('\n')

    assert '  Address   : N/A' in lines
    assert '  Rent Received   : $0.00' in lines
    assert not any(l.startswith('  Late Fee') for l in lines)
    assert '  >> STATUS: BALANCE DUE: $1200.00' in lines


def test_compose_links_are_uri_encoded():
    assert encode_uri_component("a b&c=d/e\n(f)'!*~") == "a%20b%26c%3Dd%2Fe%0A(f)'!*~"

    receipt = format_receipt(PROP, TENANT, payment('1200', '600'), 3, 2024, SETTINGS,
                             today=date(2024, 3, 7))
    gmail = receipt['gmail_url']
    assert gmail.startswith('https://mail.google.com/mail/?view=cm&to=jane%40example.com&su=')
    assert ' ' not in gmail and '\n' not in gmail
    body_param = gmail.split('&body=', 1)[1]
    assert unquote(body_param) == receipt['body']
    assert receipt['mailto_url'].startswith('mailto:jane%40example.com?subject=Rent%20Receipt')


def test_send_receipt_logs_email(session, oak_street):
    prop_id, tenant_id = oak_street
    record_payment(session, prop_id, tenant_id, 3, 2024, '1200', '1200', late_fee='20')

    receipt = send_receipt(session, prop_id, tenant_id, 3, 2024, SETTINGS, today=date(2024, 3, 9))

    assert receipt['to_email'] == 'jane@example.com'
    entry = session.query(EmailLog).one()
    assert entry.type == 'receipt'
    assert entry.amount == Decimal('1220.00')
    assert (entry.month, entry.year) == (3, 2024)
    assert entry.sent_at is not None
    assert entry.sent_at.tzinfo is None

    log = list_email_log(session)
    assert log[0]['prop_label'] == 'Oak Street Unit 2'
    assert log[0]['ten_name'] == 'Jane Roe'


def test_send_receipt_unknown_party(session, oak_street):
    prop_id, _ = oak_street
    with pytest.raises(NotFound):
        send_receipt(session, prop_id, 999, 3, 2024, SETTINGS)
    assert session.query(EmailLog).count() == 0


def test_email_receipt_api(admin_client):
    prop_id = admin_client.post('/api/properties', json={
        'name': 'Oak St #2', 'base_rent': 1200, 'tenant_name': 'Jane Roe', 'tenant_email': 'jane@example.com',
    }).get_json()['id']
    tenant_id = admin_client.get('/api/properties').get_json()[0]['tenant_id']

    resp = admin_client.post('/api/email-receipt', json={
        'property_id': prop_id, 'tenant_id': tenant_id, 'month': 3, 'year': 2024,
    })
    body = resp.get_json()
    assert body['ok'] is True
    assert body['msg'] == 'Receipt ready for jane@example.com'
    assert body['gmailUrl'].startswith('https://mail.google.com/mail/?view=cm')
    assert body['mailtoUrl'].startswith('mailto:')

    log = admin_client.get('/api/email-log').get_json()
    assert len(log) == 1
    assert log[0]['amount'] == 0.0

    resp = admin_client.get(f'/api/email-receipt/pdf?property_id={prop_id}&tenant_id={tenant_id}&month=3&year=2024')
    assert resp.status_code == 200
    assert resp.mimetype == 'application/pdf'
    assert resp.data.startswith(b'%PDF')
    # El PDF no deja rastro en email_log
    assert len(admin_client.get('/api/email-log').get_json()) == 1


def test_email_receipt_api_not_found(admin_client):
    resp = admin_client.post('/api/email-receipt', json={
        'property_id': 5, 'tenant_id': 6, 'month': 3, 'year': 2024,
    })
    assert resp.status_code == 404
    assert resp.get_json() == {'ok': False, 'msg': 'Property or tenant not found.'}
