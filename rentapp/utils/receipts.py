# rentapp/utils/receipts.py
"""
Recibos de alquiler en texto plano con maquetación fija, más un enlace de
redacción de Gmail (y un mailto:) ya rellenados. Aquí no se envía ningún
correo: el envío es cosa de quien abra el enlace. Cada recibo preparado deja
una fila en email_log.
"""

import re
from datetime import date
from urllib.parse import quote

from flask import current_app
from sqlalchemy import select

from ..models import EmailLog, Property, Tenant, MONTH_NAMES
from ..errors import NotFound
from .database_helpers import store_operation, ZERO
from .ledger import get_payment

RECEIPT_BANNER = 'J3MPI PROPERTY MANAGEMENT'
RULE = '=' * 48
GMAIL_COMPOSE_URL = 'https://mail.google.com/mail/?view=cm'

# Lo que encodeURIComponent deja sin escapar
_URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_uri_component(text):
    return quote(text, safe=_URI_COMPONENT_SAFE)


def money(value):
    return f"${value:.2f}"


def long_date(d):
    """'October 17, 2026'"""
    return f"{MONTH_NAMES[d.month - 1]} {d.day}, {d.year}"


def receipt_number(property_name, month, year):
    """'Oak St #2', 3, 2024 -> 'OAKST2-MAR-2024'"""
    cleaned = re.sub(r'[^A-Za-z0-9]', '', property_name or '').upper()
    return f"{cleaned}-{MONTH_NAMES[month - 1][:3].upper()}-{year}"


def receipt_status(due, received):
    if received >= due and due > 0:
        return 'PAID IN FULL'
    if 0 < received < due:
        return f"PARTIAL - Balance: {money(due - received)}"
    return f"BALANCE DUE: {money(due)}"


def format_receipt(prop, tenant, payment, month, year, settings=None, today=None):
    """
    Devuelve dict con body, subject, receipt_no, total, gmail_url y mailto_url.
    Sin fila de pago para el periodo: debido = renta base, recibido = 0, recargo = 0.
    """
    settings = settings or {}
    today = today or date.today()
    month_name = MONTH_NAMES[month - 1]

    due = payment.rent_due if payment is not None else prop.base_rent
    received = payment.rent_received if payment is not None else ZERO
    late = payment.late_fee if payment is not None else ZERO
    total = received + late
    receipt_no = receipt_number(prop.name, month, year)

    lines = [
        f"Hi {tenant.name},",
        '',
        f"Your rent receipt for {month_name} {year}:",
        '',
        RULE,
        f"         {RECEIPT_BANNER}",
        '           OFFICIAL RENT RECEIPT',
        RULE,
        f"  Property  : {prop.label}",
        f"  Address   : {prop.address or 'N/A'}",
        f"  Tenant    : {tenant.name}",
        f"  Period    : {month_name} {year}",
        f"  Receipt # : {receipt_no}",
        f"  Date      : {long_date(today)}",
        '',
        f"  Rent Due        : {money(due)}",
        f"  Rent Received   : {money(received)}",
    ]
    if late > 0:
        lines.append(f"  Late Fee        : {money(late)}")
    lines += [
        '  .............................................',
        f"  TOTAL RECEIVED  : {money(total)}",
        '',
        f"  >> STATUS: {receipt_status(due, received)}",
        '',
        RULE,
        'Thank you for your payment!',
        '',
        settings.get('ll_name') or '',
        settings.get('ll_phone') or '',
        settings.get('ll_email') or '',
        RULE,
    ]
    body = '\n'.join(lines)
    subject = f"Rent Receipt - {prop.label} - {month_name} {year}"

    gmail_url = (f"{GMAIL_COMPOSE_URL}&to={encode_uri_component(tenant.email)}"
                 f"&su={encode_uri_component(subject)}&body={encode_uri_component(body)}")
    mailto_url = (f"mailto:{encode_uri_component(tenant.email)}"
                  f"?subject={encode_uri_component(subject)}&body={encode_uri_component(body)}")
    return {
        'body': body,
        'subject': subject,
        'receipt_no': receipt_no,
        'total': total,
        'gmail_url': gmail_url,
        'mailto_url': mailto_url,
    }


@store_operation
def load_receipt_parties(session, property_id, tenant_id, month, year):
    prop = session.get(Property, property_id)
    tenant = session.get(Tenant, tenant_id)
    if prop is None or tenant is None:
        raise NotFound('Property or tenant not found.')
    return prop, tenant, get_payment(session, property_id, month, year)


@store_operation
def send_receipt(session, property_id, tenant_id, month, year, settings, today=None):
    """
    Prepara el recibo del periodo y lo anota en email_log (tipo 'receipt',
    importe = total recibido). No envía nada.
    """
    prop, tenant, payment = load_receipt_parties(session, property_id, tenant_id, month, year)
    receipt = format_receipt(prop, tenant, payment, month, year, settings, today=today)

    session.add(EmailLog(type='receipt', property_id=property_id, tenant_id=tenant_id,
                         to_email=tenant.email, month=month, year=year, amount=receipt['total']))
    session.commit()
    current_app.logger.info(f"Recibo {receipt['receipt_no']} preparado para {tenant.email}.")
    receipt['to_email'] = tenant.email
    return receipt


@store_operation
def list_email_log(session, limit=200):
    entries = session.execute(
        select(EmailLog).order_by(EmailLog.sent_at.desc(), EmailLog.id.desc()).limit(limit)
    ).scalars().all()
    result = []
    for el in entries:
        prop = session.get(Property, el.property_id) if el.property_id is not None else None
        tenant = session.get(Tenant, el.tenant_id) if el.tenant_id is not None else None
        result.append({
            'id': el.id, 'type': el.type, 'property_id': el.property_id, 'tenant_id': el.tenant_id,
            'to_email': el.to_email, 'month': el.month, 'year': el.year, 'amount': el.amount,
            'sent_at': el.sent_at.strftime('%Y-%m-%d %H:%M:%S') if el.sent_at else None,
            'prop_label': prop.label if prop else '—',
            'ten_name': tenant.name if tenant else '—',
        })
    return result
