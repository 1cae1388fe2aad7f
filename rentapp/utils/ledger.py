# rentapp/utils/ledger.py
"""
Libros de pagos, gastos y contratos (leases).

- Pagos: como máximo una fila por (propiedad, mes, año); se escriben con upsert atómico.
- Gastos: solo se añaden/borran, sin unicidad.
- Contratos: historial por inquilino con un único contrato activo.
"""

from datetime import date, timedelta

from flask import current_app
from sqlalchemy import select, update, delete, and_
from sqlalchemy.exc import IntegrityError

from ..models import Payment, Expense, Lease, Tenant, Property
from ..errors import NotFound, ValidationFailure
from .database_helpers import store_operation, to_money, upsert, ZERO


def require_property(session, property_id):
    if session.get(Property, property_id) is None:
        raise NotFound('Property not found.')


# === PAGOS ===

@store_operation
def record_payment(session, property_id, tenant_id, month, year,
                   rent_due, rent_received, late_fee=ZERO, notes='', today=None):
    """
    Registra el pago del periodo (property_id, month, year).

    Si ya existe se actualizan rent_received, late_fee, notes, rent_due y
    paid_date; el tenant_id original se conserva. paid_date es hoy si se ha
    recibido algo (> 0) y NULL en otro caso. No se validan rangos: los importes
    negativos se aceptan tal cual.
    """
    require_property(session, property_id)
    rent_received = to_money(rent_received)
    values = {
        'property_id': property_id,
        'tenant_id': tenant_id,
        'month': month,
        'year': year,
        'rent_due': to_money(rent_due),
        'rent_received': rent_received,
        'late_fee': to_money(late_fee),
        'notes': notes or '',
        'paid_date': (today or date.today()) if rent_received > 0 else None,
    }
    upsert(session, Payment, values,
           index_elements=('property_id', 'month', 'year'),
           update_columns=('rent_received', 'late_fee', 'notes', 'paid_date', 'rent_due'))
    session.commit()
    current_app.logger.info(f"Pago registrado: propiedad {property_id} {year}-{month:02d} "
                            f"recibido {values['rent_received']} / debido {values['rent_due']}")


@store_operation
def get_payment(session, property_id, month, year):
    return session.execute(
        select(Payment).where(Payment.property_id == property_id,
                              Payment.month == month, Payment.year == year)
    ).scalar_one_or_none()


@store_operation
def list_payments(session, property_id, year):
    return session.execute(
        select(Payment).where(Payment.property_id == property_id, Payment.year == year)
        .order_by(Payment.month)
    ).scalars().all()


def payment_to_dict(p):
    return {
        'id': p.id, 'property_id': p.property_id, 'tenant_id': p.tenant_id,
        'month': p.month, 'year': p.year,
        'rent_due': p.rent_due, 'rent_received': p.rent_received, 'late_fee': p.late_fee,
        'notes': p.notes, 'paid_date': p.paid_date,
    }


# === GASTOS ===

@store_operation
def add_expense(session, property_id, month, year, amount, category, description='', today=None):
    require_property(session, property_id)
    expense = Expense(property_id=property_id, month=month, year=year,
                      amount=to_money(amount), category=category,
                      description=description or '', expense_date=today or date.today())
    session.add(expense)
    session.commit()
    current_app.logger.info(f"Gasto añadido: propiedad {property_id} {year}-{month:02d} "
                            f"{expense.category} {expense.amount}")
    return expense.id


@store_operation
def list_expenses(session, property_id, year):
    return session.execute(
        select(Expense).where(Expense.property_id == property_id, Expense.year == year)
        .order_by(Expense.month, Expense.id)
    ).scalars().all()


@store_operation
def delete_expense(session, expense_id):
    session.execute(delete(Expense).where(Expense.id == expense_id))
    session.commit()


def expense_to_dict(e):
    return {
        'id': e.id, 'property_id': e.property_id, 'month': e.month, 'year': e.year,
        'amount': e.amount, 'category': e.category, 'description': e.description,
        'expense_date': e.expense_date,
    }


# === CONTRATOS (LEASES) ===

@store_operation
def create_lease(session, tenant_id, property_id, start_date, end_date, rent_amount=ZERO, notes=''):
    """
    Desactiva los contratos previos del inquilino e inserta el nuevo como activo,
    todo en la misma transacción. El índice único parcial sobre tenant_id
    (activo) hace que una activación concurrente falle en lugar de dejar dos
    contratos activos.
    """
    require_property(session, property_id)
    if session.get(Tenant, tenant_id) is None:
        raise NotFound('Tenant not found.')
    session.execute(update(Lease).where(Lease.tenant_id == tenant_id, Lease.active.is_(True))
                    .values(active=False))
    lease = Lease(tenant_id=tenant_id, property_id=property_id, start_date=start_date,
                  end_date=end_date, rent_amount=to_money(rent_amount), notes=notes or '',
                  active=True)
    session.add(lease)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        current_app.logger.warning(f"Activación concurrente de contrato para inquilino {tenant_id}.")
        raise ValidationFailure('Another lease is being activated for this tenant.')
    current_app.logger.info(f"Contrato ID {lease.id} activado para inquilino {tenant_id} "
                            f"({start_date} - {end_date}).")
    return lease.id


@store_operation
def list_active_leases(session):
    """Inquilinos activos con su propiedad y, si lo tienen, su contrato activo."""
    rows = session.execute(
        select(Tenant, Property, Lease)
        .join(Property, Property.id == Tenant.property_id)
        .outerjoin(Lease, and_(Lease.tenant_id == Tenant.id, Lease.active.is_(True)))
        .where(Tenant.active.is_(True))
        .order_by(Lease.end_date.asc(), Property.label.asc())
    ).all()
    return [{
        'id': t.id, 'name': t.name, 'email': t.email, 'phone': t.phone,
        'property_id': t.property_id, 'prop_label': p.label, 'address': p.address,
        'lease_id': l.id if l else None,
        'start_date': l.start_date if l else None,
        'end_date': l.end_date if l else None,
        'rent_amount': l.rent_amount if l else None,
        'notes': l.notes if l else None,
    } for t, p, l in rows]


@store_operation
def lease_alerts(session, today=None, window_days=60):
    """Contratos activos que vencen entre hoy y hoy + window_days (incluidos)."""
    today = today or date.today()
    limit_date = today + timedelta(days=window_days)
    rows = session.execute(
        select(Lease, Tenant, Property)
        .join(Tenant, Tenant.id == Lease.tenant_id)
        .join(Property, Property.id == Lease.property_id)
        .where(Lease.active.is_(True), Lease.end_date >= today, Lease.end_date <= limit_date)
        .order_by(Lease.end_date.asc())
    ).all()
    return [{
        'tenant_name': t.name, 'prop_label': p.label,
        'start_date': l.start_date, 'end_date': l.end_date,
    } for l, t, p in rows]
