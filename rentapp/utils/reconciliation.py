# rentapp/utils/reconciliation.py
"""
Conciliación mensual de rentas y los informes que se construyen sobre ella.

- reconcile(): libro de 12 meses de una propiedad. Los meses sin pago
  registrado se proyectan con la renta base como importe debido (nunca como
  recibido).
- build_dashboard(): pliega las conciliaciones de todas las propiedades en
  una serie mensual de cartera.
- build_tax_report(): ingresos realmente cobrados (solo filas de pago
  existentes, sin proyección) y gastos por categoría.
"""

from sqlalchemy import select, func, desc

from ..models import Payment, Expense
from .database_helpers import store_operation, ZERO
from .registry import load_properties

MONTHS = range(1, 13)

STATUS_PAID = 'paid'
STATUS_PARTIAL = 'partial'
STATUS_UNPAID = 'unpaid'


def payment_status(due, received):
    """
    'paid' si se cobró todo lo debido y algo (> 0); 'partial' si se cobró algo
    pero menos de lo debido; 'unpaid' en cualquier otro caso, incluido
    debido == 0 y cobrado == 0.
    """
    if received >= due and received > 0:
        return STATUS_PAID
    if received > 0:
        return STATUS_PARTIAL
    return STATUS_UNPAID


def reconcile_months(base_rent, payments):
    """Los 12 meses a partir de las filas de pago (dispersas) de un año."""
    by_month = {p.month: p for p in payments}
    months = []
    for m in MONTHS:
        p = by_month.get(m)
        due = p.rent_due if p is not None else base_rent
        recv = p.rent_received if p is not None else ZERO
        late = p.late_fee if p is not None else ZERO
        months.append({'month': m, 'due': due, 'recv': recv, 'late': late,
                       'status': payment_status(due, recv)})
    return months


@store_operation
def total_expenses(session, property_id, year):
    total = session.execute(
        select(func.sum(Expense.amount)).where(Expense.property_id == property_id, Expense.year == year)
    ).scalar()
    return total if total is not None else ZERO


@store_operation
def reconcile(session, prop, year):
    """
    Libro anual de una propiedad. ``prop`` es cualquier objeto o dict con
    ``id`` y ``base_rent`` (p. ej. una fila de load_properties()).
    """
    prop_id = prop['id'] if isinstance(prop, dict) else prop.id
    base_rent = prop['base_rent'] if isinstance(prop, dict) else prop.base_rent

    payments = session.execute(
        select(Payment).where(Payment.property_id == prop_id, Payment.year == year)
    ).scalars().all()
    months = reconcile_months(base_rent, payments)

    t_due = sum((m['due'] for m in months), ZERO)
    t_recv = sum((m['recv'] for m in months), ZERO)
    t_late = sum((m['late'] for m in months), ZERO)
    t_exp = total_expenses(session, prop_id, year)
    return {
        'months': months,
        'tDue': t_due,
        'tRecv': t_recv,
        'tLate': t_late,
        'tExp': t_exp,
        'net': t_recv + t_late - t_exp,
        'paid': sum(1 for m in months if m['status'] == STATUS_PAID),
    }


def monthly_series(reconciled):
    """Suma mes a mes (cobrado y debido) de varias conciliaciones. Sin consultas."""
    series = []
    for i, m in enumerate(MONTHS):
        series.append({
            'month': m,
            'collected': sum((r['months'][i]['recv'] for r in reconciled), ZERO),
            'due': sum((r['months'][i]['due'] for r in reconciled), ZERO),
        })
    return series


@store_operation
def build_dashboard(session, year):
    results = []
    for prop in load_properties(session):
        row = {'id': prop['id'], 'label': prop['label'], 'base_rent': prop['base_rent'],
               'tenant_name': prop['tenant_name']}
        row.update(reconcile(session, prop, year))
        results.append(row)
    return {'properties': results, 'monthly': monthly_series(results), 'year': year}


@store_operation
def build_tax_report(session, year):
    report = []
    for prop in load_properties(session):
        t_recv, t_late = session.execute(
            select(func.coalesce(func.sum(Payment.rent_received), ZERO),
                   func.coalesce(func.sum(Payment.late_fee), ZERO))
            .where(Payment.property_id == prop['id'], Payment.year == year)
        ).one()
        expenses = [{'category': category, 'total': total} for category, total in session.execute(
            select(Expense.category, func.sum(Expense.amount))
            .where(Expense.property_id == prop['id'], Expense.year == year)
            .group_by(Expense.category)
            .order_by(Expense.category)
        ).all()]
        t_exp = sum((e['total'] for e in expenses), ZERO)
        gross = t_recv + t_late
        report.append({
            'id': prop['id'], 'label': prop['label'], 'address': prop['address'],
            'tenant_name': prop['tenant_name'],
            'totalRecv': t_recv, 'totalLate': t_late, 'grossIncome': gross,
            'expenses': expenses, 'totalExp': t_exp, 'netIncome': gross - t_exp,
        })

    grand_income = sum((r['grossIncome'] for r in report), ZERO)
    grand_exp = sum((r['totalExp'] for r in report), ZERO)

    # Consulta independiente: no es una re-agregación de las listas por propiedad
    category_total = func.sum(Expense.amount).label('total')
    all_categories = [{'category': category, 'total': total} for category, total in session.execute(
        select(Expense.category, category_total)
        .where(Expense.year == year)
        .group_by(Expense.category)
        .order_by(desc(category_total))
    ).all()]

    return {
        'year': year,
        'properties': report,
        'grandIncome': grand_income,
        'grandExp': grand_exp,
        'grandNet': grand_income - grand_exp,
        'allCategories': all_categories,
    }
