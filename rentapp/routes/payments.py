# rentapp/routes/payments.py
from flask import Blueprint, jsonify, request
from flask_login import login_required

from .. import db
from ..errors import ValidationFailure
from ..forms import PaymentForm, ExpenseForm, validate_or_fail
from ..utils.ledger import (
    record_payment, list_payments, payment_to_dict,
    add_expense, list_expenses, delete_expense, expense_to_dict,
)
from .main import year_arg

payments_bp = Blueprint('payments_bp', __name__)


@payments_bp.before_request
@login_required
def before_request():
    pass


def property_id_arg():
    property_id = request.args.get('property_id', type=int)
    if property_id is None:
        raise ValidationFailure('property_id is required.')
    return property_id


# ---------- Pagos ----------
@payments_bp.route('/payments', methods=['GET'])
def payments_list():
    payments = list_payments(db.session, property_id_arg(), year_arg())
    return jsonify([payment_to_dict(p) for p in payments])


@payments_bp.route('/payments', methods=['POST'])
def payments_record():
    form = validate_or_fail(PaymentForm())
    record_payment(
        db.session,
        property_id=form.property_id.data,
        tenant_id=form.tenant_id.data,
        month=form.month.data,
        year=form.year.data,
        rent_due=form.rent_due.data,
        rent_received=form.rent_received.data,
        late_fee=form.late_fee.data,
        notes=form.notes.data,
    )
    return jsonify(ok=True)


# ---------- Gastos ----------
@payments_bp.route('/expenses', methods=['GET'])
def expenses_list():
    expenses = list_expenses(db.session, property_id_arg(), year_arg())
    return jsonify([expense_to_dict(e) for e in expenses])


@payments_bp.route('/expenses', methods=['POST'])
def expenses_add():
    form = validate_or_fail(ExpenseForm())
    expense_id = add_expense(
        db.session,
        property_id=form.property_id.data,
        month=form.month.data,
        year=form.year.data,
        amount=form.amount.data,
        category=form.category.data,
        description=form.description.data,
    )
    return jsonify(ok=True, id=expense_id)


@payments_bp.route('/expenses/<int:id>', methods=['DELETE'])
def expenses_delete(id):
    delete_expense(db.session, id)
    return jsonify(ok=True)
