# rentapp/routes/leases.py
from flask import Blueprint, jsonify, current_app
from flask_login import login_required

from .. import db
from ..forms import LeaseForm, validate_or_fail
from ..utils.ledger import create_lease, list_active_leases, lease_alerts

leases_bp = Blueprint('leases_bp', __name__)


@leases_bp.before_request
@login_required
def before_request():
    pass


@leases_bp.route('', methods=['GET'])
def leases_overview():
    """Inquilinos activos con su contrato activo (si lo tienen), por fecha de fin."""
    return jsonify(list_active_leases(db.session))


@leases_bp.route('', methods=['POST'])
def leases_create():
    form = validate_or_fail(LeaseForm())
    lease_id = create_lease(
        db.session,
        tenant_id=form.tenant_id.data,
        property_id=form.property_id.data,
        start_date=form.start_date.data,
        end_date=form.end_date.data,
        rent_amount=form.rent_amount.data,
        notes=form.notes.data,
    )
    return jsonify(ok=True, id=lease_id)


@leases_bp.route('/alerts')
def leases_alerts():
    return jsonify(lease_alerts(db.session, window_days=current_app.config['LEASE_ALERT_DAYS']))
