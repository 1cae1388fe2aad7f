# rentapp/routes/properties.py
from flask import Blueprint, jsonify
from flask_login import login_required

from .. import db
from ..forms import PropertyForm, PropertyEditForm, validate_or_fail
from ..utils.registry import load_properties, create_property, update_property, delete_property

properties_bp = Blueprint('properties_bp', __name__)


@properties_bp.before_request
@login_required
def before_request():
    pass


@properties_bp.route('', methods=['GET'])
def list_properties():
    return jsonify(load_properties(db.session))


@properties_bp.route('', methods=['POST'])
def add_property():
    form = validate_or_fail(PropertyForm())
    new_id = create_property(
        db.session,
        name=form.name.data,
        base_rent=form.base_rent.data,
        tenant_name=form.tenant_name.data,
        tenant_email=form.tenant_email.data,
        label=form.label.data,
        address=form.address.data,
        tenant_phone=form.tenant_phone.data,
    )
    return jsonify(ok=True, id=new_id)


@properties_bp.route('/<int:id>', methods=['PUT'])
def edit_property(id):
    form = validate_or_fail(PropertyEditForm())
    update_property(
        db.session, id,
        name=form.name.data,
        label=form.label.data or form.name.data,
        base_rent=form.base_rent.data,
        address=form.address.data,
        tenant_id=form.tenant_id.data,
        tenant_name=form.tenant_name.data,
        tenant_email=form.tenant_email.data,
        tenant_phone=form.tenant_phone.data,
    )
    return jsonify(ok=True)


@properties_bp.route('/<int:id>', methods=['DELETE'])
def remove_property(id):
    # Pagos, gastos e inquilinos se van con la propiedad; contratos y email_log se quedan
    delete_property(db.session, id)
    return jsonify(ok=True)
