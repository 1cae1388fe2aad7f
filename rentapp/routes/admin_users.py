# rentapp/routes/admin_users.py
from flask import Blueprint, jsonify
from flask_login import login_required, current_user

from .. import db
from ..forms import UserCreateForm, validate_or_fail
from ..decorators import role_required # Importar decorador de rol
from ..utils.registry import list_users, create_user, delete_user

admin_users_bp = Blueprint('admin_users_bp', __name__)

# Proteger TODO este blueprint para que solo accedan administradores
@admin_users_bp.before_request
@login_required
@role_required('admin')
def before_request():
    """Protege todas las rutas de este blueprint para admins."""
    pass


@admin_users_bp.route('', methods=['GET'])
def users_list():
    return jsonify(list_users(db.session))


@admin_users_bp.route('', methods=['POST'])
def users_create():
    form = validate_or_fail(UserCreateForm())
    user_id = create_user(db.session, form.username.data, form.password.data, form.role.data or 'manager')
    return jsonify(ok=True, id=user_id)


@admin_users_bp.route('/<int:id>', methods=['DELETE'])
def users_delete(id):
    delete_user(db.session, id, current_user.id)
    return jsonify(ok=True)
