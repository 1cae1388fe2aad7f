# rentapp/routes/auth.py
from flask import Blueprint, jsonify, session, current_app
from flask_login import login_user, logout_user, current_user

from .. import db
from ..forms import LoginForm, validate_or_fail
from ..utils.registry import authenticate

auth_bp = Blueprint('auth_bp', __name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    form = validate_or_fail(LoginForm())
    user = authenticate(db.session, form.username.data, form.password.data)
    if user is None:
        current_app.logger.warning(f"Login fallido para '{form.username.data}'.")
        return jsonify(ok=False, msg='Invalid username or password.')

    session.permanent = True # Caduca según PERMANENT_SESSION_LIFETIME (24h)
    login_user(user)
    current_app.logger.info(f"Usuario '{user.username}' ha iniciado sesión.")
    return jsonify(ok=True, user=user.to_dict())


@auth_bp.route('/logout', methods=['POST'])
def logout():
    if current_user.is_authenticated:
        current_app.logger.info(f"Usuario '{current_user.username}' ha cerrado sesión.")
    logout_user()
    session.clear()
    return jsonify(ok=True)


@auth_bp.route('/me')
def me():
    """Usuario de la sesión o null (sin 401)."""
    if not current_user.is_authenticated:
        return jsonify(None)
    return jsonify(current_user.to_dict())
