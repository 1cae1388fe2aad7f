# rentapp/routes/main.py
from datetime import date

from flask import Blueprint, jsonify, request, g
from flask_login import login_required

from .. import db
from ..errors import ValidationFailure
from ..utils.registry import get_settings, save_settings
from ..utils.reconciliation import build_dashboard

main_bp = Blueprint('main_bp', __name__)


@main_bp.before_request
@login_required
def before_request():
    """Todas las rutas de este blueprint requieren sesión."""
    pass


def year_arg():
    """?year=YYYY o, si falta o no es un número, el año en curso."""
    return request.args.get('year', date.today().year, type=int)


def payload():
    """Cuerpo de la petición como dict (JSON o form-urlencoded)."""
    if request.is_json:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationFailure('Expected a JSON object.')
        return data
    return request.form.to_dict()


# ---------- Ajustes ----------
@main_bp.route('/settings', methods=['GET'])
def settings_get():
    return jsonify(get_settings(db.session))


@main_bp.route('/settings', methods=['POST'])
def settings_save():
    save_settings(db.session, payload())
    g.pop('settings', None)
    return jsonify(ok=True)


# ---------- Dashboard ----------
@main_bp.route('/dashboard')
def dashboard():
    return jsonify(build_dashboard(db.session, year_arg()))
