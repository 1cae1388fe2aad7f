# rentapp/decorators.py
from functools import wraps
from flask import jsonify, current_app
from flask_login import current_user


def role_required(*roles):
    """Decorador para requerir uno o más roles."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                # Aunque @login_required debería encargarse, es una doble verificación.
                return jsonify(ok=False, msg='Not logged in.'), 401

            # Manejar tanto listas como argumentos separados
            allowed_roles = roles[0] if len(roles) == 1 and isinstance(roles[0], (list, tuple)) else roles

            if current_user.role not in allowed_roles:
                current_app.logger.warning(f"Acceso denegado a {current_user.username}. "
                                           f"Rol requerido: {allowed_roles}, rol actual: {current_user.role}")
                return jsonify(ok=False, msg='Forbidden.'), 403

            return f(*args, **kwargs)
        return decorated_function
    return decorator
