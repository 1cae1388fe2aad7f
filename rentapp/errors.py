# rentapp/errors.py
from flask import jsonify, current_app


class RentAppError(Exception):
    """Base de los errores que se devuelven al cliente como {ok: false, msg}."""
    status_code = 400

    def __init__(self, msg):
        super().__init__(msg)
        self.msg = msg


class NotFound(RentAppError):
    """Propiedad, inquilino u otro registro referenciado inexistente."""
    status_code = 404


class ValidationFailure(RentAppError):
    status_code = 400


class StoreError(RentAppError):
    """Fallo de la BD. Nunca se convierte en un resultado vacío."""
    status_code = 500

    def __init__(self, msg='Database error.'):
        super().__init__(msg)


def register_error_handlers(app):
    @app.errorhandler(RentAppError)
    def rentapp_error(e):
        if e.status_code >= 500:
            current_app.logger.error(f"Error de almacenamiento: {e.__cause__ or e}")
        return jsonify(ok=False, msg=e.msg), e.status_code

    @app.errorhandler(404)
    def not_found(e): return jsonify(ok=False, msg='Not found.'), 404

    @app.errorhandler(405)
    def method_not_allowed(e): return jsonify(ok=False, msg='Method not allowed.'), 405

    @app.errorhandler(500)
    def server_error(e): return jsonify(ok=False, msg='Server error.'), 500
