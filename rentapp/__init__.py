# rentapp/__init__.py
import os
import logging # Para logging a archivo
from logging.handlers import RotatingFileHandler # Para logging a archivo
from datetime import date, timedelta
from decimal import Decimal
import atexit  # Para cerrar el scheduler limpiamente

from flask import Flask, g, jsonify, send_from_directory
from flask.json.provider import DefaultJSONProvider
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from sqlalchemy.exc import SQLAlchemyError
from apscheduler.schedulers.background import BackgroundScheduler

# --- Instancias de Extensiones Globales ---
db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()


@login_manager.user_loader
def load_user(user_id):
    """Función para cargar un usuario para Flask-Login."""
    from .models import User # Importación local para evitar ciclos
    return db.session.get(User, int(user_id))

@login_manager.unauthorized_handler
def unauthorized():
    # API JSON: nada de redirecciones a una vista de login
    return jsonify(ok=False, msg='Not logged in.'), 401


class MoneyJSONProvider(DefaultJSONProvider):
    """Importes Decimal como números JSON y fechas como YYYY-MM-DD."""

    @staticmethod
    def default(o):
        if isinstance(o, Decimal):
            return float(o)
        if isinstance(o, date):
            return o.isoformat()
        return DefaultJSONProvider.default(o)


def _default_database_uri(app):
    # En plataformas hospedadas (Railway, etc.) solo /tmp es escribible
    if os.environ.get('RAILWAY_ENVIRONMENT') or os.environ.get('PORT'):
        db_dir = '/tmp'
    else:
        db_dir = app.instance_path
    return f"sqlite:///{os.path.join(db_dir, 'rental.db')}"


# --- Factory de la Aplicación ---
def create_app(test_config=None):
    """Crea y configura la instancia de la aplicación Flask."""
    current_dir = os.path.dirname(os.path.abspath(__file__))
    static_folder_abs = os.path.join(current_dir, 'static')
    app = Flask(
        __name__,
        instance_relative_config=True,
        static_folder=static_folder_abs if os.path.exists(static_folder_abs) else None,
    )
    app.json = MoneyJSONProvider(app)

    # --- Configuración Principal de la Aplicación ---
    app.config['SECRET_KEY'] = os.environ.get('SESSION_SECRET') or \
                               os.environ.get('FLASK_SECRET_KEY', 'rentapp-dev-secret')
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['PERMANENT_SESSION_LIFETIME'] = timedelta(hours=24)
    app.config['LEASE_ALERT_DAYS'] = 60
    app.config['SCHEDULER_ENABLED'] = True
    app.config['WTF_CSRF_ENABLED'] = False # API JSON con cookie de sesión, sin formularios HTML

    try:
        os.makedirs(app.instance_path, exist_ok=True)
    except OSError as e:
        app.logger.error(f"No se pudo crear la carpeta de instancia en '{app.instance_path}': {e}")

    app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get('DATABASE_URL') or _default_database_uri(app)

    if test_config is not None:
        app.config.update(test_config)
    if app.testing:
        app.config['SCHEDULER_ENABLED'] = False

    # --- Inicializar Extensiones ---
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    from .errors import register_error_handlers
    register_error_handlers(app)

    # --- Configurar Logging a Archivo ---
    if not app.debug and not app.testing:
        log_dir = os.path.join(app.instance_path, 'logs')
        try:
            os.makedirs(log_dir, exist_ok=True)
            file_handler = RotatingFileHandler(os.path.join(log_dir, 'rentapp.log'),
                                               maxBytes=102400, backupCount=5) # 100KB por log, 5 backups
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
            ))
            file_handler.setLevel(logging.INFO)
            app.logger.addHandler(file_handler)
            app.logger.setLevel(logging.INFO)
            app.logger.info('rentapp iniciado (logging configurado)')
        except OSError as e_log:
            app.logger.error(f"Error configurando logging a archivo: {e_log}")

    # --- Abrir la BD: si falla aquí, el proceso no debe arrancar ---
    with app.app_context():
        from .models import initialize_database
        try:
            initialize_database()
        except SQLAlchemyError as e:
            app.logger.critical(f"No se pudo abrir/inicializar la base de datos "
                                f"{app.config['SQLALCHEMY_DATABASE_URI']}: {e}", exc_info=True)
            raise
        app.logger.info(f"BD lista en {app.config['SQLALCHEMY_DATABASE_URI']}")

    # --- Inicializar APScheduler ---
    if app.config['SCHEDULER_ENABLED'] and (not app.debug or os.environ.get('WERKZEUG_RUN_MAIN') == 'true'):
        scheduler = BackgroundScheduler(daemon=True)
        from .tasks import check_expiring_leases
        scheduler.add_job(
            func=check_expiring_leases,
            args=[app],
            trigger="cron",
            hour=7,
            minute=0,
            id='check_expiring_leases'
        )
        scheduler.start()
        app.logger.info("APScheduler iniciado y tareas programadas.")
        atexit.register(lambda: scheduler.shutdown())

    # --- Ajustes en g antes de cada request ---
    @app.before_request
    def load_app_settings_to_g():
        if 'settings' not in g:
            from .utils.registry import get_settings
            g.settings = get_settings(db.session)

    # --- Registrar Blueprints ---
    from .routes.auth import auth_bp
    from .routes.admin_users import admin_users_bp
    from .routes.main import main_bp
    from .routes.properties import properties_bp
    from .routes.payments import payments_bp
    from .routes.leases import leases_bp
    from .routes.reports import reports_bp
    from .routes.receipts import receipts_bp

    app.register_blueprint(auth_bp,         url_prefix='/api')
    app.register_blueprint(admin_users_bp,  url_prefix='/api/users')
    app.register_blueprint(main_bp,         url_prefix='/api')
    app.register_blueprint(properties_bp,   url_prefix='/api/properties')
    app.register_blueprint(payments_bp,     url_prefix='/api')
    app.register_blueprint(leases_bp,       url_prefix='/api/leases')
    app.register_blueprint(reports_bp,      url_prefix='/api')
    app.register_blueprint(receipts_bp,     url_prefix='/api')

    @app.route('/')
    def index():
        if not app.static_folder or not os.path.exists(os.path.join(app.static_folder, 'index.html')):
            return jsonify(ok=True, app='rentapp')
        return send_from_directory(app.static_folder, 'index.html')

    return app
