# rentapp/tasks.py
from datetime import date

from flask import current_app

from .models import db
from .utils.ledger import lease_alerts


# --- Tarea: Contratos por Vencer ---
def check_expiring_leases(app_context):
    """Tarea diaria: avisa en el log de los contratos activos que vencen pronto."""
    with app_context.app_context(): # Necesitas el contexto de la aplicación
        current_app.logger.info("Tarea Programada: Verificando contratos por vencer...")
        today = date.today()
        expiring = lease_alerts(db.session, today=today,
                                window_days=current_app.config['LEASE_ALERT_DAYS'])

        for lease in expiring:
            days_to_expiry = (lease['end_date'] - today).days
            current_app.logger.warning(
                f"El contrato de '{lease['tenant_name']}' (Propiedad: {lease['prop_label']}) "
                f"vence en {days_to_expiry} días ({lease['end_date'].isoformat()})."
            )

        current_app.logger.info(f"Tarea Programada: {len(expiring)} contrato(s) por vencer.")
        return len(expiring)
