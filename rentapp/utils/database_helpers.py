# rentapp/utils/database_helpers.py
"""
Funciones auxiliares comunes a todas las operaciones sobre la BD.

Todas las operaciones de registry/ledger/receipts reciben la sesión SQLAlchemy
como primer argumento; las rutas pasan ``db.session`` y los tests pueden pasar
cualquier otra.
"""

from functools import wraps
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

from flask import current_app
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.dialects import sqlite, postgresql

from ..errors import StoreError

TWO_PLACES = Decimal('0.01')
ZERO = Decimal('0.00')


def store_operation(f):
    """
    Decorador para operaciones de almacenamiento.

    Cualquier SQLAlchemyError hace rollback, se loguea con traza y se relanza
    como StoreError. Así "sin filas" (lista vacía) y "consulta fallida" nunca
    se confunden.
    """
    @wraps(f)
    def decorated_function(session, *args, **kwargs):
        try:
            return f(session, *args, **kwargs)
        except SQLAlchemyError as e:
            session.rollback()
            current_app.logger.error(f"Error de BD en {f.__name__}: {e}", exc_info=True)
            raise StoreError() from e
    return decorated_function


def to_money(value, default=ZERO):
    """Convierte entrada (str, int, float, Decimal o None) en Decimal con 2 decimales."""
    if value is None or value == '':
        return default
    try:
        dec_value = value if isinstance(value, Decimal) else Decimal(str(value))
        return dec_value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError):
        raise ValueError(f"«{value}» no es un importe válido.")


def upsert(session, model, values, index_elements, update_columns):
    """
    INSERT ... ON CONFLICT DO UPDATE sobre la restricción única ``index_elements``.

    SQLite y PostgreSQL lo hacen de forma nativa (atómico). En otros motores se
    bloquea la fila con SELECT ... FOR UPDATE dentro de la misma transacción.
    No hace commit.
    """
    dialect = session.get_bind().dialect.name
    table = model.__table__

    if dialect in ('sqlite', 'postgresql'):
        insert = sqlite.insert if dialect == 'sqlite' else postgresql.insert
        stmt = insert(table).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=list(index_elements),
            set_={col: stmt.excluded[col] for col in update_columns},
        )
        session.execute(stmt)
        return

    key_filter = [getattr(model, col) == values[col] for col in index_elements]
    existing = session.execute(select(model).where(*key_filter).with_for_update()).scalar_one_or_none()
    if existing is not None:
        for col in update_columns:
            setattr(existing, col, values[col])
    else:
        session.add(model(**values))
    session.flush()
