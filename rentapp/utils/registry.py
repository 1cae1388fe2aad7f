# rentapp/utils/registry.py
"""
Registro de propiedades/inquilinos, ajustes y usuarios.

El inquilino "actual" de una propiedad no se guarda: es una vista calculada,
el inquilino activo con menor id.
"""

from flask import current_app
from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError

from ..models import Property, Tenant, Payment, Expense, Setting, User
from ..errors import NotFound, ValidationFailure
from .database_helpers import store_operation, to_money, upsert


# === INQUILINO ACTUAL ===

def current_tenant_stmt(property_id):
    """Primer inquilino activo por id. Si hay varios activos, gana el de menor id."""
    return (select(Tenant)
            .where(Tenant.property_id == property_id, Tenant.active.is_(True))
            .order_by(Tenant.id)
            .limit(1))


@store_operation
def current_tenant(session, property_id):
    return session.execute(current_tenant_stmt(property_id)).scalar_one_or_none()


def property_view(prop, tenant):
    return {
        'id': prop.id, 'name': prop.name, 'label': prop.label,
        'address': prop.address, 'base_rent': prop.base_rent,
        'tenant_id': tenant.id if tenant else None,
        'tenant_name': tenant.name if tenant else None,
        'tenant_email': tenant.email if tenant else None,
        'tenant_phone': tenant.phone if tenant else None,
    }


# === PROPIEDADES ===

@store_operation
def load_properties(session):
    """Propiedades ordenadas por nombre, con los datos de su inquilino actual."""
    props = session.execute(select(Property).order_by(Property.name, Property.id)).scalars().all()
    return [property_view(p, session.execute(current_tenant_stmt(p.id)).scalar_one_or_none())
            for p in props]


@store_operation
def get_property(session, property_id):
    prop = session.get(Property, property_id)
    if prop is None:
        raise NotFound('Property not found.')
    return prop


@store_operation
def create_property(session, name, base_rent, tenant_name, tenant_email,
                    label=None, address=None, tenant_phone=None):
    """Crea la propiedad y su inquilino inicial (activo) en una sola transacción."""
    prop = Property(name=name, label=label or name, address=address or '',
                    base_rent=to_money(base_rent))
    session.add(prop)
    session.flush()
    session.add(Tenant(property_id=prop.id, name=tenant_name, email=tenant_email,
                       phone=tenant_phone or '', active=True))
    session.commit()
    current_app.logger.info(f"Propiedad creada: ID {prop.id} '{prop.name}' (renta base {prop.base_rent}).")
    return prop.id


@store_operation
def update_property(session, property_id, name, label, base_rent, address=None,
                    tenant_id=None, tenant_name=None, tenant_email=None, tenant_phone=None):
    prop = session.get(Property, property_id)
    if prop is None:
        raise NotFound('Property not found.')

    tenant = None
    if tenant_id:
        tenant = session.get(Tenant, tenant_id)
        if tenant is None:
            raise NotFound('Tenant not found.')

    prop.name = name
    prop.label = label
    prop.address = address or ''
    prop.base_rent = to_money(base_rent)
    if tenant is not None:
        tenant.name = tenant_name
        tenant.email = tenant_email
        tenant.phone = tenant_phone or ''
    session.commit()
    current_app.logger.info(f"Propiedad ID {property_id} actualizada.")


@store_operation
def delete_property(session, property_id):
    """
    Borra la propiedad con sus pagos, gastos e inquilinos.
    Los contratos (leases) y el email_log NO se borran: quedan huérfanos.
    """
    for model in (Payment, Expense, Tenant):
        session.execute(delete(model).where(model.property_id == property_id))
    session.execute(delete(Property).where(Property.id == property_id))
    session.commit()
    current_app.logger.info(f"Propiedad ID {property_id} eliminada con sus pagos, gastos e inquilinos.")


# === AJUSTES ===

@store_operation
def get_settings(session):
    return {s.key: s.value for s in session.execute(select(Setting)).scalars()}


@store_operation
def save_settings(session, values):
    """Upsert de cada clave; los valores se guardan siempre como texto."""
    for key, value in values.items():
        upsert(session, Setting, {'key': str(key), 'value': '' if value is None else str(value)},
               index_elements=('key',), update_columns=('value',))
    session.commit()
    current_app.logger.info(f"Ajustes guardados: {', '.join(sorted(values))}")


# === USUARIOS ===

@store_operation
def list_users(session):
    return [u.to_dict() for u in session.execute(select(User).order_by(User.username)).scalars()]


@store_operation
def authenticate(session, username, password):
    user = session.execute(select(User).where(User.username == username)).scalar_one_or_none()
    if user is None or not user.check_password(password):
        return None
    return user


@store_operation
def create_user(session, username, password, role='manager'):
    user = User(username=username, role=role or 'manager')
    user.set_password(password)
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ValidationFailure('Username already exists.')
    current_app.logger.info(f"Usuario '{username}' creado con rol '{user.role}'.")
    return user.id


@store_operation
def delete_user(session, user_id, acting_user_id):
    if user_id == acting_user_id:
        raise ValidationFailure('Cannot delete yourself.')
    session.execute(delete(User).where(User.id == user_id))
    session.commit()
    current_app.logger.info(f"Usuario ID {user_id} eliminado por usuario ID {acting_user_id}.")
