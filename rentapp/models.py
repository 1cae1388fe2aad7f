# rentapp/models.py
from datetime import datetime, date, timezone
from decimal import Decimal

from flask import current_app
from sqlalchemy import UniqueConstraint, Numeric, Integer, String, Boolean, DateTime, Date, Text, ForeignKey, Index, func, text
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash

from . import db

# --- CONSTANTES ---
MONTH_NAMES = ['January', 'February', 'March', 'April', 'May', 'June', 'July',
               'August', 'September', 'October', 'November', 'December']

DEFAULT_SETTINGS = (
    ('ll_name', 'J3MPI Rental Property Management'),
    ('ll_email', 'landlord@example.com'),
    ('ll_phone', '(555) 000-0000'),
    ('ll_addr', '123 Your St, City, ST 00000'),
)

DEFAULT_ADMIN_USERNAME = 'admin'
DEFAULT_ADMIN_PASSWORD = 'admin123'


def utc_now():
    """UTC sin tzinfo, igual que CURRENT_TIMESTAMP."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Property(db.Model):
    __tablename__ = 'properties'
    id = db.Column(Integer, primary_key=True)
    name = db.Column(String(150), nullable=False)
    label = db.Column(String(150), nullable=False)
    address = db.Column(String(200), default='')
    base_rent = db.Column(Numeric(10, 2), nullable=False, default=Decimal('0.00'))
    tenants = db.relationship('Tenant', backref='property_ref', lazy='select', order_by='Tenant.id')
    def __repr__(self): return f'<Property {self.id}: {self.name}>'

class Tenant(db.Model):
    __tablename__ = 'tenants'
    id = db.Column(Integer, primary_key=True)
    property_id = db.Column(Integer, ForeignKey('properties.id', ondelete='CASCADE'), nullable=False, index=True)
    name = db.Column(String(150), nullable=False)
    email = db.Column(String(120), nullable=False)
    phone = db.Column(String(40), default='')
    active = db.Column(Boolean, default=True, nullable=False)
    def __repr__(self): return f'<Tenant {self.id}: {self.name}>'

class Lease(db.Model):
    """
    Historial de contratos de un inquilino.
    property_id/tenant_id sin FK: los contratos sobreviven al borrado de la propiedad.
    """
    __tablename__ = 'leases'
    id = db.Column(Integer, primary_key=True)
    tenant_id = db.Column(Integer, nullable=False, index=True)
    property_id = db.Column(Integer, nullable=False, index=True)
    start_date = db.Column(Date, nullable=False)
    end_date = db.Column(Date, nullable=False)
    rent_amount = db.Column(Numeric(10, 2), default=Decimal('0.00'))
    notes = db.Column(Text, default='')
    active = db.Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        # Un solo contrato activo por inquilino
        Index('uq_lease_active_tenant', 'tenant_id', unique=True,
              sqlite_where=text('active = 1'),
              postgresql_where=text('active')),
    )
    def __repr__(self): return f'<Lease {self.id}: tenant {self.tenant_id} {self.start_date}..{self.end_date}>'

class Payment(db.Model):
    __tablename__ = 'payments'
    id = db.Column(Integer, primary_key=True)
    property_id = db.Column(Integer, ForeignKey('properties.id', ondelete='CASCADE'), nullable=False)
    tenant_id = db.Column(Integer, nullable=False)
    month = db.Column(Integer, nullable=False)
    year = db.Column(Integer, nullable=False)
    rent_due = db.Column(Numeric(10, 2), default=Decimal('0.00'))
    rent_received = db.Column(Numeric(10, 2), default=Decimal('0.00'))
    late_fee = db.Column(Numeric(10, 2), default=Decimal('0.00'))
    notes = db.Column(Text, default='')
    paid_date = db.Column(Date, nullable=True)

    __table_args__ = (
        UniqueConstraint('property_id', 'month', 'year', name='uq_payment_property_period'),
    )
    def __repr__(self): return f'<Payment {self.id}: prop {self.property_id} {self.year}-{self.month:02d}>'

class Expense(db.Model):
    __tablename__ = 'expenses'
    id = db.Column(Integer, primary_key=True)
    property_id = db.Column(Integer, ForeignKey('properties.id', ondelete='CASCADE'), nullable=False, index=True)
    month = db.Column(Integer, nullable=False)
    year = db.Column(Integer, nullable=False, index=True)
    amount = db.Column(Numeric(10, 2), default=Decimal('0.00'))
    category = db.Column(String(80), nullable=False)
    description = db.Column(Text, default='')
    expense_date = db.Column(Date, default=date.today)
    def __repr__(self): return f'<Expense {self.id}: {self.category} - {self.amount}>'

class Setting(db.Model):
    __tablename__ = 'settings'
    key = db.Column(String(80), primary_key=True)
    value = db.Column(Text, default='')
    def __repr__(self): return f'<Setting {self.key}>'

class EmailLog(db.Model):
    """Registro de recibos preparados. No es un log de envíos reales."""
    __tablename__ = 'email_log'
    id = db.Column(Integer, primary_key=True)
    type = db.Column(String(20))
    property_id = db.Column(Integer)
    tenant_id = db.Column(Integer)
    to_email = db.Column(String(120))
    month = db.Column(Integer)
    year = db.Column(Integer)
    amount = db.Column(Numeric(10, 2))
    sent_at = db.Column(DateTime, default=utc_now, server_default=func.current_timestamp(), index=True)
    def __repr__(self): return f'<EmailLog {self.id}: {self.type} -> {self.to_email}>'

class User(UserMixin, db.Model):
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.String(20), nullable=False, default='manager') # Roles: 'admin', 'manager'

    def set_password(self, password):
        """Genera un hash seguro para la contraseña."""
        self.password_hash = generate_password_hash(password, method='pbkdf2:sha256:600000', salt_length=16)

    def check_password(self, password):
        """Verifica si la contraseña proporcionada coincide con el hash."""
        if not self.password_hash or password is None:
            return False
        return check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {'id': self.id, 'username': self.username, 'role': self.role}

    def __repr__(self):
        return f'<User {self.id}: {self.username} [{self.role}]>'


def initialize_database():
    """
    Crea las tablas que falten y siembra los datos mínimos:
    ajustes por defecto (solo si no existen) y un admin si no hay usuarios.
    Cualquier error de BD se propaga: sin BD la app no arranca.
    """
    db.create_all()

    existing_keys = {k for (k,) in db.session.query(Setting.key).all()}
    for key, value in DEFAULT_SETTINGS:
        if key not in existing_keys:
            db.session.add(Setting(key=key, value=value))

    if db.session.query(func.count(User.id)).scalar() == 0:
        admin = User(username=DEFAULT_ADMIN_USERNAME, role='admin')
        admin.set_password(DEFAULT_ADMIN_PASSWORD)
        db.session.add(admin)
        current_app.logger.warning(f"Sin usuarios en BD: creado '{DEFAULT_ADMIN_USERNAME}' con contraseña por defecto.")

    db.session.commit()
