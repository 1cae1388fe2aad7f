# rentapp/forms.py
# Los formularios validan tanto cuerpos JSON como form-urlencoded
# (Flask-WTF convierte el JSON de la petición en formdata).
from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField, SelectField, IntegerField, DecimalField, DateField, TextAreaField
from wtforms.validators import DataRequired, Length, Email, Optional, NumberRange, ValidationError, StopValidation

from .errors import ValidationFailure


class NullAsMissing:
    """Un null JSON cuenta como campo ausente (WTForms no sabe convertir None)."""

    def process_formdata(self, valuelist):
        if valuelist and valuelist[0] is None:
            return
        super().process_formdata(valuelist)


class MoneyField(NullAsMissing, DecimalField):
    pass


class IntField(NullAsMissing, IntegerField):
    pass


class IsoDateField(NullAsMissing, DateField):
    pass


def present(form, field):
    """Como InputRequired, pero acepta 0 (los importes pueden ser cero)."""
    if not field.raw_data or field.raw_data[0] is None or field.raw_data[0] == '':
        field.errors[:] = []
        raise StopValidation('This field is required.')


def validate_or_fail(form):
    """Valida el formulario o lanza ValidationFailure con el primer error."""
    if form.validate_on_submit():
        return form
    if not form.errors:
        raise ValidationFailure('Invalid request.')
    field_name, errors = next(iter(form.errors.items()))
    raise ValidationFailure(f"{field_name}: {errors[0]}")


# --- FORMULARIO DE LOGIN ---
class LoginForm(FlaskForm):
    username = StringField('Username', validators=[DataRequired()])
    password = PasswordField('Password', validators=[DataRequired()])


# --- FORMULARIO CREAR USUARIO (Admin) ---
class UserCreateForm(FlaskForm):
    username = StringField('Username', validators=[DataRequired(), Length(min=3, max=80)])
    password = PasswordField('Password', validators=[DataRequired(), Length(min=6, message='Password must be at least 6 characters.')])
    role = SelectField('Role', choices=[('admin', 'Administrator'), ('manager', 'Manager')],
                       default='manager', validators=[Optional()])


# --- PROPIEDADES ---
class PropertyForm(FlaskForm):
    name = StringField('Name', validators=[DataRequired(), Length(max=150)])
    label = StringField('Label', validators=[Optional(), Length(max=150)])
    address = StringField('Address', validators=[Optional(), Length(max=200)])
    base_rent = MoneyField('Base rent', validators=[present])
    tenant_name = StringField('Tenant name', validators=[DataRequired(), Length(max=150)])
    tenant_email = StringField('Tenant email', validators=[DataRequired(), Email(), Length(max=120)])
    tenant_phone = StringField('Tenant phone', validators=[Optional(), Length(max=40)])


class PropertyEditForm(FlaskForm):
    name = StringField('Name', validators=[DataRequired(), Length(max=150)])
    label = StringField('Label', validators=[Optional(), Length(max=150)])
    address = StringField('Address', validators=[Optional(), Length(max=200)])
    base_rent = MoneyField('Base rent', validators=[present])
    tenant_id = IntField('Tenant', validators=[Optional()])
    tenant_name = StringField('Tenant name', validators=[Optional(), Length(max=150)])
    tenant_email = StringField('Tenant email', validators=[Optional(), Email(), Length(max=120)])
    tenant_phone = StringField('Tenant phone', validators=[Optional(), Length(max=40)])

    def validate_tenant_name(self, field):
        if self.tenant_id.data and not field.data:
            raise ValidationError('Tenant name is required when tenant_id is given.')

    def validate_tenant_email(self, field):
        if self.tenant_id.data and not field.data:
            raise ValidationError('Tenant email is required when tenant_id is given.')


# --- PAGOS Y GASTOS ---
class PaymentForm(FlaskForm):
    property_id = IntField('Property', validators=[DataRequired()])
    tenant_id = IntField('Tenant', validators=[DataRequired()])
    month = IntField('Month', validators=[DataRequired(), NumberRange(min=1, max=12)])
    year = IntField('Year', validators=[DataRequired()])
    rent_due = MoneyField('Rent due', validators=[present])
    rent_received = MoneyField('Rent received', validators=[present])
    late_fee = MoneyField('Late fee', validators=[Optional()])
    notes = TextAreaField('Notes', validators=[Optional()])


class ExpenseForm(FlaskForm):
    property_id = IntField('Property', validators=[DataRequired()])
    month = IntField('Month', validators=[DataRequired(), NumberRange(min=1, max=12)])
    year = IntField('Year', validators=[DataRequired()])
    amount = MoneyField('Amount', validators=[present])
    category = StringField('Category', validators=[DataRequired(), Length(max=80)])
    description = TextAreaField('Description', validators=[Optional()])


# --- CONTRATOS ---
class LeaseForm(FlaskForm):
    tenant_id = IntField('Tenant', validators=[DataRequired()])
    property_id = IntField('Property', validators=[DataRequired()])
    start_date = IsoDateField('Start date', format='%Y-%m-%d', validators=[DataRequired()])
    end_date = IsoDateField('End date', format='%Y-%m-%d', validators=[DataRequired()])
    rent_amount = MoneyField('Rent amount', validators=[Optional()])
    notes = TextAreaField('Notes', validators=[Optional()])

    def validate_end_date(self, field):
        if self.start_date.data and field.data and field.data < self.start_date.data:
            raise ValidationError('End date must not be before start date.')


# --- RECIBOS ---
class ReceiptForm(FlaskForm):
    property_id = IntField('Property', validators=[DataRequired()])
    tenant_id = IntField('Tenant', validators=[DataRequired()])
    month = IntField('Month', validators=[DataRequired(), NumberRange(min=1, max=12)])
    year = IntField('Year', validators=[DataRequired()])
