# rentapp/routes/receipts.py
from flask import Blueprint, jsonify, request, send_file, g
from flask_login import login_required

from .. import db
from ..errors import ValidationFailure
from ..forms import ReceiptForm, validate_or_fail
from ..utils.receipts import send_receipt, load_receipt_parties, format_receipt, list_email_log
from ..utils.exports import receipt_pdf

receipts_bp = Blueprint('receipts_bp', __name__)


@receipts_bp.before_request
@login_required
def before_request():
    pass


@receipts_bp.route('/email-receipt', methods=['POST'])
def email_receipt():
    """Prepara el recibo y devuelve los enlaces de redacción. No envía correo."""
    form = validate_or_fail(ReceiptForm())
    receipt = send_receipt(db.session, form.property_id.data, form.tenant_id.data,
                           form.month.data, form.year.data, g.settings)
    return jsonify(ok=True, gmailUrl=receipt['gmail_url'], mailtoUrl=receipt['mailto_url'],
                   msg=f"Receipt ready for {receipt['to_email']}")


@receipts_bp.route('/email-receipt/pdf')
def email_receipt_pdf():
    """El mismo recibo en PDF. No deja fila en email_log."""
    args = {}
    for name in ('property_id', 'tenant_id', 'month', 'year'):
        value = request.args.get(name, type=int)
        if value is None:
            raise ValidationFailure(f"{name}: This field is required.")
        args[name] = value
    if not 1 <= args['month'] <= 12:
        raise ValidationFailure('month: Number must be between 1 and 12.')

    prop, tenant, payment = load_receipt_parties(db.session, **args)
    receipt = format_receipt(prop, tenant, payment, args['month'], args['year'], g.settings)
    return send_file(
        receipt_pdf(receipt),
        mimetype='application/pdf',
        as_attachment=True,
        download_name=f"receipt_{receipt['receipt_no']}.pdf",
    )


@receipts_bp.route('/email-log')
def email_log():
    return jsonify(list_email_log(db.session))
