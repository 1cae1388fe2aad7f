# rentapp/routes/reports.py
from flask import Blueprint, jsonify, send_file, current_app
from flask_login import login_required

from .. import db
from ..utils.reconciliation import build_tax_report
from ..utils.exports import tax_report_xlsx
from .main import year_arg

reports_bp = Blueprint('reports_bp', __name__)


@reports_bp.before_request
@login_required
def before_request():
    pass


@reports_bp.route('/taxreport')
def tax_report():
    return jsonify(build_tax_report(db.session, year_arg()))


@reports_bp.route('/taxreport/export')
def tax_report_export():
    year = year_arg()
    report = build_tax_report(db.session, year)
    output = tax_report_xlsx(report)
    current_app.logger.info(f"Informe fiscal {year} exportado a Excel ({len(report['properties'])} propiedades).")
    return send_file(
        output,
        mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        as_attachment=True,
        download_name=f"tax_report_{year}.xlsx",
    )
