# rentapp/utils/exports.py
"""Exportaciones descargables: informe fiscal en Excel y recibo en PDF."""

from io import BytesIO
from xml.sax.saxutils import escape

import xlsxwriter
from reportlab.platypus import SimpleDocTemplate, Preformatted, Spacer, Paragraph
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import cm
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4

PRIMARY_COLOR = colors.HexColor('#1e3a5f')

styles = getSampleStyleSheet()
styles.add(ParagraphStyle(name='ReceiptTitle',
                          fontSize=16,
                          fontName='Helvetica-Bold',
                          textColor=PRIMARY_COLOR,
                          spaceAfter=12
                         ))
styles.add(ParagraphStyle(name='ReceiptBody',
                          fontSize=9,
                          fontName='Courier',
                          leading=12
                         ))


def tax_report_xlsx(report):
    """
    Libro Excel con una fila por propiedad, la fila de totales y una segunda
    hoja con los gastos por categoría de toda la cartera.
    """
    output = BytesIO()
    workbook = xlsxwriter.Workbook(output, {'in_memory': True})
    worksheet = workbook.add_worksheet(f"Tax {report['year']}")

    header_format = workbook.add_format({
        'bold': True,
        'bg_color': '#4472C4',
        'font_color': 'white',
        'border': 1,
        'align': 'center',
        'valign': 'vcenter'
    })
    data_format = workbook.add_format({'border': 1, 'align': 'left', 'valign': 'vcenter'})
    number_format = workbook.add_format({
        'border': 1,
        'align': 'right',
        'valign': 'vcenter',
        'num_format': '#,##0.00'
    })
    total_format = workbook.add_format({
        'bold': True,
        'bg_color': '#D9E1F2',
        'border': 1,
        'align': 'right',
        'valign': 'vcenter',
        'num_format': '#,##0.00'
    })
    total_label_format = workbook.add_format({
        'bold': True,
        'bg_color': '#D9E1F2',
        'border': 1,
        'align': 'center',
        'valign': 'vcenter'
    })

    headers = ['Property', 'Address', 'Tenant', 'Rent Received', 'Late Fees',
               'Gross Income', 'Expenses', 'Net Income']
    for col, header in enumerate(headers):
        worksheet.write(0, col, header, header_format)
    for col, width in enumerate([25, 35, 25, 15, 12, 15, 15, 15]):
        worksheet.set_column(col, col, width)

    for row, prop in enumerate(report['properties'], 1):
        worksheet.write(row, 0, prop['label'] or '', data_format)
        worksheet.write(row, 1, prop['address'] or '', data_format)
        worksheet.write(row, 2, prop['tenant_name'] or '', data_format)
        worksheet.write(row, 3, float(prop['totalRecv']), number_format)
        worksheet.write(row, 4, float(prop['totalLate']), number_format)
        worksheet.write(row, 5, float(prop['grossIncome']), number_format)
        worksheet.write(row, 6, float(prop['totalExp']), number_format)
        worksheet.write(row, 7, float(prop['netIncome']), number_format)

    row = len(report['properties']) + 1
    worksheet.write(row, 2, 'TOTALS:', total_label_format)
    worksheet.write(row, 5, float(report['grandIncome']), total_format)
    worksheet.write(row, 6, float(report['grandExp']), total_format)
    worksheet.write(row, 7, float(report['grandNet']), total_format)

    categories = workbook.add_worksheet('Expenses by category')
    categories.write(0, 0, 'Category', header_format)
    categories.write(0, 1, 'Total', header_format)
    categories.set_column(0, 0, 30)
    categories.set_column(1, 1, 15)
    for row, cat in enumerate(report['allCategories'], 1):
        categories.write(row, 0, cat['category'], data_format)
        categories.write(row, 1, float(cat['total']), number_format)

    workbook.close()
    output.seek(0)
    return output


def receipt_pdf(receipt):
    """El mismo texto del recibo, en una página A4 monoespaciada."""
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4,
                            leftMargin=2 * cm, rightMargin=2 * cm,
                            topMargin=2 * cm, bottomMargin=2 * cm,
                            title=receipt['subject'])
    story = [
        Paragraph(escape(receipt['subject']), styles['ReceiptTitle']),
        Spacer(1, 0.3 * cm),
        Preformatted(receipt['body'], styles['ReceiptBody']),
    ]
    doc.build(story)
    buffer.seek(0)
    return buffer
