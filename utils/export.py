"""
utils/export.py — Excel export of the harvest report using openpyxl.

Generates an .xlsx file with one sheet per unit (kg, count). Each sheet holds
two tables side by side: totals by month and totals by plant type.
"""

from datetime import date
from io import BytesIO
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side


UNIT_LABELS = {
    'kg': 'Harvest (kg)',
    'count': 'Harvest (count)',
}

HEADER_FONT = Font(name='Calibri', bold=True, color='FFFFFF', size=11)
HEADER_FILL = PatternFill(start_color='059669', end_color='059669', fill_type='solid')
HEADER_ALIGNMENT = Alignment(horizontal='center', vertical='center', wrap_text=True)
HEADER_BORDER = Border(
    bottom=Side(style='thin', color='047857'),
    right=Side(style='thin', color='E2E8F0'),
)
CELL_BORDER = Border(
    bottom=Side(style='thin', color='E2E8F0'),
    right=Side(style='thin', color='E2E8F0'),
)


def _write_table(ws, first_col, columns, rows):
    """Write a header row and data rows starting at (1, first_col)."""
    for offset, col_name in enumerate(columns):
        cell = ws.cell(row=1, column=first_col + offset, value=col_name)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = HEADER_ALIGNMENT
        cell.border = HEADER_BORDER

    for row_idx, values in enumerate(rows, 2):
        for offset, value in enumerate(values):
            ws.cell(row=row_idx, column=first_col + offset, value=value).border = CELL_BORDER


def _build_sheet(ws, unit_report):
    """Populate a worksheet with the monthly and per-plant tables."""
    _write_table(
        ws, 1, ['Month', 'Total'],
        [(r['month'], r['total']) for r in unit_report['monthly']]
    )
    _write_table(
        ws, 4, ['Plant', 'Total'],
        [(r['name'], r['total']) for r in unit_report['by_plant_type']]
    )

    ws.column_dimensions['A'].width = 12
    ws.column_dimensions['B'].width = 12
    ws.column_dimensions['C'].width = 4
    ws.column_dimensions['D'].width = 28
    ws.column_dimensions['E'].width = 12

    ws.freeze_panes = 'A2'


def generate_report_excel(report, today=None):
    """Generate an Excel workbook for a harvest report.

    Args:
        report: Output of reports.build_report
        today: Date used in the filename

    Returns:
        (BytesIO buffer, filename) on success, (None, None) if there are no harvests.
    """
    import openpyxl

    if not any(report[unit]['harvest_count'] for unit in report):
        return None, None

    wb = openpyxl.Workbook()
    # Remove default sheet
    wb.remove(wb.active)

    for unit, unit_report in report.items():
        ws = wb.create_sheet(title=UNIT_LABELS.get(unit, unit))
        _build_sheet(ws, unit_report)

    buffer = BytesIO()
    wb.save(buffer)
    buffer.seek(0)

    today = today or date.today()
    filename = f"kai-keeper-report-{today.strftime('%Y%m%d')}.xlsx"
    return buffer, filename
