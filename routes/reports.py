"""
routes/reports.py — Harvest report routes.

Provides:
- GET /reports/       — Totals by month and by plant type, per unit (JSON)
- GET /reports/excel  — Excel export of the same report
"""

from flask import Blueprint, jsonify, send_file

from routes.helpers import get_tracker
from utils.export import generate_report_excel

reports_bp = Blueprint('reports', __name__, url_prefix='/reports')


@reports_bp.route('/')
def index():
    """Harvest report (JSON API)."""
    try:
        return jsonify({'success': True, 'report': get_tracker().report()})
    except Exception as e:
        return jsonify({'success': False, 'error': str(e)}), 500


@reports_bp.route('/excel')
def export_excel():
    """Download the report as an Excel workbook."""
    try:
        buffer, filename = generate_report_excel(get_tracker().report())
    except Exception as e:
        return jsonify({'success': False, 'error': str(e)}), 500
    if not buffer:
        return jsonify({'success': False, 'error': 'No harvests to export'}), 404

    return send_file(
        buffer,
        as_attachment=True,
        download_name=filename,
        mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    )
