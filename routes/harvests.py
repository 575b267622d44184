"""
routes/harvests.py — Harvest ledger API routes.

Provides:
- GET /harvests/ — Ledger rows (newest first) with plant name and location
- POST /harvests/delete — Delete a harvest
"""

from flask import Blueprint, jsonify

from routes.helpers import get_tracker, request_data

harvests_bp = Blueprint('harvests', __name__, url_prefix='/harvests')


@harvests_bp.route('/')
def ledger():
    """Harvest ledger (JSON API)."""
    try:
        return jsonify({'success': True, 'harvests': get_tracker().ledger()})
    except Exception as e:
        return jsonify({'success': False, 'error': str(e)}), 500


@harvests_bp.route('/delete', methods=['POST'])
def delete_harvest():
    data = request_data()
    if not get_tracker().delete_harvest(data.get('id')):
        return jsonify({'success': False, 'error': 'Harvest not found'}), 404
    return jsonify({'success': True})
