"""
routes/plantings.py — Planting tracker API routes.

Provides:
- GET /plantings/ — Plantings with plant name and phase estimate
- POST /plantings/add — Record a new planting
- POST /plantings/archive — Toggle the archived flag
- POST /plantings/delete — Delete a planting (harvests are kept)
- POST /plantings/harvest — Log a harvest against a planting
"""

from flask import Blueprint, request, jsonify

from routes.helpers import get_tracker, request_data
from utils.validators import clean_amount, clean_date, clean_unit

plantings_bp = Blueprint('plantings', __name__, url_prefix='/plantings')


@plantings_bp.route('/')
def list_plantings():
    """Tracker view (JSON API). Optional ?today=YYYY-MM-DD."""
    today_arg = request.args.get('today')
    today = clean_date(today_arg) if today_arg else None
    if today_arg and not today:
        return jsonify({'success': False, 'error': 'Invalid date'}), 400

    try:
        rows = get_tracker().tracker_rows(today)
        return jsonify({'success': True, 'plantings': [row.to_dict() for row in rows]})
    except Exception as e:
        return jsonify({'success': False, 'error': str(e)}), 500


@plantings_bp.route('/add', methods=['POST'])
def add_planting():
    """Add a planting. Requires plantTypeId and plantedAt."""
    data = request_data()
    planting = get_tracker().add_planting(
        data.get('plantTypeId'),
        data.get('plantedAt'),
        location=data.get('location', ''),
        quantity_planted=data.get('quantityPlanted', 1),
        notes=data.get('notes', ''),
    )
    if not planting:
        return jsonify({'success': False, 'error': 'Plant type and planting date are required'}), 400
    return jsonify({'success': True, 'planting': planting.to_dict()})


@plantings_bp.route('/archive', methods=['POST'])
def toggle_archive():
    data = request_data()
    planting = get_tracker().toggle_archive(data.get('id'))
    if not planting:
        return jsonify({'success': False, 'error': 'Planting not found'}), 404
    return jsonify({'success': True, 'planting': planting.to_dict()})


@plantings_bp.route('/delete', methods=['POST'])
def delete_planting():
    data = request_data()
    if not get_tracker().delete_planting(data.get('id')):
        return jsonify({'success': False, 'error': 'Planting not found'}), 404
    return jsonify({'success': True})


@plantings_bp.route('/harvest', methods=['POST'])
def log_harvest():
    """Log a harvest. Unit defaults to the plant type's default unit."""
    data = request_data()
    tracker = get_tracker()
    planting_id = data.get('plantingId')

    if tracker.get_planting(planting_id) is None:
        return jsonify({'success': False, 'error': 'Planting not found'}), 404

    harvest = tracker.log_harvest(
        planting_id,
        data.get('amount'),
        unit=data.get('unit'),
        harvest_date=data.get('date'),
        notes=data.get('notes', ''),
    )
    if not harvest:
        return jsonify({'success': False, 'error': _harvest_error(data)}), 400
    return jsonify({'success': True, 'harvest': harvest.to_dict()})


def _harvest_error(data):
    """Which submitted harvest field was rejected."""
    if clean_amount(data.get('amount')) is None:
        return 'Amount must be greater than zero'
    if data.get('unit') and clean_unit(data.get('unit')) is None:
        return 'Unit must be kg or count'
    if data.get('date') and clean_date(data.get('date')) is None:
        return 'Invalid date, expected YYYY-MM-DD'
    return 'Invalid harvest'
