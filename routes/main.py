"""
routes/main.py — Overview and CSRF token routes.

Provides:
- GET / — Collection counts and the active/archived planting split
- GET /csrf-token — Token to send back as the X-CSRFToken header on POSTs
"""

from flask import Blueprint, jsonify
from flask_wtf.csrf import generate_csrf

from routes.helpers import get_tracker

main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def index():
    """Overview of the tracker state (JSON API)."""
    tracker = get_tracker()
    archived = sum(1 for p in tracker.plantings if p.archived)
    return jsonify({
        'success': True,
        'plant_types': len(tracker.plant_types),
        'plantings': len(tracker.plantings),
        'active_plantings': len(tracker.plantings) - archived,
        'archived_plantings': archived,
        'harvests': len(tracker.harvests),
    })


@main_bp.route('/csrf-token')
def csrf_token():
    return jsonify({'success': True, 'csrf_token': generate_csrf()})
