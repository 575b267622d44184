"""
routes/settings.py — Plant catalogue and backup routes.

Provides:
- GET /settings/plant-types — List the plant catalogue
- POST /settings/plant-type/add — Add a plant type
- POST /settings/plant-type/edit — Edit plant type fields
- POST /settings/plant-type/delete — Delete a plant type (plantings are kept)
- POST /settings/catalogue/reset — Reset the catalogue to the defaults
- GET /settings/export — Download a JSON backup of all collections
- POST /settings/import — Replace all collections from a JSON backup
"""

import json
from datetime import date

from flask import Blueprint, request, jsonify, Response

from routes.helpers import get_tracker, request_data
from utils.backup import backup_filename, parse_backup_text

settings_bp = Blueprint('settings', __name__, url_prefix='/settings')

# Form field -> PlantType attribute
PLANT_TYPE_FORM_FIELDS = {
    'name': 'name',
    'germinationMinDays': 'germination_min_days',
    'germinationMaxDays': 'germination_max_days',
    'maturityDays': 'maturity_days',
    'harvestWindowDays': 'harvest_window_days',
    'defaultUnit': 'default_unit',
}


def _plant_type_fields(data):
    return {attr: data[key] for key, attr in PLANT_TYPE_FORM_FIELDS.items() if key in data}


# ========================================
# Plant Catalogue
# ========================================

@settings_bp.route('/plant-types')
def list_plant_types():
    plant_types = get_tracker().plant_types
    return jsonify({'success': True, 'plant_types': [pt.to_dict() for pt in plant_types]})


@settings_bp.route('/plant-type/add', methods=['POST'])
def plant_type_add():
    """Add a plant type. Missing timing fields use the form defaults."""
    fields = _plant_type_fields(request_data())
    name = fields.pop('name', '')
    plant_type = get_tracker().add_plant_type(name, **fields)
    if not plant_type:
        return jsonify({'success': False, 'error': 'Name and numeric timings are required'}), 400
    return jsonify({'success': True, 'plant_type': plant_type.to_dict()})


@settings_bp.route('/plant-type/edit', methods=['POST'])
def plant_type_edit():
    data = request_data()
    plant_type_id = data.get('id')
    tracker = get_tracker()

    if not plant_type_id or tracker.get_plant_type(plant_type_id) is None:
        return jsonify({'success': False, 'error': 'Plant type not found'}), 404

    plant_type = tracker.update_plant_type(plant_type_id, **_plant_type_fields(data))
    if not plant_type:
        return jsonify({'success': False, 'error': 'Invalid value'}), 400
    return jsonify({'success': True, 'plant_type': plant_type.to_dict()})


@settings_bp.route('/plant-type/delete', methods=['POST'])
def plant_type_delete():
    data = request_data()
    if not get_tracker().remove_plant_type(data.get('id')):
        return jsonify({'success': False, 'error': 'Plant type not found'}), 404
    return jsonify({'success': True})


@settings_bp.route('/catalogue/reset', methods=['POST'])
def catalogue_reset():
    """Reset the catalogue to defaults. Plantings and harvests are untouched."""
    plant_types = get_tracker().reset_catalogue()
    return jsonify({'success': True, 'plant_types': [pt.to_dict() for pt in plant_types]})


# ========================================
# Backup Export / Import
# ========================================

@settings_bp.route('/export')
def export_backup():
    """Export all collections as a JSON file download."""
    data = get_tracker().export_backup()
    return Response(
        json.dumps(data, indent=2, ensure_ascii=False),
        mimetype='application/json',
        headers={
            'Content-Disposition': f'attachment; filename={backup_filename(date.today())}'
        }
    )


@settings_bp.route('/import', methods=['POST'])
def import_backup():
    """Import from an uploaded file (field 'file') or a JSON body."""
    if 'file' in request.files:
        file = request.files['file']
        if file.filename == '':
            return jsonify({'success': False, 'error': 'No file selected'}), 400
        try:
            text = file.read().decode('utf-8-sig')
        except UnicodeDecodeError:
            return jsonify({'success': False, 'error': 'Invalid backup file: not UTF-8 text'}), 400
        payload, error = parse_backup_text(text)
        if error:
            return jsonify({'success': False, 'error': error}), 400
    elif request.is_json:
        payload = request.get_json(silent=True)
        if payload is None:
            return jsonify({'success': False, 'error': 'Import failed: invalid JSON'}), 400
    else:
        return jsonify({'success': False, 'error': 'No file selected'}), 400

    success, message = get_tracker().import_backup(payload)
    if not success:
        return jsonify({'success': False, 'error': message}), 400
    return jsonify({'success': True, 'message': message})
