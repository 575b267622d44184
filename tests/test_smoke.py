import pytest
from app import create_app
import io
import os
import tempfile

import openpyxl


@pytest.fixture
def app():
    # Create a temporary file to isolate the database for each test
    db_fd, db_path = tempfile.mkstemp(suffix='.db')

    # Configure app for testing
    app = create_app({
        'TESTING': True,
        'DATABASE': db_path,
        'SECRET_KEY': 'dev-key-for-testing',
        'WTF_CSRF_ENABLED': False,
    })

    yield app

    # Cleanup
    app.extensions['tracker'].gateway.close()
    os.close(db_fd)
    try:
        os.unlink(db_path)
    except PermissionError:
        pass


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


def first_plant_type(client, name='Tomato'):
    rv = client.get('/settings/plant-types')
    return next(pt for pt in rv.get_json()['plant_types'] if pt['name'] == name)


def add_planting(client, plant_type_id, planted_at='2024-09-01'):
    rv = client.post('/plantings/add', json={
        'plantTypeId': plant_type_id,
        'plantedAt': planted_at,
        'location': 'Bed 1',
        'quantityPlanted': 6,
    })
    assert rv.status_code == 200
    return rv.get_json()['planting']


def test_homepage_loads(client):
    """Test that the overview responds with seeded counts."""
    rv = client.get('/')
    assert rv.status_code == 200
    data = rv.get_json()
    assert data['success']
    assert data['plant_types'] == 10
    assert data['plantings'] == 0


def test_planting_and_phase(client):
    tomato = first_plant_type(client)
    planting = add_planting(client, tomato['id'])

    rv = client.get('/plantings/?today=2024-09-11')
    rows = rv.get_json()['plantings']

    assert rows[0]['planting']['id'] == planting['id']
    assert rows[0]['plantName'] == 'Tomato'
    assert rows[0]['phase']['germinationPct'] == 100
    assert rows[0]['phase']['expected']['germinationStart'] == '2024-09-07'


def test_invalid_today(client):
    rv = client.get('/plantings/?today=tomorrow')
    assert rv.status_code == 400


def test_add_planting_rejected(client):
    rv = client.post('/plantings/add', json={'plantTypeId': '', 'plantedAt': '2024-09-01'})
    assert rv.status_code == 400
    assert client.get('/').get_json()['plantings'] == 0


def test_add_planting_from_form(client):
    tomato = first_plant_type(client)
    rv = client.post('/plantings/add', data={'plantTypeId': tomato['id'], 'plantedAt': '2024-09-01'})
    assert rv.status_code == 200
    assert rv.get_json()['planting']['quantityPlanted'] == 1


def test_archive_and_delete(client):
    planting = add_planting(client, first_plant_type(client)['id'])

    rv = client.post('/plantings/archive', json={'id': planting['id']})
    assert rv.get_json()['planting']['archived'] is True
    assert client.get('/').get_json()['archived_plantings'] == 1

    rv = client.post('/plantings/delete', json={'id': planting['id']})
    assert rv.status_code == 200
    assert client.post('/plantings/delete', json={'id': planting['id']}).status_code == 404


def test_harvest_and_reports(client):
    lettuce = first_plant_type(client, 'Lettuce')
    planting = add_planting(client, lettuce['id'])

    rv = client.post('/plantings/harvest', json={'plantingId': planting['id'], 'amount': 8, 'date': '2024-10-20'})
    assert rv.status_code == 200
    assert rv.get_json()['harvest']['unit'] == 'count'

    rv = client.post('/plantings/harvest', json={'plantingId': planting['id'], 'amount': 0})
    assert rv.status_code == 400

    ledger = client.get('/harvests/').get_json()['harvests']
    assert len(ledger) == 1
    assert ledger[0]['plant_name'] == 'Lettuce'

    report = client.get('/reports/').get_json()['report']
    assert report['count']['monthly'] == [{'month': '2024-10', 'total': 8}]
    assert report['kg']['monthly'] == []

    rv = client.post('/harvests/delete', json={'id': ledger[0]['harvest']['id']})
    assert rv.status_code == 200


def test_harvest_unknown_planting(client):
    rv = client.post('/plantings/harvest', json={'plantingId': 'nope', 'amount': 1})
    assert rv.status_code == 404


def test_report_excel(client):
    assert client.get('/reports/excel').status_code == 404

    planting = add_planting(client, first_plant_type(client)['id'])
    client.post('/plantings/harvest', json={'plantingId': planting['id'], 'amount': 1.5, 'date': '2024-12-01'})

    rv = client.get('/reports/excel')
    assert rv.status_code == 200

    wb = openpyxl.load_workbook(io.BytesIO(rv.data))
    ws = wb['Harvest (kg)']
    assert ws['A2'].value == '2024-12'
    assert ws['B2'].value == 1.5
    assert ws['D2'].value == 'Tomato'


def test_catalogue_routes(client):
    rv = client.post('/settings/plant-type/add', json={'name': 'Pumpkin', 'maturityDays': 110, 'defaultUnit': 'count'})
    assert rv.status_code == 200
    pumpkin = rv.get_json()['plant_type']
    assert pumpkin['germinationMinDays'] == 7

    rv = client.post('/settings/plant-type/edit', json={'id': pumpkin['id'], 'harvestWindowDays': '40'})
    assert rv.get_json()['plant_type']['harvestWindowDays'] == 40

    rv = client.post('/settings/plant-type/edit', json={'id': pumpkin['id'], 'defaultUnit': 'bunch'})
    assert rv.status_code == 400

    rv = client.post('/settings/plant-type/delete', json={'id': pumpkin['id']})
    assert rv.status_code == 200

    rv = client.post('/settings/catalogue/reset')
    assert len(rv.get_json()['plant_types']) == 10

    rv = client.post('/settings/plant-type/add', json={'name': ''})
    assert rv.status_code == 400


def test_export_import(client):
    planting = add_planting(client, first_plant_type(client)['id'])
    client.post('/plantings/harvest', json={'plantingId': planting['id'], 'amount': 2, 'date': '2024-10-01'})

    rv = client.get('/settings/export')
    assert rv.status_code == 200
    assert 'kai-keeper-backup-' in rv.headers['Content-Disposition']
    exported = rv.get_json()
    assert set(exported) == {'plantTypes', 'plantings', 'harvests', 'exportedAt'}

    # Upload as a file
    rv = client.post('/settings/import', data={
        'file': (io.BytesIO(rv.data), 'backup.json'),
    }, content_type='multipart/form-data')
    assert rv.status_code == 200
    assert rv.get_json()['success']

    rv = client.get('/settings/export')
    again = rv.get_json()
    for key in ('plantTypes', 'plantings', 'harvests'):
        assert again[key] == exported[key]


def test_import_rejected(client):
    add_planting(client, first_plant_type(client)['id'])

    rv = client.post('/settings/import', json={'plantTypes': [], 'plantings': []})
    assert rv.status_code == 400
    assert client.get('/').get_json()['plantings'] == 1

    rv = client.post('/settings/import', data={
        'file': (io.BytesIO(b'{broken'), 'backup.json'),
    }, content_type='multipart/form-data')
    assert rv.status_code == 400
    assert client.get('/').get_json()['plant_types'] == 10


def test_harvest_rejection_names_field(client):
    planting = add_planting(client, first_plant_type(client)['id'])

    rv = client.post('/plantings/harvest', json={'plantingId': planting['id'], 'amount': 1, 'unit': 'bunch'})
    assert rv.status_code == 400
    assert rv.get_json()['error'] == 'Unit must be kg or count'

    rv = client.post('/plantings/harvest', json={'plantingId': planting['id'], 'amount': 1, 'date': '01/10/2024'})
    assert rv.status_code == 400
    assert rv.get_json()['error'] == 'Invalid date, expected YYYY-MM-DD'

    rv = client.post('/plantings/harvest', json={'plantingId': planting['id'], 'amount': -2})
    assert rv.get_json()['error'] == 'Amount must be greater than zero'


def test_import_rejects_non_utf8_file(client):
    rv = client.post('/settings/import', data={
        'file': (io.BytesIO(b'{"plantTypes": [{"name": "\xff\xfe"}], "plantings": [], "harvests": []}'), 'backup.json'),
    }, content_type='multipart/form-data')
    assert rv.status_code == 400
    assert rv.get_json()['error'].startswith('Invalid backup file')
    assert client.get('/').get_json()['plant_types'] == 10


def test_reports_tolerate_loosely_typed_import(client):
    """Imported harvests are not schema-checked; reports skip the ones they cannot total."""
    payload = {
        'plantTypes': [{'id': 'pt-1', 'name': 'Tomato', 'defaultUnit': 'kg'}],
        'plantings': [{'id': 'p-1', 'plantTypeId': 'pt-1', 'plantedAt': '2024-09-01'}],
        'harvests': [
            {'id': 'h-1', 'plantingId': 'p-1', 'date': '2024-10-01', 'amount': '2', 'unit': 'kg'},
            {'id': 'h-2', 'plantingId': 'p-1', 'date': None, 'amount': 1, 'unit': 'kg'},
            {'id': 'h-3', 'plantingId': ['p-1'], 'date': '2024-10-02', 'amount': 1, 'unit': 'kg'},
            {'id': 'h-4', 'plantingId': 'p-1', 'date': '2024-10-03', 'amount': 3, 'unit': 'kg'},
        ],
    }
    rv = client.post('/settings/import', json=payload)
    assert rv.status_code == 200

    rv = client.get('/reports/')
    assert rv.status_code == 200
    report = rv.get_json()['report']
    assert report['kg']['monthly'] == [{'month': '2024-10', 'total': 4}]
    assert report['kg']['by_plant_type'] == [{'name': 'Tomato', 'total': 3}]

    assert client.get('/reports/excel').status_code == 200
    assert len(client.get('/harvests/').get_json()['harvests']) == 4


def test_state_survives_restart(app):
    client = app.test_client()
    add_planting(client, first_plant_type(client)['id'])
    tracker = app.extensions['tracker']
    tracker.gateway.flush()

    restarted = create_app({
        'TESTING': True,
        'DATABASE': app.config['DATABASE'],
        'WTF_CSRF_ENABLED': False,
    })
    assert restarted.extensions['tracker'].plantings == tracker.plantings
    restarted.extensions['tracker'].gateway.close()


def test_csrf_protection():
    """POSTs without a token are rejected; with the session's token they pass."""
    db_fd, db_path = tempfile.mkstemp(suffix='.db')
    app = create_app({'TESTING': True, 'DATABASE': db_path, 'SECRET_KEY': 'dev-key-for-testing'})

    with app.test_client() as client:
        rv = client.post('/settings/catalogue/reset')
        assert rv.status_code == 400

        token = client.get('/csrf-token').get_json()['csrf_token']
        rv = client.post('/settings/catalogue/reset', headers={'X-CSRFToken': token})
        assert rv.status_code == 200

    app.extensions['tracker'].gateway.close()
    os.close(db_fd)
    os.unlink(db_path)
