"""
app.py — Flask entry point for the Kai Keeper garden tracker.

Initializes the Flask app, opens the persistence gateway, loads the tracker
state from the store, and registers all route blueprints.

Run: python app.py → localhost:5000
"""

import os
import atexit
import logging
from flask import Flask
from flask_wtf.csrf import CSRFProtect

from database import PersistenceGateway, get_db_path
from tracker import Tracker
from routes.main import main_bp
from routes.plantings import plantings_bp
from routes.harvests import harvests_bp
from routes.reports import reports_bp
from routes.settings import settings_bp


def create_app(test_config=None):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.secret_key = 'kai-keeper-local-app-secret-key'
    app.config['WTF_CSRF_CHECK_DEFAULT'] = True
    app.config['DATABASE'] = get_db_path()

    if test_config:
        app.config.update(test_config)

    CSRFProtect(app)

    if not app.debug and not app.testing:
        logging.basicConfig(level=logging.INFO)

    # Load state once; every mutation after this saves in the background
    gateway = PersistenceGateway(app.config['DATABASE'])
    tracker = Tracker(gateway).load()
    app.extensions['tracker'] = tracker
    atexit.register(gateway.close)
    app.logger.info(
        "Loaded %d plant types, %d plantings, %d harvests from %s",
        len(tracker.plant_types), len(tracker.plantings), len(tracker.harvests),
        app.config['DATABASE']
    )

    # Register blueprints
    app.register_blueprint(main_bp)
    app.register_blueprint(plantings_bp)
    app.register_blueprint(harvests_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(settings_bp)

    return app


if __name__ == '__main__':
    app = create_app()
    # Debug mode: enabled by default for development (auto-reload on file changes)
    # Set FLASK_DEBUG=0 to disable for production
    debug = os.environ.get('FLASK_DEBUG', '1') != '0'
    # The tracker mutates its lists without locking: serve one request at a time
    app.run(host='localhost', port=5000, debug=debug, threaded=False)
