"""
routes/helpers.py — Request helpers shared by the blueprints.
"""

from flask import current_app, request


def get_tracker():
    """The Tracker owned by the running app."""
    return current_app.extensions['tracker']


def request_data():
    """Submitted fields, from a JSON body or a form."""
    if request.is_json:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}
    return request.form.to_dict()
