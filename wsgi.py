"""
WSGI / Flask-Migrate entry point.

Usage:
    flask --app wsgi db upgrade
    flask --app wsgi seed-forms [--company-id ID] [--force]
    gunicorn wsgi:app
"""

from safetyforms import create_app

app = create_app()
