"""
WSGI entry point (gunicorn) and Flask-Migrate target.

Usage:
    gunicorn wsgi:app
    FLASK_APP=wsgi flask db upgrade
    FLASK_APP=wsgi flask init-storage
"""

from qa_checklist import create_app

app = create_app()
