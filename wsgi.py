"""
WSGI Entry Point for Gunicorn

    gunicorn wsgi:app

The Flask application is built by the factory in app_init.py.
"""

from app_init import create_app

app = create_app()
