"""
API Blueprints Package

All HTTP route handlers for the application, organized by domain.
Each module defines a Flask Blueprint registered in app/__init__.py.

BLUEPRINT REFERENCE:
====================
- conversations.py : quote families, revision limits, email threads, history
"""

# All blueprints are imported and registered in app/__init__.py
# This file serves as documentation only

__all__ = []
