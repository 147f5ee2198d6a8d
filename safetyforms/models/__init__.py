"""
Safety Forms Platform
SQLAlchemy extension instance shared by every model module.

Usage:
    from safetyforms.models import db
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
