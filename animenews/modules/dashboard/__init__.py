"""
Dashboard Module
================

Admin panel for the news site.

Provides:
- Admin login / logout (session based, 24 hour lifetime)
- Article list with recent activity log
- Article create / edit / delete with image upload
- Manual Google Indexing ping
"""

from flask import Blueprint

dashboard_bp = Blueprint(
    'admin',
    __name__,
    url_prefix='/admin',
    template_folder='templates',
)

from . import routes

__all__ = ['dashboard_bp']
