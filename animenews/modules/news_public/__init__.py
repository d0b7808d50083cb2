"""
Public News Module
==================

Reader-facing pages: home, article, category, tag, search, load-more API,
static pages and the 404 page. Only published articles are ever shown.
"""

from flask import Blueprint

news_public_bp = Blueprint(
    'news',
    __name__,
    template_folder='templates',
    static_folder='static',
    static_url_path='/img',
)

from . import routes

__all__ = ['news_public_bp']
