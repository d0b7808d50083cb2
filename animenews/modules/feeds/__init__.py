"""
Feeds Module
============

RSS feeds and XML sitemaps for readers and search engines.

Provides:
- /rss                    latest 50 articles
- /rss/category/<slug>    latest 20 articles in a category
- /sitemap.xml            static pages, articles and tag pages
- /sitemap-news.xml       Google News sitemap (last 48 hours)
"""

from flask import Blueprint

feeds_bp = Blueprint('feeds', __name__)

from . import routes

__all__ = ['feeds_bp']
