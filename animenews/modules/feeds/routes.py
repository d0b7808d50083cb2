import logging
from datetime import datetime, timezone

from flask import Response

from animenews.core.config import get_site
from animenews.core.database import StoreError
from animenews.modules.articles.database import find_published
from . import feeds_bp
from .generator import (
    build_rss, build_category_rss, build_sitemap, build_news_sitemap,
    news_cutoff, RSS_LIMIT, CATEGORY_RSS_LIMIT, NEWS_SITEMAP_LIMIT,
)

logger = logging.getLogger(__name__)


def _xml(document):
    return Response(document, mimetype='application/xml')


@feeds_bp.route('/rss')
def rss():
    try:
        articles = find_published(limit=RSS_LIMIT)
    except StoreError as e:
        logger.error(f"Error generating RSS: {e}")
        return "Error generating RSS", 500
    return _xml(build_rss(get_site(), articles))


@feeds_bp.route('/rss/category/<slug>')
def category_rss(slug):
    try:
        articles = find_published(category=slug.replace('-', ' '), limit=CATEGORY_RSS_LIMIT)
    except StoreError as e:
        logger.error(f"Error generating category RSS for {slug}: {e}")
        return "Error generating RSS", 500
    return _xml(build_category_rss(get_site(), slug, articles))


@feeds_bp.route('/sitemap.xml')
def sitemap():
    try:
        articles = find_published()
    except StoreError as e:
        logger.error(f"Error generating sitemap: {e}")
        return "Error sitemap", 500
    return _xml(build_sitemap(get_site(), articles))


@feeds_bp.route('/sitemap-news.xml')
def news_sitemap():
    now = datetime.now(timezone.utc)
    try:
        articles = find_published(since=news_cutoff(now), limit=NEWS_SITEMAP_LIMIT)
    except StoreError as e:
        logger.error(f"Error generating news sitemap: {e}")
        return "Error generating News Sitemap", 500
    return _xml(build_news_sitemap(get_site(), articles, now=now))
