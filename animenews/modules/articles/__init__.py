"""
Articles Module
===============

Article persistence, slug assignment and form input parsing shared by the
admin panel, the public site and the feeds.
"""

from .database import (
    STATUS_PUBLISHED, STATUS_DRAFT, STATUSES,
    init_news_db, find_published, get_published_by_slug,
)
from .slugs import slugify, assign_slug, SlugError
from .labels import parse_labels

__all__ = ['STATUS_PUBLISHED', 'STATUS_DRAFT', 'STATUSES', 'init_news_db',
           'find_published', 'get_published_by_slug', 'slugify', 'assign_slug',
           'SlugError', 'parse_labels']
