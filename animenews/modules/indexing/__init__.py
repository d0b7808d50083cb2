"""
Indexing Module
===============

Best-effort URL notifications to the Google Indexing API.
"""

from .service import (
    IndexingService, indexing_service, notify_in_background,
    URL_UPDATED, URL_DELETED,
)

__all__ = ['IndexingService', 'indexing_service', 'notify_in_background',
           'URL_UPDATED', 'URL_DELETED']
