"""
AnimeNews Modules
=================

Flask blueprints and domain packages that make up the news site.
"""

__all__ = ['articles', 'dashboard', 'feeds', 'indexing', 'news_public']
