"""
AnimeNews Core
==============

Configuration, persistence helpers, logging and image storage shared by the
site modules.
"""

from .config import Config, get_config_value, get_site
from .database import Database, StoreError
from .logging_service import LoggingService, logger

__all__ = ['Config', 'get_config_value', 'get_site', 'Database', 'StoreError',
           'LoggingService', 'logger']
