"""
AnimeNews - A Flask News Site
=============================

Anime, manga and game news portal with:
- Public article pages, category/tag listings and search
- RSS feeds, sitemap and Google News sitemap
- Session-protected admin panel with image upload to Cloudflare R2
- Google Indexing API pings on publish, update and delete

Usage:
    from flask import Flask
    from animenews import AnimeNews

    app = Flask(__name__)
    AnimeNews(app)
"""

import logging
import os
from datetime import timedelta

from flask import Flask
from flask_cors import CORS

from .core.config import Config, get_site

__version__ = '0.1.0'

logger = logging.getLogger(__name__)

SESSION_LIFETIME = timedelta(hours=24)

# Flask ships its own values for these, so they are only replaced while the
# app still has the Flask default
SESSION_DEFAULTS = {
    'PERMANENT_SESSION_LIFETIME': SESSION_LIFETIME,
    'SESSION_COOKIE_HTTPONLY': True,
    'SESSION_COOKIE_SAMESITE': 'Lax',
}

# app.config keys filled from Config when the app does not set them
CONFIG_KEYS = [
    'SITE_NAME', 'SITE_URL', 'SITE_LANGUAGE', 'DB_DIR', 'NEWS_DB', 'LOG_DB',
    'UPLOAD_FOLDER', 'R2_ENDPOINT', 'R2_ACCESS_KEY_ID', 'R2_SECRET_ACCESS_KEY',
    'R2_BUCKET_NAME', 'R2_PUBLIC_DOMAIN', 'ADMIN_USER', 'ADMIN_PASS',
    'GOOGLE_CLIENT_EMAIL', 'GOOGLE_PRIVATE_KEY',
]


class AnimeNews:
    """Flask extension that wires the news site into an app."""

    def __init__(self, app=None, authenticator=None):
        self.authenticator = authenticator
        self._registered = []
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self._apply_config(app)
        self._setup_database_dir(app)
        self._init_databases(app)
        self._register_blueprints(app)
        self._setup_cors(app)
        self._setup_context_processor(app)

        from .cli import register_commands
        register_commands(app)

        app.extensions['animenews'] = self

    def _apply_config(self, app):
        for key in CONFIG_KEYS:
            value = getattr(Config, key, None)
            if value is not None:
                app.config.setdefault(key, value)
        if not app.config.get('SECRET_KEY') and Config.SECRET_KEY:
            app.config['SECRET_KEY'] = Config.SECRET_KEY
        for key, value in SESSION_DEFAULTS.items():
            if app.config.get(key) == Flask.default_config.get(key):
                app.config[key] = value

    def _setup_database_dir(self, app):
        db_dir = app.config.get('DB_DIR')
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    def _init_databases(self, app):
        from .modules.articles.database import init_news_db
        with app.app_context():
            init_news_db()

    def _register_blueprints(self, app):
        from .modules.dashboard import dashboard_bp
        from .modules.news_public import news_public_bp
        from .modules.feeds import feeds_bp

        for name, bp in (('dashboard', dashboard_bp),
                         ('news_public', news_public_bp),
                         ('feeds', feeds_bp)):
            app.register_blueprint(bp)
            self._registered.append(name)
            logger.debug("Registered module %s", name)

    def _setup_cors(self, app):
        # Feeds and the load-more API are read by other sites and apps
        CORS(app, resources={
            r"/api/*": {"origins": "*"},
            r"/rss*": {"origins": "*"},
            r"/sitemap*": {"origins": "*"},
        }, send_wildcard=True)

    def _setup_context_processor(self, app):
        from .modules.articles.slugs import slugify
        from .modules.dashboard.auth import is_logged_in

        @app.context_processor
        def inject_site():
            site = get_site()
            return {
                'site_name': site['name'],
                'site_url': site['url'],
                'is_logged_in': is_logged_in(),
                'create_slug': slugify,
            }

    def get_registered_modules(self):
        return list(self._registered)


__all__ = ['AnimeNews']
