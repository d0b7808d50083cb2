import os
from dotenv import load_dotenv

load_dotenv(override=True)

class Config:
    """
    Base configuration for the AnimeNews site.
    Everything is read from environment variables (or a .env file).
    """
    # Site identity
    SITE_NAME = os.getenv('SITE_NAME', 'AnimeNews ID')
    SITE_URL = os.getenv('SITE_URL', 'http://localhost:3000')
    SITE_LANGUAGE = os.getenv('SITE_LANGUAGE', 'id')

    # Flask settings
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY')
    UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER', os.path.join(os.getcwd(), 'static', 'uploads'))

    # Get DB_DIR from environment, or use a default if not set
    DB_DIR = os.getenv('DB_DIR', os.path.join(os.getcwd(), 'databases'))

    # Database paths
    NEWS_DB = os.getenv('NEWS_DB', os.path.join(DB_DIR, "news.db"))
    LOG_DB = os.getenv('LOG_DB', os.path.join(DB_DIR, "app_logs.db"))

    # Table names
    NEWS_ARTICLES_TABLE = "news_articles"
    LOGS_TABLE = "app_logs"

    # Cloudflare R2 (S3 compatible object storage)
    R2_ENDPOINT = os.getenv('R2_ENDPOINT')
    R2_ACCESS_KEY_ID = os.getenv('R2_ACCESS_KEY_ID')
    R2_SECRET_ACCESS_KEY = os.getenv('R2_SECRET_ACCESS_KEY')
    R2_BUCKET_NAME = os.getenv('R2_BUCKET_NAME')
    R2_PUBLIC_DOMAIN = os.getenv('R2_PUBLIC_DOMAIN')

    # Static admin credentials
    ADMIN_USER = os.getenv('ADMIN_USER')
    ADMIN_PASS = os.getenv('ADMIN_PASS')

    # Google Indexing API service account
    GOOGLE_CLIENT_EMAIL = os.getenv('GOOGLE_CLIENT_EMAIL')
    GOOGLE_PRIVATE_KEY = os.getenv('GOOGLE_PRIVATE_KEY')

    # Port for local server
    port = int(os.getenv('PORT', '3000'))


def get_config_value(key, default=None):
    """Get configuration value: Flask app config first, then Config, then env var"""
    try:
        from flask import current_app
        val = current_app.config.get(key)
        if val:
            return val
    except RuntimeError:
        pass
    val = getattr(Config, key, None)
    if val:
        return val
    return os.getenv(key, default)


def get_site():
    """Site identity used by metadata, feeds and templates"""
    return {
        'name': get_config_value('SITE_NAME', 'AnimeNews ID'),
        'url': get_config_value('SITE_URL', 'http://localhost:3000').rstrip('/'),
        'language': get_config_value('SITE_LANGUAGE', 'id'),
    }
