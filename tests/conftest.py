"""
Shared fixtures: a fully initialised app on throwaway databases.

NOTE: pytest and pytest-flask are listed under extras_require["dev"] in setup.py.
Install with: pip install -e ".[dev]"
"""

import os
import shutil
import tempfile

import pytest
from flask import Flask

from animenews import AnimeNews
from animenews.core.storage import DEFAULT_IMAGE
from animenews.modules.articles.database import (
    STATUS_PUBLISHED, create_article_db, get_article_db,
)
from animenews.modules.articles.slugs import slugify

SITE_URL = "https://animenews.test"
ADMIN_USER = "redaksi"
ADMIN_PASS = "rahasia-123"


def build_app(db_dir, **overrides):
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.config["SECRET_KEY"] = "test-secret"
    app.config["DB_DIR"] = db_dir
    app.config["NEWS_DB"] = os.path.join(db_dir, "news.db")
    app.config["LOG_DB"] = os.path.join(db_dir, "app_logs.db")
    app.config["UPLOAD_FOLDER"] = os.path.join(db_dir, "uploads")
    app.config["SITE_NAME"] = "AnimeNews Test"
    app.config["SITE_URL"] = SITE_URL
    app.config["ADMIN_USER"] = ADMIN_USER
    app.config["ADMIN_PASS"] = ADMIN_PASS
    app.config.update(overrides)
    AnimeNews(app)
    return app


@pytest.fixture
def tmp_db_dir():
    """Create a temporary directory for test databases, cleaned up after."""
    d = tempfile.mkdtemp(prefix="animenews-test-")
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def app(tmp_db_dir):
    return build_app(tmp_db_dir)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(client):
    """Test client with an admin session already established."""
    with client.session_transaction() as sess:
        sess["is_logged_in"] = True
    return client


@pytest.fixture
def make_article(app):
    """Insert an article straight into the store and return it as a dict."""
    def _make(title, status=STATUS_PUBLISHED, slug=None, category=("Anime",), tags=(),
              image=DEFAULT_IMAGE, content="<p>Isi berita lengkap.</p>",
              created_at=None, seo_description=""):
        with app.app_context():
            article_id = create_article_db(title, slug or slugify(title), content, image,
                                           list(category), list(tags), status,
                                           seo_description, created_at)
            return get_article_db(article_id)
    return _make
