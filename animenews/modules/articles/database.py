"""
Article Store
=============

sqlite-backed persistence for news articles. Category and tag lists are kept
as JSON arrays. Every public read goes through find_published(), so drafts
never leak onto the site or into the feeds.
"""

import json
import sqlite3

from animenews.core.config import Config, get_config_value
from animenews.core.database import Database, StoreError

TABLE = Config.NEWS_ARTICLES_TABLE

STATUS_PUBLISHED = 'published'
STATUS_DRAFT = 'draft'
STATUSES = (STATUS_PUBLISHED, STATUS_DRAFT)

ARTICLE_COLUMNS = ('id', 'title', 'slug', 'image', 'content', 'category', 'tags',
                   'status', 'seo_description', 'created_at')

_SELECT = f"SELECT {', '.join(ARTICLE_COLUMNS)} FROM {TABLE}"


def get_db_config():
    """Get the article database path"""
    return get_config_value('NEWS_DB', Config.NEWS_DB)


def init_news_db():
    """Create the articles table and its indexes"""
    try:
        with Database.connect(get_db_config()) as conn:
            cursor = conn.cursor()
            cursor.execute(f'''
                CREATE TABLE IF NOT EXISTS {TABLE} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    slug TEXT NOT NULL UNIQUE,
                    image TEXT DEFAULT 'default.jpg',
                    content TEXT NOT NULL,
                    category TEXT NOT NULL DEFAULT '[]',
                    tags TEXT NOT NULL DEFAULT '[]',
                    status TEXT NOT NULL DEFAULT 'published'
                        CHECK (status IN ('published', 'draft')),
                    seo_description TEXT DEFAULT '',
                    created_at TEXT NOT NULL
                )
            ''')
            cursor.execute(f'CREATE INDEX IF NOT EXISTS idx_news_status_created ON {TABLE}(status, created_at)')
            conn.commit()
    except sqlite3.Error as e:
        raise StoreError(f"Error initializing news database: {e}") from e


def _decode_list(value):
    try:
        items = json.loads(value or '[]')
    except ValueError:
        return []
    return [str(item) for item in items] if isinstance(items, list) else []


def _row_to_article(row):
    article = dict(zip(ARTICLE_COLUMNS, row))
    article['category'] = _decode_list(article['category'])
    article['tags'] = _decode_list(article['tags'])
    article['seo_description'] = article['seo_description'] or ''
    return article


def _fetch(query, params=()):
    try:
        with Database.connect(get_db_config()) as conn:
            rows = conn.execute(query, params).fetchall()
    except sqlite3.Error as e:
        raise StoreError(str(e)) from e
    return [_row_to_article(row) for row in rows]


def _write(query, params=()):
    try:
        with Database.connect(get_db_config()) as conn:
            cursor = conn.execute(query, params)
            conn.commit()
            return cursor
    except sqlite3.IntegrityError:
        raise
    except sqlite3.Error as e:
        raise StoreError(str(e)) from e


def _like_pattern(text):
    escaped = text.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
    return f"%{escaped}%"


def get_all_articles_db():
    """Every article regardless of status, newest first (admin only)"""
    return _fetch(f"{_SELECT} ORDER BY created_at DESC, id DESC")


def find_published(category=None, tag=None, title_query=None, since=None,
                   exclude_id=None, any_category=None, limit=None, skip=0):
    """
    Published articles, newest first.

    Args:
        category: case-insensitive exact match against one category label
        tag: case-insensitive exact match against one tag label
        title_query: case-insensitive substring of the title
        since: only articles created at or after this datetime
        exclude_id: leave this article out
        any_category: list of labels, article must carry at least one
        limit / skip: paging
    """
    clauses = ['status = ?']
    params = [STATUS_PUBLISHED]

    if category:
        clauses.append(f"EXISTS (SELECT 1 FROM json_each({TABLE}.category) "
                       f"WHERE lower(json_each.value) = lower(?))")
        params.append(category)
    if tag:
        clauses.append(f"EXISTS (SELECT 1 FROM json_each({TABLE}.tags) "
                       f"WHERE lower(json_each.value) = lower(?))")
        params.append(tag)
    if title_query:
        clauses.append("title LIKE ? ESCAPE '\\'")
        params.append(_like_pattern(title_query))
    if since is not None:
        clauses.append('created_at >= ?')
        params.append(Database.format_timestamp(since))
    if exclude_id is not None:
        clauses.append('id != ?')
        params.append(exclude_id)
    if any_category is not None:
        if not any_category:
            return []
        placeholders = ', '.join('?' for _ in any_category)
        clauses.append(f"EXISTS (SELECT 1 FROM json_each({TABLE}.category) "
                       f"WHERE json_each.value IN ({placeholders}))")
        params.extend(any_category)

    query = f"{_SELECT} WHERE {' AND '.join(clauses)} ORDER BY created_at DESC, id DESC"
    if limit is not None:
        query += ' LIMIT ? OFFSET ?'
        params.extend([limit, max(skip, 0)])
    elif skip:
        query += ' LIMIT -1 OFFSET ?'
        params.append(skip)

    return _fetch(query, params)


def get_published_by_slug(slug):
    """Single published article by slug, or None"""
    articles = _fetch(f"{_SELECT} WHERE slug = ? AND status = ?", (slug, STATUS_PUBLISHED))
    return articles[0] if articles else None


def get_article_db(article_id):
    """Single article by ID, any status"""
    articles = _fetch(f"{_SELECT} WHERE id = ?", (article_id,))
    return articles[0] if articles else None


def slug_exists(slug, exclude_id=None):
    """Check whether another article already owns slug"""
    query = f"SELECT id FROM {TABLE} WHERE slug = ?"
    params = [slug]
    if exclude_id is not None:
        query += ' AND id != ?'
        params.append(exclude_id)
    try:
        with Database.connect(get_db_config()) as conn:
            return conn.execute(query, params).fetchone() is not None
    except sqlite3.Error as e:
        raise StoreError(str(e)) from e


def create_article_db(title, slug, content, image, category, tags,
                      status=STATUS_PUBLISHED, seo_description='', created_at=None):
    """Insert an article and return its ID.

    Raises sqlite3.IntegrityError when the slug is already taken.
    """
    cursor = _write(f'''
        INSERT INTO {TABLE} (title, slug, image, content, category, tags,
                             status, seo_description, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
    ''', (title, slug, image, content,
          json.dumps(list(category), ensure_ascii=False),
          json.dumps(list(tags), ensure_ascii=False),
          status, seo_description or '',
          Database.format_timestamp(created_at) if created_at else Database.now()))
    return cursor.lastrowid


def update_article_db(article_id, title, slug, content, image, category, tags,
                      status, seo_description=''):
    """Update an article in place. created_at never changes."""
    cursor = _write(f'''
        UPDATE {TABLE}
        SET title = ?, slug = ?, image = ?, content = ?, category = ?, tags = ?,
            status = ?, seo_description = ?
        WHERE id = ?
    ''', (title, slug, image, content,
          json.dumps(list(category), ensure_ascii=False),
          json.dumps(list(tags), ensure_ascii=False),
          status, seo_description or '', article_id))
    return cursor.rowcount > 0


def delete_article_db(article_id):
    """Delete article from database"""
    cursor = _write(f'DELETE FROM {TABLE} WHERE id = ?', (article_id,))
    return cursor.rowcount > 0


def replace_image_db(old_image, new_image):
    """Point every article using old_image at new_image. Returns rows changed."""
    cursor = _write(f'UPDATE {TABLE} SET image = ? WHERE image = ?', (new_image, old_image))
    return cursor.rowcount
