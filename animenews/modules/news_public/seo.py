"""
SEO Metadata
============

Builds the per-page metadata dict consumed by the base template (title,
description, robots, Open Graph, Twitter card and article structured data).
Every builder returns a fresh dict; nothing is shared between requests.
"""

import re
from datetime import timedelta, timezone
from urllib.parse import quote

from animenews.core.database import Database
from animenews.core.storage import resolve_image_url, DEFAULT_COVER_PATH

ROBOTS_INDEX = "index, follow, max-snippet:-1, max-video-preview:-1, max-image-preview:large"
ROBOTS_NOINDEX = "noindex, follow"

DEFAULT_DESCRIPTION = "Portal berita Anime, Manga, dan Game terlengkap dan terupdate."
HOME_DESCRIPTION = "Baca berita anime, manga, game, dan budaya pop Jepang terbaru hari ini."

DESCRIPTION_LENGTH = 155
SCHEMA_AUTHOR = "Redaksi"
SCHEMA_SECTION = "Artikel"
OG_IMAGE_WIDTH = 854
OG_IMAGE_HEIGHT = 480

# Publish dates are shown in Western Indonesia Time
SITE_TIMEZONE = timezone(timedelta(hours=7))

_TAG_RE = re.compile(r'<[^>]+>')


def strip_tags(html):
    """Remove every HTML tag, keeping the text between them."""
    return _TAG_RE.sub('', html or '')


def humanize_slug(slug):
    """'one-piece' -> 'One Piece'"""
    return re.sub(r'\b\w', lambda m: m.group(0).upper(), slug.replace('-', ' '))


def derive_description(article):
    """Editor override, or the first 155 characters of the plain-text body."""
    if article.get('seo_description'):
        return article['seo_description']
    return strip_tags(article.get('content', ''))[:DESCRIPTION_LENGTH] + "..."


def format_publish_date(created_at):
    """ISO-8601 with millisecond precision and the fixed +07:00 offset."""
    moment = Database.parse_timestamp(created_at).astimezone(SITE_TIMEZONE)
    return moment.isoformat(timespec='milliseconds')


def build_default_metadata(site, path):
    """Site-wide defaults for a page at path."""
    return {
        'seo_title': site['name'],
        'seo_description': DEFAULT_DESCRIPTION,
        'robots': ROBOTS_INDEX,
        'og_image': f"{site['url']}{DEFAULT_COVER_PATH}",
        'current_url': f"{site['url']}{path}",
        'og_type': 'website',
    }


def home_metadata(site, headline=None):
    seo = build_default_metadata(site, '/')
    seo['seo_title'] = f"{site['name']} - Berita Anime dan Manga Terbaru Hari Ini"
    seo['seo_description'] = HOME_DESCRIPTION
    if headline:
        seo['og_image'] = resolve_image_url(headline.get('image'), site['url'])
    return seo


def article_metadata(site, article):
    """Full metadata for a single article page."""
    image = resolve_image_url(article.get('image'), site['url'])
    published = format_publish_date(article['created_at'])
    url = f"{site['url']}/read/{article['slug']}"

    return {
        'seo_title': f"{article['title']} | {site['name']}",
        'seo_description': derive_description(article),
        'robots': ROBOTS_INDEX,
        'seo_canonical': url,
        'seo_keywords': ', '.join(article.get('tags') or []),
        'og_type': 'article',
        'og_image': image,
        'og_image_width': OG_IMAGE_WIDTH,
        'og_image_height': OG_IMAGE_HEIGHT,
        'og_date': published,
        'twitter_card': 'summary_large_image',
        'twitter_site': f"@{site['name']}",
        'twitter_image': image,
        'schema_publisher_name': site['name'],
        'schema_author_name': SCHEMA_AUTHOR,
        'schema_sections': list(article.get('category') or []) + [SCHEMA_SECTION],
        'schema_date': published,
        'current_url': url,
    }


def category_metadata(site, slug):
    name = humanize_slug(slug)
    seo = build_default_metadata(site, f"/category/{slug}")
    seo['seo_title'] = f"Berita Kategori {name} | {site['name']}"
    seo['seo_description'] = f"Kumpulan berita terbaru seputar {name}."
    return seo


def tag_metadata(site, slug):
    name = humanize_slug(slug)
    seo = build_default_metadata(site, f"/tag/{slug}")
    seo['seo_title'] = f"Topik #{name} | {site['name']}"
    seo['seo_description'] = f"Berita terkini dengan topik #{name}."
    return seo


def search_metadata(site, query):
    # Search result pages stay out of the index
    seo = build_default_metadata(site, '/search')
    seo['seo_title'] = f"Pencarian: {query} | {site['name']}"
    seo['seo_description'] = f'Menampilkan hasil pencarian untuk "{query}".'
    seo['current_url'] = f"{site['url']}/search?q={quote(query, safe='')}"
    seo['robots'] = ROBOTS_NOINDEX
    return seo


def static_page_metadata(site, path, title, description=None, noindex=False):
    seo = build_default_metadata(site, path)
    seo['seo_title'] = f"{title} | {site['name']}"
    if description:
        seo['seo_description'] = description
    if noindex:
        seo['robots'] = ROBOTS_NOINDEX
    return seo


def not_found_metadata(site, path):
    seo = build_default_metadata(site, path)
    seo['seo_title'] = f"404 Halaman Tidak Ditemukan | {site['name']}"
    seo['seo_description'] = "Halaman yang Anda cari tidak ditemukan."
    seo['robots'] = ROBOTS_NOINDEX
    return seo
