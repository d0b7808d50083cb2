import logging

from flask import render_template, request, jsonify, abort, send_from_directory

from animenews.core.config import get_config_value, get_site
from animenews.core.database import Database, StoreError
from animenews.core.storage import resolve_image_url
from animenews.modules.articles.database import find_published, get_published_by_slug
from . import news_public_bp
from . import seo as seo_meta

logger = logging.getLogger(__name__)

HOME_LIMIT = 13
LOAD_MORE_LIMIT = 6
RELATED_LIMIT = 3
SIDEBAR_LIMIT = 10

MONTHS_ID = ['Januari', 'Februari', 'Maret', 'April', 'Mei', 'Juni', 'Juli',
             'Agustus', 'September', 'Oktober', 'November', 'Desember']


@news_public_bp.app_template_filter('image_url')
def image_url_filter(image):
    return resolve_image_url(image)


@news_public_bp.app_template_filter('format_date')
def format_date_filter(created_at):
    """'2024-03-05 ...' -> '5 Maret 2024' in site time"""
    if not created_at:
        return ''
    moment = Database.parse_timestamp(created_at).astimezone(seo_meta.SITE_TIMEZONE)
    return f"{moment.day} {MONTHS_ID[moment.month - 1]} {moment.year}"


@news_public_bp.app_template_filter('excerpt')
def excerpt_filter(content, length=150):
    text = seo_meta.strip_tags(content)
    return text if len(text) <= length else text[:length].rstrip() + '...'


def _sidebar(exclude_id=None):
    return find_published(exclude_id=exclude_id, limit=SIDEBAR_LIMIT)


@news_public_bp.route('/')
def home():
    """Headline plus the latest published articles"""
    try:
        articles = find_published(limit=HOME_LIMIT)
    except StoreError as e:
        logger.error(f"Error loading home page: {e}")
        return "Error memuat halaman depan", 500

    headline = articles[0] if articles else None
    list_articles = articles[1:]
    seo = seo_meta.home_metadata(get_site(), headline)
    return render_template('news_public/index.html', headline=headline,
                           list_articles=list_articles, seo=seo)


@news_public_bp.route('/api/load-more')
def load_more():
    """Next page of published articles for the "load more" button"""
    try:
        skip = int(request.args.get('skip', 0))
    except (TypeError, ValueError):
        skip = 0

    try:
        articles = find_published(limit=LOAD_MORE_LIMIT, skip=max(skip, 0))
    except StoreError as e:
        logger.error(f"Error in load-more: {e}")
        return jsonify({'error': 'Gagal memuat berita'}), 500

    for article in articles:
        article['image_url'] = resolve_image_url(article['image'])
    return jsonify(articles)


@news_public_bp.route('/read/<slug>')
def read(slug):
    """Single article page"""
    try:
        article = get_published_by_slug(slug)
        if not article:
            abort(404)
        related = find_published(exclude_id=article['id'], any_category=article['category'],
                                 limit=RELATED_LIMIT)
        sidebar = _sidebar(exclude_id=article['id'])
    except StoreError as e:
        logger.error(f"Error loading article {slug}: {e}")
        return "Terjadi kesalahan server", 500

    seo = seo_meta.article_metadata(get_site(), article)
    return render_template('news_public/single.html', article=article, seo=seo,
                           related_articles=related, sidebar_articles=sidebar)


@news_public_bp.route('/category/<slug>')
def category(slug):
    """Published articles in one category"""
    name = slug.replace('-', ' ')
    try:
        articles = find_published(category=name)
        sidebar = _sidebar()
    except StoreError as e:
        logger.error(f"Error loading category {slug}: {e}")
        return "Error memuat kategori", 500

    return render_template('news_public/category.html', articles=articles,
                           category_name=seo_meta.humanize_slug(slug), current_slug=slug,
                           sidebar_articles=sidebar,
                           seo=seo_meta.category_metadata(get_site(), slug))


@news_public_bp.route('/tag/<slug>')
def tag(slug):
    """Published articles carrying one tag"""
    name = slug.replace('-', ' ')
    try:
        articles = find_published(tag=name)
        sidebar = _sidebar()
    except StoreError as e:
        logger.error(f"Error loading tag {slug}: {e}")
        return "Error memuat tags", 500

    return render_template('news_public/tag.html', articles=articles,
                           tag_name=seo_meta.humanize_slug(slug), sidebar_articles=sidebar,
                           seo=seo_meta.tag_metadata(get_site(), slug))


@news_public_bp.route('/search')
def search():
    """Title search over published articles (noindex)"""
    query = request.args.get('q', '').strip()
    articles = []
    if query:
        try:
            articles = find_published(title_query=query)
        except StoreError as e:
            logger.error(f"Error searching for {query!r}: {e}")
            return "Terjadi kesalahan saat mencari berita", 500

    return render_template('news_public/search.html', articles=articles, query=query,
                           seo=seo_meta.search_metadata(get_site(), query))


# ===== Static pages =====

@news_public_bp.route('/about')
def about():
    seo = seo_meta.static_page_metadata(get_site(), '/about', 'Tentang Kami',
                                        "Informasi tentang redaksi, visi, dan misi kami.")
    return render_template('news_public/pages/about.html', seo=seo)


@news_public_bp.route('/contact')
def contact():
    seo = seo_meta.static_page_metadata(get_site(), '/contact', 'Hubungi Redaksi',
                                        "Kontak kerjasama, media partner, dan laporan berita.")
    return render_template('news_public/pages/contact.html', seo=seo)


@news_public_bp.route('/privacy-policy')
def privacy_policy():
    seo = seo_meta.static_page_metadata(get_site(), '/privacy-policy', 'Kebijakan Privasi',
                                        noindex=True)
    return render_template('news_public/pages/privacy.html', seo=seo)


@news_public_bp.route('/disclaimer')
def disclaimer():
    seo = seo_meta.static_page_metadata(get_site(), '/disclaimer', 'Disclaimer', noindex=True)
    return render_template('news_public/pages/disclaimer.html', seo=seo)


@news_public_bp.route('/uploads/<path:filename>')
def uploaded_file(filename):
    """Images saved before the move to object storage"""
    return send_from_directory(get_config_value('UPLOAD_FOLDER'), filename)


@news_public_bp.app_errorhandler(404)
def page_not_found(error):
    seo = seo_meta.not_found_metadata(get_site(), request.path)
    return render_template('news_public/404.html', seo=seo), 404
