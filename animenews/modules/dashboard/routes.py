"""
Admin Dashboard Routes
======================

Login, article management and indexing pings. Writes to the article store
happen inline; image clean-up and Google Indexing pings are side effects
that never block the redirect back to the dashboard.
"""

import sqlite3
from urllib.parse import urlparse

from flask import render_template, request, redirect, url_for, flash, session

from animenews.core.config import get_site
from animenews.core.database import StoreError
from animenews.core.logging_service import LoggingService
from animenews.core.storage import (
    DEFAULT_IMAGE, allowed_file, upload_image, delete_image, is_stored_image,
)
from animenews.modules.articles.database import (
    STATUS_PUBLISHED, STATUS_DRAFT, STATUSES,
    get_all_articles_db, get_article_db, create_article_db, update_article_db,
    delete_article_db,
)
from animenews.modules.articles.labels import parse_labels
from animenews.modules.articles.slugs import assign_slug, SlugError
from animenews.modules.indexing import (
    indexing_service, notify_in_background, URL_UPDATED, URL_DELETED,
)
from . import dashboard_bp
from .auth import SESSION_KEY, admin_required, get_authenticator, is_logged_in

DASHBOARD_MESSAGES = {
    'ping_success': ('Ping Google Indexing berhasil dikirim.', 'success'),
    'ping_error': ('Ping Google Indexing gagal, cek log aktivitas.', 'error'),
    'ping_failed_draft': ('Artikel draft tidak bisa di-ping ke Google.', 'error'),
    'ping_not_found': ('Artikel tidak ditemukan.', 'error'),
}


def _article_url(slug):
    return f"{get_site()['url']}/read/{slug}"


def _read_article_form():
    """Collect and normalize the add/edit form"""
    status = request.form.get('status') or STATUS_PUBLISHED
    if status not in STATUSES:
        status = STATUS_PUBLISHED
    return {
        'title': request.form.get('title', '').strip(),
        'content': request.form.get('content', '').strip(),
        'slug': request.form.get('slug', '').strip(),
        'category': parse_labels(request.form.get('category')),
        'tags': parse_labels(request.form.get('tags')),
        'status': status,
        'seo_description': request.form.get('seo_description', '').strip(),
    }


def _validate(form):
    if not form['title'] or not form['content']:
        return 'Judul dan konten wajib diisi'
    return None


def _uploaded_image():
    """The uploaded image file, or None when the field was left empty"""
    file = request.files.get('image')
    if not file or not file.filename:
        return None
    if not allowed_file(file.filename):
        raise ValueError('Format gambar tidak didukung (png, jpg, jpeg, gif, webp)')
    return file


def _safe_next(target):
    """Local path to return to after login, or None for anything off-site"""
    if not target or not target.startswith('/') or target.startswith('//') or '\\' in target:
        return None
    parsed = urlparse(target)
    if parsed.scheme or parsed.netloc:
        return None
    return target


def _save_with_unique_slug(save, form, article_id=None):
    """Assign a slug and save; a slug taken between check and write is re-assigned once."""
    for _ in range(2):
        slug = assign_slug(form['slug'], form['title'], article_id=article_id)
        try:
            return save(slug), slug
        except sqlite3.IntegrityError:
            LoggingService.warning('articles', f"Slug '{slug}' was taken concurrently, retrying")
    raise StoreError('Could not store article with a unique slug')


# ===== Authentication =====

@dashboard_bp.route('/login', methods=['GET', 'POST'])
def login():
    """Admin login route"""
    if request.method == 'GET':
        if is_logged_in():
            return redirect(_safe_next(request.args.get('next')) or url_for('admin.dashboard'))
        return render_template('admin/login.html')

    username = request.form.get('username', '').strip()
    password = request.form.get('password', '')

    if get_authenticator().authenticate(username, password):
        session.permanent = True
        session[SESSION_KEY] = True
        return redirect(_safe_next(request.args.get('next')) or url_for('admin.dashboard'))

    LoggingService.log_security_event('Failed admin login', {'username': username})
    return render_template('admin/login.html', error='Username atau Password salah!')


@dashboard_bp.route('/logout')
def logout():
    session.clear()
    return redirect(url_for('admin.login'))


# ===== Dashboard =====

@dashboard_bp.route('/', strict_slashes=False)
@admin_required
def dashboard():
    """Every article, newest first, plus the recent activity log"""
    try:
        articles = get_all_articles_db()
    except StoreError as e:
        LoggingService.error('articles', f"Error loading dashboard: {e}")
        return "Gagal memuat dashboard", 500

    message = DASHBOARD_MESSAGES.get(request.args.get('msg', ''))
    return render_template('admin/dashboard.html', articles=articles, message=message,
                           activity=LoggingService.recent(limit=15))


# ===== Create =====

@dashboard_bp.route('/post', methods=['GET', 'POST'])
@admin_required
def add_article():
    if request.method == 'GET':
        return render_template('admin/add.html', form={})

    form = _read_article_form()
    error = _validate(form)
    if error:
        return render_template('admin/add.html', form=form, error=error), 400

    try:
        file = _uploaded_image()
    except ValueError as e:
        return render_template('admin/add.html', form=form, error=str(e)), 400

    image = DEFAULT_IMAGE
    if file:
        try:
            image = upload_image(file)
        except Exception as e:
            LoggingService.log_error_with_traceback('storage', e, {'filename': file.filename})
            return render_template('admin/add.html', form=form, error='Gagal mengunggah gambar'), 500

    def save(slug):
        return create_article_db(form['title'], slug, form['content'], image,
                                 form['category'], form['tags'], form['status'],
                                 form['seo_description'])

    try:
        article_id, slug = _save_with_unique_slug(save, form)
    except SlugError as e:
        if image != DEFAULT_IMAGE:
            delete_image(image)
        return render_template('admin/add.html', form=form, error=str(e)), 400
    except StoreError as e:
        if image != DEFAULT_IMAGE:
            delete_image(image)
        LoggingService.error('articles', f"Gagal menambah postingan: {e}")
        flash(f'Gagal menambah postingan: {e}', 'error')
        return redirect(url_for('admin.dashboard'))

    LoggingService.info('articles', f"Article {article_id} created as {form['status']}: {slug}")

    if form['status'] == STATUS_PUBLISHED:
        notify_in_background(_article_url(slug), URL_UPDATED)

    flash('Artikel berhasil disimpan', 'success')
    return redirect(url_for('admin.dashboard'))


# ===== Update =====

@dashboard_bp.route('/edit/<int:article_id>', methods=['GET', 'POST'])
@admin_required
def edit_article(article_id):
    try:
        article = get_article_db(article_id)
    except StoreError as e:
        LoggingService.error('articles', f"Error loading article {article_id}: {e}")
        article = None

    if not article:
        flash('Artikel tidak ditemukan', 'error')
        return redirect(url_for('admin.dashboard'))

    if request.method == 'GET':
        return render_template('admin/edit.html', article=article, form=article)

    form = _read_article_form()
    error = _validate(form)
    if error:
        return render_template('admin/edit.html', article=article, form=form, error=error), 400

    try:
        file = _uploaded_image()
    except ValueError as e:
        return render_template('admin/edit.html', article=article, form=form, error=str(e)), 400

    image = article['image']
    if file:
        try:
            image = upload_image(file)
        except Exception as e:
            LoggingService.log_error_with_traceback('storage', e, {'filename': file.filename})
            return render_template('admin/edit.html', article=article, form=form,
                                   error='Gagal mengunggah gambar'), 500

    def save(slug):
        return update_article_db(article_id, form['title'], slug, form['content'], image,
                                 form['category'], form['tags'], form['status'],
                                 form['seo_description'])

    try:
        _, slug = _save_with_unique_slug(save, form, article_id=article_id)
    except SlugError as e:
        if image != article['image']:
            delete_image(image)
        return render_template('admin/edit.html', article=article, form=form, error=str(e)), 400
    except StoreError as e:
        if image != article['image']:
            delete_image(image)
        LoggingService.error('articles', f"Gagal update postingan: {e}")
        flash(f'Gagal update postingan: {e}', 'error')
        return redirect(url_for('admin.dashboard'))

    if image != article['image'] and is_stored_image(article['image']):
        delete_image(article['image'])

    # Only URLs that were live get removed from the index
    was_published = article['status'] == STATUS_PUBLISHED
    if was_published and (article['slug'] != slug or form['status'] == STATUS_DRAFT):
        notify_in_background(_article_url(article['slug']), URL_DELETED)

    if form['status'] == STATUS_PUBLISHED:
        notify_in_background(_article_url(slug), URL_UPDATED)

    flash('Artikel berhasil diperbarui', 'success')
    return redirect(url_for('admin.dashboard'))


# ===== Delete =====

@dashboard_bp.route('/delete/<int:article_id>')
@admin_required
def delete_article(article_id):
    try:
        article = get_article_db(article_id)
        if not article:
            flash('Artikel tidak ditemukan', 'error')
            return redirect(url_for('admin.dashboard'))
        delete_article_db(article_id)
    except StoreError as e:
        LoggingService.error('articles', f"Gagal menghapus artikel {article_id}: {e}")
        flash('Gagal menghapus artikel', 'error')
        return redirect(url_for('admin.dashboard'))

    if is_stored_image(article['image']):
        delete_image(article['image'])

    if article['status'] == STATUS_PUBLISHED:
        notify_in_background(_article_url(article['slug']), URL_DELETED)

    LoggingService.info('articles', f"Article {article_id} deleted: {article['slug']}")
    flash('Artikel dihapus', 'success')
    return redirect(url_for('admin.dashboard'))


# ===== Manual indexing ping =====

@dashboard_bp.route('/ping-google/<int:article_id>')
@admin_required
def ping_google(article_id):
    try:
        article = get_article_db(article_id)
    except StoreError as e:
        LoggingService.error('indexing', f"Error loading article {article_id}: {e}")
        return redirect(url_for('admin.dashboard', msg='ping_error'))

    if not article:
        return redirect(url_for('admin.dashboard', msg='ping_not_found'))
    if article['status'] != STATUS_PUBLISHED:
        return redirect(url_for('admin.dashboard', msg='ping_failed_draft'))

    result = indexing_service.publish(_article_url(article['slug']), URL_UPDATED)
    msg = 'ping_success' if result['success'] else 'ping_error'
    return redirect(url_for('admin.dashboard', msg=msg))
