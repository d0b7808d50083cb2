"""
Storage Utility
===============

Article image storage on Cloudflare R2 (S3 API) with a local-folder fallback.
"""

import os
import time
from flask import current_app
from .config import get_config_value, get_site
from .logging_service import LoggingService

# Stored in the image field when an article has no picture
DEFAULT_IMAGE = 'default.jpg'
DEFAULT_COVER_PATH = '/img/default-cover.jpg'
UPLOADS_PATH = '/uploads'

ALLOWED_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp'}

CONTENT_TYPES = {
    'jpg': 'image/jpeg', 'jpeg': 'image/jpeg',
    'png': 'image/png', 'gif': 'image/gif', 'webp': 'image/webp',
}


def allowed_file(filename):
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def guess_content_type(filename):
    ext = filename.rsplit('.', 1)[-1].lower() if '.' in filename else ''
    return CONTENT_TYPES.get(ext, 'application/octet-stream')


def build_object_key(original_name, now_ms=None):
    """Object key for an upload: '<epoch ms>-<slugified name>.<ext>'"""
    from ..modules.articles.slugs import slugify

    if now_ms is None:
        now_ms = int(time.time() * 1000)
    stem, _, ext = original_name.rpartition('.')
    if not stem:
        stem, ext = ext, ''
    name = slugify(stem) or 'image'
    if ext:
        name = f"{name}.{ext.lower()}"
    return f"{now_ms}-{name}"


def resolve_image_url(image, site_url=None):
    """Public URL for a stored image value.

    Absolute URLs pass through; missing values and the default sentinel map
    to the site cover; anything else is a legacy filename in /uploads.
    """
    if site_url is None:
        site_url = get_site()['url']
    site_url = site_url.rstrip('/')

    if not image or image == DEFAULT_IMAGE:
        return f"{site_url}{DEFAULT_COVER_PATH}"
    if image.startswith('http://') or image.startswith('https://'):
        return image
    return f"{site_url}{UPLOADS_PATH}/{image}"


def get_r2_config():
    """R2 connection settings"""
    return {
        'endpoint': get_config_value('R2_ENDPOINT'),
        'access_key': get_config_value('R2_ACCESS_KEY_ID'),
        'secret_key': get_config_value('R2_SECRET_ACCESS_KEY'),
        'bucket': get_config_value('R2_BUCKET_NAME'),
        'public_domain': (get_config_value('R2_PUBLIC_DOMAIN') or '').rstrip('/'),
    }


def is_cloud_storage():
    """Check if an R2 bucket is configured"""
    config = get_r2_config()
    return bool(config['endpoint'] and config['bucket'] and config['public_domain'])


def _get_client(config):
    import boto3
    return boto3.client(
        's3',
        region_name='auto',
        endpoint_url=config['endpoint'],
        aws_access_key_id=config['access_key'],
        aws_secret_access_key=config['secret_key'],
    )


def upload_image(file_storage):
    """Store an uploaded werkzeug FileStorage and return its public URL."""
    key = build_object_key(file_storage.filename)
    file_bytes = file_storage.read()
    if is_cloud_storage():
        return _upload_to_r2(file_bytes, key)
    return _save_locally(file_bytes, key)


def _upload_to_r2(file_bytes, key):
    """Upload to the R2 bucket via boto3."""
    config = get_r2_config()
    client = _get_client(config)
    client.put_object(
        Bucket=config['bucket'],
        Key=key,
        Body=file_bytes,
        ACL='public-read',
        ContentType=guess_content_type(key),
    )
    return f"{config['public_domain']}/{key}"


def _save_locally(file_bytes, key):
    """Save to the local uploads folder."""
    upload_dir = get_config_value('UPLOAD_FOLDER') or os.path.join(current_app.root_path, 'uploads')
    os.makedirs(upload_dir, exist_ok=True)
    with open(os.path.join(upload_dir, key), 'wb') as f:
        f.write(file_bytes)
    return f"{get_site()['url']}{UPLOADS_PATH}/{key}"


def upload_existing_file(filepath, key):
    """Push a file from disk to the bucket under key. Returns the public URL."""
    config = get_r2_config()
    client = _get_client(config)
    with open(filepath, 'rb') as f:
        client.put_object(
            Bucket=config['bucket'],
            Key=key,
            Body=f.read(),
            ACL='public-read',
            ContentType=guess_content_type(key),
        )
    return f"{config['public_domain']}/{key}"


def is_stored_image(image):
    """True when image points at an object we own (absolute URL, not the sentinel)."""
    if not image or image == DEFAULT_IMAGE:
        return False
    return image.startswith('http://') or image.startswith('https://')


def delete_image(image_url):
    """Best-effort removal of a stored image. Never raises."""
    if not is_stored_image(image_url):
        return False

    local_prefix = f"{get_site()['url']}{UPLOADS_PATH}/"
    try:
        if image_url.startswith(local_prefix):
            return _delete_local_file(image_url[len(local_prefix):])
        return _delete_r2_object(image_url)
    except Exception as e:
        LoggingService.error('storage', f"Failed to delete image {image_url}: {e}")
        return False


def _delete_r2_object(image_url):
    config = get_r2_config()
    if not config['bucket']:
        LoggingService.warning('storage', f"No bucket configured, kept {image_url}")
        return False

    file_key = image_url.rstrip('/').rsplit('/', 1)[-1]
    client = _get_client(config)
    client.delete_object(Bucket=config['bucket'], Key=file_key)
    LoggingService.info('storage', f"Deleted image from R2: {file_key}")
    return True


def _delete_local_file(key):
    upload_dir = get_config_value('UPLOAD_FOLDER')
    if not upload_dir:
        return False
    full_path = os.path.join(upload_dir, os.path.basename(key))
    if os.path.isfile(full_path):
        os.unlink(full_path)
        LoggingService.info('storage', f"Deleted local image: {key}")
        return True
    return False
