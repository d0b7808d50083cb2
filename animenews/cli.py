"""
Maintenance commands, available through `flask <command>`.

- migrate-images: move legacy files from the local uploads folder to the R2
  bucket and point the articles at their new URLs
- cleanup-logs: drop old activity log entries
"""

import os

import click
from flask.cli import with_appcontext

from animenews.core.config import get_config_value
from animenews.core.logging_service import LoggingService
from animenews.core.storage import is_cloud_storage, upload_existing_file
from animenews.modules.articles.database import replace_image_db


def migrate_images(folder):
    """
    Upload every file in folder to the bucket (same key) and rewrite the
    articles that still reference it by bare filename.

    Returns:
        dict with {uploaded, failed, articles_updated}
    """
    summary = {'uploaded': 0, 'failed': 0, 'articles_updated': 0}

    for filename in sorted(os.listdir(folder)):
        # Skip hidden files like .DS_Store or .gitkeep
        if filename.startswith('.'):
            continue
        filepath = os.path.join(folder, filename)
        if not os.path.isfile(filepath):
            continue

        try:
            url = upload_existing_file(filepath, filename)
        except Exception as e:
            LoggingService.error('storage', f"Failed to upload {filename} to R2: {e}")
            summary['failed'] += 1
            continue

        summary['uploaded'] += 1
        updated = replace_image_db(filename, url)
        summary['articles_updated'] += updated
        if updated:
            LoggingService.info('storage', f"Migrated {filename}: {updated} article(s) updated")
        else:
            LoggingService.info('storage', f"Uploaded {filename}, no article referenced it")

    return summary


@click.command('migrate-images')
@click.option('--folder', default=None, help='Local uploads folder (defaults to UPLOAD_FOLDER).')
@with_appcontext
def migrate_images_command(folder):
    """Move legacy local uploads to object storage."""
    folder = folder or get_config_value('UPLOAD_FOLDER')
    if not folder or not os.path.isdir(folder):
        raise click.ClickException(f"Uploads folder not found: {folder}")
    if not is_cloud_storage():
        raise click.ClickException('R2 storage is not configured (R2_ENDPOINT, R2_BUCKET_NAME, R2_PUBLIC_DOMAIN)')

    summary = migrate_images(folder)
    click.echo(f"Uploaded {summary['uploaded']} file(s), {summary['failed']} failed, "
               f"{summary['articles_updated']} article(s) updated.")


@click.command('cleanup-logs')
@click.option('--days', default=30, show_default=True, help='Keep entries newer than this.')
@with_appcontext
def cleanup_logs_command(days):
    """Delete activity log entries older than --days."""
    deleted = LoggingService.cleanup_old_logs(days_to_keep=days)
    click.echo(f"Deleted {deleted} log entries.")


def register_commands(app):
    app.cli.add_command(migrate_images_command)
    app.cli.add_command(cleanup_logs_command)
