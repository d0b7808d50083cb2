"""
Google Indexing Service
=======================

Tells the Google Indexing API that an article URL was published, changed or
removed. Credentials come from a service account (client email + private
key). Every call is best-effort: failures are logged, never raised.
"""

import threading

import requests
from flask import current_app
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import AuthorizedSession
from google.oauth2 import service_account

from animenews.core.config import get_config_value
from animenews.core.logging_service import LoggingService

PUBLISH_ENDPOINT = "https://indexing.googleapis.com/v3/urlNotifications:publish"
INDEXING_SCOPES = ["https://www.googleapis.com/auth/indexing"]
TOKEN_URI = "https://oauth2.googleapis.com/token"

URL_UPDATED = 'URL_UPDATED'
URL_DELETED = 'URL_DELETED'
ACTIONS = (URL_UPDATED, URL_DELETED)


def clean_private_key(private_key):
    """Turn a .env-mangled PEM (literal \\n, stray quotes) back into a usable key."""
    return private_key.replace('\\n', '\n').replace('"', '').strip()


class IndexingService:
    """Indexing API client - reads credentials from app config at call time."""

    def _get_credentials(self):
        client_email = get_config_value('GOOGLE_CLIENT_EMAIL')
        private_key = get_config_value('GOOGLE_PRIVATE_KEY')
        if not client_email or not private_key:
            return None

        info = {
            'type': 'service_account',
            'client_email': client_email,
            'private_key': clean_private_key(private_key),
            'token_uri': TOKEN_URI,
        }
        return service_account.Credentials.from_service_account_info(info, scopes=INDEXING_SCOPES)

    def publish(self, url, action=URL_UPDATED):
        """
        Send one URL notification.

        Returns:
            dict with {success: bool, error: str}
        """
        if action not in ACTIONS:
            return {'success': False, 'error': f'Unknown indexing action: {action}'}

        try:
            credentials = self._get_credentials()
        except (ValueError, GoogleAuthError) as e:
            LoggingService.error('indexing', f"Invalid service account credentials: {e}")
            return {'success': False, 'error': str(e)}

        if credentials is None:
            LoggingService.warning('indexing', 'Indexing API skipped: credentials are not configured')
            return {'success': False, 'error': 'Indexing credentials not configured'}

        try:
            session = AuthorizedSession(credentials)
            resp = session.post(PUBLISH_ENDPOINT, json={'url': url, 'type': action}, timeout=15)
            resp.raise_for_status()
        except (requests.RequestException, GoogleAuthError) as e:
            LoggingService.error('indexing', f"Indexing ping failed for {url}: {e}", {'action': action})
            return {'success': False, 'error': str(e)}

        LoggingService.info('indexing', f"[{action}] sent for {url}")
        return {'success': True, 'error': ''}


# Singleton instance
indexing_service = IndexingService()


def _run_in_app(app, url, action):
    with app.app_context():
        try:
            indexing_service.publish(url, action)
        except Exception as e:
            LoggingService.log_error_with_traceback('indexing', e, {'url': url, 'action': action})


def notify_in_background(url, action=URL_UPDATED):
    """Fire-and-forget indexing ping. Returns the started thread."""
    app = current_app._get_current_object()
    thread = threading.Thread(target=_run_in_app, args=(app, url, action), daemon=True)
    thread.start()
    return thread
