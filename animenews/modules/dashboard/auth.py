"""
Admin authentication.

Routes only ever call get_authenticator().authenticate(); the default
implementation compares against ADMIN_USER / ADMIN_PASS, and an app can pass
its own Authenticator to AnimeNews(app, authenticator=...).
"""

import hmac
from functools import wraps

from flask import current_app, redirect, request, session, url_for

from animenews.core.config import get_config_value

SESSION_KEY = 'is_logged_in'


class Authenticator:
    """Interface for checking admin credentials"""

    def authenticate(self, username, password):
        raise NotImplementedError


class StaticCredentialAuthenticator(Authenticator):
    """Single admin account configured through the environment"""

    def __init__(self, username=None, password=None):
        self.username = username
        self.password = password

    def authenticate(self, username, password):
        expected_user = self.username or get_config_value('ADMIN_USER')
        expected_pass = self.password or get_config_value('ADMIN_PASS')
        if not expected_user or not expected_pass:
            return False
        user_ok = hmac.compare_digest((username or '').encode(), expected_user.encode())
        pass_ok = hmac.compare_digest((password or '').encode(), expected_pass.encode())
        return user_ok and pass_ok


def get_authenticator():
    ext = current_app.extensions.get('animenews')
    if ext is not None and ext.authenticator is not None:
        return ext.authenticator
    return StaticCredentialAuthenticator()


def is_logged_in():
    return bool(session.get(SESSION_KEY))


def admin_required(f):
    """Decorator to require admin login"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not is_logged_in():
            return redirect(url_for('admin.login', next=request.path))
        return f(*args, **kwargs)
    return decorated_function
