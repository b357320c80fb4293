"""Session guards for admin routes.

The session cookie only carries a random token. The admin it belongs to
lives in the ``admin_sessions`` table, so deleting that row at logout (or
letting it expire) ends the login even for a copied cookie.
"""

from functools import wraps

from flask import current_app, redirect, session, url_for

from showcase.core.database import get_db

SESSION_KEY = 'admin_session'


def current_admin():
    """The logged-in admin ({id, username, logged_in_at}) or None"""
    admin = None
    token = session.get(SESSION_KEY)
    if token:
        row = get_db().get_session(token)
        if row:
            admin = {
                'id': row['admin_id'],
                'username': row['username'],
                'logged_in_at': row['created_at'],
            }
        else:
            # Logged out elsewhere or expired
            session.pop(SESSION_KEY, None)

    return admin


def start_admin_session(admin):
    """Replace whatever the client had with a fresh server-side session"""
    session.clear()
    session[SESSION_KEY] = get_db().create_session(admin['id'], current_app.permanent_session_lifetime)
    session.permanent = True


def end_admin_session():
    token = session.get(SESSION_KEY)
    if token:
        get_db().delete_session(token)
    session.clear()


def admin_required(f):
    """Decorator to require admin login"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if current_admin() is None:
            return redirect(url_for('admin.login'))
        # Sliding expiry: every admin request restarts the lifetime
        get_db().touch_session(session[SESSION_KEY], current_app.permanent_session_lifetime)
        return f(*args, **kwargs)
    return decorated_function


def anonymous_required(f):
    """Decorator for pages a logged-in admin should skip (the login form)"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if current_admin() is not None:
            return redirect(url_for('admin.dashboard'))
        return f(*args, **kwargs)
    return decorated_function
