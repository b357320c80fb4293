"""
Admin Dashboard Routes
======================

Login, logout and the dashboard landing page for the single admin account.
"""

from flask import render_template, request, redirect, url_for
from werkzeug.security import check_password_hash

from showcase.core.database import get_db, ProjectStatus
from showcase.core.logging_service import LoggingService
from . import dashboard_bp
from .auth import (
    admin_required, anonymous_required, current_admin, end_admin_session, start_admin_session
)

INVALID_CREDENTIALS = 'Invalid credentials'


def verify_admin_credentials(username, password):
    """Return the admin record when username and password match, else None.

    A missing user and a wrong password are indistinguishable to the caller.
    """
    if not username or not password:
        return None

    admin = get_db().get_admin_by_username(username)
    if admin and check_password_hash(admin['password_hash'], password):
        return admin
    return None


@dashboard_bp.route('/login', methods=['GET'])
@anonymous_required
def login():
    """Admin login page"""
    return render_template('dashboard/login.html', error=None)


@dashboard_bp.route('/login', methods=['POST'])
@anonymous_required
def login_submit():
    """Check credentials and start an admin session"""
    username = request.form.get('username', '').strip()
    password = request.form.get('password', '')

    try:
        admin = verify_admin_credentials(username, password)
    except Exception as e:
        LoggingService.log_error_with_traceback('auth', e, {'username': username})
        return render_template('dashboard/login.html', error='Login failed. Please try again.'), 500

    if admin is None:
        LoggingService.log_security_event('Failed admin login', {'username': username})
        return render_template('dashboard/login.html', error=INVALID_CREDENTIALS), 401

    start_admin_session(admin)

    LoggingService.log_user_action('auth', 'login', user_id=admin['id'])
    return redirect(url_for('admin.dashboard'))


@dashboard_bp.route('/logout', methods=['POST'])
@admin_required
def logout():
    """Admin logout route"""
    admin = current_admin()
    end_admin_session()
    LoggingService.log_user_action('auth', 'logout', user_id=admin['id'])
    return redirect(url_for('admin.login'))


@dashboard_bp.route('/')
@dashboard_bp.route('/dashboard')
@admin_required
def dashboard():
    """Admin dashboard with moderation counts"""
    try:
        db = get_db()
        pending_count = db.count_projects(ProjectStatus.PENDING)
        total_projects = db.count_projects()
    except Exception as e:
        LoggingService.log_error_with_traceback('dashboard', e)
        return 'Error loading dashboard', 500

    return render_template('dashboard/dashboard.html',
                           admin=current_admin(),
                           pending_count=pending_count,
                           total_projects=total_projects)
