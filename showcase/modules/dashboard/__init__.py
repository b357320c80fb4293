"""
Dashboard Module
================

Admin entry point for the showcase.

Provides core admin functionality:
- Admin authentication (login/logout)
- Admin dashboard with pending/total counts
- Guards shared by the other admin modules (admin_required, anonymous_required)
"""

from flask import Blueprint

# Note: Blueprint name is 'admin' so url_for('admin.login') reads naturally in templates
dashboard_bp = Blueprint(
    'admin',
    __name__,
    url_prefix='/admin',
    template_folder='templates'
)

# Import routes after blueprint is created
from . import routes
from .auth import admin_required, anonymous_required, current_admin

__all__ = ['dashboard_bp', 'admin_required', 'anonymous_required', 'current_admin']
