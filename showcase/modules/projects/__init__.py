"""
Projects Admin Module
=====================

Moderation queue for student submissions.
Plugs into the admin dashboard module.

Provides:
- Pending and all-projects listings
- Project detail view
- Approve / reject / delete actions (JSON)
"""

from flask import Blueprint

projects_bp = Blueprint(
    'projects_admin',
    __name__,
    url_prefix='/admin/projects',
    template_folder='templates'
)

from . import routes

__all__ = ['projects_bp']
