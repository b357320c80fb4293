"""
Projects Public Routes
======================

Public-facing project listing and API. Only approved projects are ever shown.
The JSON feed gets CORS headers from the app-level CORS setup.
"""

from flask import Blueprint, render_template, jsonify, request, url_for

from showcase.core.database import get_db
from showcase.core.logging_service import LoggingService

projects_public_bp = Blueprint('projects', __name__, url_prefix='/projects', template_folder='templates')


def _listing_args():
    search = request.args.get('search', '').strip()
    category = request.args.get('category', '').strip()
    return search, category


@projects_public_bp.app_template_filter('screenshot_url')
def screenshot_url_filter(filename):
    """Public URL of a stored screenshot"""
    return url_for('uploaded_file', filename=filename)


# ===== Routes =====

@projects_public_bp.route('', strict_slashes=False)
def projects_list():
    """Public projects listing - approved projects, newest first."""
    search, category = _listing_args()
    try:
        db = get_db()
        projects = db.get_projects(search, category, approved_only=True)
        modules = db.get_modules()
    except Exception as e:
        LoggingService.log_error_with_traceback('projects_public', e)
        return 'Error fetching projects', 500

    return render_template('projects_public/projects.html',
                           projects=projects,
                           modules=modules,
                           search=search,
                           category=category)


# ===== API Routes =====

@projects_public_bp.route('/api/projects', methods=['GET'])
def api_projects():
    """Approved projects as JSON - public endpoint."""
    search, category = _listing_args()
    try:
        projects = get_db().get_projects(search, category, approved_only=True)
    except Exception as e:
        LoggingService.log_error_with_traceback('projects_public', e)
        return jsonify({'success': False, 'error': 'Error fetching projects'}), 500
    return jsonify(projects)
