"""
Projects Admin Routes
=====================

Moderation of submitted projects.
- `status`: pending/approved/rejected (approved controls public visibility)
- Approve and reject move a project out of the pending queue; delete removes
  it and its screenshots. There is no way back to pending.
"""

from flask import render_template, request, jsonify, abort

from showcase.core.database import get_db, ProjectStatus
from showcase.core.logging_service import LoggingService
from showcase.core.storage import delete_uploads
from showcase.modules.dashboard.auth import admin_required, current_admin
from . import projects_bp

NOT_FOUND = 'Project not found'


def _wants_json():
    return (request.args.get('format') == 'json'
            or request.accept_mimetypes.best == 'application/json')


def _set_status(project_id, status, verb):
    """Apply a status transition and build the JSON response"""
    try:
        changed = get_db().update_project_status(project_id, status)
    except Exception as e:
        LoggingService.log_error_with_traceback('moderation', e, {'project_id': project_id})
        return jsonify({'success': False, 'error': f'Failed to {verb} project'}), 500

    if not changed:
        return jsonify({'success': False, 'error': NOT_FOUND}), 404

    LoggingService.log_user_action('moderation', f'{verb} project {project_id}',
                                   user_id=current_admin()['id'])
    return jsonify({'success': True, 'message': f'Project {status.value}'})


# ===== Pages =====

@projects_bp.route('/pending')
@admin_required
def pending_projects():
    """Moderation queue"""
    try:
        projects = get_db().get_pending_projects()
    except Exception as e:
        LoggingService.log_error_with_traceback('moderation', e)
        return 'Error loading projects', 500

    return render_template('projects/projects.html',
                           admin=current_admin(),
                           projects=projects,
                           title='Pending Projects',
                           type='pending')


@projects_bp.route('/all')
@admin_required
def all_projects():
    """Every project, pending first"""
    try:
        projects = get_db().get_all_projects()
    except Exception as e:
        LoggingService.log_error_with_traceback('moderation', e)
        return 'Error loading projects', 500

    return render_template('projects/projects.html',
                           admin=current_admin(),
                           projects=projects,
                           title='All Projects',
                           type='all')


@projects_bp.route('/<int:project_id>', methods=['GET'])
@admin_required
def project_detail(project_id):
    """Single project, as a page or JSON"""
    project = get_db().get_project(project_id)

    if _wants_json():
        if not project:
            return jsonify({'success': False, 'error': NOT_FOUND}), 404
        return jsonify({'success': True, 'project': project})

    if not project:
        abort(404)
    return render_template('projects/project_detail.html',
                           admin=current_admin(),
                           project=project)


# ===== Actions =====

@projects_bp.route('/<int:project_id>/approve', methods=['POST'])
@admin_required
def approve_project(project_id):
    """Approve project"""
    return _set_status(project_id, ProjectStatus.APPROVED, 'approve')


@projects_bp.route('/<int:project_id>/reject', methods=['POST'])
@admin_required
def reject_project(project_id):
    """Reject project"""
    return _set_status(project_id, ProjectStatus.REJECTED, 'reject')


@projects_bp.route('/<int:project_id>', methods=['DELETE'])
@admin_required
def delete_project(project_id):
    """Delete project and its screenshots"""
    db = get_db()
    try:
        project = db.get_project(project_id)
        deleted = db.delete_project(project_id)
    except Exception as e:
        LoggingService.log_error_with_traceback('moderation', e, {'project_id': project_id})
        return jsonify({'success': False, 'error': 'Failed to delete project'}), 500

    if not deleted:
        return jsonify({'success': False, 'error': NOT_FOUND}), 404

    if project:
        try:
            delete_uploads(project['screenshots'])
        except OSError as e:
            LoggingService.warning('moderation', f'Could not remove screenshots for project {project_id}: {e}')

    LoggingService.log_user_action('moderation', f'delete project {project_id}',
                                   user_id=current_admin()['id'])
    return jsonify({'success': True, 'message': 'Project deleted'})
