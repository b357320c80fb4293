"""
Showcase - Student Project Showcase
===================================

A Flask app where students submit projects with screenshots, an admin
moderates the submissions, and approved projects are listed publicly.

Usage:
    from showcase import create_app
    app = create_app()

Or attach to an existing app:
    from showcase import Showcase
    Showcase(app)
"""

import os
from datetime import datetime, timezone

from flask import Flask, jsonify, render_template, request, send_from_directory
from flask_cors import CORS

from .core.config import Config
from .core.database import ShowcaseDatabase, ProjectStatus
from .core.logging_service import LoggingService

__version__ = '0.1.0'

# Settings the extension needs; applied only when the app has not set them
_DEFAULT_KEYS = (
    'SITE_NAME', 'DB_DIR', 'DB_FILENAME', 'UPLOAD_FOLDER', 'MAX_SCREENSHOT_SIZE',
    'SCREENSHOT_COUNT', 'ALLOWED_EXTENSIONS', 'ADMIN_USERNAME', 'ADMIN_PASSWORD',
    'CORS_ORIGINS',
)


class Showcase:
    """Flask extension wiring the persistence service and all blueprints"""

    def __init__(self, app=None):
        self.db = None
        self._registered = []
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        for key in _DEFAULT_KEYS:
            app.config.setdefault(key, getattr(Config, key))

        if not app.config.get('SHOWCASE_DB'):
            app.config['SHOWCASE_DB'] = os.path.join(app.config['DB_DIR'], app.config['DB_FILENAME'])

        # Whole-request cap: all screenshots at full size plus form fields
        if not app.config.get('MAX_CONTENT_LENGTH'):
            app.config['MAX_CONTENT_LENGTH'] = (
                app.config['SCREENSHOT_COUNT'] * app.config['MAX_SCREENSHOT_SIZE'] + 1024 * 1024
            )

        os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)

        self.db = ShowcaseDatabase(app.config['SHOWCASE_DB'])
        self.db.init(app.config.get('ADMIN_USERNAME'), app.config.get('ADMIN_PASSWORD'))

        app.extensions['showcase'] = self

        self._register_modules(app)
        self._register_core_routes(app)
        self._register_error_handlers(app)
        self._setup_cors(app)

        @app.context_processor
        def inject_showcase_context():
            from .modules.dashboard.auth import current_admin
            return {
                'brand_name': app.config['SITE_NAME'],
                'current_admin': current_admin(),
            }

    def get_registered_modules(self):
        return list(self._registered)

    def _register_modules(self, app):
        from .modules.dashboard import dashboard_bp
        from .modules.projects import projects_bp
        from .modules.projects_public import projects_public_bp
        from .modules.submissions import submissions_bp

        for name, bp in (('dashboard', dashboard_bp),
                         ('projects', projects_bp),
                         ('projects_public', projects_public_bp),
                         ('submissions', submissions_bp)):
            app.register_blueprint(bp)
            self._registered.append(name)

    def _register_core_routes(self, app):
        db = self.db

        @app.route('/')
        def index():
            """Landing page"""
            try:
                approved_count = db.count_projects(ProjectStatus.APPROVED)
            except Exception as e:
                LoggingService.log_error_with_traceback('app', e)
                approved_count = None
            return render_template('index.html', approved_count=approved_count)

        @app.route('/uploads/<path:filename>')
        def uploaded_file(filename):
            """Serve a stored screenshot"""
            return send_from_directory(app.config['UPLOAD_FOLDER'], filename)

        @app.route('/api/health')
        def health():
            """Health check for uptime monitors"""
            from .modules.dashboard.auth import current_admin
            try:
                db.ping()
                database = 'ok'
            except Exception as e:
                LoggingService.error('health', f'Database check failed: {e}')
                database = 'error'

            payload = {
                'status': 'OK' if database == 'ok' else 'ERROR',
                'timestamp': datetime.now(timezone.utc).isoformat(),
                'session_admin': current_admin() is not None,
                'database': database,
            }
            return jsonify(payload), 200 if database == 'ok' else 503

    def _register_error_handlers(self, app):

        @app.errorhandler(404)
        def not_found(error):
            if request.path.startswith('/admin/projects/') and request.method != 'GET':
                return jsonify({'success': False, 'error': 'Project not found'}), 404
            return render_template('errors/404.html'), 404

        @app.errorhandler(413)
        def too_large(error):
            if request.path == '/upload':
                from .modules.submissions.routes import render_upload_form, _size_limit_message
                return render_upload_form(_size_limit_message(), None, 413)
            return 'Upload too large', 413

        @app.errorhandler(500)
        def server_error(error):
            original = getattr(error, 'original_exception', None) or error
            LoggingService.log_error_with_traceback('app', original, {'path': request.path})
            return 'Something went wrong. Please try again.', 500

    def _setup_cors(self, app):
        origins = app.config['CORS_ORIGINS']
        if origins != '*':
            origins = [o.strip() for o in origins.split(',') if o.strip()]
        CORS(app, resources={r'/projects/api/*': {'origins': origins}}, supports_credentials=False)


def create_app(test_config=None):
    """Application factory.

    Args:
        test_config: Optional mapping applied over the environment-driven Config
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    Showcase(app)
    return app


__all__ = ['Showcase', 'create_app', '__version__']
