import os
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()


class Config:
    """
    Base configuration for the showcase app.
    Deployments provide credentials and paths via environment variables.
    """
    # Flask settings
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY', 'dev-secret-key-change-in-production')
    SITE_NAME = os.getenv('SITE_NAME', 'Student Project Showcase')

    # Get DB_DIR from environment, or use a default if not set
    DB_DIR = os.getenv('DB_DIR', os.path.join(os.getcwd(), 'databases'))
    DB_FILENAME = 'projects.db'
    # Explicit database file; when unset the app uses DB_DIR/DB_FILENAME
    SHOWCASE_DB = os.getenv('SHOWCASE_DB')

    # Uploaded screenshots
    UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER', os.path.join(os.getcwd(), 'uploads'))
    MAX_SCREENSHOT_SIZE = int(os.getenv('MAX_SCREENSHOT_SIZE', str(5 * 1024 * 1024)))
    SCREENSHOT_COUNT = 3
    ALLOWED_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp'}

    # Seeded admin account (required)
    ADMIN_USERNAME = os.getenv('ADMIN_USERNAME')
    ADMIN_PASSWORD = os.getenv('ADMIN_PASSWORD')

    # Session cookie
    SESSION_COOKIE_NAME = 'showcase_session'
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_SECURE = os.getenv('SESSION_COOKIE_SECURE') == '1'
    SESSION_REFRESH_EACH_REQUEST = True
    PERMANENT_SESSION_LIFETIME = timedelta(hours=int(os.getenv('SESSION_LIFETIME_HOURS', '24')))

    # Origins allowed to fetch the public projects API
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')

    # Table names
    PROJECTS_TABLE = "projects"
    ADMINS_TABLE = "admins"
    SESSIONS_TABLE = "admin_sessions"
    LOGS_TABLE = "app_logs"

    # Port for local server
    port = int(os.getenv('PORT', '3000'))


def get_config_value(key, default=None):
    """Get configuration value: Flask app config first, then Config, then env var"""
    try:
        from flask import current_app
        val = current_app.config.get(key)
        if val:
            return val
    except RuntimeError:
        pass
    val = getattr(Config, key, None)
    if val:
        return val
    return os.getenv(key, default)
