"""
Showcase Database
=================

SQLite persistence for project submissions, the admin account and its
server-side login sessions.

Every call opens its own short-lived connection, so a single
``ShowcaseDatabase`` instance can be shared by all request handlers.
Storage failures propagate as ``sqlite3.Error``.
"""

import enum
import json
import os
import secrets
import sqlite3
from datetime import datetime, timezone

from flask import current_app
from werkzeug.security import generate_password_hash

from .config import Config


class ConfigurationError(RuntimeError):
    """Raised at startup when required settings are missing."""


class ProjectStatus(enum.Enum):
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'

    @classmethod
    def coerce(cls, value):
        """Accept a ProjectStatus or its string value; anything else raises ValueError."""
        if isinstance(value, cls):
            return value
        return cls(value)


# Columns accepted from the submission workflow, in insert order
PROJECT_FIELDS = ('project_name', 'project_link', 'student_name', 'teacher_name', 'module_name')

_SELECT_COLS = '''id, project_name, project_link, student_name, teacher_name,
                  module_name, screenshots, status, created_at'''


def _decode_screenshots(value):
    """Decode the stored JSON list; malformed or empty values become []."""
    if not value:
        return []
    try:
        parsed = json.loads(value)
    except (json.JSONDecodeError, TypeError):
        return []
    if isinstance(parsed, list):
        return [str(item) for item in parsed]
    return []


def _row_to_dict(row):
    """Convert a DB row to a project dict"""
    d = dict(row)
    d['screenshots'] = _decode_screenshots(d.get('screenshots'))
    return d


def _escape_like(value):
    return value.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


def _casefold(value):
    # SQLite's own LIKE and lower() only fold ASCII
    return value.casefold() if isinstance(value, str) else value


def _timestamp(moment=None):
    """Fixed-width UTC timestamp, so stored values compare as strings"""
    moment = moment or datetime.now(timezone.utc)
    return moment.isoformat(timespec='microseconds')


class ShowcaseDatabase:
    """Persistence service owning the ``projects``, ``admins`` and
    ``admin_sessions`` tables."""

    def __init__(self, db_path):
        self.db_path = db_path

    def _get_connection(self):
        """Get database connection"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.create_function('casefold', 1, _casefold, deterministic=True)
        return conn

    # ===== Setup =====

    def init(self, admin_username, admin_password):
        """
        Create tables if absent and seed the admin account.

        Args:
            admin_username: Username of the seeded admin
            admin_password: Plain-text password, stored hashed

        Raises:
            ConfigurationError: if either credential is unset
        """
        if not admin_username or not admin_password:
            raise ConfigurationError(
                'ADMIN_USERNAME and ADMIN_PASSWORD must be set to seed the admin account'
            )

        db_dir = os.path.dirname(self.db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(f'''
                CREATE TABLE IF NOT EXISTS {Config.PROJECTS_TABLE} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    project_name TEXT NOT NULL,
                    project_link TEXT,
                    student_name TEXT,
                    teacher_name TEXT,
                    module_name TEXT NOT NULL,
                    screenshots TEXT,
                    status TEXT NOT NULL DEFAULT 'pending'
                        CHECK (status IN ('pending', 'approved', 'rejected')),
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            ''')
            cursor.execute(f'''
                CREATE TABLE IF NOT EXISTS {Config.ADMINS_TABLE} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    username TEXT UNIQUE NOT NULL,
                    password_hash TEXT NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            ''')
            cursor.execute(f'''
                CREATE TABLE IF NOT EXISTS {Config.SESSIONS_TABLE} (
                    token TEXT PRIMARY KEY,
                    admin_id INTEGER NOT NULL REFERENCES {Config.ADMINS_TABLE}(id),
                    created_at TEXT NOT NULL,
                    expires_at TEXT NOT NULL
                )
            ''')
            cursor.execute(f'CREATE INDEX IF NOT EXISTS idx_projects_status ON {Config.PROJECTS_TABLE}(status)')
            cursor.execute(f'CREATE INDEX IF NOT EXISTS idx_projects_created ON {Config.PROJECTS_TABLE}(created_at)')

            cursor.execute(f'''
                INSERT OR IGNORE INTO {Config.ADMINS_TABLE} (username, password_hash)
                VALUES (?, ?)
            ''', (admin_username, generate_password_hash(admin_password)))
            conn.commit()
        finally:
            conn.close()

        self.purge_expired_sessions()

    def ping(self):
        """Run a trivial query; raises sqlite3.Error when the store is unusable"""
        conn = self._get_connection()
        try:
            conn.execute(f'SELECT COUNT(*) FROM {Config.PROJECTS_TABLE}').fetchone()
        finally:
            conn.close()

    # ===== Projects =====

    def add_project(self, fields):
        """Insert a submission as pending and return its id.

        ``fields`` holds the PROJECT_FIELDS values plus ``screenshots``, an
        ordered list of stored filenames.
        """
        values = [fields.get(name) for name in PROJECT_FIELDS]
        values.append(json.dumps(list(fields.get('screenshots') or [])))

        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(f'''
                INSERT INTO {Config.PROJECTS_TABLE}
                    (project_name, project_link, student_name, teacher_name,
                     module_name, screenshots, status)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            ''', (*values, ProjectStatus.PENDING.value))
            conn.commit()
            return cursor.lastrowid
        finally:
            conn.close()

    def get_projects(self, search=None, module_filter=None, approved_only=True):
        """Get projects newest first.

        search: case-insensitive substring of project, teacher or student name
            (both sides are casefolded in Python, so "ÉCOLE" finds "école")
        module_filter: exact module name
        approved_only: restrict to approved projects
        """
        conditions = []
        params = []

        if approved_only:
            conditions.append('status = ?')
            params.append(ProjectStatus.APPROVED.value)

        if search:
            pattern = f'%{_escape_like(_casefold(search))}%'
            conditions.append(
                "(casefold(project_name) LIKE ? ESCAPE '\\' "
                "OR casefold(teacher_name) LIKE ? ESCAPE '\\' "
                "OR casefold(student_name) LIKE ? ESCAPE '\\')"
            )
            params.extend([pattern, pattern, pattern])

        if module_filter:
            conditions.append('module_name = ?')
            params.append(module_filter)

        where = f' WHERE {" AND ".join(conditions)}' if conditions else ''

        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(f'''
                SELECT {_SELECT_COLS}
                FROM {Config.PROJECTS_TABLE}{where}
                ORDER BY created_at DESC, id DESC
            ''', params)
            return [_row_to_dict(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def get_pending_projects(self):
        """All pending projects, newest first"""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(f'''
                SELECT {_SELECT_COLS}
                FROM {Config.PROJECTS_TABLE}
                WHERE status = ?
                ORDER BY created_at DESC, id DESC
            ''', (ProjectStatus.PENDING.value,))
            return [_row_to_dict(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def get_all_projects(self):
        """All projects: pending first, then approved, then the rest; newest first within each"""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(f'''
                SELECT {_SELECT_COLS}
                FROM {Config.PROJECTS_TABLE}
                ORDER BY
                    CASE status
                        WHEN 'pending' THEN 1
                        WHEN 'approved' THEN 2
                        ELSE 3
                    END,
                    created_at DESC, id DESC
            ''')
            return [_row_to_dict(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def get_project(self, project_id):
        """Get single project by ID"""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(f'SELECT {_SELECT_COLS} FROM {Config.PROJECTS_TABLE} WHERE id = ?', (project_id,))
            row = cursor.fetchone()
            return _row_to_dict(row) if row else None
        finally:
            conn.close()

    def get_modules(self):
        """Distinct module names of approved projects, sorted"""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(f'''
                SELECT DISTINCT module_name FROM {Config.PROJECTS_TABLE}
                WHERE status = ?
                ORDER BY module_name COLLATE NOCASE
            ''', (ProjectStatus.APPROVED.value,))
            return [row[0] for row in cursor.fetchall()]
        finally:
            conn.close()

    def count_projects(self, status=None):
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            if status is None:
                cursor.execute(f'SELECT COUNT(*) FROM {Config.PROJECTS_TABLE}')
            else:
                cursor.execute(f'SELECT COUNT(*) FROM {Config.PROJECTS_TABLE} WHERE status = ?',
                               (ProjectStatus.coerce(status).value,))
            return cursor.fetchone()[0]
        finally:
            conn.close()

    def update_project_status(self, project_id, status):
        """Set a project's status. Returns affected row count; 0 means not found."""
        status = ProjectStatus.coerce(status)

        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(f'''
                UPDATE {Config.PROJECTS_TABLE}
                SET status = ?
                WHERE id = ?
            ''', (status.value, project_id))
            conn.commit()
            return cursor.rowcount
        finally:
            conn.close()

    def delete_project(self, project_id):
        """Delete project. Returns affected row count; 0 means not found."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(f'DELETE FROM {Config.PROJECTS_TABLE} WHERE id = ?', (project_id,))
            conn.commit()
            return cursor.rowcount
        finally:
            conn.close()

    # ===== Admins =====

    def get_admin_by_username(self, username):
        """Get admin by username"""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(f'''
                SELECT id, username, password_hash, created_at
                FROM {Config.ADMINS_TABLE} WHERE username = ?
            ''', (username,))
            row = cursor.fetchone()
            return dict(row) if row else None
        finally:
            conn.close()

    # ===== Admin sessions =====

    def create_session(self, admin_id, lifetime):
        """Start a server-side admin session and return its token.

        Args:
            admin_id: The admin the session belongs to
            lifetime: timedelta until the session expires unless touched
        """
        token = secrets.token_urlsafe(32)
        now = datetime.now(timezone.utc)

        conn = self._get_connection()
        try:
            conn.execute(f'''
                INSERT INTO {Config.SESSIONS_TABLE} (token, admin_id, created_at, expires_at)
                VALUES (?, ?, ?, ?)
            ''', (token, admin_id, _timestamp(now), _timestamp(now + lifetime)))
            conn.commit()
            return token
        finally:
            conn.close()

    def get_session(self, token):
        """Live session joined with its admin's username, or None when unknown or expired"""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(f'''
                SELECT s.token, s.admin_id, a.username, s.created_at, s.expires_at
                FROM {Config.SESSIONS_TABLE} s
                JOIN {Config.ADMINS_TABLE} a ON a.id = s.admin_id
                WHERE s.token = ? AND s.expires_at > ?
            ''', (token, _timestamp()))
            row = cursor.fetchone()
            return dict(row) if row else None
        finally:
            conn.close()

    def touch_session(self, token, lifetime):
        """Push a live session's expiry to now + lifetime. Returns affected row count."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(f'''
                UPDATE {Config.SESSIONS_TABLE}
                SET expires_at = ?
                WHERE token = ? AND expires_at > ?
            ''', (_timestamp(datetime.now(timezone.utc) + lifetime), token, _timestamp()))
            conn.commit()
            return cursor.rowcount
        finally:
            conn.close()

    def delete_session(self, token):
        """End a session. Returns affected row count."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(f'DELETE FROM {Config.SESSIONS_TABLE} WHERE token = ?', (token,))
            conn.commit()
            return cursor.rowcount
        finally:
            conn.close()

    def purge_expired_sessions(self):
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(f'DELETE FROM {Config.SESSIONS_TABLE} WHERE expires_at <= ?', (_timestamp(),))
            conn.commit()
            return cursor.rowcount
        finally:
            conn.close()


def get_db():
    """The ShowcaseDatabase bound to the current app"""
    return current_app.extensions['showcase'].db
