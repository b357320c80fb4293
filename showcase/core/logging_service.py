"""
Application log for the showcase.

Every entry goes to the ``showcase`` stdlib logger (so it reaches whatever
handlers the host app configured) and is also appended to the ``app_logs``
table next to the projects, where an admin can read it back later. The
table write is best effort: a broken log store never fails a request.
"""

import json
import logging
import os
import sqlite3
import traceback
from datetime import datetime, timedelta

from flask import request, has_request_context

from .config import Config, get_config_value

_logger = logging.getLogger('showcase')

_LOG_COLUMNS = ('timestamp', 'level', 'source', 'message', 'details',
                'ip_address', 'user_agent', 'request_path', 'user_id')


class LoggingService:
    """Static helpers that record events from the routes and the extension"""

    @staticmethod
    def _connect():
        db_path = get_config_value('SHOWCASE_DB') or os.path.join(
            get_config_value('DB_DIR', Config.DB_DIR), Config.DB_FILENAME)
        conn = sqlite3.connect(db_path)
        conn.row_factory = sqlite3.Row
        try:
            LoggingService._ensure_table(conn)
        except sqlite3.Error:
            conn.close()
            raise
        return conn

    @staticmethod
    def _ensure_table(conn):
        conn.execute(f"""
            CREATE TABLE IF NOT EXISTS {Config.LOGS_TABLE} (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp TEXT NOT NULL,
                level TEXT NOT NULL,
                source TEXT NOT NULL,
                message TEXT NOT NULL,
                details TEXT,
                ip_address TEXT,
                user_agent TEXT,
                request_path TEXT,
                user_id TEXT
            )
        """)
        conn.execute(f"CREATE INDEX IF NOT EXISTS idx_app_logs_level ON {Config.LOGS_TABLE}(level)")

    @staticmethod
    def _client():
        """(ip, user agent, path) of the current request, or Nones outside one"""
        if not has_request_context():
            return None, None, None

        # First hop of X-Forwarded-For when behind a proxy
        forwarded = request.headers.get('X-Forwarded-For', '')
        ip_address = forwarded.split(',')[0].strip() or request.remote_addr
        return ip_address, request.headers.get('User-Agent', ''), request.path

    @staticmethod
    def log(level, source, message, details=None, user_id=None):
        """
        Record one event.

        Args:
            level (str): DEBUG, INFO, WARNING, ERROR or CRITICAL (any case)
            source (str): Area of the app, e.g. 'auth', 'submissions', 'moderation'
            message (str): One-line summary
            details (str/dict): Extra context; dicts are stored as JSON
            user_id: Admin id when an admin triggered the event
        """
        level = level.upper()
        if isinstance(details, dict):
            details = json.dumps(details, indent=2, default=str)

        _logger.log(getattr(logging, level, logging.INFO), "[%s] %s", source, message)
        if details:
            _logger.debug("%s details: %s", source, details)

        entry = (datetime.now().isoformat(), level, source, message, details,
                 *LoggingService._client(),
                 None if user_id is None else str(user_id))
        placeholders = ', '.join('?' for _ in _LOG_COLUMNS)

        try:
            conn = LoggingService._connect()
            try:
                conn.execute(
                    f"INSERT INTO {Config.LOGS_TABLE} ({', '.join(_LOG_COLUMNS)}) VALUES ({placeholders})",
                    entry,
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            _logger.warning("Could not store log entry from %s: %s", source, e)

    @staticmethod
    def info(source, message, details=None, user_id=None):
        LoggingService.log('INFO', source, message, details, user_id)

    @staticmethod
    def warning(source, message, details=None, user_id=None):
        LoggingService.log('WARNING', source, message, details, user_id)

    @staticmethod
    def error(source, message, details=None, user_id=None):
        LoggingService.log('ERROR', source, message, details, user_id)

    @staticmethod
    def log_user_action(source, action, user_id=None, details=None):
        """Audit trail for admin actions: login, logout, approve, reject, delete"""
        LoggingService.info(source, f"User action: {action}", details, user_id)

    @staticmethod
    def log_error_with_traceback(source, error, details=None):
        """Call from an except block; stores the exception type, text and traceback"""
        error_details = {
            'error_type': type(error).__name__,
            'error_message': str(error),
            'traceback': traceback.format_exc(),
        }
        if details:
            error_details['context'] = details

        LoggingService.error(source, f"Exception occurred: {type(error).__name__}", error_details)

    @staticmethod
    def log_security_event(message, details=None):
        """Failed logins and similar; stored as WARNING under source 'security'"""
        LoggingService.warning('security', message, details)

    @staticmethod
    def get_recent_logs(limit=50, level=None):
        """Newest entries first, optionally only one level"""
        conn = LoggingService._connect()
        try:
            query = f"SELECT * FROM {Config.LOGS_TABLE}"
            params = []
            if level:
                query += " WHERE level = ?"
                params.append(level.upper())
            query += " ORDER BY id DESC LIMIT ?"
            params.append(limit)
            return [dict(row) for row in conn.execute(query, params).fetchall()]
        finally:
            conn.close()

    @staticmethod
    def cleanup_old_logs(days_to_keep=30):
        """Drop entries older than ``days_to_keep`` days. Returns how many went."""
        cutoff = (datetime.now() - timedelta(days=days_to_keep)).isoformat()

        try:
            conn = LoggingService._connect()
            try:
                removed = conn.execute(
                    f"DELETE FROM {Config.LOGS_TABLE} WHERE timestamp < ?", (cutoff,)
                ).rowcount
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            _logger.error("Log cleanup failed: %s", e)
            return 0

        LoggingService.info('system', f"Removed {removed} log entries older than {days_to_keep} days")
        return removed
