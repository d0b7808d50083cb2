"""
Centralized logging service for the AnimeNews site.
Keeps a persistent activity log (indexing pings, storage clean-up, login
attempts) that the admin dashboard can display.
"""

import json
import logging
import traceback
from datetime import datetime, timedelta
from flask import request, has_request_context
from .database import Database
from .config import Config, get_config_value

logger = logging.getLogger('animenews')


class LoggingService:
    """Application log backed by the app_logs table"""

    @staticmethod
    def _db_path():
        return get_config_value('LOG_DB', Config.LOG_DB)

    @staticmethod
    def _ensure_logs_table(conn):
        cursor = conn.cursor()
        cursor.execute(f"""
            CREATE TABLE IF NOT EXISTS {Config.LOGS_TABLE} (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp TEXT NOT NULL,
                level TEXT NOT NULL,
                source TEXT NOT NULL,
                message TEXT NOT NULL,
                details TEXT,
                request_path TEXT
            )
        """)
        cursor.execute(f"""
            CREATE INDEX IF NOT EXISTS idx_logs_timestamp
            ON {Config.LOGS_TABLE}(timestamp DESC)
        """)

    @staticmethod
    def _request_path():
        if not has_request_context():
            return None
        try:
            return request.path
        except Exception:
            return None

    @staticmethod
    def log(level, source, message, details=None):
        """
        Log a message to the Python logger and to the database

        Args:
            level (str): Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            source (str): Source component (indexing, storage, security, articles)
            message (str): Main log message
            details (str/dict): Additional details (JSON-encoded if dict)
        """
        level = level.upper()
        logger.log(getattr(logging, level, logging.INFO), "[%s] %s", source, message)

        if isinstance(details, dict):
            details = json.dumps(details, indent=2, default=str)

        try:
            with Database.connect(LoggingService._db_path()) as conn:
                LoggingService._ensure_logs_table(conn)
                conn.execute(f"""
                    INSERT INTO {Config.LOGS_TABLE}
                    (timestamp, level, source, message, details, request_path)
                    VALUES (?, ?, ?, ?, ?, ?)
                """, (
                    datetime.now().isoformat(), level, source, message,
                    details, LoggingService._request_path()
                ))
                conn.commit()
        except Exception as e:
            # The Python logger already has the entry
            logger.warning("Logging service error: %s", e)

    @staticmethod
    def info(source, message, details=None):
        """Log info message"""
        LoggingService.log('INFO', source, message, details)

    @staticmethod
    def warning(source, message, details=None):
        """Log warning message"""
        LoggingService.log('WARNING', source, message, details)

    @staticmethod
    def error(source, message, details=None):
        """Log error message"""
        LoggingService.log('ERROR', source, message, details)

    @staticmethod
    def log_error_with_traceback(source, error, details=None):
        """Log error with full traceback"""
        error_details = {
            'error_type': type(error).__name__,
            'error_message': str(error),
            'traceback': traceback.format_exc()
        }
        if details:
            error_details['additional_details'] = details

        LoggingService.error(source, f"Exception occurred: {type(error).__name__}", error_details)

    @staticmethod
    def log_security_event(message, details=None):
        """Log security-related events (failed logins and the like)"""
        details = dict(details or {})
        if has_request_context():
            ip_address = request.headers.get('X-Forwarded-For', request.remote_addr)
            if ip_address and ',' in ip_address:
                ip_address = ip_address.split(',')[0].strip()
            details['ip_address'] = ip_address

        LoggingService.warning('security', message, details)

    @staticmethod
    def recent(limit=20, source=None):
        """Most recent log entries, newest first"""
        try:
            with Database.connect(LoggingService._db_path()) as conn:
                LoggingService._ensure_logs_table(conn)
                query = f"""
                    SELECT timestamp, level, source, message, details
                    FROM {Config.LOGS_TABLE}
                """
                params = []
                if source:
                    query += " WHERE source = ?"
                    params.append(source)
                query += " ORDER BY id DESC LIMIT ?"
                params.append(limit)
                rows = conn.execute(query, params).fetchall()
                return [dict(row) for row in rows]
        except Exception as e:
            logger.warning("Could not read app logs: %s", e)
            return []

    @staticmethod
    def cleanup_old_logs(days_to_keep=30):
        """Clean up old log entries"""
        cutoff_iso = (datetime.now() - timedelta(days=days_to_keep)).isoformat()
        try:
            with Database.connect(LoggingService._db_path()) as conn:
                LoggingService._ensure_logs_table(conn)
                cursor = conn.execute(
                    f"DELETE FROM {Config.LOGS_TABLE} WHERE timestamp < ?", (cutoff_iso,)
                )
                conn.commit()
                return cursor.rowcount
        except Exception as e:
            logger.error("Failed to cleanup old logs: %s", e)
            return 0
