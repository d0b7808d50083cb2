import os
import sqlite3
from datetime import datetime, timezone

TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S.%f'


class StoreError(Exception):
    """Raised when the article store cannot complete a query"""


class Database:

    @staticmethod
    def connect(path):
        db_dir = os.path.dirname(path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)
        conn = sqlite3.connect(path)
        conn.row_factory = sqlite3.Row
        return conn

    @staticmethod
    def now():
        """Current UTC time as stored in timestamp columns"""
        return datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT)

    @staticmethod
    def format_timestamp(value):
        """Format an aware or naive-UTC datetime the way it is stored"""
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.strftime(TIMESTAMP_FORMAT)

    @staticmethod
    def parse_timestamp(value):
        """Parse a stored timestamp into an aware UTC datetime"""
        if isinstance(value, datetime):
            parsed = value
        else:
            parsed = datetime.fromisoformat(str(value))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
