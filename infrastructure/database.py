import os
import sqlite3
from typing import Optional

from infrastructure.configuration import get_app_data_dir


class Database:
    """Local SQLite file holding the offline key/value entries (local storage)."""

    def __init__(self, db_path: str = None):
        if db_path is None:
            db_dir = get_app_data_dir()
            if not os.path.exists(db_dir):
                os.makedirs(db_dir, exist_ok=True)
            db_path = os.path.join(db_dir, "rubroquote_local.db")

        self.db_path = db_path
        self.init_db()

    def get_connection(self):
        return sqlite3.connect(self.db_path)

    def init_db(self):
        """Initialize the database schema."""
        conn = self.get_connection()
        try:
            conn.execute('''
                CREATE TABLE IF NOT EXISTS local_storage (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    last_updated TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            ''')
            conn.commit()
        finally:
            conn.close()

    def get_item(self, key: str) -> Optional[str]:
        conn = self.get_connection()
        try:
            row = conn.execute("SELECT value FROM local_storage WHERE key = ?", (key,)).fetchone()
            return row[0] if row else None
        finally:
            conn.close()

    def set_item(self, key: str, value: str):
        """Write the whole value for a key (insert or replace)."""
        conn = self.get_connection()
        try:
            conn.execute('''
                INSERT OR REPLACE INTO local_storage (key, value, last_updated)
                VALUES (?, ?, CURRENT_TIMESTAMP)
            ''', (key, value))
            conn.commit()
        finally:
            conn.close()

    def remove_item(self, key: str) -> bool:
        conn = self.get_connection()
        try:
            cursor = conn.execute("DELETE FROM local_storage WHERE key = ?", (key,))
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()
