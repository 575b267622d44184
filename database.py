"""
database.py — SQLite key-value store, persistence gateway, and seed data.

The three collections (plantTypes, plantings, harvests) are stored as JSON
blobs in a single kv_store table. Writes go through PersistenceGateway, which
dispatches them to a single background worker so callers never wait on disk.
Uses WAL mode for concurrent read performance.
"""

import sqlite3
import os
import json
import logging
from concurrent.futures import ThreadPoolExecutor

logger = logging.getLogger(__name__)

# Storage keys for the three collections
STORAGE_KEYS = {
    'plant_types': 'plantTypes',
    'plantings': 'plantings',
    'harvests': 'harvests',
}

# Seed catalogue: (name, germ min, germ max, maturity, harvest window, unit)
DEFAULT_PLANT_TYPES = [
    ('Kūmara (Sweet Potato)', 10, 20, 140, 21, 'kg'),
    ('Potato', 14, 21, 100, 28, 'kg'),
    ('Lettuce', 7, 14, 50, 21, 'count'),
    ('Tomato', 6, 14, 85, 35, 'kg'),
    ('Broccoli', 7, 14, 70, 14, 'count'),
    ('Silverbeet (Chard)', 7, 14, 55, 45, 'kg'),
    ('Corn (Sweet)', 7, 10, 85, 14, 'count'),
    ('Beans (Bush)', 7, 14, 55, 21, 'kg'),
    ('Carrot', 14, 21, 80, 21, 'kg'),
    ('Capsicum (Pepper)', 10, 21, 110, 35, 'kg'),
]


def get_db_path() -> str:
    """Get the database path from environment or default."""
    default_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data', 'kai_keeper.db')
    return os.environ.get('KAI_KEEPER_DB_PATH', default_path)


def get_db(db_path=None):
    """Get a database connection with WAL mode enabled."""
    db_path = db_path or get_db_path()
    db_dir = os.path.dirname(db_path)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)
    conn = sqlite3.connect(db_path)
    conn.execute("PRAGMA journal_mode=WAL")
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path=None):
    """Create the key-value table if it doesn't exist."""
    conn = get_db(db_path)
    try:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        conn.commit()
    finally:
        conn.close()


def kv_get(key, db_path=None):
    """Return the raw JSON text stored under key, or None."""
    conn = get_db(db_path)
    try:
        row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
    finally:
        conn.close()
    if row:
        return row['value']
    return None


def kv_set(key, value_text, db_path=None):
    """Insert or overwrite the JSON text stored under key."""
    conn = get_db(db_path)
    try:
        conn.execute(
            """INSERT INTO kv_store (key, value, updated_at)
               VALUES (?, ?, CURRENT_TIMESTAMP)
               ON CONFLICT(key) DO UPDATE SET
                   value = excluded.value,
                   updated_at = CURRENT_TIMESTAMP""",
            (key, value_text)
        )
        conn.commit()
    finally:
        conn.close()


class PersistenceGateway:
    """
    Asynchronous load/save boundary over the key-value store.

    save() returns immediately; the write runs on a single worker thread, so
    overlapping saves of the same key land in call order (last write wins).
    Failures never reach the caller: load() falls back, save() logs.
    """

    def __init__(self, db_path=None):
        self.db_path = db_path or get_db_path()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='kai-keeper-save')
        try:
            init_db(self.db_path)
        except sqlite3.Error as e:
            logger.warning("Could not initialize store at %s: %s", self.db_path, e)

    def load(self, key, fallback):
        """Return the stored value for key, or fallback if absent or unreadable."""
        try:
            raw = kv_get(key, self.db_path)
        except sqlite3.Error as e:
            logger.warning("Load of %r failed: %s", key, e)
            return fallback
        if raw is None:
            return fallback
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.warning("Stored value for %r is not valid JSON: %s", key, e)
            return fallback

    def save(self, key, value):
        """Schedule an overwrite of key with value. Does not wait."""
        # Serialize now so later in-memory mutations can't leak into this write
        value_text = json.dumps(value, ensure_ascii=False)
        self._executor.submit(self._write, key, value_text)

    def _write(self, key, value_text):
        try:
            kv_set(key, value_text, self.db_path)
        except sqlite3.Error as e:
            logger.warning("Save of %r failed: %s", key, e)

    def flush(self):
        """Block until every previously scheduled save has run."""
        self._executor.submit(lambda: None).result()

    def close(self):
        """Flush pending saves and stop the worker."""
        self._executor.shutdown(wait=True)
