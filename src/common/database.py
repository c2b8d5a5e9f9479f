"""SQLite access to the WordPress content store.

The store mirrors the WordPress table layout. `init_db` creates the
tables the baker reads, which is how local mirrors and tests are seeded.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

from .config import settings

# Subset of the WordPress schema read by the baker
_CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS wp_users (
    ID INTEGER PRIMARY KEY AUTOINCREMENT,
    user_login TEXT NOT NULL,
    display_name TEXT NOT NULL DEFAULT ''
);

CREATE TABLE IF NOT EXISTS wp_posts (
    ID INTEGER PRIMARY KEY AUTOINCREMENT,
    post_author INTEGER NOT NULL DEFAULT 0,
    post_date TEXT NOT NULL DEFAULT '1970-01-01 00:00:00',
    post_content TEXT NOT NULL DEFAULT '',
    post_title TEXT NOT NULL DEFAULT '',
    post_excerpt TEXT NOT NULL DEFAULT '',
    post_status TEXT NOT NULL DEFAULT 'publish',
    post_name TEXT NOT NULL DEFAULT '',
    post_modified TEXT NOT NULL DEFAULT '1970-01-01 00:00:00',
    post_parent INTEGER NOT NULL DEFAULT 0,
    menu_order INTEGER NOT NULL DEFAULT 0,
    post_type TEXT NOT NULL DEFAULT 'post'
);

CREATE TABLE IF NOT EXISTS wp_postmeta (
    meta_id INTEGER PRIMARY KEY AUTOINCREMENT,
    post_id INTEGER NOT NULL,
    meta_key TEXT,
    meta_value TEXT,
    FOREIGN KEY (post_id) REFERENCES wp_posts(ID)
);

CREATE TABLE IF NOT EXISTS wp_terms (
    term_id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    slug TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS wp_term_taxonomy (
    term_taxonomy_id INTEGER PRIMARY KEY AUTOINCREMENT,
    term_id INTEGER NOT NULL,
    taxonomy TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    FOREIGN KEY (term_id) REFERENCES wp_terms(term_id)
);

CREATE TABLE IF NOT EXISTS wp_term_relationships (
    object_id INTEGER NOT NULL,
    term_taxonomy_id INTEGER NOT NULL,
    term_order INTEGER NOT NULL DEFAULT 0,
    PRIMARY KEY (object_id, term_taxonomy_id)
);

CREATE TABLE IF NOT EXISTS wp_redirection_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    url TEXT NOT NULL,
    action_data TEXT NOT NULL,
    action_code INTEGER NOT NULL DEFAULT 301
);

CREATE INDEX IF NOT EXISTS idx_posts_type_status ON wp_posts(post_type, post_status);
CREATE INDEX IF NOT EXISTS idx_term_taxonomy ON wp_term_taxonomy(taxonomy);
"""


def get_connection(db_path: str | None = None) -> sqlite3.Connection:
    """Get a SQLite connection with row factory enabled."""
    path = db_path or settings.database.db_path
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


def init_db(db_path: str | None = None) -> None:
    """Create all tables if they don't exist."""
    conn = get_connection(db_path)
    try:
        conn.executescript(_CREATE_TABLES_SQL)
        conn.commit()
    finally:
        conn.close()
