"""WordPress content store queries.

Reads posts, pages, authorship, navigation categories and redirects
from a SQLite database laid out like the WordPress schema.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

from src.common.config import Settings, settings as default_settings
from src.common.database import get_connection
from src.common.logging import setup_logging

from .models import CategoryWithEntries, EntryMeta, FullPost, Redirect

logger = setup_logging(module_name="baker.wpdb")

WP_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def parse_wp_date(value: str | None) -> datetime:
    """Parse a WordPress `YYYY-MM-DD HH:MM:SS` column value."""
    if not value:
        return datetime(1970, 1, 1)
    try:
        return datetime.strptime(value, WP_DATE_FORMAT)
    except ValueError:
        return datetime.fromisoformat(value)


class WordpressDB:
    """Thin query layer over the WordPress tables.

    Usage:
        db = WordpressDB()
        for row in db.get_published_rows():
            post = db.get_full_post(row)
        db.end()
    """

    def __init__(
        self,
        settings: Settings | None = None,
        conn: sqlite3.Connection | None = None,
    ):
        self.settings = settings or default_settings
        if conn is None:
            db_path = Path(self.settings.database.db_path)
            if not db_path.exists():
                raise ValueError(
                    f"WordPress database not found at {db_path}. "
                    "Set WORDPRESS_DB_PATH or database.db_path in config/settings.yaml."
                )
            conn = get_connection(str(db_path))
        self._conn = conn
        self._entries_cache: list[CategoryWithEntries] | None = None

    def query(self, sql: str, params: Iterable[Any] = ()) -> list[sqlite3.Row]:
        """Run a query and return all rows."""
        return self._conn.execute(sql, tuple(params)).fetchall()

    def end(self) -> None:
        """Close the underlying connection."""
        self._conn.close()

    # --- Posts ---

    def get_published_rows(
        self, post_types: tuple[str, ...] = ("page", "post"),
    ) -> list[sqlite3.Row]:
        placeholders = ", ".join("?" for _ in post_types)
        return self.query(
            f"SELECT * FROM wp_posts WHERE post_type IN ({placeholders}) "
            "AND post_status='publish' ORDER BY ID",
            post_types,
        )

    def get_post_contents(self) -> list[str]:
        """HTML bodies of every published post and page."""
        rows = self.query(
            "SELECT post_content FROM wp_posts "
            "WHERE (post_type='page' OR post_type='post') AND post_status='publish'"
        )
        return [row["post_content"] or "" for row in rows]

    def get_authors(self, row: sqlite3.Row) -> list[str]:
        """Authors from the author taxonomy, else the WordPress post author."""
        rows = self.query(
            """
            SELECT t.name FROM wp_term_relationships tr
            JOIN wp_term_taxonomy tt ON tt.term_taxonomy_id = tr.term_taxonomy_id
            JOIN wp_terms t ON t.term_id = tt.term_id
            WHERE tr.object_id = ? AND tt.taxonomy = 'author'
            ORDER BY tr.term_order, t.term_id
            """,
            (row["ID"],),
        )
        if rows:
            return [r["name"] for r in rows]

        user = self.query(
            "SELECT display_name FROM wp_users WHERE ID = ?", (row["post_author"],)
        )
        if user and user[0]["display_name"]:
            return [user[0]["display_name"]]
        return []

    def get_full_post(self, row: sqlite3.Row) -> FullPost:
        """Resolve a wp_posts row into a FullPost."""
        return FullPost(
            id=row["ID"],
            type=row["post_type"],
            slug=row["post_name"],
            title=row["post_title"],
            date=parse_wp_date(row["post_date"]),
            modified_date=parse_wp_date(row["post_modified"]),
            authors=self.get_authors(row),
            content=row["post_content"] or "",
            excerpt=row["post_excerpt"] or "",
        )

    def get_recent_posts(self, limit: int) -> list[FullPost]:
        rows = self.query(
            "SELECT * FROM wp_posts WHERE post_type='post' AND post_status='publish' "
            "ORDER BY post_date DESC LIMIT ?",
            (limit,),
        )
        return [self.get_full_post(row) for row in rows]

    def get_blog_index(self) -> list[FullPost]:
        """All published blog posts, newest first."""
        rows = self.query(
            "SELECT * FROM wp_posts WHERE post_type='post' AND post_status='publish' "
            "ORDER BY post_date DESC"
        )
        return [self.get_full_post(row) for row in rows]

    # --- Navigation ---

    def get_entries_by_category(self) -> list[CategoryWithEntries]:
        """Categories with their published entry pages, cached per instance."""
        if self._entries_cache is not None:
            return self._entries_cache

        rows = self.query(
            """
            SELECT t.term_id, t.name AS category_name, t.slug AS category_slug,
                   p.post_name, p.post_title
            FROM wp_terms t
            JOIN wp_term_taxonomy tt ON tt.term_id = t.term_id AND tt.taxonomy = 'category'
            JOIN wp_term_relationships tr ON tr.term_taxonomy_id = tt.term_taxonomy_id
            JOIN wp_posts p ON p.ID = tr.object_id
            WHERE p.post_type = 'page' AND p.post_status = 'publish'
              AND t.slug != 'uncategorized'
            ORDER BY t.term_id, p.menu_order, p.post_title
            """
        )

        categories: dict[int, CategoryWithEntries] = {}
        for row in rows:
            category = categories.get(row["term_id"])
            if category is None:
                category = CategoryWithEntries(
                    name=row["category_name"], slug=row["category_slug"],
                )
                categories[row["term_id"]] = category
            category.entries.append(
                EntryMeta(slug=row["post_name"], title=row["post_title"])
            )

        self._entries_cache = list(categories.values())
        logger.info("Loaded %d navigation categories", len(self._entries_cache))
        return self._entries_cache

    # --- Redirects ---

    def get_redirects(self) -> list[Redirect]:
        rows = self.query(
            "SELECT url, action_data, action_code FROM wp_redirection_items ORDER BY id"
        )
        return [
            Redirect(source=row["url"], target=row["action_data"], code=row["action_code"])
            for row in rows
        ]
