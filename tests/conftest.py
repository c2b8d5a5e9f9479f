"""Shared test fixtures for the site baker."""

import sys
from pathlib import Path

import pytest

# Ensure src is importable
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.common.config import Settings
from src.common.database import get_connection, init_db
from src.baker.wpdb import WordpressDB


LIFE_EXPECTANCY_CONTENT = """Life expectancy has doubled.[ref]Riley (2005).[/ref]

<h2>Rising life expectancy</h2>

<iframe src="https://ourworldindata.org/grapher/life-expectancy?tab=map" width="100%" height="600"></iframe>

Since 1900 it has risen everywhere.[ref]UN WPP 2017.[/ref]

<h2>Sources</h2>

<h3>Data</h3>"""

POSTS = [
    # ID, author, date, content, title, excerpt, status, name, modified, menu_order, type
    (1, 1, "2017-05-01 10:00:00", LIFE_EXPECTANCY_CONTENT, "Life Expectancy", "",
     "publish", "life-expectancy", "2018-02-01 09:30:00", 1, "page"),
    (2, 1, "2016-11-01 10:00:00",
     '<p>Child deaths have fallen.</p>\n<iframe src="/grapher/child-mortality"></iframe>',
     "Child Mortality", "", "publish", "child-mortality", "2017-01-01 00:00:00", 0, "page"),
    (3, 1, "2018-03-01 08:00:00", "We added new data on <b>poverty</b>.", "New data on poverty",
     "New data available.", "publish", "new-data", "2018-03-02 08:00:00", 0, "post"),
    (4, 1, "2018-01-15 12:00:00", "An older post.", "Older post", "",
     "publish", "older-post", "2018-01-15 12:00:00", 0, "post"),
    (5, 1, "2015-01-01 00:00:00", "", "Blog", "", "publish", "blog", "2015-01-01 00:00:00", 0, "page"),
    (6, 1, "2018-04-01 00:00:00", "Not ready.", "Draft post", "", "draft", "draft-post",
     "2018-04-01 00:00:00", 0, "post"),
    (7, 1, "2015-01-01 00:00:00", "<p>About us.</p>", "About", "", "publish", "about",
     "2015-01-01 00:00:00", 0, "page"),
]


def seed_wordpress(db_path: str) -> None:
    """Populate a fresh WordPress store with a small site."""
    init_db(db_path)
    conn = get_connection(db_path)
    try:
        conn.execute(
            "INSERT INTO wp_users (ID, user_login, display_name) VALUES (1, 'max', 'Max Roser')"
        )
        conn.executemany(
            "INSERT INTO wp_posts (ID, post_author, post_date, post_content, post_title, "
            "post_excerpt, post_status, post_name, post_modified, menu_order, post_type) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            POSTS,
        )
        conn.executemany(
            "INSERT INTO wp_terms (term_id, name, slug) VALUES (?, ?, ?)",
            [
                (1, "Health", "health"),
                (2, "Uncategorized", "uncategorized"),
                (3, "Max Roser", "cap-max-roser"),
                (4, "Esteban Ortiz-Ospina", "cap-esteban"),
            ],
        )
        conn.executemany(
            "INSERT INTO wp_term_taxonomy (term_taxonomy_id, term_id, taxonomy) VALUES (?, ?, ?)",
            [(1, 1, "category"), (2, 2, "category"), (3, 3, "author"), (4, 4, "author")],
        )
        conn.executemany(
            "INSERT INTO wp_term_relationships (object_id, term_taxonomy_id, term_order) "
            "VALUES (?, ?, ?)",
            [
                (1, 1, 0), (2, 1, 0), (7, 2, 0),
                (1, 4, 0), (1, 3, 1),
                (3, 3, 0),
            ],
        )
        conn.execute(
            "INSERT INTO wp_redirection_items (url, action_data, action_code) "
            "VALUES ('/old-page', '/new-page', 301)"
        )
        conn.commit()
    finally:
        conn.close()


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def wp_db_path(tmp_path) -> str:
    """Path to a seeded temporary WordPress database."""
    db_path = str(tmp_path / "wordpress.db")
    seed_wordpress(db_path)
    return db_path


@pytest.fixture
def test_settings(tmp_path, wp_db_path) -> Settings:
    """Settings bound to the temporary database and directories."""
    settings = Settings()
    settings.site.baked_dir = str(tmp_path / "baked")
    settings.site.baked_url = "https://ourworldindata.org"
    settings.wordpress.wordpress_dir = str(tmp_path / "wordpress")
    settings.database.db_path = wp_db_path
    return settings


@pytest.fixture
def wpdb(test_settings):
    """WordpressDB over the seeded database."""
    db = WordpressDB(test_settings)
    yield db
    db.end()
