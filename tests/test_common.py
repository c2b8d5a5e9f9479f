"""Tests for shared common modules: config, database, logging."""

import logging
from pathlib import Path

import pytest

from src.common.config import DEFAULT_REDIRECTS, Settings
from src.common.database import get_connection, init_db
from src.common.logging import resolve_level, setup_logging


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.site.blog_posts_per_page == 21
        assert settings.site.feed_size == 10
        assert settings.site.static_redirects == DEFAULT_REDIRECTS
        assert settings.deploy.branch == "master"
        assert settings.grapher.bake_command == []

    def test_load_yaml(self, tmp_path, monkeypatch):
        for var in ["BAKED_DIR", "BAKED_URL", "BLOG_POSTS_PER_PAGE", "WORDPRESS_DB_PATH"]:
            monkeypatch.delenv(var, raising=False)
        path = tmp_path / "settings.yaml"
        path.write_text(
            "site:\n"
            "  title: Test Site\n"
            "  baked_dir: /srv/baked\n"
            "  blog_posts_per_page: 5\n"
            "database:\n"
            "  db_path: data/test.db\n",
            encoding="utf-8",
        )
        settings = Settings.load(path)
        assert settings.site.title == "Test Site"
        assert settings.site.baked_dir == "/srv/baked"
        assert settings.site.blog_posts_per_page == 5
        # Relative paths resolve against the project root
        assert Path(settings.database.db_path).is_absolute()
        assert settings.database.db_path.endswith(str(Path("data") / "test.db"))

    def test_missing_file_uses_defaults(self, tmp_path):
        settings = Settings.load(tmp_path / "absent.yaml")
        assert settings.site.title == "Our World in Data"

    def test_env_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("BAKED_DIR", "/tmp/baked")
        monkeypatch.setenv("BAKED_URL", "https://example.org/")
        monkeypatch.setenv("BLOG_POSTS_PER_PAGE", "7")
        monkeypatch.setenv("GRAPHER_BAKE_COMMAND", "node bake.js")
        monkeypatch.setenv("DEPLOY_BRANCH", "live")

        settings = Settings.load(tmp_path / "absent.yaml")
        assert settings.site.baked_dir == "/tmp/baked"
        assert settings.site.baked_url == "https://example.org"
        assert settings.site.blog_posts_per_page == 7
        assert settings.grapher.bake_command == ["node", "bake.js"]
        assert settings.deploy.branch == "live"

    def test_env_page_size_validated(self, tmp_path, monkeypatch):
        monkeypatch.setenv("BLOG_POSTS_PER_PAGE", "0")
        with pytest.raises(ValueError):
            Settings.load(tmp_path / "absent.yaml")

    def test_env_page_size_not_a_number(self, tmp_path, monkeypatch):
        monkeypatch.setenv("BLOG_POSTS_PER_PAGE", "many")
        with pytest.raises(ValueError):
            Settings.load(tmp_path / "absent.yaml")

    def test_invalid_page_size(self):
        with pytest.raises(Exception):
            Settings(site={"blog_posts_per_page": 0})

    def test_theme_dir(self):
        settings = Settings()
        settings.wordpress.wordpress_dir = "/var/www/wp"
        assert settings.wordpress.theme_dir == Path("/var/www/wp/wp-content/themes/owid-theme")


class TestDatabase:
    def test_init_creates_wordpress_tables(self, tmp_path):
        db_path = str(tmp_path / "wp.db")
        init_db(db_path)
        conn = get_connection(db_path)
        try:
            tables = {
                row["name"]
                for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            }
        finally:
            conn.close()
        assert {
            "wp_posts", "wp_users", "wp_terms", "wp_term_taxonomy",
            "wp_term_relationships", "wp_redirection_items",
        } <= tables

    def test_init_is_idempotent(self, tmp_path):
        db_path = str(tmp_path / "wp.db")
        init_db(db_path)
        init_db(db_path)

    def test_row_factory(self, wp_db_path):
        conn = get_connection(wp_db_path)
        try:
            row = conn.execute("SELECT post_name FROM wp_posts WHERE ID = 1").fetchone()
        finally:
            conn.close()
        assert row["post_name"] == "life-expectancy"


class TestLogging:
    @pytest.fixture(autouse=True)
    def restore_level(self):
        root = logging.getLogger("baker")
        level = root.level
        yield
        root.setLevel(level)

    def test_module_loggers_share_one_handler(self):
        logger = setup_logging(module_name="baker.test")
        again = setup_logging(module_name="baker.test")
        assert logger is again
        assert logger.handlers == []
        assert len(logging.getLogger("baker").handlers) == 1
        assert logging.getLogger("baker").propagate is False

    def test_foreign_name_nested_under_baker(self):
        assert setup_logging(module_name="scripts").name == "baker.scripts"

    def test_resolve_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert resolve_level() == logging.DEBUG
        assert resolve_level("warning") == logging.WARNING
        assert resolve_level(logging.ERROR) == logging.ERROR

    def test_unknown_level(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            resolve_level("chatty")

    def test_explicit_level_applies_to_configured_logger(self):
        setup_logging(module_name="baker.test")
        logger = setup_logging(level="DEBUG", module_name="baker.test")
        assert logger.getEffectiveLevel() == logging.DEBUG
