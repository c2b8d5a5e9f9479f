"""Project configuration and paths.

Loads settings from config/settings.yaml, then applies environment
variable overrides (a project-root .env is loaded first).
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

# === Paths ===
PROJECT_ROOT = Path(__file__).parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"
DATA_DIR = PROJECT_ROOT / "data"

# Load .env from project root
load_dotenv(PROJECT_ROOT / ".env")


DEFAULT_REDIRECTS = [
    "/feed /atom.xml 302",
    "/entries /#entries 302",
    "/chart-builder/* /grapher/:splat 301",
    "/grapher/public/* /grapher/:splat 301",
    "/grapher/view/* /grapher/:splat 301",
    "/wp-admin/* https://owid.cloud/wp-admin/:splat 302",
    "/wp-login.php https://owid.cloud/wp-login.php 302",
    "/grapher/admin/* https://owid.cloud/grapher/admin/:splat 302",
    "/roser/* https://www.maxroser.com/roser/:splat 302",
    "/wp-content/uploads/nvd3/* https://www.maxroser.com/owidUploads/nvd3/:splat 302",
    "/wp-content/uploads/datamaps/* https://www.maxroser.com/owidUploads/datamaps/:splat 302",
    "/grapher/* https://owid-grapher.netlify.com/grapher/:splat 200",
    "/mispy/sdgs/* https://owid-sdgs.netlify.com/:splat 302",
    "/slides/Max_PPT_presentations/* https://www.maxroser.com/slides/Max_PPT_presentations/:splat 302",
    "/slides/Max_Interactive_Presentations/* https://www.maxroser.com/slides/Max_Interactive_Presentations/:splat 302",
]


class SiteSettings(BaseModel):
    """Public site identity and output layout."""
    model_config = ConfigDict(validate_assignment=True)

    title: str = "Our World in Data"
    subtitle: str = "Living conditions around the world are changing rapidly. Explore how and why."
    baked_dir: str = str(DATA_DIR / "baked")
    baked_url: str = "https://ourworldindata.org"
    static_root: str = "/wp-content/themes/owid-theme"
    citation_author: str = "Max Roser"
    blog_posts_per_page: int = Field(default=21, gt=0)
    feed_size: int = Field(default=10, gt=0)
    static_redirects: list[str] = Field(default_factory=lambda: list(DEFAULT_REDIRECTS))
    # Baked pages under these prefixes are never pruned
    preserved_prefixes: list[str] = Field(default_factory=lambda: ["wp-", "slides", "blog"])
    preserved_pages: list[str] = Field(default_factory=lambda: ["index", "identifyadmin", "404"])


class WordpressSettings(BaseModel):
    """Location of the WordPress install whose assets are mirrored."""
    model_config = ConfigDict(validate_assignment=True)

    wordpress_dir: str = str(PROJECT_ROOT / "wordpress")
    wordpress_url: str = "http://localhost:8080"
    theme: str = "owid-theme"

    @property
    def theme_dir(self) -> Path:
        return Path(self.wordpress_dir) / "wp-content" / "themes" / self.theme


class DatabaseSettings(BaseModel):
    """WordPress content store connection settings."""
    model_config = ConfigDict(validate_assignment=True)

    db_path: str = str(DATA_DIR / "wordpress.db")


class GrapherSettings(BaseModel):
    """External chart baker invoked for embedded grapher URLs."""
    model_config = ConfigDict(validate_assignment=True)

    # Empty means chart baking is skipped; existing exports are still used
    bake_command: list[str] = Field(default_factory=list)
    exports_subdir: str = "exports"


class DeploySettings(BaseModel):
    """Git deployment of the baked directory."""
    model_config = ConfigDict(validate_assignment=True)

    remote: str = "origin"
    branch: str = "master"
    add_chunk_size: int = Field(default=100, gt=0)


class Settings(BaseModel):
    """Top-level application settings."""
    model_config = ConfigDict(validate_assignment=True)

    site: SiteSettings = Field(default_factory=SiteSettings)
    wordpress: WordpressSettings = Field(default_factory=WordpressSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    grapher: GrapherSettings = Field(default_factory=GrapherSettings)
    deploy: DeploySettings = Field(default_factory=DeploySettings)

    @classmethod
    def load(cls, settings_path: Path | None = None) -> Settings:
        """Load settings from config/settings.yaml, falling back to defaults.

        Environment variables take precedence over the YAML file.
        """
        settings_path = settings_path or CONFIG_DIR / "settings.yaml"
        data: dict = {}
        if settings_path.exists():
            with open(settings_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        settings = cls(**data)
        settings.apply_env()
        settings.resolve_paths()
        return settings

    def resolve_paths(self, root: Path = PROJECT_ROOT) -> None:
        """Resolve relative filesystem paths against the project root."""
        self.site.baked_dir = str(_resolve(self.site.baked_dir, root))
        self.wordpress.wordpress_dir = str(_resolve(self.wordpress.wordpress_dir, root))
        self.database.db_path = str(_resolve(self.database.db_path, root))

    def apply_env(self) -> None:
        """Override values from environment variables."""
        if baked_dir := os.getenv("BAKED_DIR"):
            self.site.baked_dir = baked_dir
        if baked_url := os.getenv("BAKED_URL"):
            self.site.baked_url = baked_url.rstrip("/")
        if per_page := os.getenv("BLOG_POSTS_PER_PAGE"):
            self.site.blog_posts_per_page = int(per_page)
        if wp_dir := os.getenv("WORDPRESS_DIR"):
            self.wordpress.wordpress_dir = wp_dir
        if wp_url := os.getenv("WORDPRESS_URL"):
            self.wordpress.wordpress_url = wp_url
        if db_path := os.getenv("WORDPRESS_DB_PATH"):
            self.database.db_path = db_path
        if command := os.getenv("GRAPHER_BAKE_COMMAND"):
            self.grapher.bake_command = command.split()
        if branch := os.getenv("DEPLOY_BRANCH"):
            self.deploy.branch = branch


def _resolve(path: str, root: Path) -> Path:
    p = Path(path)
    if p.is_absolute():
        return p
    return root / p


# Singleton settings instance
settings = Settings.load()
