"""Static site baker for a WordPress-backed site.

Orchestrates the complete bake:
redirects -> blog index -> Atom feed -> assets -> chart embeds
-> front page -> posts and pages

Every file written or deleted is staged so `deploy` can commit exactly
what changed in the baked directory's git checkout.

Usage:
    baker = WordpressBaker()
    baker.bake_all()
    baker.deploy("Update site")
    baker.end()
"""

from __future__ import annotations

import math
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from src.common.config import Settings, settings as default_settings
from src.common.logging import setup_logging

from .formatting import format_post
from .grapher import (
    GrapherExports,
    bake_grapher_urls,
    collect_grapher_urls,
    get_grapher_exports_by_url,
)
from .models import CategoryWithEntries, FullPost
from .shell import CommandResult, ShellRunner
from .views import SiteRenderer
from .wpdb import WordpressDB

logger = setup_logging(module_name="baker.baker")

# Slug of the WordPress page that stands in for the paginated blog index
BLOG_SLUG = "blog"


class WordpressBaker:
    """Bakes the WordPress site into {baked_dir} and deploys it with git.

    Steps (see bake_all):
    1. _redirects file from static rules and the redirection plugin table
    2. Paginated blog index
    3. Atom feed of recent posts
    4. rsync of theme and upload assets
    5. Grapher chart previews for embedded charts
    6. Front page
    7. Every published post and page, pruning pages no longer published
    """

    def __init__(
        self,
        settings: Settings | None = None,
        force_update: bool = False,
        db: WordpressDB | None = None,
        shell: ShellRunner | None = None,
        renderer: SiteRenderer | None = None,
        max_workers: int = 8,
    ):
        self.settings = settings or default_settings
        self.force_update = force_update
        self.db = db or WordpressDB(self.settings)
        self.shell = shell or ShellRunner()
        self.renderer = renderer or SiteRenderer(self.settings)
        self.max_workers = max_workers
        self.grapher_exports: GrapherExports = {}
        self.staged_files: list[str] = []
        self._stage_lock = threading.Lock()

    @property
    def baked_dir(self) -> Path:
        return Path(self.settings.site.baked_dir)

    @property
    def baked_url(self) -> str:
        return self.settings.site.baked_url.rstrip("/")

    # --- Bake steps ---

    def bake_redirects(self) -> None:
        redirects = list(self.settings.site.static_redirects)
        redirects.extend(r.to_line() for r in self.db.get_redirects())
        self.stage_write(self.baked_dir / "_redirects", "\n".join(redirects))

    def bake_embeds(self) -> None:
        """Bake previews for every chart embedded in a published post or page."""
        grapher_urls = collect_grapher_urls(self.db.get_post_contents())

        # The grapher handles versioning as only it knows the current version of charts
        bake_grapher_urls(grapher_urls, self.settings, shell=self.shell)

        self.grapher_exports = get_grapher_exports_by_url(self.settings)

    def bake_post(self, post: FullPost, entries: list[CategoryWithEntries]) -> None:
        """Bake an individual post or page."""
        formatted = format_post(post, self.grapher_exports, self.baked_url)
        html = self.renderer.render_post(formatted, entries)
        self.stage_write(self.baked_dir / f"{post.slug}.html", html)

    def bake_posts(self) -> None:
        """Bake all published blog posts and entry pages."""
        posts = []
        for row in self.db.get_published_rows():
            # The blog index is baked separately
            if row["post_name"] == BLOG_SLUG:
                continue
            posts.append(self.db.get_full_post(row))

        entries = self.db.get_entries_by_category()
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            list(executor.map(lambda post: self.bake_post(post, entries), posts))

        self.remove_stale_pages({post.slug for post in posts})

    def remove_stale_pages(self, post_slugs: set[str]) -> list[str]:
        """Delete previously baked pages that are no longer in the database."""
        removed = []
        for slug in self.existing_slugs():
            if slug in post_slugs:
                continue
            out_path = self.baked_dir / f"{slug}.html"
            out_path.unlink()
            self.stage(out_path, f"DELETING {out_path}")
            removed.append(slug)
        return removed

    def existing_slugs(self) -> list[str]:
        """Slugs of baked pages that are owned by posts or pages."""
        site = self.settings.site
        slugs = []
        for path in sorted(self.baked_dir.glob("**/*.html")):
            slug = path.relative_to(self.baked_dir).with_suffix("").as_posix()
            if slug.startswith(tuple(site.preserved_prefixes)):
                continue
            if slug in site.preserved_pages:
                continue
            slugs.append(slug)
        return slugs

    def bake_front_page(self) -> None:
        posts = [
            format_post(post)
            for post in self.db.get_recent_posts(self.settings.site.feed_size)
        ]
        html = self.renderer.render_front_page(posts, self.db.get_entries_by_category())
        self.stage_write(self.baked_dir / "index.html", html)

    def bake_blog(self) -> None:
        """Bake the paginated blog index: /blog, /blog/page/2, ..."""
        all_posts = [format_post(post) for post in self.db.get_blog_index()]
        per_page = self.settings.site.blog_posts_per_page
        num_pages = math.ceil(len(all_posts) / per_page)
        entries = self.db.get_entries_by_category()

        for i in range(1, num_pages + 1):
            slug = BLOG_SLUG if i == 1 else f"{BLOG_SLUG}/page/{i}"
            page_posts = all_posts[(i - 1) * per_page:i * per_page]
            html = self.renderer.render_blog_page(page_posts, i, num_pages, entries)
            self.stage_write(self.baked_dir / f"{slug}.html", html)

    def bake_rss(self) -> None:
        posts = [
            format_post(post)
            for post in self.db.get_recent_posts(self.settings.site.feed_size)
        ]
        self.stage_write(self.baked_dir / "atom.xml", self.renderer.render_feed(posts))

    def bake_assets(self) -> None:
        """Mirror theme pages, uploads and includes from the WordPress install."""
        wp_dir = Path(self.settings.wordpress.wordpress_dir)
        theme_dir = self.settings.wordpress.theme_dir
        baked = f"{self.baked_dir}/"

        self.rsync(theme_dir / "identifyadmin.html", baked)
        self.rsync(wp_dir / "wp-content", baked)
        self.rsync(wp_dir / "wp-includes", baked)
        favicons = sorted(wp_dir.glob("favicon*"))
        if favicons:
            self.rsync(*favicons, baked)
        self.rsync(f"{wp_dir}/slides/", self.baked_dir / "slides")
        self.rsync(theme_dir / "404.html", baked)

    def rsync(self, *paths) -> CommandResult:
        return self.exec(["rsync", "-havz", "--delete", *paths])

    def bake_all(self) -> None:
        self.bake_redirects()
        self.bake_blog()
        self.bake_rss()
        self.bake_assets()
        self.bake_embeds()
        self.bake_front_page()
        self.bake_posts()

    # --- Staging and deployment ---

    def stage_write(self, out_path: Path, content: str) -> None:
        out_path = Path(out_path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(content, encoding="utf-8")
        self.stage(out_path)

    def stage(self, out_path: Path, msg: Optional[str] = None) -> None:
        logger.info(msg or str(out_path))
        with self._stage_lock:
            self.staged_files.append(str(out_path))

    def exec(self, args: list, cwd: Optional[Path] = None) -> CommandResult:
        return self.shell.run(args, cwd=cwd)

    def repo_path(self, path: str) -> str:
        """Path of a staged file relative to the baked checkout."""
        try:
            return Path(path).relative_to(self.baked_dir).as_posix()
        except ValueError:
            return str(path)

    def deploy(
        self,
        commit_msg: str,
        author_email: Optional[str] = None,
        author_name: Optional[str] = None,
    ) -> bool:
        """Commit the baked directory and push it.

        Returns:
            True when both the commit and the push succeeded.
        """
        deploy = self.settings.deploy
        cwd = self.baked_dir
        size = deploy.add_chunk_size

        staged = [self.repo_path(path) for path in self.staged_files]
        for start in range(0, len(staged), size):
            files = staged[start:start + size]
            self.exec(["git", "add", "-A", *files], cwd=cwd)

        self.exec(["git", "add", "-A", "."], cwd=cwd)

        commit = ["git", "commit"]
        if author_email and author_name:
            commit.append(f"--author={author_name} <{author_email}>")
        commit.extend(["-a", "-m", commit_msg])
        if not self.exec(commit, cwd=cwd).ok:
            logger.warning("Nothing committed, skipping push")
            return False

        return self.exec(["git", "push", deploy.remote, deploy.branch], cwd=cwd).ok

    def end(self) -> None:
        self.db.end()
