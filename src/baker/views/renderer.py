"""
Site renderer for baked pages.
Handles Jinja2 template loading and rendering of every page type.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from src.common.config import Settings, settings as default_settings

from ..formatting import format_authors
from ..models import CategoryWithEntries, FormattedPost


def iso_date(value: datetime) -> str:
    """Atom timestamp; naive datetimes are taken as UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def citation_date(value: datetime) -> str:
    return value.strftime("%Y/%m/%d")


def display_date(value: datetime) -> str:
    return f"{value.strftime('%B')} {value.day}, {value.year}"


class SiteRenderer:
    """
    Renders baked pages using Jinja2 templates.

    Usage:
        renderer = SiteRenderer(settings)
        html = renderer.render_article(post, entries)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        templates_dir: Optional[Path] = None,
    ):
        """
        Initialize the site renderer.

        Args:
            settings: Site settings. Defaults to the project settings.
            templates_dir: Path to templates directory.
                          Defaults to ./templates relative to this file.
        """
        if templates_dir is None:
            templates_dir = Path(__file__).parent / "templates"

        self.settings = settings or default_settings
        self.templates_dir = templates_dir
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["iso_date"] = iso_date
        self.env.filters["citation_date"] = citation_date
        self.env.filters["display_date"] = display_date
        self.env.filters["format_authors"] = format_authors
        self.env.globals["site"] = self.settings.site

    def render(self, template_name: str, context: dict[str, Any]) -> str:
        """
        Render a single template.

        Args:
            template_name: Template file name (e.g., "front_page.html")
            context: Template variables

        Returns:
            Rendered string
        """
        template = self.env.get_template(template_name)
        return template.render(**context)

    def citation_authors(self, authors: list[str]) -> list[str]:
        """Citation authors always include the site's principal author."""
        site_author = self.settings.site.citation_author
        if site_author and site_author not in authors:
            return [*authors, site_author]
        return list(authors)

    def render_article(
        self, post: FormattedPost, entries: list[CategoryWithEntries],
    ) -> str:
        return self.render("article_page.html", {
            "post": post,
            "entries": entries,
            "citation_authors": self.citation_authors(post.authors),
        })

    def render_blog_post(
        self, post: FormattedPost, entries: list[CategoryWithEntries],
    ) -> str:
        return self.render("blog_post_page.html", {
            "post": post,
            "entries": entries,
            "citation_authors": self.citation_authors(post.authors),
        })

    def render_post(
        self, post: FormattedPost, entries: list[CategoryWithEntries],
    ) -> str:
        """Blog posts and entry pages use different layouts."""
        if post.type == "post":
            return self.render_blog_post(post, entries)
        return self.render_article(post, entries)

    def render_front_page(
        self, posts: list[FormattedPost], entries: list[CategoryWithEntries],
    ) -> str:
        return self.render("front_page.html", {"posts": posts, "entries": entries})

    def render_blog_page(
        self,
        posts: list[FormattedPost],
        page_num: int,
        num_pages: int,
        entries: list[CategoryWithEntries],
    ) -> str:
        """
        Render one page of the blog index.

        Args:
            posts: Posts shown on this page
            page_num: 1-based page number
            num_pages: Total number of blog pages
            entries: Navigation categories for the site header

        Returns:
            Rendered HTML string
        """
        return self.render("blog_index.html", {
            "posts": posts,
            "page_num": page_num,
            "num_pages": num_pages,
            "entries": entries,
        })

    def render_feed(
        self, posts: list[FormattedPost], updated: Optional[datetime] = None,
    ) -> str:
        """Render the Atom feed; `updated` defaults to the newest post date."""
        if updated is None:
            updated = posts[0].date if posts else datetime.now(timezone.utc)
        return self.render("atom.xml", {"posts": posts, "updated": updated})
