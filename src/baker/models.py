"""Data models for the site baker."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class FullPost:
    """A published WordPress post or page with its authorship resolved."""
    id: int
    type: str  # post | page
    slug: str
    title: str
    date: datetime
    modified_date: datetime
    authors: list[str] = field(default_factory=list)
    content: str = ""
    excerpt: str = ""


@dataclass
class EntryMeta:
    """A page listed under a category in the site navigation."""
    slug: str
    title: str


@dataclass
class CategoryWithEntries:
    """Navigation category with its published entry pages."""
    name: str
    slug: str
    entries: list[EntryMeta] = field(default_factory=list)


@dataclass
class Redirect:
    """One line of the _redirects file."""
    source: str
    target: str
    code: int

    def to_line(self) -> str:
        return f"{self.source} {self.target} {self.code}"


@dataclass
class TocHeading:
    """Heading collected for an article's table of contents."""
    text: str
    slug: str
    is_subheading: bool = False


@dataclass
class FormattedContent:
    """Transformed post body plus the footnotes pulled out of it."""
    html: str
    footnotes: list[str] = field(default_factory=list)
    toc: list[TocHeading] = field(default_factory=list)


@dataclass
class FormattedPost:
    """Post ready for template rendering."""
    id: int
    type: str
    slug: str
    title: str
    date: datetime
    modified_date: datetime
    authors: list[str]
    html: str
    footnotes: list[str] = field(default_factory=list)
    excerpt: str = ""
    toc: list[TocHeading] = field(default_factory=list)


@dataclass
class GrapherExport:
    """Static SVG preview of a grapher chart baked by the grapher."""
    url: str  # chart URL as embedded in posts
    svg_url: str
    version: int
    width: int
    height: int
