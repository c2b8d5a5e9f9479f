# Baker
# Bakes the WordPress site into static files and deploys them with git

from .baker import WordpressBaker
from .formatting import format_authors, format_content, format_post
from .grapher import collect_grapher_urls, extract_grapher_urls, get_grapher_exports_by_url
from .models import (
    CategoryWithEntries,
    EntryMeta,
    FormattedContent,
    FormattedPost,
    FullPost,
    GrapherExport,
    Redirect,
    TocHeading,
)
from .shell import CommandResult, ShellRunner
from .wpdb import WordpressDB

__all__ = [
    "WordpressBaker",
    "format_authors",
    "format_content",
    "format_post",
    "collect_grapher_urls",
    "extract_grapher_urls",
    "get_grapher_exports_by_url",
    "CategoryWithEntries",
    "EntryMeta",
    "FormattedContent",
    "FormattedPost",
    "FullPost",
    "GrapherExport",
    "Redirect",
    "TocHeading",
    "CommandResult",
    "ShellRunner",
    "WordpressDB",
]
