"""Grapher chart embeds.

Posts embed interactive charts as iframes pointing at /grapher/<slug>.
The grapher bakes a static SVG preview per chart version into
{baked_dir}/exports as {slug}_v{version}_{width}x{height}.svg; those
previews replace the iframes in baked pages.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from src.common.config import Settings
from src.common.logging import setup_logging

from .models import GrapherExport
from .shell import CommandResult, ShellRunner

logger = setup_logging(module_name="baker.grapher")

GRAPHER_PATH = "/grapher/"
EXPORT_FILENAME_RE = re.compile(r"^(?P<slug>.+)_v(?P<version>\d+)_(?P<width>\d+)x(?P<height>\d+)\.svg$")

GrapherExports = dict[str, GrapherExport]


def extract_grapher_urls(html: str) -> list[str]:
    """Return grapher iframe sources in document order."""
    if not html:
        return []
    soup = BeautifulSoup(html, "lxml")
    return [
        iframe["src"]
        for iframe in soup.find_all("iframe")
        if GRAPHER_PATH in (iframe.get("src") or "")
    ]


def collect_grapher_urls(contents: Iterable[str]) -> list[str]:
    """Unique grapher URLs across many post bodies, first-seen order."""
    seen: dict[str, None] = {}
    for html in contents:
        for url in extract_grapher_urls(html):
            seen.setdefault(url, None)
    return list(seen)


def chart_slug(url: str) -> str:
    """Chart slug from a grapher URL, ignoring query string and trailing slash."""
    path = urlparse(url).path
    if GRAPHER_PATH not in path:
        return ""
    return path.split(GRAPHER_PATH, 1)[1].strip("/")


def export_key(url: str, baked_url: str) -> str:
    return f"{baked_url.rstrip('/')}/grapher/{chart_slug(url)}"


def find_export(exports: GrapherExports, url: str, baked_url: str) -> GrapherExport | None:
    """Look up the preview for an embedded chart URL."""
    if not chart_slug(url):
        return None
    return exports.get(export_key(url, baked_url))


def bake_grapher_urls(
    urls: list[str],
    settings: Settings,
    shell: ShellRunner | None = None,
) -> CommandResult | None:
    """Ask the grapher to bake previews for the given chart URLs.

    The grapher alone knows the current version of each chart, so
    versioning is left to it.
    """
    if not urls:
        logger.info("No grapher embeds found, skipping chart bake")
        return None
    command = settings.grapher.bake_command
    if not command:
        logger.info("No grapher bake command configured, using existing exports")
        return None

    shell = shell or ShellRunner()
    logger.info("Baking %d grapher charts", len(urls))
    return shell.run([*command, *urls])


def get_grapher_exports_by_url(settings: Settings) -> GrapherExports:
    """Index baked chart previews by chart URL, newest version wins."""
    baked_url = settings.site.baked_url.rstrip("/")
    subdir = settings.grapher.exports_subdir
    exports_dir = Path(settings.site.baked_dir) / subdir

    exports: GrapherExports = {}
    if not exports_dir.is_dir():
        return exports

    for svg_path in sorted(exports_dir.glob("*.svg")):
        match = EXPORT_FILENAME_RE.match(svg_path.name)
        if not match:
            continue
        url = f"{baked_url}/grapher/{match['slug']}"
        export = GrapherExport(
            url=url,
            svg_url=f"{baked_url}/{subdir}/{svg_path.name}",
            version=int(match["version"]),
            width=int(match["width"]),
            height=int(match["height"]),
        )
        current = exports.get(url)
        if current is None or export.version > current.version:
            exports[url] = export

    logger.info("Found %d grapher exports", len(exports))
    return exports
