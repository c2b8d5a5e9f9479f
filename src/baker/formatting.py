"""Content transform from raw WordPress post bodies to baked HTML.

Handles:
- [ref]...[/ref] footnote shortcodes
- Paragraph wrapping of bare text blocks
- Grapher iframe replacement with static previews
- Heading anchors and table of contents
- Excerpts and author bylines
"""

from __future__ import annotations

import re
import unicodedata

from bs4 import BeautifulSoup

from src.common.logging import setup_logging

from .grapher import GRAPHER_PATH, GrapherExports, find_export
from .models import FormattedContent, FormattedPost, FullPost, TocHeading

logger = setup_logging(module_name="baker.formatting")

FOOTNOTE_RE = re.compile(r"\[ref\](.*?)\[/ref\]", re.DOTALL)
BLOCK_SPLIT_RE = re.compile(r"(\n\s*\n)")
BLOCK_TAG_RE = re.compile(
    r"^(?:<!--|</?(?:p|div|h[1-6]|ul|ol|li|table|thead|tbody|tr|figure|iframe|blockquote|"
    r"pre|hr|section|aside|nav|header|footer|img|script|style)\b)",
    re.IGNORECASE,
)
# Container elements whose content may span blank lines; void tags are excluded
_CONTAINER_TAGS = (
    r"p|div|h[1-6]|ul|ol|li|table|thead|tbody|tr|td|th|figure|iframe|blockquote|"
    r"pre|section|aside|nav|header|footer|script|style"
)
BLOCK_OPEN_RE = re.compile(rf"<(?:{_CONTAINER_TAGS})\b[^>]*>", re.IGNORECASE)
BLOCK_CLOSE_RE = re.compile(rf"</(?:{_CONTAINER_TAGS})\s*>", re.IGNORECASE)

EXCERPT_WORDS = 30


def format_authors(authors: list[str]) -> str:
    """Join author names as 'A', 'A and B' or 'A, B and C'."""
    if not authors:
        return ""
    if len(authors) == 1:
        return authors[0]
    return f"{', '.join(authors[:-1])} and {authors[-1]}"


def slugify(text: str) -> str:
    text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    text = re.sub(r"[^\w\s-]", "", text).strip().lower()
    return re.sub(r"[\s_-]+", "-", text)


def _extract_footnotes(raw: str) -> tuple[str, list[str]]:
    footnotes: list[str] = []

    def replace(match: re.Match) -> str:
        footnotes.append(match.group(1).strip())
        n = len(footnotes)
        return f'<a class="ref" href="#note-{n}"><sup>{n}</sup></a>'

    return FOOTNOTE_RE.sub(replace, raw), footnotes


def _wrap_paragraphs(html: str) -> str:
    """Wrap bare text blocks in <p>, leaving anything inside an open block element alone."""
    parts = BLOCK_SPLIT_RE.split(html)
    pieces: list[str] = []
    depth = 0
    for i in range(0, len(parts), 2):
        block = parts[i]
        if depth > 0:
            # Inside an unclosed element: keep the original separator and text
            pieces[-1] += parts[i - 1] + block
        else:
            stripped = block.strip()
            if stripped:
                if BLOCK_TAG_RE.match(stripped):
                    pieces.append(stripped)
                else:
                    pieces.append(f"<p>{stripped}</p>")
        depth += len(BLOCK_OPEN_RE.findall(block)) - len(BLOCK_CLOSE_RE.findall(block))
        depth = max(depth, 0)
    return "\n".join(pieces)


def _parse_fragment(html: str) -> BeautifulSoup:
    # An explicit <body> keeps leading <style>/<script>/<link> out of the parser's <head>
    return BeautifulSoup(f"<body>{html}</body>", "lxml")


def _replace_grapher_iframes(
    soup: BeautifulSoup, grapher_exports: GrapherExports, baked_url: str,
) -> int:
    replaced = 0
    for iframe in soup.find_all("iframe"):
        src = iframe.get("src") or ""
        if GRAPHER_PATH not in src:
            continue
        export = find_export(grapher_exports, src, baked_url)
        if export is None:
            logger.warning("No grapher export for %s", src)
            continue

        figure = soup.new_tag("figure", attrs={"data-grapher-src": src, "class": "grapherPreview"})
        link = soup.new_tag("a", href=src, target="_blank")
        wrapper = soup.new_tag("div")
        img = soup.new_tag(
            "img", src=export.svg_url, width=str(export.width), height=str(export.height),
        )
        wrapper.append(img)
        link.append(wrapper)
        figure.append(link)
        iframe.replace_with(figure)
        replaced += 1
    return replaced


def _add_heading_ids(soup: BeautifulSoup) -> list[TocHeading]:
    toc: list[TocHeading] = []
    used: dict[str, int] = {}
    for heading in soup.find_all(["h2", "h3"]):
        text = heading.get_text(" ", strip=True)
        if not text:
            continue
        base = heading.get("id") or slugify(text) or "section"
        count = used.get(base, 0) + 1
        used[base] = count
        slug = base if count == 1 else f"{base}-{count}"
        heading["id"] = slug
        toc.append(TocHeading(text=text, slug=slug, is_subheading=heading.name == "h3"))
    return toc


def format_content(
    raw: str,
    grapher_exports: GrapherExports | None = None,
    baked_url: str = "",
) -> FormattedContent:
    """Transform a raw post body into baked HTML plus its footnotes."""
    html, footnotes = _extract_footnotes(raw or "")
    html = _wrap_paragraphs(html)

    soup = _parse_fragment(html)

    if grapher_exports:
        _replace_grapher_iframes(soup, grapher_exports, baked_url)
    toc = _add_heading_ids(soup)

    return FormattedContent(
        html=soup.body.decode_contents(),
        footnotes=footnotes,
        toc=toc,
    )


def make_excerpt(post: FullPost, max_words: int = EXCERPT_WORDS) -> str:
    """Post excerpt, or the opening words of its plain text."""
    if post.excerpt.strip():
        return post.excerpt.strip()

    text = FOOTNOTE_RE.sub("", post.content or "")
    soup = _parse_fragment(text)
    for tag in soup.find_all(["script", "style"]):
        tag.decompose()
    plain = soup.get_text(" ", strip=True)
    words = plain.split()
    if len(words) <= max_words:
        return " ".join(words)
    return " ".join(words[:max_words]) + "…"


def format_post(
    post: FullPost,
    grapher_exports: GrapherExports | None = None,
    baked_url: str = "",
) -> FormattedPost:
    """Format a FullPost for rendering."""
    content = format_content(post.content, grapher_exports, baked_url)
    return FormattedPost(
        id=post.id,
        type=post.type,
        slug=post.slug,
        title=post.title,
        date=post.date,
        modified_date=post.modified_date,
        authors=list(post.authors),
        html=content.html,
        footnotes=content.footnotes,
        excerpt=make_excerpt(post),
        toc=content.toc,
    )
