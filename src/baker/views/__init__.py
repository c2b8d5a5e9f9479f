# Views
# Jinja2 page templates and the renderer that fills them

from .renderer import SiteRenderer, citation_date, display_date, iso_date

__all__ = [
    "SiteRenderer",
    "citation_date",
    "display_date",
    "iso_date",
]
