"""XML sitemap assembly.

Static entries supplied by the caller come first, in order, followed by
every dynamic note from the full listing. Dates are normalized to
``YYYY-MM-DD`` (UTC) and locations to a leading ``/``.
"""

from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from pydantic import TypeAdapter

from ..models import NoteSummary, SitemapEntry
from .api_client_core import _ClientLogger

SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"

logger = _ClientLogger("SITEMAP")

# lenient on fractional digits, where fromisoformat is not before 3.11
_DATETIME = TypeAdapter(datetime)


def today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def normalize_lastmod(value: Any, default: str | None = None) -> str:
    """Convert a note timestamp to ``YYYY-MM-DD``.

    Accepts ISO-8601 strings (``Z`` or offset suffixes), ``datetime``
    objects and epoch milliseconds (as numbers or digit strings).
    Unparsable values fall back to ``default`` (today when not given).
    """
    fallback = default or today()
    if value is None or value == "":
        return fallback

    try:
        if isinstance(value, datetime):
            moment = value
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            moment = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        elif isinstance(value, str) and value.strip().lstrip("-").isdigit():
            moment = datetime.fromtimestamp(int(value.strip()) / 1000, tz=timezone.utc)
        elif isinstance(value, str):
            moment = _DATETIME.validate_python(value.strip())
        else:
            raise TypeError(type(value).__name__)
    except (TypeError, ValueError, OverflowError, OSError) as e:
        logger.warning(f"Unparsable sitemap date {value!r} ({e}); using {fallback}")
        return fallback

    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.date().isoformat()


def normalize_loc(loc: str | None) -> str:
    loc = (loc or "").strip()
    if not loc:
        return "/"
    return loc if loc.startswith("/") else "/" + loc


def collect_static_entries(static_pages: Iterable[Any], default_date: str | None = None) -> list[SitemapEntry]:
    """Accept bare path strings, mappings with ``loc``, or ``SitemapEntry``.

    Anything else is logged and skipped.
    """
    stamp = default_date or today()
    entries: list[SitemapEntry] = []
    for page in static_pages:
        if isinstance(page, str):
            entries.append(SitemapEntry(loc=page.strip(), lastmod=stamp))
        elif isinstance(page, SitemapEntry) and page.loc:
            entries.append(SitemapEntry(loc=page.loc, lastmod=page.lastmod or stamp))
        elif isinstance(page, Mapping) and page.get("loc"):
            entries.append(SitemapEntry(loc=str(page["loc"]), lastmod=str(page.get("lastmod") or stamp)))
        else:
            logger.warning(
                f"Sitemap static path passed is not a string or object with loc, lastmod properties: {page!r}"
            )
    return entries


def collect_dynamic_entries(notes: Iterable[NoteSummary], default_date: str | None = None) -> list[SitemapEntry]:
    return [
        SitemapEntry(loc=note.path or "/", lastmod=normalize_lastmod(note.modified, default_date))
        for note in notes
    ]


def render_sitemap(site_url: str, entries: Iterable[SitemapEntry]) -> str:
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<urlset xmlns="{SITEMAP_NAMESPACE}">',
    ]
    for entry in entries:
        lines.append("  <url>")
        lines.append(f"    <loc>{site_url}{normalize_loc(entry.loc)}</loc>")
        lines.append(f"    <lastmod>{entry.lastmod}</lastmod>")
        lines.append("  </url>")
    lines.append("</urlset>")
    return "\n".join(lines) + "\n"


def build_sitemap(
    site_url: str,
    static_pages: Iterable[Any],
    notes: Iterable[NoteSummary],
    default_date: str | None = None,
) -> str:
    """Merge static pages and dynamic notes into sitemap XML."""
    entries = collect_static_entries(static_pages, default_date)
    entries.extend(collect_dynamic_entries(notes, default_date))
    return render_sitemap(site_url, entries)
