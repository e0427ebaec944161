"""SEO <head> fragment for a note.

Values are interpolated as-is; callers must sanitize free-text fields.
"""

from ..models import HeadInfo, Note

HEAD_TEMPLATE = """
      <title>{title}</title>
      <meta name="description" content="{description}">
      <link rel="canonical" href="https://{host}{path}">

      <!-- Open Graph / Facebook -->
      <meta property="og:type" content="article">
      <meta property="og:title" content="{title}">
      <meta property="og:description" content="{description}">
      <meta property="og:url" content="https://{host}{path}">
      <meta property="og:image" content="{imgUrl}">

      <!-- Twitter -->
      <meta name="twitter:card" content="summary_large_image">
      <meta name="twitter:title" content="{title}">
      <meta name="twitter:description" content="{description}">
      <meta name="twitter:image" content="{imgUrl}">
      <meta name="twitter:imageAlt" content="{title}">
    """


def head_info(note: Note | None, host: str | None = None) -> HeadInfo:
    if note is None:
        return HeadInfo(host=host or "")
    return HeadInfo(
        title=note.title or "",
        description=note.description or "",
        imgUrl=note.imgUrl or "",
        path=note.path or "",
        host=host or "",
    )


def render_head(head: HeadInfo) -> str:
    return HEAD_TEMPLATE.format(**head.model_dump())
