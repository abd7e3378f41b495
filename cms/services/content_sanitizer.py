"""Rich-text HTML sanitization.

Editor output is stored exactly as submitted and cleaned whenever it is
rendered into a page. Cleaning is allow-list based: tags, attributes and
URL schemes not listed here are dropped.
"""

import bleach

ALLOWED_TAGS = frozenset(
    {
        "p", "br", "hr", "span", "div",
        "h1", "h2", "h3", "h4", "h5", "h6",
        "strong", "b", "em", "i", "u", "s", "sub", "sup", "mark",
        "blockquote", "pre", "code",
        "ul", "ol", "li",
        "a", "img", "figure", "figcaption",
        "table", "thead", "tbody", "tr", "th", "td",
    }
)

ALLOWED_ATTRIBUTES = {
    "*": ["class"],
    "a": ["href", "title", "target", "rel"],
    "img": ["src", "alt", "title", "width", "height"],
    "th": ["colspan", "rowspan"],
    "td": ["colspan", "rowspan"],
}

# Relative URLs (uploaded images, in-site links) carry no scheme and pass
ALLOWED_PROTOCOLS = frozenset({"http", "https", "mailto", "tel"})


def sanitize_content_html(html: str) -> str:
    """Strip script-capable markup from editor HTML, keeping formatting."""
    return bleach.clean(
        html,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
        strip_comments=True,
    )
