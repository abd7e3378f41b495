"""Public page template for blog posts and case studies.

The same functions render stored records for visitors and unsaved drafts for
the authoring preview, so a preview shows exactly what will be published.
"""

import html
from datetime import date

from cms.models.blog import BlogPost, BlogPostPreview
from cms.models.case_study import CaseStudy, CaseStudyPreview
from cms.services.content_sanitizer import sanitize_content_html

SITE_NAME = "Adaptive Edge"
SITE_URL = "https://adaptiveedge.uk"

# Shown in place of the cover when there is no image or it fails to load
_COVER_FALLBACK = '<div class="cover cover-fallback" aria-hidden="true"></div>'

_STYLE = """
body{font-family:Georgia,serif;margin:0;color:#1f2a44;background:#faf8f5}
main{max-width:760px;margin:0 auto;padding:48px 24px}
.preview-banner{background:#f5c542;padding:8px 24px;font:600 14px sans-serif;text-align:center}
.category{font:600 13px sans-serif;text-transform:uppercase;letter-spacing:.08em;color:#8a6d3b}
.meta{font:14px sans-serif;color:#6b6b6b}
.cover{margin:32px 0;border-radius:8px;overflow:hidden}
.cover img{width:100%;display:block}
.cover-fallback{height:240px;background:linear-gradient(135deg,#1f2a44,#8a6d3b)}
section h2{font-size:20px;margin-top:40px}
"""


def _esc(value: str | None) -> str:
    return html.escape(value or "")


def format_display_date(value: str) -> str:
    """"2025-01-01" -> "January 1, 2025"; anything unparseable is shown as is."""
    try:
        d = date.fromisoformat(value)
    except (TypeError, ValueError):
        return value
    return f"{d:%B} {d.day}, {d.year}"


def _cover(image: str | None, alt: str) -> str:
    if not image:
        return _COVER_FALLBACK
    # A broken image URL swaps itself for the fallback block
    return (
        f'<figure class="cover"><img src="{_esc(image)}" alt="{_esc(alt)}" '
        "onerror=\"this.parentNode.className='cover cover-fallback';this.remove()\">"
        "</figure>"
    )


def _page(title: str, description: str, canonical: str, body: str, preview: bool) -> str:
    banner = (
        '<div class="preview-banner">Preview: this draft has not been saved</div>'
        if preview
        else ""
    )
    robots = '<meta name="robots" content="noindex" />' if preview else ""
    page_title = f"{_esc(title)} | {SITE_NAME}" if title else SITE_NAME
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8" />
<meta name="viewport" content="width=device-width, initial-scale=1" />
<title>{page_title}</title>
<meta name="description" content="{_esc(description)}" />
<link rel="canonical" href="{_esc(canonical)}" />
{robots}<style>{_STYLE}</style>
</head>
<body>
{banner}<main>
{body}
</main>
</body>
</html>"""


def render_blog_post(post: BlogPost | BlogPostPreview, *, preview: bool = False) -> str:
    """Render a stored post or an unsaved draft as a full HTML page."""
    slug = post.slug
    byline = " · ".join(
        part
        for part in (_esc(post.author), _esc(format_display_date(post.date)))
        if part
    )
    linkedin = (
        f'<p class="meta"><a href="{_esc(post.linkedin_url)}" rel="noopener">'
        "Discuss on LinkedIn</a></p>"
        if post.linkedin_url
        else ""
    )
    body = f"""<article>
<p class="category">{_esc(post.category)}</p>
<h1>{_esc(post.title)}</h1>
<p class="meta">{byline}</p>
<p class="excerpt"><em>{_esc(post.excerpt)}</em></p>
{_cover(post.image, post.title)}
<div class="content">{sanitize_content_html(post.content)}</div>
{linkedin}</article>"""
    return _page(post.title, post.excerpt, f"{SITE_URL}/blog/{slug}", body, preview)


def render_case_study(
    case_study: CaseStudy | CaseStudyPreview, *, preview: bool = False
) -> str:
    """Render a stored case study or an unsaved draft as a full HTML page."""
    slug = case_study.slug
    client = (
        f'<p class="meta">Client: {_esc(case_study.client)}</p>'
        if case_study.client
        else ""
    )
    attribution = ""
    if case_study.tree_house_attribution == "true":
        attribution = '<p class="meta">Delivered in partnership with Tree House.</p>'
    elif case_study.tree_house_attribution:
        attribution = f'<p class="meta">{_esc(case_study.tree_house_attribution)}</p>'
    sections = "".join(
        f"<section><h2>{heading}</h2><p>{_esc(text)}</p></section>"
        for heading, text in (
            ("The challenge", case_study.challenge),
            ("Our approach", case_study.approach),
            ("The impact", case_study.impact),
            ("Our role", case_study.role_description),
        )
        if text
    )
    body = f"""<article>
<p class="category">{_esc(case_study.category)}</p>
<h1>{_esc(case_study.title)}</h1>
{client}{_cover(case_study.image, case_study.title)}
{sections}
{attribution}</article>"""
    return _page(
        case_study.title,
        case_study.challenge[:160],
        f"{SITE_URL}/work/{slug}",
        body,
        preview,
    )
