from __future__ import annotations

from html import escape

from newsdesk.core.config import Settings
from newsdesk.models import Article
from newsdesk.services.content import description
from newsdesk.services.images import get_image_url


def article_url(settings: Settings, slug: str) -> str:
    return f"{settings.site_url.rstrip('/')}/article/{slug}"


def render_share_page(article: Article, settings: Settings) -> str:
    url = article_url(settings, article.slug)
    title = f"{article.title} | {settings.site_name}"
    desc = description(article.summary, article.content)
    image = get_image_url(article.cover_image_url, settings.cdn_domain, settings.legacy_s3_host_marker)

    meta = [
        ("property", "og:type", "article"),
        ("property", "og:site_name", settings.site_name),
        ("property", "og:title", article.title),
        ("property", "og:description", desc),
        ("property", "og:image", image),
        ("property", "og:url", url),
        ("name", "twitter:card", "summary_large_image"),
        ("name", "twitter:title", article.title),
        ("name", "twitter:description", desc),
        ("name", "twitter:image", image),
        ("name", "description", desc),
    ]
    if article.published_at:
        meta.append(("property", "article:published_time", article.published_at))

    tags = "\n".join(
        f'    <meta {attr}="{escape(key)}" content="{escape(value)}" />' for attr, key, value in meta
    )
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        "  <head>\n"
        '    <meta charset="utf-8" />\n'
        f"    <title>{escape(title)}</title>\n"
        f'    <link rel="canonical" href="{escape(url)}" />\n'
        f"{tags}\n"
        f'    <meta http-equiv="refresh" content="0; url={escape(url)}" />\n'
        "  </head>\n"
        "  <body>\n"
        f'    <h1>{escape(article.title)}</h1>\n'
        f"    <p>{escape(desc)}</p>\n"
        f'    <a href="{escape(url)}">Read the full article</a>\n'
        "  </body>\n"
        "</html>\n"
    )
