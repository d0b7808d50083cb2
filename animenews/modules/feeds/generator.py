"""
Feed Generator
==============

Serializes published articles into RSS 2.0, category RSS, the general
sitemap and the Google News sitemap. Callers pass articles newest first.
Titles and descriptions always go out as CDATA, never HTML-escaped.
"""

from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from xml.sax.saxutils import escape, quoteattr

from animenews.core.database import Database
from animenews.core.storage import resolve_image_url
from animenews.modules.articles.slugs import slugify
from animenews.modules.news_public.seo import strip_tags, humanize_slug

RSS_LIMIT = 50
CATEGORY_RSS_LIMIT = 20
NEWS_SITEMAP_LIMIT = 1000
NEWS_WINDOW = timedelta(days=2)

RSS_EXCERPT_LENGTH = 300
CATEGORY_RSS_EXCERPT_LENGTH = 200

# (path, changefreq, priority)
STATIC_SITEMAP_PAGES = [
    ('/', 'daily', '1.0'),
    ('/category/anime', 'weekly', '0.8'),
    ('/category/manga', 'weekly', '0.8'),
    ('/category/jadwal', 'weekly', '0.8'),
    ('/about', 'weekly', '0.8'),
    ('/privacy-policy', 'weekly', '0.8'),
    ('/contact', 'weekly', '0.8'),
    ('/disclaimer', 'weekly', '0.8'),
]

NS_ATOM = "http://www.w3.org/2005/Atom"
NS_MEDIA = "http://search.yahoo.com/mrss/"
NS_SITEMAP = "http://www.sitemaps.org/schemas/sitemap/0.9"
NS_IMAGE = "http://www.google.com/schemas/sitemap-image/1.1"
NS_NEWS = "http://www.google.com/schemas/sitemap-news/0.9"

XML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>'


def cdata(text):
    """Wrap text in CDATA, splitting any ']]>' it contains."""
    return '<![CDATA[' + (text or '').replace(']]>', ']]]]><![CDATA[>') + ']]>'


def rfc1123(value):
    """'Mon, 01 Jan 2024 10:00:00 GMT'"""
    return format_datetime(Database.parse_timestamp(value), usegmt=True)


def iso_date(value):
    return Database.parse_timestamp(value).date().isoformat()


def iso_timestamp(value):
    return Database.parse_timestamp(value).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def article_url(site, article):
    return f"{site['url']}/read/{article['slug']}"


def _rss_item(site, article, excerpt_length):
    link = escape(article_url(site, article))
    thumb = resolve_image_url(article.get('image'), site['url'])
    excerpt = strip_tags(article.get('content'))[:excerpt_length]
    categories = ', '.join(article.get('category') or [])

    description = (
        f'<img src="{thumb}" width="320" height="180" style="object-fit:cover;" /><br/>'
        f'<p>{excerpt}...</p>'
        f'<p><strong>Kategori:</strong> {categories}</p>'
    )

    return f"""
        <item>
            <title>{cdata(article['title'])}</title>
            <link>{link}</link>
            <guid isPermaLink="true">{link}</guid>
            <description>{cdata(description)}</description>
            <media:content url={quoteattr(thumb)} medium="image">
                <media:title type="plain">{cdata(article['title'])}</media:title>
            </media:content>
            <pubDate>{rfc1123(article['created_at'])}</pubDate>
        </item>"""


def _rss_document(channel, items):
    return f"""{XML_HEADER}
<rss version="2.0" xmlns:atom="{NS_ATOM}" xmlns:media="{NS_MEDIA}">
    <channel>{channel}{''.join(items)}
    </channel>
</rss>"""


def build_rss(site, articles, now=None):
    """Main RSS feed with the latest published articles."""
    now = now or datetime.now(timezone.utc)
    channel = f"""
        <title>{cdata(site['name'] + ' - Berita Terbaru')}</title>
        <link>{escape(site['url'])}</link>
        <description>{cdata('Update berita Anime, Manga, dan Game terbaru.')}</description>
        <language>id-ID</language>
        <lastBuildDate>{format_datetime(now, usegmt=True)}</lastBuildDate>
        <atom:link href={quoteattr(site['url'] + '/rss')} rel="self" type="application/rss+xml" />"""

    items = [_rss_item(site, article, RSS_EXCERPT_LENGTH) for article in articles[:RSS_LIMIT]]
    return _rss_document(channel, items)


def build_category_rss(site, category_slug, articles, now=None):
    """RSS feed for one category."""
    now = now or datetime.now(timezone.utc)
    name = category_slug.replace('-', ' ')
    channel = f"""
        <title>{cdata('Berita Kategori: ' + name.upper())}</title>
        <link>{escape(site['url'] + '/category/' + category_slug)}</link>
        <description>{cdata('Feed terbaru seputar ' + humanize_slug(category_slug))}</description>
        <language>id-ID</language>
        <lastBuildDate>{format_datetime(now, usegmt=True)}</lastBuildDate>
        <atom:link href={quoteattr(site['url'] + '/rss/category/' + category_slug)} rel="self" type="application/rss+xml" />"""

    items = [_rss_item(site, article, CATEGORY_RSS_EXCERPT_LENGTH)
             for article in articles[:CATEGORY_RSS_LIMIT]]
    return _rss_document(channel, items)


def collect_tag_slugs(articles):
    """Distinct tag slugs across articles, first-seen order."""
    seen = {}
    for article in articles:
        for label in article.get('tags') or []:
            tag_slug = slugify(label)
            if tag_slug:
                seen.setdefault(tag_slug, None)
    return list(seen)


def _image_block(site, article):
    return f"""
        <image:image>
            <image:loc>{escape(resolve_image_url(article.get('image'), site['url']))}</image:loc>
            <image:title>{cdata(article['title'])}</image:title>
        </image:image>"""


def build_sitemap(site, articles):
    """General sitemap: static pages, every published article, every tag page."""
    entries = []
    for path, changefreq, priority in STATIC_SITEMAP_PAGES:
        entries.append(f"""
    <url>
        <loc>{escape(site['url'] + path)}</loc>
        <changefreq>{changefreq}</changefreq>
        <priority>{priority}</priority>
    </url>""")

    for article in articles:
        entries.append(f"""
    <url>
        <loc>{escape(article_url(site, article))}</loc>
        <lastmod>{iso_date(article['created_at'])}</lastmod>
        <priority>0.9</priority>{_image_block(site, article)}
    </url>""")

    for tag_slug in collect_tag_slugs(articles):
        entries.append(f"""
    <url>
        <loc>{escape(site['url'] + '/tag/' + tag_slug)}</loc>
        <changefreq>weekly</changefreq>
        <priority>0.6</priority>
    </url>""")

    return f"""{XML_HEADER}
<urlset xmlns="{NS_SITEMAP}" xmlns:image="{NS_IMAGE}">{''.join(entries)}
</urlset>"""


def news_cutoff(now=None):
    return (now or datetime.now(timezone.utc)) - NEWS_WINDOW


def build_news_sitemap(site, articles, now=None):
    """Google News sitemap: articles from the last 48 hours, at most 1000."""
    cutoff = news_cutoff(now)
    recent = [a for a in articles if Database.parse_timestamp(a['created_at']) >= cutoff]

    entries = []
    for article in recent[:NEWS_SITEMAP_LIMIT]:
        entries.append(f"""
    <url>
        <loc>{escape(article_url(site, article))}</loc>
        <news:news>
            <news:publication>
                <news:name>{escape(site['name'])}</news:name>
                <news:language>{escape(site.get('language', 'id'))}</news:language>
            </news:publication>
            <news:publication_date>{iso_timestamp(article['created_at'])}</news:publication_date>
            <news:title>{cdata(article['title'])}</news:title>
        </news:news>{_image_block(site, article)}
    </url>""")

    return f"""{XML_HEADER}
<urlset xmlns="{NS_SITEMAP}" xmlns:news="{NS_NEWS}" xmlns:image="{NS_IMAGE}">{''.join(entries)}
</urlset>"""
