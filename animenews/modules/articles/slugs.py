"""
Slug assignment for articles.

Slugs are lowercase ASCII words joined by single hyphens. A slug that is
already taken gets the current epoch milliseconds appended; the suffixed
value is checked again before it is handed out.
"""

import re
import time
import unicodedata

from .database import slug_exists

MAX_ATTEMPTS = 5


class SlugError(ValueError):
    """Raised when no usable slug can be derived from the input"""


def slugify(text):
    """Strict slugify: drop diacritics and punctuation, hyphenate the rest."""
    text = unicodedata.normalize('NFKD', text or '')
    text = text.encode('ascii', 'ignore').decode('ascii')
    text = re.sub(r'[^a-z0-9]+', '-', text.lower())
    return text.strip('-')


def _millis():
    return int(time.time() * 1000)


def assign_slug(candidate, title, article_id=None, exists=slug_exists, clock=_millis):
    """
    Derive a unique slug for an article.

    Args:
        candidate: explicit slug typed by the editor (may be blank)
        title: article title, used when candidate is blank
        article_id: ID of the article being edited, None on create
        exists: callable(slug, exclude_id) -> bool
        clock: callable returning epoch milliseconds

    Raises:
        SlugError: when the input normalizes to an empty slug, or no free
            suffixed slug was found
    """
    source = candidate if candidate and candidate.strip() else title
    base = slugify(source)
    if not base:
        raise SlugError('Judul atau slug tidak menghasilkan URL yang valid')

    if not exists(base, article_id):
        return base

    for _ in range(MAX_ATTEMPTS):
        slug = f"{base}-{clock()}"
        if not exists(slug, article_id):
            return slug
        time.sleep(0.001)

    raise SlugError(f"Could not find a free slug for '{base}'")
