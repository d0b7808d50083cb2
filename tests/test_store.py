"""Article store queries. Every public read must hide drafts."""

import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from animenews.modules.articles.database import (
    STATUS_DRAFT, create_article_db, find_published, get_all_articles_db,
    get_article_db, get_published_by_slug, replace_image_db, slug_exists,
    update_article_db,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def hours_ago(hours):
    return NOW - timedelta(hours=hours)


@pytest.fixture
def catalog(app, make_article):
    """Five published articles an hour apart, plus one draft."""
    make_article("Jadwal Anime Musim Panas", category=["Jadwal"], tags=["Seasonal"],
                 created_at=hours_ago(5))
    make_article("One Piece Chapter 1100", category=["Manga"], tags=["One Piece"],
                 created_at=hours_ago(4))
    make_article("Diskon 100% Game Gacha", category=["Game"], tags=["Gacha"],
                 created_at=hours_ago(3))
    make_article("Jujutsu Kaisen Season 3", category=["Anime"], tags=["Jujutsu Kaisen", "MAPPA"],
                 created_at=hours_ago(2))
    make_article("One Piece Film Red", category=["Anime", "Movie"], tags=["One Piece"],
                 created_at=hours_ago(1))
    make_article("Bocoran One Piece", status=STATUS_DRAFT, category=["Manga"],
                 tags=["One Piece"], created_at=hours_ago(0))
    with app.app_context():
        yield


def titles(articles):
    return [a["title"] for a in articles]


def test_find_published_newest_first_without_drafts(catalog):
    articles = find_published()
    assert titles(articles) == [
        "One Piece Film Red", "Jujutsu Kaisen Season 3", "Diskon 100% Game Gacha",
        "One Piece Chapter 1100", "Jadwal Anime Musim Panas",
    ]


def test_admin_listing_includes_drafts(catalog):
    assert titles(get_all_articles_db())[0] == "Bocoran One Piece"


def test_category_is_case_insensitive_exact_match(catalog):
    assert titles(find_published(category="anime")) == ["One Piece Film Red", "Jujutsu Kaisen Season 3"]
    assert find_published(category="anim") == []


def test_tag_filter(catalog):
    assert titles(find_published(tag="one piece")) == ["One Piece Film Red", "One Piece Chapter 1100"]
    assert titles(find_published(tag="JUJUTSU KAISEN")) == ["Jujutsu Kaisen Season 3"]


def test_title_search(catalog):
    assert titles(find_published(title_query="one piece")) == ["One Piece Film Red", "One Piece Chapter 1100"]
    assert titles(find_published(title_query="100%")) == ["Diskon 100% Game Gacha"]
    assert find_published(title_query="_") == []


def test_since_and_paging(catalog):
    assert titles(find_published(since=hours_ago(2))) == ["One Piece Film Red", "Jujutsu Kaisen Season 3"]
    assert titles(find_published(limit=2, skip=1)) == ["Jujutsu Kaisen Season 3", "Diskon 100% Game Gacha"]
    assert titles(find_published(skip=4)) == ["Jadwal Anime Musim Panas"]


def test_related_by_any_category(catalog):
    film = get_published_by_slug("one-piece-film-red")
    related = find_published(exclude_id=film["id"], any_category=film["category"])
    assert titles(related) == ["Jujutsu Kaisen Season 3"]
    assert find_published(any_category=[]) == []


def test_get_published_by_slug_hides_drafts(catalog):
    assert get_published_by_slug("bocoran-one-piece") is None
    assert get_published_by_slug("one-piece-film-red")["tags"] == ["One Piece"]


def test_slug_is_unique(app, make_article):
    make_article("Frieren", slug="frieren")
    with app.app_context():
        assert slug_exists("frieren")
        with pytest.raises(sqlite3.IntegrityError):
            create_article_db("Frieren lagi", "frieren", "<p>x</p>", "default.jpg", [], [])


def test_update_keeps_created_at(app, make_article):
    article = make_article("Spy x Family", created_at=hours_ago(10))
    with app.app_context():
        assert update_article_db(article["id"], "Spy x Family Code White", "spy-x-family-code-white",
                                 "<p>baru</p>", article["image"], ["Movie"], ["Spy x Family"],
                                 STATUS_DRAFT)
        updated = get_article_db(article["id"])

    assert updated["slug"] == "spy-x-family-code-white"
    assert updated["status"] == STATUS_DRAFT
    assert updated["category"] == ["Movie"]
    assert updated["created_at"] == article["created_at"]


def test_replace_image(app, make_article):
    make_article("A", image="old.jpg")
    make_article("B", image="old.jpg")
    make_article("C", image="other.jpg")
    with app.app_context():
        assert replace_image_db("old.jpg", "https://img.animenews.test/old.jpg") == 2
        assert get_published_by_slug("a")["image"] == "https://img.animenews.test/old.jpg"
