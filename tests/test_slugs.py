"""Slug normalization and collision handling."""

import re

import pytest

from animenews.modules.articles.slugs import MAX_ATTEMPTS, SlugError, assign_slug, slugify


@pytest.mark.parametrize("text, expected", [
    ("Attack on Titan: Final Season!", "attack-on-titan-final-season"),
    ("Pokémon Horizons Episode 45", "pokemon-horizons-episode-45"),
    ("  --Hello__World--  ", "hello-world"),
    ("One Piece   1100", "one-piece-1100"),
    ("日本語", ""),
    ("", ""),
    (None, ""),
])
def test_slugify(text, expected):
    assert slugify(text) == expected


def never_taken(slug, exclude_id):
    return False


def test_title_used_when_candidate_blank():
    assert assign_slug("", "Jujutsu Kaisen Season 3", exists=never_taken) == "jujutsu-kaisen-season-3"
    assert assign_slug("   ", "Jujutsu Kaisen", exists=never_taken) == "jujutsu-kaisen"


def test_explicit_candidate_is_normalized():
    assert assign_slug("My Custom Slug!", "Some Title", exists=never_taken) == "my-custom-slug"


def test_collision_appends_millis():
    taken = {"one-piece"}
    slug = assign_slug("", "One Piece", exists=lambda s, i: s in taken,
                       clock=lambda: 1700000000123)
    assert slug == "one-piece-1700000000123"
    assert re.fullmatch(r"one-piece-\d{13}", slug)


def test_suffixed_slug_is_rechecked():
    taken = {"naruto", "naruto-1"}
    ticks = iter([1, 2, 3])
    slug = assign_slug("", "Naruto", exists=lambda s, i: s in taken, clock=lambda: next(ticks))
    assert slug == "naruto-2"


def test_gives_up_after_max_attempts():
    calls = []

    def always_taken(slug, exclude_id):
        calls.append(slug)
        return True

    with pytest.raises(SlugError):
        assign_slug("", "Bleach", exists=always_taken, clock=lambda: 1)
    assert len(calls) == MAX_ATTEMPTS + 1


@pytest.mark.parametrize("candidate, title", [("", ""), ("", "!!!"), ("???", "日本語")])
def test_empty_slug_rejected(candidate, title):
    with pytest.raises(SlugError):
        assign_slug(candidate, title, exists=never_taken)


def test_article_id_passed_to_exists():
    seen = []
    assign_slug("", "Dandadan", article_id=7, exists=lambda s, i: seen.append(i) or False)
    assert seen == [7]


def test_against_store(app, make_article):
    """An article keeps its own slug on edit; a new one gets a suffix."""
    article = make_article("Chainsaw Man")

    with app.app_context():
        assert assign_slug("", "Chainsaw Man", article_id=article["id"]) == "chainsaw-man"
        assert re.fullmatch(r"chainsaw-man-\d{13}", assign_slug("", "Chainsaw Man"))
