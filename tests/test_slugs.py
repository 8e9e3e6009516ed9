"""Tests for slug generation and week buckets."""

from datetime import date

import pytest

from linkarchive.slugs import (
    MAX_SLUG_LENGTH,
    ensure_unique,
    is_date_format,
    is_valid_monday,
    slugify,
    week_start_date,
)


class TestSlugify:
    def test_lowercases_and_hyphenates(self):
        assert slugify("Hello World From Python") == "hello-world-from-python"

    def test_strips_punctuation_set(self):
        assert slugify("What's new in Python 3.13?!") == "whats-new-in-python-313"
        assert slugify("(Draft) *Notes* + ~ideas~ @home: \"quoted\"") == "draft-notes-ideas-home-quoted"

    def test_transliterates_to_ascii(self):
        assert slugify("Zażółć gęślą jaźń") == "zazolc-gesla-jazn"
        assert slugify("Café crème brûlée") == "cafe-creme-brulee"
        assert slugify("Straße in Århus") == "strasse-in-arhus"

    def test_empty_title(self):
        assert slugify("") == "untitled"
        assert slugify("!!!") == "untitled"

    @pytest.mark.parametrize("title", ["2024-01-15", "1999-12-31", "0000-00-00"])
    def test_date_like_title_gets_suffix(self, title):
        slug = slugify(title)
        assert slug != title
        assert slug == f"{title}-article"
        assert not is_date_format(slug)

    def test_date_inside_longer_title_is_untouched(self):
        assert slugify("Release notes 2024-01-15") == "release-notes-2024-01-15"


class TestEnsureUnique:
    def test_unused_slug_returned_as_is(self):
        assert ensure_unique("hello", {"other"}) == "hello"

    def test_appends_counter(self):
        assert ensure_unique("hello", {"hello"}) == "hello-1"
        assert ensure_unique("hello", {"hello", "hello-1", "hello-2"}) == "hello-3"

    def test_growing_set_never_reuses_a_slug(self):
        existing = {"post"}
        chosen = []
        for _ in range(5):
            slug = ensure_unique("post", existing)
            assert slug not in existing
            existing.add(slug)
            chosen.append(slug)
        assert chosen == ["post-1", "post-2", "post-3", "post-4", "post-5"]
        assert len(set(chosen)) == len(chosen)


class TestWeekStartDate:
    @pytest.mark.parametrize(
        "today, expected",
        [
            (date(2026, 10, 12), "2026-10-12"),  # Monday
            (date(2026, 10, 14), "2026-10-12"),  # Wednesday
            (date(2026, 10, 18), "2026-10-12"),  # Sunday
            (date(2026, 1, 1), "2025-12-29"),  # crosses the year
        ],
    )
    def test_returns_monday(self, today, expected):
        assert week_start_date(today) == expected
        assert is_valid_monday(week_start_date(today))

    def test_defaults_to_now(self):
        assert is_valid_monday(week_start_date())


def test_is_valid_monday():
    assert is_valid_monday("2026-10-12")
    assert not is_valid_monday("2026-10-13")
    assert not is_valid_monday("2026-02-30")
    assert not is_valid_monday("not-a-date")


class TestSlugLength:
    def test_long_title_cut_at_word_boundary(self):
        title = " ".join(["word"] * 80)  # 399 characters
        slug = slugify(title)

        assert len(slug) <= MAX_SLUG_LENGTH
        assert not slug.endswith("-")
        assert all(part == "word" for part in slug.split("-"))

    def test_long_single_word_is_hard_cut(self):
        assert slugify("x" * 400) == "x" * MAX_SLUG_LENGTH

    def test_suffixed_slug_fits_column(self):
        slug = slugify("x " * 300)
        existing = {slug} | {f"{slug}-{i}" for i in range(1, 1000)}
        assert len(ensure_unique(slug, existing)) <= 255
