"""Tests for tag sets and first-non-empty merging."""

from __future__ import annotations

from tagsniff.tags import EMPTY_TAGS, TagCollector, TagSet, clean_text, merge_tag_sets


def test_tag_set_keeps_only_non_empty_vocabulary_keys() -> None:
    tags = TagSet({"title": "Song", "artist": "", "genre": "Rock"})
    assert dict(tags) == {"title": "Song"}
    assert tags.title == "Song"
    assert tags.artist is None
    assert tags.album is None
    assert TagSet({"album": "Record"}).album == "Record"
    assert "genre" not in tags


def test_tag_set_compares_equal_to_plain_mapping() -> None:
    assert TagSet({"album": "X"}) == {"album": "X"}
    assert TagSet() == {}
    assert not EMPTY_TAGS
    assert hash(TagSet({"title": "a"})) == hash(TagSet({"title": "a"}))


def test_merge_prefers_first_non_empty_value() -> None:
    merged = merge_tag_sets(
        [
            None,
            TagSet({"title": "From ID3v2"}),
            TagSet({"title": "From ID3v1", "artist": "Trailer"}),
            TagSet(),
            TagSet({"album": "Container", "artist": "Container"}),
        ]
    )
    assert merged.as_dict() == {
        "title": "From ID3v2",
        "artist": "Trailer",
        "album": "Container",
    }


def test_collector_ignores_unknown_and_empty_values() -> None:
    collector = TagCollector()
    assert not collector
    collector.offer(None, "ignored")
    collector.offer("comment", "ignored")
    collector.offer("title", "")
    collector.offer("title", None)
    collector.offer("title", "First")
    collector.offer("title", "Second")
    assert collector
    assert collector.freeze() == {"title": "First"}


def test_clean_text_trims_whitespace_and_control_characters() -> None:
    assert clean_text("\x00 Title \t\x00\x00") == "Title"
    assert clean_text("  inner  space ") == "inner  space"
    assert clean_text("\x00\x00") == ""
