import json

import pytest

from nostrkit.tags import Tag, Tags


@pytest.fixture
def sample() -> Tags:
    return Tags(
        [
            ["e", "event1", "wss://relay.example.com"],
            ["p", "pubkey1"],
            ["d", "ident"],
            ["e", "event2"],
            ["t", "nostr"],
        ]
    )


def test_tags_wraps_items_as_tag(sample):
    assert all(isinstance(tag, Tag) for tag in sample)
    assert sample[1] == ["p", "pubkey1"]


def test_starts_with_exact_and_partial_last():
    tag = Tag(["e", "abcdef", "relay"])
    assert tag.starts_with(["e", "abc"])
    assert tag.starts_with(["e"])
    assert not tag.starts_with(["p"])
    assert not tag.starts_with(["e", "xyz"])


def test_starts_with_requires_exact_match_before_last():
    tag = Tag(["ex", "abc"])
    assert not tag.starts_with(["e", "abc"])


def test_starts_with_longer_prefix_fails():
    assert not Tag(["e"]).starts_with(["e", "a"])


def test_key_value_relay():
    tag = Tag(["e", "id1", "wss://relay.example.com"])
    assert tag.key() == "e"
    assert tag.value() == "id1"
    assert tag.relay() == "wss://relay.example.com"


def test_missing_parts_are_none():
    assert Tag([]).key() is None
    assert Tag(["e"]).value() is None
    assert Tag(["e", "id"]).relay() is None


def test_relay_only_for_e_and_p():
    assert Tag(["t", "x", "wss://relay.example.com"]).relay() is None
    assert Tag(["p", "x", "wss://r.example.com"]).relay() == "wss://r.example.com"


def test_tag_to_json_round_trip():
    tag = Tag(["e", 'quote " and \\ backslash', "line\nbreak"])
    assert json.loads(tag.to_json()) == list(tag)


def test_tag_to_json_format():
    assert Tag(["e", "abc"]).to_json() == '["e","abc"]'


def test_get_d(sample):
    assert sample.get_d() == "ident"
    assert Tags([["e", "x"]]).get_d() is None


def test_get_first_and_last(sample):
    assert sample.get_first(["e"]) == ["e", "event1", "wss://relay.example.com"]
    assert sample.get_last(["e"]) == ["e", "event2"]
    assert sample.get_first(["z"]) is None
    assert sample.get_last(["z"]) is None


def test_get_all_and_filter_out_partition(sample):
    matched = sample.get_all(["e"])
    rest = sample.filter_out(["e"])
    assert isinstance(matched, Tags)
    assert [tag[1] for tag in matched] == ["event1", "event2"]
    assert len(matched) + len(rest) == len(sample)
    assert all(tag[0] != "e" for tag in rest)


def test_append_unique_adds_new(sample):
    result = sample.append_unique(["t", "bitcoin"])
    assert len(result) == len(sample) + 1
    assert result[-1] == ["t", "bitcoin"]


def test_append_unique_keeps_existing(sample):
    result = sample.append_unique(["t", "nos"])
    assert result is sample
    assert len(result) == 5


def test_contains_any(sample):
    assert sample.contains_any("e", ["nope", "event2"])
    assert not sample.contains_any("e", ["pubkey1"])
    assert not sample.contains_any("x", ["event1"])


def test_contains_any_skips_short_tags():
    assert not Tags([["e"]]).contains_any("e", ["e"])


def test_tags_to_json_round_trip(sample):
    assert json.loads(sample.to_json()) == [list(tag) for tag in sample]


def test_empty_tags_to_json():
    assert Tags().to_json() == "[]"