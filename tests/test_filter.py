from nostrkit.event import Event
from nostrkit.filter import Filter, Filters
from nostrkit.tags import Tags


def _event(**kwargs):
    defaults = dict(id="id1", pubkey="alice", created_at=100, kind=1, content="x")
    defaults.update(kwargs)
    return Event(**defaults)


def test_empty_filter_matches_everything():
    assert Filter().matches(_event()) is True


def test_none_event_never_matches():
    assert Filter().matches(None) is False
    assert Filter().matches_ignoring_timestamp(None) is False
    assert Filters([Filter()]).match(None) is False


def test_ids_kinds_authors():
    event = _event()
    assert Filter(ids=["id1"]).matches(event) is True
    assert Filter(ids=["other"]).matches(event) is False
    assert Filter(kinds=[1, 7]).matches(event) is True
    assert Filter(kinds=[7]).matches(event) is False
    assert Filter(authors=["alice"]).matches(event) is True
    assert Filter(authors=["bob"]).matches(event) is False


def test_since_and_until():
    event = _event(created_at=100)
    assert Filter(since=100).matches(event) is True
    assert Filter(since=101).matches(event) is False
    assert Filter(until=100).matches(event) is True
    assert Filter(until=99).matches(event) is False
    assert Filter(since=101).matches_ignoring_timestamp(event) is True


def test_tag_conditions():
    event = _event(tags=[["e", "abc"], ["p", "def"]])
    assert Filter(tags=[["e", "abc", "zzz"]]).matches(event) is True
    assert Filter(tags=[["e", "zzz"]]).matches(event) is False
    assert Filter(tags=[["e", "abc"], ["p", "nope"]]).matches(event) is False
    assert Filter(tags=[["t", "abc"]]).matches(event) is False


def test_filter_tags_converted():
    f = Filter(tags=[["e", "x"]])
    assert isinstance(f.tags, Tags)
    assert f.tags.to_json() == '[["e","x"]]'


def test_filters_any_match():
    event = _event(kind=1, created_at=50)
    filters = Filters([Filter(kinds=[7]), Filter(kinds=[1], since=40)])
    assert filters.match(event) is True
    assert Filters([Filter(kinds=[7])]).match(event) is False
    assert Filters().match(event) is False


def test_filters_ignoring_timestamp():
    event = _event(created_at=10)
    filters = Filters([Filter(since=20)])
    assert filters.match(event) is False
    assert filters.match_ignoring_timestamp(event) is True


def test_defaults():
    f = Filter()
    assert (f.since, f.until, f.limit, f.search, f.limit_zero) == (0, 0, 0, None, False)
    assert f.ids == [] and f.kinds == [] and f.authors == []