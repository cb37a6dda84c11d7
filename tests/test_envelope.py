import json

import pytest

from nostrkit.codec import event_to_dict
from nostrkit.envelope import (
    AuthEnvelope,
    ClosedEnvelope,
    CloseEnvelope,
    CountEnvelope,
    EnvelopeType,
    EOSEEnvelope,
    EventEnvelope,
    NoticeEnvelope,
    OKEnvelope,
    ReqEnvelope,
    parse_message,
)
from nostrkit.errors import NostrError
from nostrkit.event import Event
from nostrkit.filter import Filter, Filters
from nostrkit.tags import Tags


def _event():
    return Event(
        id="ab" * 32,
        pubkey="cd" * 32,
        created_at=1700000000,
        kind=1,
        tags=Tags([["t", "nostr"]]),
        content="hello\tworld",
        sig="12" * 64,
    )


ENVELOPES = [
    EventEnvelope(subscription_id="sub1", event=_event()),
    EventEnvelope(event=_event()),
    ReqEnvelope("sub1", Filters([Filter(kinds=[1]), Filter(authors=["cd" * 32], limit=3)])),
    CountEnvelope("q1", Filters([Filter(kinds=[7])])),
    CountEnvelope("q1", count=12),
    NoticeEnvelope("slow down"),
    EOSEEnvelope("sub1"),
    CloseEnvelope("sub1"),
    ClosedEnvelope("sub1", "error: shutting down"),
    OKEnvelope("ab" * 32, True, ""),
    OKEnvelope("ab" * 32, False, "blocked: spam"),
    AuthEnvelope(challenge="challenge-string"),
    AuthEnvelope(event=_event()),
]


@pytest.mark.parametrize("envelope", ENVELOPES)
def test_round_trip(envelope):
    assert parse_message(envelope.to_json()) == envelope


@pytest.mark.parametrize("envelope", ENVELOPES)
def test_label_matches_type(envelope):
    text = envelope.to_json()
    assert json.loads(text)[0] == envelope.type.value
    assert parse_message(text).type is envelope.type


def test_notice_wire_form():
    assert NoticeEnvelope("hello").to_json() == '["NOTICE","hello"]'


def test_event_envelope_with_subscription():
    event = _event()
    items = json.loads(EventEnvelope("sub", event).to_json())
    assert items[:2] == ["EVENT", "sub"]
    assert items[2] == event_to_dict(event)


def test_event_envelope_without_subscription():
    event = _event()
    items = json.loads(EventEnvelope(event=event).to_json())
    assert len(items) == 2
    parsed = parse_message(json.dumps(items))
    assert parsed.subscription_id is None
    assert parsed.event == event


def test_parse_ok():
    parsed = parse_message('["OK","abc",true,"duplicate: have it"]')
    assert isinstance(parsed, OKEnvelope)
    assert parsed.event_id == "abc"
    assert parsed.ok is True
    assert parsed.reason == "duplicate: have it"


def test_parse_count_answer():
    parsed = parse_message('["COUNT","q",{"count":42}]')
    assert parsed.count == 42
    assert parsed.subscription_id == "q"


def test_parse_eose_type():
    parsed = parse_message('["EOSE","sub9"]')
    assert isinstance(parsed, EOSEEnvelope)
    assert parsed.type is EnvelopeType.EOSE
    assert parsed.subscription_id == "sub9"


def test_parse_auth_challenge():
    parsed = parse_message('["AUTH","xyz"]')
    assert parsed.challenge == "xyz"
    assert parsed.event is None


@pytest.mark.parametrize(
    "message",
    [
        '["PING","x"]',
        "not json",
        "{}",
        "[]",
        "[1,2]",
        '["OK","abc"]',
        '["NOTICE",5]',
        '["CLOSED","sub"]',
        '["EVENT","sub",{"kind":"1"}]',
        '["COUNT","q",{"count":"5"}]',
        None,
    ],
)
def test_invalid_messages_give_none(message):
    assert parse_message(message) is None


def test_empty_auth_cannot_be_encoded():
    with pytest.raises(NostrError):
        AuthEnvelope().to_json()