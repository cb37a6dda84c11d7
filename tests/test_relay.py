import json
import queue
import threading
import time

import pytest

from nostrkit.codec import event_from_dict, event_to_dict
from nostrkit.envelope import EventEnvelope
from nostrkit.errors import ErrorCode, NostrError
from nostrkit.event import Event
from nostrkit.filter import Filter
from nostrkit.keys import generate_private_key, get_public_key
from nostrkit.kinds import Kind
from nostrkit.relay import Relay

URL = "wss://relay.example.com"


class FakeConnection:
    def __init__(self, url, responder=None):
        self.url = url
        self.responder = responder
        self.sent = []
        self.incoming = queue.Queue()
        self.closed = False

    def write_message(self, message):
        if self.closed:
            raise NostrError(ErrorCode.WEBSOCKET_CLOSED, "connection closed")
        self.sent.append(message)
        if self.responder is not None:
            replies = self.responder(message)
            if replies:
                threading.Timer(0.05, self._feed, args=(replies,)).start()

    def _feed(self, replies):
        for reply in replies:
            self.incoming.put(reply)

    def read_message(self, timeout=None):
        item = self.incoming.get(timeout=timeout)
        if item is None:
            self.incoming.put(None)
            raise NostrError(ErrorCode.WEBSOCKET_CLOSED, "failed to receive message")
        return item

    def close(self):
        self.closed = True
        self.incoming.put(None)


def make_relay(made, responder=None, **kwargs):
    def factory(url):
        conn = FakeConnection(url, responder)
        made.append(conn)
        return conn

    return Relay(URL, connection_factory=factory, **kwargs)


def wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def sample_event():
    return Event(id="ab" * 32, pubkey="cd" * 32, created_at=1, kind=1, content="x")


def answering(*events):
    def respond(message):
        msg = json.loads(message)
        if msg[0] != "REQ":
            return []
        replies = [json.dumps(["EVENT", msg[1], event_to_dict(e)]) for e in events]
        return replies + [json.dumps(["EOSE", msg[1]])]

    return respond


@pytest.fixture
def made():
    return []


def test_empty_url_rejected():
    with pytest.raises(NostrError) as info:
        Relay("")
    assert info.value.code == ErrorCode.RELAY_INVALID_URL


def test_not_connected_initially(made):
    relay = make_relay(made)
    assert relay.is_connected() is False
    with pytest.raises(NostrError):
        relay.subscribe([Filter()])
    with pytest.raises(NostrError) as info:
        relay.close()
    assert info.value.code == ErrorCode.RELAY_CLOSE_FAILED


def test_connect_uses_factory(made):
    relay = make_relay(made)
    relay.connect()
    assert relay.is_connected() is True
    assert relay.connection is made[0]
    assert made[0].url == URL
    relay.close()


def test_connect_failure_is_wrapped():
    def factory(url):
        raise OSError("refused")

    relay = Relay(URL, connection_factory=factory)
    with pytest.raises(NostrError) as info:
        relay.connect()
    assert info.value.code == ErrorCode.RELAY_CONNECTION_FAILED
    assert relay.is_connected() is False


def test_subscribe_sends_req(made):
    relay = make_relay(made)
    relay.connect()
    sub = relay.subscribe([Filter(kinds=[1])])
    assert json.loads(made[0].sent[-1]) == ["REQ", sub.get_id(), {"kinds": [1]}]
    assert sub.live is True
    assert relay.subscriptions[sub.counter] is sub
    relay.close()


def test_prepare_subscription_uses_increasing_serials(made):
    relay = make_relay(made)
    relay.connect()
    first = relay.prepare_subscription([Filter()])
    second = relay.prepare_subscription([Filter()])
    assert second.counter == first.counter + 1
    assert first.live is False
    assert made[0].sent == []
    relay.close()


def test_notice_handler_receives_text(made):
    received = []
    relay = make_relay(made, notice_handler=received.append)
    relay.handle_message('["NOTICE","hello"]')
    assert received == ["hello"]


def test_custom_handler_gets_unknown_messages(made):
    received = []
    relay = make_relay(made, custom_handler=received.append)
    relay.handle_message('["WHATEVER",1]')
    assert received == ['["WHATEVER",1]']


def test_auth_challenge_recorded(made):
    relay = make_relay(made)
    relay.handle_message('["AUTH","abc"]')
    assert relay.challenge == "abc"


def test_event_dispatched_when_assumed_valid(made):
    relay = make_relay(made, assume_valid=True)
    relay.connect()
    sub = relay.subscribe([Filter()])
    event = sample_event()
    relay.handle_message(EventEnvelope(sub.get_id(), event).to_json())
    assert sub.events.get_nowait().id == event.id
    relay.close()


def test_event_with_bad_signature_dropped(made):
    relay = make_relay(made)
    relay.connect()
    sub = relay.subscribe([Filter()])
    event = sample_event()
    event.sig = "00" * 64
    relay.handle_message(EventEnvelope(sub.get_id(), event).to_json())
    assert sub.events.empty()
    relay.close()


def test_signed_event_accepted(made):
    relay = make_relay(made)
    relay.connect()
    sub = relay.subscribe([Filter()])
    sk = generate_private_key()
    event = Event(pubkey=get_public_key(sk), created_at=5, kind=1, content="signed")
    event.sign(sk)
    relay.handle_message(EventEnvelope(sub.get_id(), event).to_json())
    assert sub.events.get_nowait().sig == event.sig
    relay.close()


def test_event_for_unknown_subscription_ignored(made):
    relay = make_relay(made, assume_valid=True)
    relay.connect()
    sub = relay.subscribe([Filter()])
    relay.handle_message(EventEnvelope("99:", sample_event()).to_json())
    assert sub.events.empty()
    relay.close()


def test_eose_and_closed_dispatched(made):
    relay = make_relay(made)
    relay.connect()
    sub = relay.subscribe([Filter()])
    relay.handle_message(json.dumps(["EOSE", sub.get_id()]))
    relay.handle_message(json.dumps(["CLOSED", sub.get_id(), "bye"]))
    assert sub.eosed is True
    assert sub.closed_reason.get_nowait() == "bye"
    relay.close()


def test_ok_callback_invoked(made):
    relay = make_relay(made)
    results = []
    event_id = "ab" * 32
    relay.ok_callbacks[event_id] = lambda ok, reason: results.append((ok, reason))
    relay.handle_message(json.dumps(["OK", event_id, True, "duplicate: have it"]))
    assert results == [(True, "duplicate: have it")]


def test_query_sync_collects_until_eose(made):
    event = sample_event()
    relay = make_relay(made, answering(event), assume_valid=True)
    relay.connect()
    events = relay.query_sync(Filter(kinds=[1]), timeout=2.0)
    assert [e.id for e in events] == [event.id]
    assert relay.subscriptions == {}
    assert json.loads(made[0].sent[-1])[0] == "CLOSE"
    relay.close()


def test_query_sync_times_out(made):
    relay = make_relay(made)
    relay.connect()
    with pytest.raises(NostrError) as info:
        relay.query_sync(Filter(), timeout=0.2)
    assert info.value.code == ErrorCode.CONTEXT_TIMEOUT
    assert relay.subscriptions == {}
    relay.close()


def test_query_events_iterates(made):
    event = sample_event()
    relay = make_relay(made, answering(event), assume_valid=True)
    relay.connect()
    iterator = relay.query_events(Filter())
    assert next(iterator).id == event.id
    iterator.close()
    assert relay.subscriptions == {}
    relay.close()


def test_count_returns_relay_answer(made):
    def respond(message):
        msg = json.loads(message)
        if msg[0] == "COUNT":
            return [json.dumps(["COUNT", msg[1], {"count": 7}])]
        return []

    relay = make_relay(made, respond)
    relay.connect()
    assert relay.count(Filter(kinds=[1]), timeout=2.0) == 7
    assert json.loads(made[0].sent[0])[0] == "COUNT"
    assert relay.subscriptions == {}
    relay.close()


def test_count_times_out(made):
    relay = make_relay(made)
    relay.connect()
    with pytest.raises(NostrError) as info:
        relay.count(Filter(), timeout=0.2)
    assert info.value.code == ErrorCode.CONTEXT_TIMEOUT
    relay.close()


def test_close_ends_subscriptions(made):
    relay = make_relay(made)
    relay.connect()
    sub = relay.subscribe([Filter()])
    relay.close()
    assert relay.is_connected() is False
    assert relay.connection is None
    assert made[0].closed is True
    assert sub.events.get_nowait() is None
    assert sub.done.is_set()
    assert relay.subscriptions == {}


def test_connection_loss_detected(made):
    relay = make_relay(made)
    relay.connect()
    made[0].close()
    assert wait_for(lambda: not relay.is_connected())
    assert relay.connection_error.code == ErrorCode.WEBSOCKET_CLOSED


def test_reconnect_after_close(made):
    relay = make_relay(made)
    relay.connect()
    relay.close()
    relay.connect()
    assert relay.is_connected() is True
    assert len(made) == 2
    relay.close()


def test_publish_sends_event_envelope(made):
    relay = make_relay(made)
    relay.connect()
    event = sample_event()
    relay.publish(event)
    message = json.loads(made[0].sent[-1])
    assert message[0] == "EVENT"
    assert event_from_dict(message[1]) == event
    relay.close()


def test_write_when_disconnected_raises(made):
    relay = make_relay(made)
    with pytest.raises(NostrError) as info:
        relay.write('["CLOSE","1:"]')
    assert info.value.code == ErrorCode.WEBSOCKET_CLOSED


def test_auth_sends_signed_event(made):
    relay = make_relay(made)
    relay.connect()
    relay.handle_message('["AUTH","abc"]')
    sk = generate_private_key()

    def sign(event):
        event.pubkey = get_public_key(sk)
        event.sign(sk)

    relay.auth(sign)
    message = json.loads(made[0].sent[-1])
    assert message[0] == "AUTH"
    event = event_from_dict(message[1])
    assert event.kind == Kind.CLIENT_AUTHENTICATION
    assert ["relay", URL] in event.tags
    assert ["challenge", "abc"] in event.tags
    assert event.check_signature() is True
    relay.close()


def test_unsubscribe_sends_close(made):
    relay = make_relay(made)
    relay.connect()
    sub = relay.subscribe([Filter()])
    relay.unsubscribe(sub.counter)
    assert json.loads(made[0].sent[-1]) == ["CLOSE", sub.get_id()]
    assert sub.counter not in relay.subscriptions
    relay.close()