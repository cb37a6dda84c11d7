# nostrkit

A Python client library for the Nostr protocol. It provides:

- **Keys** (`nostrkit.keys`): generate secp256k1 private keys, derive x-only
  public keys, and make and check BIP-340 Schnorr signatures, in pure Python.
- **Events** (`nostrkit.event`): build, serialize, hash, sign and verify
  events, and keep out-of-spec "extra" fields on them.
- **Tags** (`nostrkit.tags`): `Tag` and `Tags`, list types with prefix lookup,
  filtering, de-duplication and JSON encoding.
- **Filters** (`nostrkit.filter`): match events by id, kind, author, tag and
  time bounds.
- **Wire messages** (`nostrkit.envelope`): parse and produce `EVENT`, `REQ`,
  `COUNT`, `NOTICE`, `EOSE`, `CLOSE`, `CLOSED`, `OK` and `AUTH` messages;
  `nostrkit.codec` encodes and decodes events and filters as JSON objects.
- **Relays** (`nostrkit.connection`, `nostrkit.subscription`,
  `nostrkit.relay`): a websocket connection with a background reader,
  subscriptions, queries, counts, publishing and authentication.
- **Relay pools** (`nostrkit.simplepool`): several relays keyed by URL,
  subscribed to and queried together.
- **Stores** (`nostrkit.relay_store`): an abstract `RelayStore` and a
  `MultiStore` that fans publishing and queries out to several stores.
- **Helpers**: URL and `OK`-message normalization (`nostrkit.utils`), kind
  numbers and their classification (`nostrkit.kinds`), timestamps
  (`nostrkit.timestamp`), pointers (`nostrkit.pointer`) and error codes
  (`nostrkit.errors`).

## Installing

```
pip install nostrkit
```

Python 3.10 or later is required. The only runtime dependency is
`websocket-client`.

## Keys

```python
from nostrkit.keys import generate_private_key, get_public_key

sk = generate_private_key()      # 64 hex characters
pk = get_public_key(sk)          # x-only public key, 64 hex characters
```

`schnorr_sign(msg, sk, aux_rand)` and `schnorr_verify(msg, pubkey, sig)` work
on raw bytes (32-byte message, 32-byte key, 64-byte signature).
`is_valid_public_key(pk)` checks a 66-character compressed public key in hex.

## Signing an event

```python
from nostrkit.event import Event
from nostrkit.kinds import Kind
from nostrkit.timestamp import now

event = Event(pubkey=pk, created_at=now(), kind=Kind.TEXT_NOTE, content="hello")
event.sign(sk)                   # sets event.sig and event.id

assert event.check_signature()
print(event.serialize())         # the canonical array whose SHA-256 is the id
```

`Event.sign` raises `ValueError` for a key that is not a valid 32-byte secret
and `NostrError` if the event has no `pubkey`. `is_regular()`,
`is_replaceable()`, `is_ephemeral()` and `is_addressable()` classify an event
by kind; the same checks exist for bare numbers in `nostrkit.kinds`.

Out-of-spec fields live in `event.extra` and are reached through
`set_extra`, `get_extra`, `get_extra_string`, `get_extra_number`,
`get_extra_boolean` and `remove_extra`.

## Tags and filters

```python
from nostrkit.filter import Filter, Filters
from nostrkit.tags import Tags

event.tags = Tags([["e", "some-event-id"], ["d", "slug"]])
print(event.tags.get_d())                      # "slug"

notes = Filter(kinds=[Kind.TEXT_NOTE], authors=[pk], tags=[["e", "some-event-id"]])
assert notes.matches(event)
assert Filters([notes]).match(event)
```

A filter tag `[name, value, ...]` requires the event to carry a tag `name`
whose value is one of the listed values. A `since` or `until` of 0 means no
bound.

## Wire messages

```python
from nostrkit.envelope import parse_message, ReqEnvelope

envelope = parse_message(raw_text)   # EventEnvelope, OKEnvelope, ... or None
print(ReqEnvelope("1:", Filters([notes])).to_json())
```

`parse_message` returns `None` for anything that is not a well-formed,
known message.

## Talking to a relay

```python
from nostrkit.relay import Relay

with Relay("wss://relay.example.com") as relay:
    relay.connect()
    relay.publish(event)

    for stored in relay.query_sync(Filter(kinds=[Kind.TEXT_NOTE]), timeout=10):
        print(stored.content)

    print(relay.count(Filter(authors=[pk]), timeout=10))

    for incoming in relay.query_events(Filter(kinds=[Kind.TEXT_NOTE])):
        print(incoming.content)
        break                        # closing the iterator unsubscribes
```

The URL is used as given. Incoming events are checked for a valid signature
unless `assume_valid=True` is passed. `notice_handler` and `custom_handler`
receive `NOTICE` texts and unparsed messages; `relay.ok_callbacks` maps event
ids to callables that receive the relay's `OK` answer.

When a relay sends an `AUTH` challenge, `relay.auth(sign)` builds an
authentication event, passes it to `sign` and sends it:

```python
def sign(auth_event):
    auth_event.pubkey = pk
    auth_event.sign(sk)

relay.auth(sign)
```

## Relay pools

```python
from nostrkit.simplepool import SimplePool

with SimplePool(query_timeout=10) as pool:
    first = pool.query_single(["wss://a.example.com", "wss://b.example.com"], notes)
    if first is not None:
        print(first.relay.url, first.event.content)

    for incoming in pool.subscribe(["wss://a.example.com"], [notes], unique=True):
        print(incoming.event.content)
```

`ensure_relay(url)` connects a relay on first use and reconnects it if it has
dropped. With `unique=True` an event id is yielded once; `start()` runs a
background thread that forgets seen ids every 60 seconds, and `stop()` ends
it. `auth_handler`, `event_middleware` and `signature_checker` may be set on
the pool.

## Errors

Failures are raised as `nostrkit.errors.NostrError`, whose `code` is an
`ErrorCode`, for example `ErrorCode.RELAY_CLOSE_FAILED` when closing a relay
that is not connected, or `ErrorCode.CONTEXT_TIMEOUT` when a query times out.

## What it does not do

- There is no command-line program; everything is used from Python.
- There is no relay server and no event storage: `RelayStore` is an abstract
  base for you to implement, and `MultiStore` only combines such stores.
- Pointers are plain data classes; there is no encoding of them to shareable
  identifiers.
- Relay URLs are not normalized automatically; call
  `nostrkit.utils.normalize_url` yourself if needed.

## Running the tests

```
pip install "nostrkit[test]"
pytest
```