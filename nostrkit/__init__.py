"""Client library for the Nostr protocol: keys, events, filters, messages, relays and pools."""

__version__ = "0.1.0"