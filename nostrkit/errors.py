"""Error codes and the package's exception type."""

from __future__ import annotations

from enum import IntEnum


class ErrorCode(IntEnum):
    """Numeric error codes, grouped by area."""

    SUCCESS = 0
    UNKNOWN = 1

    MEMORY_ALLOCATION_FAILED = 100
    NULL_POINTER = 101

    WEBSOCKET_CONNECTION_FAILED = 200
    WEBSOCKET_WRITE_FAILED = 201
    WEBSOCKET_READ_FAILED = 202
    WEBSOCKET_HANDSHAKE_FAILED = 203
    WEBSOCKET_CLOSED = 204
    WEBSOCKET_INVALID_FRAME = 205

    HTTP_REQUEST_FAILED = 300
    HTTP_INVALID_RESPONSE = 301
    HTTP_HEADER_MISSING = 302

    SSL_INITIALIZATION_FAILED = 400
    SSL_CONNECTION_FAILED = 401
    SSL_HANDSHAKE_FAILED = 402

    JSON_PARSE_FAILED = 500
    JSON_SERIALIZATION_FAILED = 501
    JSON_DESERIALIZATION_FAILED = 502

    RELAY_INVALID_URL = 600
    RELAY_CONNECTION_FAILED = 601
    RELAY_WRITE_FAILED = 602
    RELAY_CLOSE_FAILED = 603
    RELAY_SUBSCRIBE_FAILED = 604
    RELAY_AUTH_FAILED = 605
    RELAY_PUBLISH_FAILED = 606

    SUBSCRIPTION_INIT_FAILED = 700
    SUBSCRIPTION_CLOSE_FAILED = 701
    SUBSCRIPTION_UNSUB_FAILED = 702

    EVENT_SIGNATURE_INVALID = 800
    EVENT_SERIALIZATION_FAILED = 801
    EVENT_DESERIALIZATION_FAILED = 802

    CHANNEL_CREATION_FAILED = 900
    CHANNEL_SEND_FAILED = 901
    CHANNEL_RECEIVE_FAILED = 902

    CONTEXT_CANCELED = 1000
    CONTEXT_TIMEOUT = 1001

    FILTER_PARSE_FAILED = 1100
    FILTER_SERIALIZATION_FAILED = 1101
    FILTER_DESERIALIZATION_FAILED = 1102

    INVALID_ARGUMENT = 1200
    OPERATION_NOT_SUPPORTED = 1201
    INTERNAL_ERROR = 1202


class NostrError(Exception):
    """An error carrying one of the package's error codes."""

    def __init__(self, code: ErrorCode | int, message: str) -> None:
        super().__init__(message)
        try:
            self.code: ErrorCode | int = ErrorCode(code)
        except ValueError:
            self.code = int(code)
        self.message = message

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code!r}, {self.message!r})"