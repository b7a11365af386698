"""Party relay API: line protocol, WebSocket transport and party client."""

from zbuffsync.api.client import ALARM_CUE_ID, PartyClient
from zbuffsync.api.protocol import (
    Command,
    Frame,
    build_uri,
    encode_join,
    encode_start,
    parse_frame,
    parse_party_update,
)
from zbuffsync.api.transport import Transport, WebSocketTransport

__all__ = [
    "ALARM_CUE_ID",
    "Command",
    "Frame",
    "PartyClient",
    "Transport",
    "WebSocketTransport",
    "build_uri",
    "encode_join",
    "encode_start",
    "parse_frame",
    "parse_party_update",
]
