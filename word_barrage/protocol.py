"""JSON wire codec for state, flash, and control records.

WHY: The state authority, its renderers, and follower sessions exchange
small JSON records over WebSockets. Anything arriving from the network
may be malformed; it must be rejected before it touches session state,
with one clear error type that callers can log and drop.

HOW: Every inbound message carries a ``type`` and is validated with
jsonschema against the schema for that type. Records without a
``type`` but with a ``state`` field are read as state records, which
is what older renderers send. apply_message() dispatches a validated
message onto a BarrageSession and returns the record (if any) that
should be broadcast in response.

RULES:
- decode_message() raises ProtocolError for bad JSON, unknown types,
  schema violations, or NaN/Infinity; it never returns a partial message
- Unknown style tags in spawn_word are valid; the session maps them to normal
- Outbound records: {"type": "state", state, tension, split_degree} and
  {"type": "flash", word, ttl}
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import jsonschema

from word_barrage.core.ir import ConversationalState, FlashRecord, StateRecord
from word_barrage.core.session import BarrageSession

_NUMBER_OR_NULL = {"type": ["number", "null"]}

SCHEMAS: Dict[str, dict] = {
    "state": {
        "type": "object",
        "required": ["state"],
        "properties": {
            "state": {"enum": [s.value for s in ConversationalState]},
            "tension": {"type": "number", "minimum": 0},
            "split_degree": {"type": "number", "minimum": 0, "maximum": 1},
        },
    },
    "flash": {
        "type": "object",
        "required": ["word"],
        "properties": {
            "word": {"type": "string", "minLength": 1},
            "ttl": {"type": "integer", "minimum": 1},
        },
    },
    "reset": {"type": "object"},
    "utterance": {
        "type": "object",
        "required": ["text"],
        "properties": {"text": {"type": "string", "minLength": 1}},
    },
    "spawn_word": {
        "type": "object",
        "required": ["text"],
        "properties": {
            "text": {"type": "string", "minLength": 1},
            "style": {"type": "string"},
            "scale": _NUMBER_OR_NULL,
            "scale_x": _NUMBER_OR_NULL,
            "rotation": _NUMBER_OR_NULL,
            "color": {"type": ["string", "null"]},
            "vy": _NUMBER_OR_NULL,
            "vy_multiplier": {"type": "number"},
            "flash": {"type": "boolean"},
            "shake": {"type": "number", "minimum": 0},
        },
    },
}

_SPAWN_FIELDS = (
    "style", "scale", "scale_x", "rotation", "color",
    "vy", "vy_multiplier", "flash", "shake",
)


class ProtocolError(ValueError):
    """Raised when an inbound message cannot be decoded or validated."""


def _reject_constant(name: str) -> float:
    raise ProtocolError("non-finite number: {}".format(name))


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ProtocolError("non-finite number: {}".format(text))
    return value


def _bounded_int(text: str) -> int:
    value = int(text)
    try:
        float(value)
    except OverflowError:
        raise ProtocolError("number out of range: {}...".format(text[:20])) from None
    return value


@dataclass(frozen=True)
class Message:
    type: str
    payload: Dict[str, Any]


def decode_message(raw: Union[str, bytes]) -> Message:
    try:
        data = json.loads(
            raw,
            parse_constant=_reject_constant,
            parse_float=_finite_float,
            parse_int=_bounded_int,
        )
    except (TypeError, ValueError) as exc:
        raise ProtocolError("not valid JSON: {}".format(exc)) from exc

    if not isinstance(data, dict):
        raise ProtocolError("message must be a JSON object")

    msg_type = data.get("type")
    if msg_type is None and "state" in data:
        msg_type = "state"
    schema = SCHEMAS.get(msg_type) if isinstance(msg_type, str) else None
    if schema is None:
        raise ProtocolError("unknown message type: {!r}".format(msg_type))

    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as exc:
        raise ProtocolError("invalid {} message: {}".format(msg_type, exc.message)) from exc

    payload = {k: v for k, v in data.items() if k != "type"}
    return Message(type=msg_type, payload=payload)


def state_from_payload(payload: Dict[str, Any]) -> StateRecord:
    state = ConversationalState(payload["state"])
    tension = float(payload.get("tension", 0.0))
    split_degree = payload.get("split_degree")
    if split_degree is None:
        split_degree = min(max(tension / 10.0, 0.0), 1.0)
    return StateRecord(state=state, tension=tension, split_degree=float(split_degree))


def apply_message(
    session: BarrageSession,
    message: Message,
) -> Optional[Union[StateRecord, FlashRecord]]:
    """Apply a decoded message to a session; return what to broadcast, if anything."""
    payload = message.payload

    if message.type == "state":
        record = state_from_payload(payload)
        session.apply_remote_state(record)
        return record

    if message.type == "flash":
        if "ttl" in payload:
            return session.flash(payload["word"], ttl=payload["ttl"])
        return session.flash(payload["word"])

    if message.type == "reset":
        session.reset()
        return session.state()

    if message.type == "utterance":
        session.submit_text(payload["text"])
        return None

    if message.type == "spawn_word":
        kwargs = {k: payload[k] for k in _SPAWN_FIELDS if k in payload}
        session.spawn_word(payload["text"], **kwargs)
        return None

    raise ProtocolError("unhandled message type: {!r}".format(message.type))


def encode_state(record: StateRecord) -> str:
    body = {"type": "state"}
    body.update(record.to_dict())
    return json.dumps(body, ensure_ascii=False)


def encode_flash(record: FlashRecord) -> str:
    body = {"type": "flash"}
    body.update(record.to_dict())
    return json.dumps(body, ensure_ascii=False)


def encode_record(record: Union[StateRecord, FlashRecord]) -> str:
    if isinstance(record, FlashRecord):
        return encode_flash(record)
    return encode_state(record)
