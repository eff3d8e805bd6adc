"""Wire codec for live channel frames and history entries."""

import json
from datetime import datetime, timezone

from ..errors import ProtocolError
from ..models import (
    ESCALATION_TYPE,
    KEEPALIVE,
    ChatFrame,
    EscalationFrame,
    Frame,
    Message,
)


def parse_timestamp(value, default: datetime) -> datetime:
    """Parse an ISO-8601 timestamp; None means "use default"."""
    if value is None or value == "":
        return default
    if not isinstance(value, str):
        raise ProtocolError(f"Timestamp must be a string, got {type(value).__name__}")

    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise ProtocolError(f"Invalid timestamp: {value!r}") from e

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def decode_message(payload: dict, received_at: datetime | None = None) -> Message:
    """Decode one {agent_name, message, timestamp?} payload."""
    if not isinstance(payload, dict):
        raise ProtocolError("Message payload must be an object")

    content = payload.get("message")
    if not isinstance(content, str):
        raise ProtocolError("Message payload has no 'message' text")

    sender = payload.get("agent_name")
    if sender is None:
        sender = "unknown"
    elif not isinstance(sender, str):
        raise ProtocolError("'agent_name' must be a string")

    message_id = payload.get("id")

    return Message(
        sender_label=sender,
        content=content,
        timestamp=parse_timestamp(
            payload.get("timestamp"),
            received_at or datetime.now(timezone.utc),
        ),
        id=str(message_id) if message_id is not None else None,
    )


def decode_frame(raw: str | bytes) -> Frame | None:
    """Decode a raw live channel frame.

    Returns None for the keep-alive sentinel. Raises ProtocolError for
    anything that is not a recognised frame.
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ProtocolError("Frame is not valid UTF-8") from e

    if raw == KEEPALIVE:
        return None

    try:
        data = json.loads(raw)
    except ValueError as e:
        raise ProtocolError(f"Frame is not JSON: {raw[:100]!r}") from e

    if not isinstance(data, dict):
        raise ProtocolError("Frame must be a JSON object")

    # Frames with a "type" are broadcasts; everything else is chat
    if "type" in data:
        if data["type"] != ESCALATION_TYPE:
            raise ProtocolError(f"Unsupported frame type: {data['type']!r}")
        ticket = data.get("ticket")
        if not isinstance(ticket, dict):
            raise ProtocolError("Escalation frame has no ticket object")
        return EscalationFrame(ticket=ticket)

    return ChatFrame(message=decode_message(data))
