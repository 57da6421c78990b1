"""Alert configuration codec."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from pydantic import ValidationError

from ..coerce import to_int, to_str
from ..models import AlertSpec

log = logging.getLogger(__name__)

# Options the API expects as integers; blueprints carry every option as text.
_INTEGER_OPTIONS = frozenset({"threshold"})


def encode_alert(alert: AlertSpec) -> dict[str, Any]:
    options: dict[str, Any] = {}
    for key, value in alert.options.items():
        options[key] = to_int(value) if key in _INTEGER_OPTIONS else value
    return {
        "type": alert.type,
        "send_for": alert.send_for,
        "should_send_recovery": alert.should_send_recovery,
        "options": options,
    }


def encode_alerts(alerts: Sequence[AlertSpec]) -> list[dict[str, Any]]:
    return [encode_alert(a) for a in alerts]


def decode_alert(wire: Any, logger: logging.Logger | None = None) -> AlertSpec | None:
    """Rebuild an alert from its wire form, or None if it is unusable.

    The server-assigned ``id`` is dropped; option values come back as text
    (``5.0`` -> ``"5"``).
    """
    logger = logger or log
    if not isinstance(wire, dict):
        logger.warning("skipping alert that is not an object: %r", wire)
        return None

    data: dict[str, Any] = {"type": wire.get("type")}
    if wire.get("send_for"):
        data["send_for"] = wire["send_for"]
    if isinstance(wire.get("should_send_recovery"), bool):
        data["should_send_recovery"] = wire["should_send_recovery"]
    options = wire.get("options")
    if isinstance(options, dict):
        data["options"] = {str(k): to_str(v) for k, v in options.items()}

    try:
        return AlertSpec.model_validate(data)
    except ValidationError as exc:
        logger.warning("skipping unreadable alert %r: %s", wire, exc)
        return None


def decode_alerts(
    wire: Sequence[Any] | None, logger: logging.Logger | None = None
) -> list[AlertSpec]:
    decoded = []
    for entry in wire or ():
        alert = decode_alert(entry, logger=logger)
        if alert is not None:
            decoded.append(alert)
    return decoded


def alert_key(alert: AlertSpec) -> tuple:
    """Identity used to compare alert lists as sets."""
    return (
        alert.type,
        alert.send_for,
        alert.should_send_recovery,
        tuple(sorted(alert.options.items())),
    )
