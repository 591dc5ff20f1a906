from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Literal, Optional

from .request_id import get_request_id

AuditAction = Literal[
    "booking.confirmed",
    "booking.cancelled",
    "slot.holiday_toggled",
    "promo.added",
    "admin.login_failed",
]
AuditInitiator = Literal["customer", "admin", "system"]

_audit_logger = logging.getLogger("audit")
_audit_logger.setLevel(logging.INFO)
if not _audit_logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    _audit_logger.addHandler(handler)
_audit_logger.propagate = False


def _enum_to_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if hasattr(value, "value"):
        return str(value.value)
    return str(value)


def emit_audit_log(
    *,
    action: AuditAction,
    initiator: AuditInitiator,
    slot_id: Optional[str] = None,
    duration: Optional[int] = None,
    mobile_number: Optional[str] = None,
    status_from: Optional[str] = None,
    status_to: Optional[str] = None,
    amount: Optional[int] = None,
    message: Optional[str] = None,
    extra: Optional[dict[str, Any]] = None,
) -> None:
    """Emit structured JSON audit log. Raises RuntimeError if logging fails."""
    payload: dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": "info",
        "action": action,
        "initiator": initiator,
        "request_id": get_request_id(),
        "slot_id": slot_id,
        "duration": duration,
        "mobile_number": _mask_mobile(mobile_number),
        "status_from": _enum_to_str(status_from),
        "status_to": _enum_to_str(status_to),
        "amount": amount,
    }
    if message is not None:
        payload["message"] = message
    if extra:
        payload.update(extra)

    # Drop None values to keep the log compact.
    compact_payload = {k: v for k, v in payload.items() if v is not None}
    try:
        _audit_logger.info(json.dumps(compact_payload, ensure_ascii=True))
    except Exception as exc:
        raise RuntimeError("failed to emit audit log") from exc


def _mask_mobile(mobile_number: Optional[str]) -> Optional[str]:
    if not mobile_number:
        return None
    return "*" * max(len(mobile_number) - 4, 0) + mobile_number[-4:]
