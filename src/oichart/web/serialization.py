"""JSON payloads for the polling API."""

from __future__ import annotations

import json
import logging
import math
from datetime import datetime
from typing import Any

from oichart.constants import TIME_FORMAT
from oichart.core.frame import Frame
from oichart.data.market_data import MarketRecord

logger = logging.getLogger(__name__)

SERIALIZATION_ERROR = "Data contains invalid values and could not be serialized"

_FLOAT_FIELDS = ("price", "bid_1", "ask_1")


def clean_record(record: MarketRecord) -> dict[str, Any]:
    """Record as a dict with non-finite float fields zeroed."""
    data = record.to_dict()
    for name in _FLOAT_FIELDS:
        if not math.isfinite(data[name]):
            data[name] = 0.0
    return data


def _finite(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def frame_payload(frame: Frame, now: datetime | None = None) -> dict[str, Any]:
    """Build the ``/data`` document for a frame."""
    now = now or datetime.now()
    stats = {k: _finite(v) if isinstance(v, float) else v for k, v in frame.stats.to_dict().items()}
    return {
        "data": [clean_record(r) for r in frame.window.records],
        "normalized_oi": list(frame.normalized_oi),
        "stats": stats,
        "window_info": frame.window.info,
        "time_range": frame.stats.time_range,
        "timestamp": now.strftime(TIME_FORMAT),
    }


def error_payload(message: str) -> dict[str, Any]:
    return {"error": message}


def encode_payload(payload: dict[str, Any]) -> bytes:
    """
    Encode a payload as strict JSON.

    If anything non-finite slipped through, an explicit error document is
    returned in place of invalid JSON.
    """
    try:
        return json.dumps(payload, allow_nan=False, ensure_ascii=False).encode("utf-8")
    except (ValueError, TypeError) as e:
        logger.error(f"JSON encoding error: {e}")
        data_points = len(payload.get("data", []))
        fallback = {
            "error": SERIALIZATION_ERROR,
            "stats": {"data_points": data_points, "message": "Check the data source"},
        }
        return json.dumps(fallback).encode("utf-8")
