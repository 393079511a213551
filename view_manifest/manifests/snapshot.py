"""
Codec for the persisted manifest document.

Wire format (UTF-8 JSON):

    {"dates": ["2020-01-01", "2020-01-02", ...]}

Only the date sequence is persisted; nothing else about the Manifest is.
"""

from __future__ import annotations

import json
import re
from datetime import date, datetime
from typing import Iterable, List, Union

from ..errors import DecodeError

ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)
CONTENT_TYPE = "application/json"


def normalize_date(value: Union[str, date]) -> str:
    """Return ``value`` as a YYYY-MM-DD string, raising ValueError if malformed."""
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str) or not ISO_DATE_RE.fullmatch(value):
        raise ValueError(f"Expected ISO date YYYY-MM-DD, got {value!r}")
    return value


def encode_snapshot(dates: Iterable[str]) -> bytes:
    return json.dumps({"dates": list(dates)}).encode("utf-8")


def decode_snapshot(data: bytes) -> List[str]:
    """
    Parse a persisted manifest.

    Raises:
        DecodeError: If the payload is not JSON or not a manifest document
    """
    try:
        doc = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DecodeError(f"Manifest is not valid JSON: {e}") from e

    if not isinstance(doc, dict) or not isinstance(doc.get("dates"), list):
        raise DecodeError("Manifest must be an object with a 'dates' list")

    dates = doc["dates"]
    bad = [d for d in dates if not isinstance(d, str) or not ISO_DATE_RE.fullmatch(d)]
    if bad:
        raise DecodeError(f"Manifest contains {len(bad)} malformed dates, e.g. {bad[0]!r}")
    return dates
