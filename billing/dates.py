"""Date normalization helpers for quotation records.

Quotation documents arrive with dates in whatever shape the document store
handed back: native datetimes, ISO strings, Firestore Timestamp objects or
plain ``{"seconds": ..., "nanoseconds": ...}`` mappings. ``classify`` tags the
raw value as one of three variants and ``resolve`` turns the variant into a
date value. ``normalize`` chains the two and never raises; unusable input
yields None (shown as "N/A" by ``format_date``).
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Mapping, Optional, Union

import pandas as pd

# Zero-argument conversion methods exposed by timestamp wrappers
# (google-cloud-firestore, protobuf Timestamp, JS-style toDate).
_CONVERSION_METHODS = ('to_datetime', 'ToDatetime', 'toDate')
# Relative keywords pandas would resolve against the clock
_RELATIVE_KEYWORDS = frozenset({'now', 'today'})


@dataclass(frozen=True)
class NativeDate:
    value: date


@dataclass(frozen=True)
class IsoString:
    text: str


@dataclass(frozen=True)
class EpochSeconds:
    seconds: float
    nanoseconds: int = 0


DateVariant = Union[NativeDate, IsoString, EpochSeconds]


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _seconds_of(raw: Any) -> Optional[tuple]:
    if isinstance(raw, Mapping):
        secs, nanos = raw.get('seconds'), raw.get('nanoseconds', 0)
    else:
        secs, nanos = getattr(raw, 'seconds', None), getattr(raw, 'nanoseconds', 0)
    if not _is_number(secs):
        return None
    return secs, nanos if _is_number(nanos) else 0


def classify(raw: Any) -> Optional[DateVariant]:
    """Tag a raw date-like value; None when the shape is not recognised."""
    if raw is None:
        return None
    if isinstance(raw, date):
        return NativeDate(raw)
    for name in _CONVERSION_METHODS:
        method = getattr(raw, name, None)
        if callable(method):
            try:
                converted = method()
            except Exception as e:
                print(f"[dates][convert][warn] {type(raw).__name__}.{name}() failed: {e}")
                return None
            return NativeDate(converted) if isinstance(converted, date) else None
    secs = _seconds_of(raw)
    if secs is not None:
        return EpochSeconds(*secs)
    if isinstance(raw, str):
        return IsoString(raw)
    return None


def resolve(variant: DateVariant) -> Optional[date]:
    if isinstance(variant, NativeDate):
        return None if pd.isna(variant.value) else variant.value
    if isinstance(variant, EpochSeconds):
        # nanoseconds are dropped; precision floor is one second
        try:
            return datetime.fromtimestamp(int(variant.seconds), tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(variant, IsoString):
        text = variant.text.strip()
        if not text or text.lower() in _RELATIVE_KEYWORDS:
            return None
        try:
            parsed = pd.to_datetime(text, errors='coerce')
        except (ValueError, TypeError, OverflowError):
            return None
        if parsed is None or pd.isna(parsed):
            return None
        return parsed.to_pydatetime()
    return None


def normalize(raw: Any) -> Optional[date]:
    """Resolve any accepted date input to a date/datetime, or None."""
    variant = classify(raw)
    if variant is None:
        return None
    return resolve(variant)


def calendar_day(value: date) -> date:
    """Drop the time component; datetimes become their calendar date."""
    return value.date() if isinstance(value, datetime) else value


def format_date(raw: Any) -> str:
    """'June 1, 2024' style date, or 'N/A' when the input cannot be resolved."""
    d = normalize(raw)
    if d is None:
        return 'N/A'
    return f"{d:%B} {d.day}, {d.year}"


def format_contract_period(start: Any, end: Any) -> str:
    parts = []
    if start:
        parts.append(format_date(start))
    if end:
        parts.append(format_date(end))
    return ' - '.join(parts)
