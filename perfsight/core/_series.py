"""Sample coercion and timestamp helpers shared by the core analyzers."""

from datetime import datetime, timezone
from typing import Any, Iterable, List, Tuple

import numpy as np


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(timezone.utc)


def parse_timestamp(ts: Any) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware UTC datetime.

    A trailing ``Z`` is accepted; naive timestamps are taken as UTC.
    Malformed strings raise ``ValueError``.
    """
    if isinstance(ts, datetime):
        dt = ts
    else:
        text = str(ts).strip()
        if text.endswith('Z') or text.endswith('z'):
            text = text[:-1] + '+00:00'
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """ISO-8601 in UTC with a ``Z`` suffix."""
    return parse_timestamp(dt).isoformat().replace("+00:00", "Z")


def _field(sample: Any, name: str, default: Any = None) -> Any:
    if isinstance(sample, dict):
        return sample.get(name, default)
    return getattr(sample, name, default)


def sample_value(sample: Any) -> float:
    """Value of a MetricSample, a mapping with ``value``, or a bare number."""
    if isinstance(sample, (int, float, np.integer, np.floating)):
        return float(sample)
    return float(_field(sample, 'value'))


def sample_timestamp(sample: Any) -> Any:
    return _field(sample, 'timestamp')


def sample_screen(sample: Any) -> Any:
    return _field(sample, 'screen_name')


def finite_samples(samples: Iterable[Any]) -> Tuple[List[Any], np.ndarray]:
    """
    Keep samples with finite values.

    Returns:
        (kept samples, their values as a float array)
    """
    kept = []
    values = []
    for s in samples:
        v = sample_value(s)
        if np.isfinite(v):
            kept.append(s)
            values.append(v)
    return kept, np.asarray(values, dtype=np.float64)
