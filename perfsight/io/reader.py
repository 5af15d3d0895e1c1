"""
Reader - all metric-file reads go through here.

No other module should call pl.read_parquet or pl.read_csv directly.
Input is long format: one row per sample with ``timestamp``,
``metric_type`` and ``value`` columns, optional ``screen_name``,
``session_id`` and ``device_id``.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

import polars as pl

from perfsight.core._series import format_timestamp
from perfsight.models.results import MetricSample
from perfsight.validation import ValidationError

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ('timestamp', 'metric_type', 'value')
OPTIONAL_COLUMNS = ('screen_name', 'session_id', 'device_id')
_FIELDS = ('timestamp', 'value', 'metric_type') + OPTIONAL_COLUMNS


def _timestamp_text(ts: Any) -> str:
    if isinstance(ts, datetime):
        return format_timestamp(ts)
    return str(ts)


def samples_from_records(records: Iterable[Union[Dict[str, Any], tuple]]) -> List[MetricSample]:
    """
    Build MetricSamples from dicts or tuples.

    Tuples are positional in MetricSample field order:
    (timestamp, value, metric_type, screen_name, session_id, device_id);
    trailing fields may be omitted.
    """
    samples = []
    for record in records:
        if isinstance(record, dict):
            fields = {k: record.get(k) for k in _FIELDS if k in record}
        else:
            fields = dict(zip(_FIELDS, record))
        missing = [k for k in ('timestamp', 'value') if fields.get(k) is None]
        if missing:
            raise ValidationError([f"record {record!r} is missing {', '.join(missing)}"])
        fields['timestamp'] = _timestamp_text(fields['timestamp'])
        fields['value'] = float(fields['value'])
        samples.append(MetricSample(**fields))
    return samples


def _check_columns(df: pl.DataFrame, source: str) -> None:
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValidationError([f"{source}: missing required column '{c}'" for c in missing])


def samples_by_metric(df: pl.DataFrame) -> Dict[str, List[MetricSample]]:
    """
    Group a long-format frame into ``{metric_type: [MetricSample, ...]}``.

    Each list is sorted ascending by timestamp. Rows with a null value are
    dropped; NaN values are kept and skipped later by the analyzers.
    """
    _check_columns(df, 'metric frame')
    keep = [c for c in _FIELDS if c in df.columns]
    df = df.select(keep).filter(pl.col('value').is_not_null()).sort(['metric_type', 'timestamp'])

    grouped: Dict[str, List[MetricSample]] = {}
    for row in df.iter_rows(named=True):
        sample = MetricSample(
            timestamp=_timestamp_text(row['timestamp']),
            value=float(row['value']),
            metric_type=row['metric_type'],
            screen_name=row.get('screen_name'),
            session_id=row.get('session_id'),
            device_id=row.get('device_id'),
        )
        grouped.setdefault(row['metric_type'], []).append(sample)

    logger.debug("grouped %d rows into %d metrics", df.height, len(grouped))
    return grouped


def load_metric_frame(path: Union[str, Path]) -> pl.DataFrame:
    """Load a parquet or CSV metric file, sorted by timestamp."""
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"No metric file at {path}")

    if p.suffix == '.parquet':
        df = pl.read_parquet(str(p))
    elif p.suffix == '.csv':
        df = pl.read_csv(str(p))
    else:
        raise ValidationError([f"{path}: unsupported file type '{p.suffix}' (expected .parquet or .csv)"])

    _check_columns(df, str(path))
    logger.debug("loaded %d rows from %s", df.height, path)
    return df.sort('timestamp')
