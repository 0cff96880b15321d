import json
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Sequence

import click

from cwindow.errors import MalformedInputError
from cwindow.models import Sample


def samples_from_payload(payload) -> List[Sample]:
    """
    Map a decoded generation feed into Sample values.
    Accepts {"data": [...]} as served by the carbon-intensity API, or a bare list.
    Order is kept as-is; sorting problems are reported by the selector.
    """
    if isinstance(payload, dict):
        points = payload.get("data")
        # the regional endpoints nest one more level: {"data": {"data": [...]}}
        if isinstance(points, dict):
            points = points.get("data")
    else:
        points = payload
    if not isinstance(points, list):
        raise MalformedInputError("Series payload has no list of samples under 'data'")
    return [Sample.from_dict(p) for p in points]


def load_samples(series_path: Path) -> List[Sample]:
    """
    Read a generation-mix series JSON file and return its samples.
    """
    path = Path(series_path).expanduser().resolve()
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise MalformedInputError(f"Series file {path} is not valid JSON: {e}") from e

    samples = samples_from_payload(payload)
    click.echo(f"📈 Loaded {len(samples)} samples from {path}", err=True)
    return samples


def slice_samples(samples: Sequence[Sample], start: datetime, duration: timedelta) -> List[Sample]:
    """
    Keep only the samples starting within [start, start + duration).
    """
    cutoff = start + duration
    return [s for s in samples if start <= s.start < cutoff]
