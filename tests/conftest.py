from datetime import datetime, timedelta, timezone

import pytest

from cwindow.models import GenerationMix, Sample

T0 = datetime(2024, 3, 1, 0, 0, tzinfo=timezone.utc)


def build_series(values, minutes=30, start=T0, gaps=None):
    """
    Contiguous samples of `minutes` each carrying the given cleanenergy values.
    `gaps` maps a sample index to the minutes of silence inserted before it.
    """
    gaps = gaps or {}
    samples = []
    t = start
    for i, value in enumerate(values):
        t += timedelta(minutes=gaps.get(i, 0))
        end = t + timedelta(minutes=minutes)
        mix = (GenerationMix("wind", value), GenerationMix("gas", 100 - value))
        samples.append(Sample(t, end, value, mix))
        t = end
    return samples


@pytest.fixture
def series():
    return build_series
