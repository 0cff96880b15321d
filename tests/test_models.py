from datetime import timedelta

import pytest

from cwindow.errors import MalformedInputError
from cwindow.models import AvgWithCleanEnergy, GenerationMix, OptimalChargingWindow, Sample
from tests.conftest import T0

RAW = {
    "from": "2024-03-01T00:00Z",
    "to": "2024-03-01T00:30Z",
    "generationmix": [
        {"fuel": "wind", "perc": 41.2},
        {"fuel": "nuclear", "perc": 15.1},
        {"fuel": "gas", "perc": 43.6},
    ],
    "cleanenergy": 56.3,
}


def test_sample_from_feed_entry():
    sample = Sample.from_dict(RAW)
    assert sample.start == T0
    assert sample.duration == timedelta(minutes=30)
    assert sample.cleanenergy == 56.3
    assert sample.share("wind") == 41.2
    assert sample.share("coal") == 0.0


def test_mix_is_not_required_to_sum_to_100():
    # 41.2 + 15.1 + 43.6 = 99.9 and cleanenergy is taken as given
    sample = Sample.from_dict(RAW)
    assert sum(m.perc for m in sample.generationmix) != 100
    assert sample.cleanenergy == 56.3


def test_alias_matches_contract_name():
    assert AvgWithCleanEnergy is Sample


@pytest.mark.parametrize("fuel", ["", "  "])
def test_empty_fuel_rejected(fuel):
    with pytest.raises(MalformedInputError):
        GenerationMix(fuel, 10.0)


@pytest.mark.parametrize("perc", [-0.1, 100.5])
def test_percentage_out_of_range_rejected(perc):
    with pytest.raises(MalformedInputError):
        GenerationMix("solar", perc)


def test_non_positive_interval_rejected():
    with pytest.raises(MalformedInputError):
        Sample(T0, T0, 50.0)


def test_missing_cleanenergy_rejected():
    raw = dict(RAW)
    del raw["cleanenergy"]
    with pytest.raises(MalformedInputError):
        Sample.from_dict(raw)


def test_bad_timestamp_rejected():
    with pytest.raises(MalformedInputError):
        Sample.from_dict(dict(RAW, **{"from": "yesterday"}))


def test_window_serializes_contract_keys():
    window = OptimalChargingWindow(T0, T0 + timedelta(hours=1), 72.4)
    assert window.to_dict() == {
        "startTime": "2024-03-01T00:00:00Z",
        "endTime": "2024-03-01T01:00:00Z",
        "cleanEnergyPercentage": 72.4,
    }
    assert window.duration == timedelta(hours=1)


def test_mixed_naive_and_aware_bounds_rejected():
    raw = dict(RAW, to="2024-03-01T00:30")
    with pytest.raises(MalformedInputError):
        Sample.from_dict(raw)
