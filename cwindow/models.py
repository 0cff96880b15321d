from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Tuple

from cwindow.errors import MalformedInputError


def parse_timestamp(value) -> datetime:
    """
    Parse an ISO-8601 instant as delivered by the generation feed
    ("2024-03-01T10:30Z"). Already-parsed datetimes pass through untouched.
    """
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError as e:
        raise MalformedInputError(f"Invalid timestamp {value!r}: {e}") from e


def format_timestamp(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")


def _check_percentage(name: str, value: float) -> None:
    if not 0.0 <= value <= 100.0:
        raise MalformedInputError(f"{name} must be within [0, 100], got {value}")


@dataclass(frozen=True)
class GenerationMix:
    """One fuel's share of total generation for a sampled interval."""
    fuel: str
    perc: float

    def __post_init__(self):
        if not self.fuel or not str(self.fuel).strip():
            raise MalformedInputError("Generation mix entry has an empty fuel identifier")
        _check_percentage(f"perc for {self.fuel}", self.perc)

    @classmethod
    def from_dict(cls, raw: dict) -> "GenerationMix":
        try:
            return cls(fuel=raw["fuel"], perc=float(raw["perc"]))
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedInputError(f"Invalid generation mix entry {raw!r}: {e}") from e

    def to_dict(self) -> dict:
        return {"fuel": self.fuel, "perc": self.perc}


@dataclass(frozen=True)
class Sample:
    """
    One reporting interval of the feed ("AvgWithCleanEnergy" in the JSON
    contract, where start/end travel as "from"/"to").

    `cleanenergy` is the precomputed clean share and is taken at face value;
    it is never derived from `generationmix`, whose entries only need to
    roughly sum to 100.
    """
    start: datetime
    end: datetime
    cleanenergy: float
    generationmix: Tuple[GenerationMix, ...] = field(default=())

    def __post_init__(self):
        if (self.start.tzinfo is None) != (self.end.tzinfo is None):
            raise MalformedInputError(
                f"Sample mixes naive and offset-aware timestamps: from {self.start} to {self.end}"
            )
        if not self.start < self.end:
            raise MalformedInputError(
                f"Sample interval must be positive: from {self.start} to {self.end}"
            )
        _check_percentage(f"cleanenergy at {self.start}", self.cleanenergy)
        # accept lists from callers, store a tuple so the sample stays hashable
        object.__setattr__(self, "generationmix", tuple(self.generationmix))

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def share(self, fuel: str) -> float:
        """Percentage contributed by `fuel`, 0.0 when the fuel is not reported."""
        return sum(m.perc for m in self.generationmix if m.fuel == fuel)

    @classmethod
    def from_dict(cls, raw: dict) -> "Sample":
        try:
            start = raw["from"]
            end = raw["to"]
            cleanenergy = float(raw["cleanenergy"])
            mix = raw.get("generationmix") or []
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedInputError(f"Invalid sample {raw!r}: {e}") from e
        return cls(
            start=parse_timestamp(start),
            end=parse_timestamp(end),
            cleanenergy=cleanenergy,
            generationmix=tuple(GenerationMix.from_dict(m) for m in mix),
        )

    def to_dict(self) -> dict:
        return {
            "from": format_timestamp(self.start),
            "to": format_timestamp(self.end),
            "generationmix": [m.to_dict() for m in self.generationmix],
            "cleanenergy": self.cleanenergy,
        }


AvgWithCleanEnergy = Sample


@dataclass(frozen=True)
class OptimalChargingWindow:
    start_time: datetime
    end_time: datetime
    clean_energy_percentage: float

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time

    def to_dict(self) -> dict:
        return {
            "startTime": format_timestamp(self.start_time),
            "endTime": format_timestamp(self.end_time),
            "cleanEnergyPercentage": self.clean_energy_percentage,
        }
