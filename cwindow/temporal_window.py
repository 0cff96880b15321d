from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

import click

from cwindow.errors import InsufficientDataError, MalformedInputError
from cwindow.load_samples import load_samples, slice_samples
from cwindow.models import OptimalChargingWindow, Sample

TIE_BREAKS = ("earliest", "latest")


@dataclass(frozen=True)
class SelectionOptions:
    """
    granularity                : slide step between candidate starts
                                 (None = the feed's native sample interval)
    tie_break                  : "earliest" or "latest" among equal scores
    allow_partial_edge_samples : may a window start/end mid-sample
    tie_epsilon                : score difference still counted as a tie
    """
    granularity: Optional[timedelta] = None
    tie_break: str = "earliest"
    allow_partial_edge_samples: bool = True
    tie_epsilon: float = 1e-9

    def __post_init__(self):
        if self.granularity is not None and self.granularity <= timedelta(0):
            raise ValueError(f"granularity must be positive, got {self.granularity}")
        if self.tie_break not in TIE_BREAKS:
            raise ValueError(f"tie_break must be one of {TIE_BREAKS}, got {self.tie_break!r}")
        if self.tie_epsilon < 0:
            raise ValueError(f"tie_epsilon must not be negative, got {self.tie_epsilon}")


@dataclass(frozen=True)
class Discontinuity:
    kind: str  # "gap" or "overlap"
    previous_end: datetime
    next_start: datetime


class _RunCurve:
    """
    Piecewise-constant clean-energy curve over one contiguous run of samples,
    with the running integral precomputed at every sample boundary.
    Offsets are timedeltas from the start of the run.
    """

    def __init__(self, run: Sequence[Sample]):
        self.origin = run[0].start
        self.bounds = [timedelta(0)] + [s.end - self.origin for s in run]
        self.values = [s.cleanenergy for s in run]
        self.integral = [0.0]
        for i, value in enumerate(self.values):
            width = (self.bounds[i + 1] - self.bounds[i]).total_seconds()
            self.integral.append(self.integral[-1] + width * value)

    @property
    def span(self) -> timedelta:
        return self.bounds[-1]

    def cursor(self) -> "_Cursor":
        return _Cursor(self)


class _Cursor:
    """Integral lookup for non-decreasing offsets; amortized O(1) per call."""

    def __init__(self, curve: _RunCurve):
        self.curve = curve
        self.i = 0

    def integral_at(self, offset: timedelta) -> float:
        c = self.curve
        while self.i < len(c.values) - 1 and c.bounds[self.i + 1] <= offset:
            self.i += 1
        partial = (offset - c.bounds[self.i]).total_seconds()
        return c.integral[self.i] + partial * c.values[self.i]


def detect_discontinuities(samples: Sequence[Sample]) -> List[Discontinuity]:
    """Every place where a sample does not start exactly where the previous one ended."""
    found = []
    for prev, cur in zip(samples, samples[1:]):
        if cur.start > prev.end:
            found.append(Discontinuity("gap", prev.end, cur.start))
        elif cur.start < prev.end:
            found.append(Discontinuity("overlap", prev.end, cur.start))
    return found


def _validate(samples: Sequence[Sample]) -> None:
    try:
        for s in samples:
            if not s.start < s.end:
                raise MalformedInputError(f"Sample interval must be positive: from {s.start} to {s.end}")
        for prev, cur in zip(samples, samples[1:]):
            if cur.start < prev.start:
                raise MalformedInputError(
                    f"Samples are not sorted by start time: {cur.start} follows {prev.start}"
                )
    except TypeError as e:
        # naive and offset-aware timestamps mixed in one series
        raise MalformedInputError(f"Sample timestamps are not comparable: {e}") from e


def _contiguous_runs(samples: Sequence[Sample]) -> List[List[Sample]]:
    runs = [[samples[0]]]
    for prev, cur in zip(samples, samples[1:]):
        if cur.start == prev.end:
            runs[-1].append(cur)
        else:
            runs.append([cur])
    return runs


def _prepare(samples: Sequence[Sample], requested_duration: timedelta) -> List[_RunCurve]:
    """Validate inputs and split the series into contiguous runs."""
    samples = list(samples)
    if not samples:
        raise InsufficientDataError("No samples to select a window from", requested_duration)
    _validate(samples)

    for d in detect_discontinuities(samples):
        click.echo(
            f"⚠️  {d.kind.capitalize()} in series between {d.previous_end.isoformat()} "
            f"and {d.next_start.isoformat()}; windows will not straddle it",
            err=True
        )

    curves = [_RunCurve(run) for run in _contiguous_runs(samples)]
    largest = max(c.span for c in curves)
    covered = max(s.end for s in samples) - samples[0].start

    if requested_duration <= timedelta(0):
        raise InsufficientDataError(
            f"Requested duration must be positive, got {requested_duration}",
            requested_duration, largest
        )
    if requested_duration > covered:
        raise InsufficientDataError(
            f"Requested window {requested_duration} exceeds the covered span {covered}",
            requested_duration, largest
        )
    return curves


def _partial_starts(curve: _RunCurve, duration: timedelta, step: timedelta) -> List[timedelta]:
    latest_start = curve.span - duration
    starts = set()
    for i in range(len(curve.values)):
        lo, hi = curve.bounds[i], curve.bounds[i + 1]
        s = lo
        while s < hi and s <= latest_start:
            starts.add(s)
            s += step
    return sorted(starts)


def _scored_candidates(curves: Sequence[_RunCurve],
                       duration: timedelta,
                       options: SelectionOptions,
                       step: timedelta) -> Iterator[Tuple[datetime, datetime, float]]:
    """Yield (start, end, score) for every admissible window, in time order."""
    for curve in curves:
        if curve.span < duration:
            continue

        if options.allow_partial_edge_samples:
            head, tail = curve.cursor(), curve.cursor()
            seconds = duration.total_seconds()
            for s in _partial_starts(curve, duration, step):
                total = tail.integral_at(s + duration) - head.integral_at(s)
                yield curve.origin + s, curve.origin + s + duration, total / seconds
            continue

        # whole samples only: window i..j ends at the first boundary reaching duration
        n = len(curve.values)
        j = 0
        for i in range(n):
            j = max(j, i)
            while j < n and curve.bounds[j + 1] - curve.bounds[i] < duration:
                j += 1
            if j == n:
                break
            width = (curve.bounds[j + 1] - curve.bounds[i]).total_seconds()
            score = (curve.integral[j + 1] - curve.integral[i]) / width
            yield curve.origin + curve.bounds[i], curve.origin + curve.bounds[j + 1], score


def _round_half_up(value: float) -> float:
    value = min(100.0, max(0.0, value))
    return float(Decimal(repr(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _native_step(samples: Sequence[Sample], options: SelectionOptions) -> timedelta:
    if options.granularity is not None:
        return options.granularity
    return samples[0].duration


def select_optimal_window(samples: Sequence[Sample],
                          requested_duration: timedelta,
                          options: Optional[SelectionOptions] = None) -> OptimalChargingWindow:
    """
    Slide a window of `requested_duration` over the clean-energy series and
    return the one with the highest time-weighted average `cleanenergy`.

    Windows never straddle a gap or overlap in the series. Raises
    MalformedInputError for unsorted or invalid samples and
    InsufficientDataError when no contiguous stretch is long enough.
    """
    options = options or SelectionOptions()
    samples = list(samples)
    curves = _prepare(samples, requested_duration)
    step = _native_step(samples, options)

    candidates = _scored_candidates(curves, requested_duration, options, step)
    if options.tie_break == "latest":
        candidates = reversed(list(candidates))

    best = None
    for start, end, score in candidates:
        if best is None or score > best[2] + options.tie_epsilon:
            best = (start, end, score)

    if best is None:
        largest = max(c.span for c in curves)
        raise InsufficientDataError(
            f"No contiguous data of requested duration {requested_duration} "
            f"(largest contiguous span {largest})",
            requested_duration, largest
        )

    start, end, score = best
    return OptimalChargingWindow(start, end, _round_half_up(score))


def find_windows_above_threshold(samples: Sequence[Sample],
                                 requested_duration: timedelta,
                                 threshold: float,
                                 options: Optional[SelectionOptions] = None) -> List[OptimalChargingWindow]:
    """
    All non-overlapping windows whose clean-energy average reaches `threshold`,
    picked greedily from the earliest. Empty when none qualify.
    """
    options = options or SelectionOptions()
    samples = list(samples)
    curves = _prepare(samples, requested_duration)
    step = _native_step(samples, options)

    found = []
    last_end = None
    for start, end, score in _scored_candidates(curves, requested_duration, options, step):
        if score + options.tie_epsilon < threshold:
            continue
        if last_end is not None and start < last_end:
            continue
        found.append(OptimalChargingWindow(start, end, _round_half_up(score)))
        last_end = end
    return found


def time_weighted_average(samples: Sequence[Sample]) -> float:
    """Unrounded duration-weighted mean of `cleanenergy` over the given samples."""
    samples = list(samples)
    if not samples:
        raise InsufficientDataError("No samples to average", timedelta(0))
    _validate(samples)
    total = sum(s.duration.total_seconds() * s.cleanenergy for s in samples)
    return total / sum(s.duration.total_seconds() for s in samples)


def find_optimal_window(series_path: Path,
                        duration_h: float,
                        options: Optional[SelectionOptions] = None,
                        horizon_h: Optional[float] = None) -> Tuple[datetime, datetime, float]:
    """
    Given a generation-mix series JSON and a window length in hours,
    find the window with the highest clean-energy percentage.
    `horizon_h` limits the search to the first hours of the series.
    Returns (start, end, clean_energy_percentage).
    """
    samples = load_samples(series_path)
    if horizon_h is not None and samples:
        samples = slice_samples(samples, samples[0].start, timedelta(hours=horizon_h))
    window = select_optimal_window(samples, timedelta(hours=duration_h), options)
    return window.start_time, window.end_time, window.clean_energy_percentage
