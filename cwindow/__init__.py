from cwindow.errors import InsufficientDataError, MalformedInputError, WindowSelectionError
from cwindow.models import AvgWithCleanEnergy, GenerationMix, OptimalChargingWindow, Sample
from cwindow.temporal_window import (
    SelectionOptions,
    detect_discontinuities,
    find_optimal_window,
    find_windows_above_threshold,
    select_optimal_window,
    time_weighted_average,
)
