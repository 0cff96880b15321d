from datetime import timedelta


class WindowSelectionError(ValueError):
    """Base class for everything the window selector refuses to compute."""


class MalformedInputError(WindowSelectionError):
    """
    The series itself is broken: unsorted samples, non-positive intervals,
    empty fuel identifiers or percentages outside [0, 100].
    """


class InsufficientDataError(WindowSelectionError):
    """
    Not enough contiguous coverage for the requested duration.
    Carries the attempted duration and the largest contiguous span found,
    so the caller can retry with something smaller.
    """

    def __init__(self, message: str,
                 requested: timedelta,
                 largest_contiguous: timedelta = timedelta(0)):
        super().__init__(message)
        self.requested = requested
        self.largest_contiguous = largest_contiguous
