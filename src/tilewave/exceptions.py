"""Contains the exception hierarchy of the project."""


class TileWaveError(Exception):
    """Base class for all errors raised by tilewave."""


class MapFormatError(TileWaveError):
    """Raised when grid text has rows with differing field counts."""


class EmptyModelError(TileWaveError):
    """Raised when a map is requested from a sample model that has not learned any tile types."""


class InvariantViolationError(TileWaveError):
    """Raised when the internal state of a generation run is inconsistent.

    This always signals a bug (index out of range, queue/grid size mismatch, not-a-number probability) and aborts the
    generation run it occurred in.
    """
