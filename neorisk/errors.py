# neorisk/errors.py


class NeoRiskError(Exception):
    """Base class for engine errors."""


class InvalidParameterError(NeoRiskError, ValueError):
    """Non-finite or out-of-domain physical input (diameter, velocity, density, elements)."""


class OutOfRangeSeekError(NeoRiskError, ValueError):
    """Seek target outside the loaded data range. Clock state is left unchanged."""

    def __init__(self, target_ms, start_ms, end_ms):
        self.target_ms = target_ms
        self.start_ms = start_ms
        self.end_ms = end_ms
        super().__init__(
            f"Seek target {target_ms} outside data range [{start_ms}, {end_ms}]"
        )


class EmptySeriesError(NeoRiskError, LookupError):
    """An ephemeris source produced no usable samples."""


class FetchError(NeoRiskError, RuntimeError):
    """Neither network, cache nor fallback file produced data."""
