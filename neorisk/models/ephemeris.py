# neorisk/models/ephemeris.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class EphemerisSample:
    """
    One row of a vector ephemeris.
    position in km, velocity in km/s (ecliptic X/Y/Z frame).
    """
    julian_date: float
    label: str
    position: Tuple[float, float, float]
    velocity: Tuple[float, float, float]

    @property
    def r(self) -> np.ndarray:
        return np.array(self.position, dtype=float)

    @property
    def v(self) -> np.ndarray:
        return np.array(self.velocity, dtype=float)


class EphemerisSeries:
    """
    Ordered, immutable sequence of samples for one body.
    Order is the source order; it is not re-sorted.
    """
    def __init__(self, samples: Iterable[EphemerisSample] = (), name: Optional[str] = None):
        self._samples = tuple(samples)
        self.name = name

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[EphemerisSample]:
        return iter(self._samples)

    def __getitem__(self, idx):
        return self._samples[idx]

    def __bool__(self) -> bool:
        return bool(self._samples)

    def __repr__(self) -> str:
        return f"EphemerisSeries(name={self.name!r}, samples={len(self._samples)})"

    @property
    def first(self) -> Optional[EphemerisSample]:
        return self._samples[0] if self._samples else None

    @property
    def last(self) -> Optional[EphemerisSample]:
        return self._samples[-1] if self._samples else None

    def julian_dates(self) -> np.ndarray:
        return np.array([s.julian_date for s in self._samples], dtype=float)

    def positions(self) -> np.ndarray:
        """(N, 3) array of positions in km."""
        if not self._samples:
            return np.zeros((0, 3))
        return np.array([s.position for s in self._samples], dtype=float)

    def is_monotonic(self) -> bool:
        jd = self.julian_dates()
        return bool(np.all(np.diff(jd) >= 0.0))
