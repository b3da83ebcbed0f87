"""Annual return-rate providers for the investment projections."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Protocol


class RateProvider(Protocol):
    def rate_for_year(self, year: int) -> float:
        """Annual return in percent for the 1-based ``year``."""
        ...


@dataclass(frozen=True)
class FlatRate:
    """The same return every year."""

    rate: float

    def rate_for_year(self, year: int) -> float:
        return self.rate


@dataclass(frozen=True)
class ReturnBand:
    start_year: int
    end_year: Optional[int]
    rate: float

    def contains(self, year: int) -> bool:
        return year >= self.start_year and (self.end_year is None or year <= self.end_year)


@dataclass
class TieredRate:
    """Returns that change across year bands.

    Unlike loan rate schedules the *first* band containing the year wins.
    Years outside every band fall back to the first band's rate.
    """

    bands: List[ReturnBand] = field(default_factory=list)

    def add_band(self, start_year: int, end_year: Optional[int], rate: float) -> "TieredRate":
        self.bands.append(ReturnBand(start_year, end_year, rate))
        self.bands.sort(key=lambda b: b.start_year)
        return self

    def rate_for_year(self, year: int) -> float:
        for band in self.bands:
            if band.contains(year):
                return band.rate
        return self.bands[0].rate if self.bands else 0.0


@dataclass
class ReturnScenario:
    """A named return assumption, e.g. "optimistic" or "pessimistic"."""

    name: str
    provider: RateProvider

    def rate_for_year(self, year: int) -> float:
        return self.provider.rate_for_year(year)
