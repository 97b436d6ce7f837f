from __future__ import annotations

from typing import Iterable, List


class BeamDesignError(Exception):
    """Base class for errors raised by the beam flexure tool."""


class InvalidInputError(BeamDesignError, ValueError):
    """Section values that cannot produce a finite capacity (zero width, zero depth, ...)."""

    def __init__(self, problems: Iterable[str]):
        self.problems: List[str] = list(problems)
        super().__init__("; ".join(self.problems) or "invalid beam section input")


class UnknownBarSizeError(BeamDesignError, LookupError):
    def __init__(self, bar_size: object):
        self.bar_size = bar_size
        super().__init__(f"Unknown reinforcing bar size: {bar_size!r}")
