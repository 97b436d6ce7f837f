from __future__ import annotations

from enum import IntEnum
from types import MappingProxyType
from typing import List, Mapping, Optional

from .errors import UnknownBarSizeError


class BarSize(IntEnum):
    """Standard US (ASTM A615) reinforcing bar designations."""

    N3 = 3
    N4 = 4
    N5 = 5
    N6 = 6
    N7 = 7
    N8 = 8
    N9 = 9
    N10 = 10
    N11 = 11
    N14 = 14
    N18 = 18

    @property
    def label(self) -> str:
        return f"#{int(self)}"


# Nominal dimensions (ASTM A615 Table 1)
REBAR_DB: Mapping[BarSize, Mapping[str, float]] = MappingProxyType({
    BarSize.N3: MappingProxyType({"db_in": 0.375, "area_in2": 0.11}),
    BarSize.N4: MappingProxyType({"db_in": 0.500, "area_in2": 0.20}),
    BarSize.N5: MappingProxyType({"db_in": 0.625, "area_in2": 0.31}),
    BarSize.N6: MappingProxyType({"db_in": 0.750, "area_in2": 0.44}),
    BarSize.N7: MappingProxyType({"db_in": 0.875, "area_in2": 0.60}),
    BarSize.N8: MappingProxyType({"db_in": 1.000, "area_in2": 0.79}),
    BarSize.N9: MappingProxyType({"db_in": 1.128, "area_in2": 1.00}),
    BarSize.N10: MappingProxyType({"db_in": 1.270, "area_in2": 1.27}),
    BarSize.N11: MappingProxyType({"db_in": 1.410, "area_in2": 1.56}),
    BarSize.N14: MappingProxyType({"db_in": 1.693, "area_in2": 2.25}),
    BarSize.N18: MappingProxyType({"db_in": 2.257, "area_in2": 4.00}),
})


def parse_bar_size(size: object) -> Optional[BarSize]:
    """Resolve 8, "8" or "#8" to a BarSize; None when it is not a standard size."""
    if isinstance(size, BarSize):
        return size
    if isinstance(size, bool):
        return None
    if isinstance(size, str):
        text = size.strip().lstrip("#").strip()
        if not (text.isascii() and text.isdecimal()):
            return None
        size = int(text)
    if isinstance(size, float):
        if not size.is_integer():
            return None
        size = int(size)
    if not isinstance(size, int):
        return None
    try:
        return BarSize(size)
    except ValueError:
        return None


def area_of(size: object) -> float:
    """Cross-sectional area (in^2) of one bar, or 0.0 if the size is not recognised."""
    bar = parse_bar_size(size)
    if bar is None:
        return 0.0
    return REBAR_DB[bar]["area_in2"]


def list_available_sizes() -> List[int]:
    return [int(b) for b in sorted(BarSize)]


def bar_area(size: object) -> float:
    bar = parse_bar_size(size)
    if bar is None:
        raise UnknownBarSizeError(size)
    return REBAR_DB[bar]["area_in2"]


def bar_diameter(size: object) -> float:
    bar = parse_bar_size(size)
    if bar is None:
        raise UnknownBarSizeError(size)
    return REBAR_DB[bar]["db_in"]


def total_steel_area(size: object, num_bars: int) -> float:
    """As = single-bar area x bar count, for the tension layer of a beam."""
    return bar_area(size) * int(num_bars)
